"""HTTP glue: dependencies and health checks"""
