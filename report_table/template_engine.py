"""
Report Table Template Engine

Renders the list, card and responsive-table layouts, the lazy-loading
placeholder and the teacher page from Jinja2 templates shipped in the
package's templates/ directory.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError, Undefined
from jinja2.sandbox import SandboxedEnvironment

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


@dataclass
class TemplateData:
    """Container for table rendering data"""

    table: Dict[str, Any]
    header: Dict[str, List[Dict[str, Any]]]
    rows: List[Dict[str, Any]]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for template rendering"""
        return {
            "table": self.table,
            "header": self.header,
            "rows": self.rows,
            "metadata": self.metadata,
        }


class TemplateLoader(BaseLoader):
    """Dictionary-backed template loader"""

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        """
        Initialize template loader

        Args:
            templates: Dictionary of template name to template content
        """
        self.templates = templates or {}

    def get_source(self, environment: Environment, template: str) -> tuple:
        """Get template source"""
        if template not in self.templates:
            raise TemplateError(f"Template '{template}' not found")

        source = self.templates[template]
        return source, None, lambda: True

    def add_template(self, name: str, content: str) -> None:
        """Add a template to the loader"""
        self.templates[name] = content


class TemplateEngine:
    """Template processing engine for report tables"""

    def __init__(
        self,
        use_sandbox: bool = True,
        auto_escape: bool = True,
        strict_undefined: bool = True,
        template_dir: Optional[Path] = None,
    ):
        """
        Initialize template engine

        Args:
            use_sandbox: Use sandboxed environment for security
            auto_escape: Auto-escape template variables
            strict_undefined: Raise errors for undefined variables
            template_dir: Directory of *.html templates to preload
        """
        self.loader = TemplateLoader()

        env_class = SandboxedEnvironment if use_sandbox else Environment
        self.env = env_class(
            loader=self.loader,
            autoescape=auto_escape,
            undefined=StrictUndefined if strict_undefined else Undefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        self._add_custom_filters()
        self._load_default_templates(template_dir or TEMPLATE_DIR)

        logger.info(f"Initialized TemplateEngine with sandbox={use_sandbox}")

    def _add_custom_filters(self) -> None:
        """Add custom Jinja2 filters for report tables"""

        def css_classes(*classes: Optional[str]) -> str:
            """Join the non-empty class names"""
            return " ".join(c for c in classes if c)

        self.env.filters["css_classes"] = css_classes

    def _load_default_templates(self, template_dir: Path) -> None:
        """Load the *.html templates of a directory, keyed by file stem"""
        if not template_dir.is_dir():
            logger.warning(f"Template directory {template_dir} does not exist")
            return

        for path in sorted(template_dir.glob("*.html")):
            self.loader.add_template(path.stem, path.read_text(encoding="utf-8"))

    def render_template(self, template_name: str, data: Union[TemplateData, Mapping[str, Any]]) -> str:
        """
        Render a template with the provided data

        Args:
            template_name: Name of the template to render
            data: Template data container or plain context mapping

        Returns:
            Rendered HTML string

        Raises:
            TemplateError: If template rendering fails
        """
        context = data.to_dict() if isinstance(data, TemplateData) else dict(data)
        try:
            template = self.env.get_template(template_name)
            rendered_html = template.render(**context)

            logger.debug(f"Rendered template '{template_name}'")
            return rendered_html

        except TemplateError as e:
            logger.error(f"Template rendering failed for '{template_name}': {e}")
            raise

