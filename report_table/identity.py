"""
Table identity tokens

Every table on a page needs an identity that no other table on the same
page shares. Eager tables get a random token; lazily loaded tables need an
identity the deferred request can recompute, so theirs is derived from the
report's human-readable name. One source is used per page view and
remembers what it has issued.
"""

import hashlib
import re
import secrets
from typing import Callable, Optional, Set


def default_token_factory() -> str:
    return secrets.token_hex(12)


def name_token(name: str) -> str:
    """Lowercase letters of a name, or a short digest when it has none"""
    token = re.sub(r"[^a-z]", "", name.lower())
    if not token:
        token = "table" + hashlib.sha1(name.encode("utf-8")).hexdigest()[:12]
    return token


class TableIdentitySource:
    """Issues table identities that are unique within one page view"""

    MAX_ATTEMPTS = 16

    def __init__(self, token_factory: Optional[Callable[[], str]] = None):
        self.token_factory = token_factory or default_token_factory
        self._issued: Set[str] = set()

    def random_identity(self) -> str:
        for _ in range(self.MAX_ATTEMPTS):
            token = self.token_factory()
            if token not in self._issued:
                self._issued.add(token)
                return token
        raise RuntimeError("Table identity source keeps returning issued tokens")

    def derived_identity(self, name: str) -> str:
        """Deterministic identity; a repeated name gets a numeric suffix"""
        base = name_token(name)
        token = base
        counter = 1
        while token in self._issued:
            counter += 1
            token = f"{base}{counter}"
        self._issued.add(token)
        return token

    @property
    def issued(self) -> Set[str]:
        return set(self._issued)
