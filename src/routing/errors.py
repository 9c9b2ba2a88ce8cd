"""Exceptions raised by the routing layer."""

from typing import List, Optional


class RouterError(Exception):
    """Base class for documentation routing errors."""


class DocumentNotFound(RouterError):
    """A document ref does not resolve to any content in the store."""

    def __init__(self, ref: str, detail: Optional[str] = None):
        self.ref = ref
        self.detail = detail
        message = f"Documentation not found: {ref}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RegistryConfigurationError(RouterError):
    """The routing table is inconsistent; raised while building the registry."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        bullet_list = "\n".join(f"  - {err}" for err in self.errors)
        super().__init__(
            f"Invalid routing configuration ({len(self.errors)} problem(s)):\n"
            f"{bullet_list}"
        )
