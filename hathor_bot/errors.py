"""
Exception types shared across the advisor backend.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .enums import CompletionErrorKind


class CompletionError(Exception):
    """A failed call to the completion gateway, tagged with its kind."""

    def __init__(
        self,
        kind: CompletionErrorKind,
        message: str = "",
        *,
        code: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.code = code or kind.value
        self.status = status

    def to_diagnostic(self) -> Dict[str, Any]:
        return {"code": self.code, "type": self.kind.value, "message": str(self)}


class DocumentGenerationError(Exception):
    """Raised when the prescription document cannot be built."""


class StoreUnavailableError(Exception):
    """Raised when the purchase/subscription store cannot be reached."""
