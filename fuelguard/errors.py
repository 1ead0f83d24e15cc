"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Service-level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """A record the operation cannot proceed without does not exist."""

    def __init__(self, message: str, code: str = "not_found") -> None:
        super().__init__(code=code, http_status=404, message=message)


class QuotaGuardError(DomainError):
    """Operator request rejected against the quota the engine reported."""

    def __init__(self, message: str, code: str = "quota_guard", details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=400, message=message, details=details)
