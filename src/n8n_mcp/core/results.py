"""Uniform success/failure envelopes returned by every operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

StatusCode: TypeAlias = int | str


@dataclass(slots=True)
class Success:
    """Operation completed."""

    data: Any
    message: str
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return True

    def as_payload(self) -> dict[str, Any]:
        """Return a transport-friendly result payload."""
        return {"success": True, "data": self.data, "message": self.message, **self.extras}


@dataclass(slots=True)
class Failure:
    """Operation ran but did not complete."""

    error: str
    message: str
    status_code: StatusCode | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return False

    def as_payload(self) -> dict[str, Any]:
        """Return a transport-friendly result payload."""
        return {
            "success": False,
            "error": self.error,
            "message": self.message,
            "statusCode": self.status_code if self.status_code is not None else "unknown",
            **self.extras,
        }


OperationResult: TypeAlias = Success | Failure


def failure_from_remote(
    exc: Exception,
    message: str,
    **extras: Any,
) -> Failure:
    """Convert a remote error into a `Failure` envelope."""
    status_code = getattr(exc, "status_code", None)
    error = str(exc)
    return Failure(
        error=error,
        message=f"{message}: {error}",
        status_code=status_code,
        extras=dict(extras),
    )
