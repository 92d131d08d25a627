"""Error taxonomy for operation dispatch."""

from __future__ import annotations

from typing import Any, Final

ACCEPTED_HEADERS: Final[tuple[str, ...]] = ("N8N-API-KEY", "N8N_API_KEY", "n8n-api-key")
BEARER_HINT: Final[str] = "Authorization: Bearer <your_n8n_api_key>"
API_KEY_ENV_VAR: Final[str] = "N8N_API_KEY"


class N8nMCPError(RuntimeError):
    """Base class for errors raised by the dispatch core."""


class AuthenticationRequired(N8nMCPError):
    """No credential could be resolved from session, headers, or environment."""

    code: Final[int] = -32001

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or (
                "Authentication required. Please provide N8N_API_KEY in request headers "
                "during connection or set it as environment variable."
            )
        )
        self.accepted_headers = list(ACCEPTED_HEADERS)
        self.environment_variable = API_KEY_ENV_VAR

    def as_payload(self) -> dict[str, Any]:
        """Return remediation hints for a JSON-RPC error `data` field."""
        return {
            "requiredHeaders": self.accepted_headers,
            "bearerToken": BEARER_HINT,
            "environmentVariable": self.environment_variable,
            "sessionSupport": "Store credentials during initial connection for automatic reuse",
        }


class OperationNotFound(N8nMCPError):
    """Dispatcher received an operation name that is not registered."""

    code: Final[int] = -32601

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class RemoteApiError(N8nMCPError):
    """The n8n REST API returned a non-success response or was unreachable."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ValidationError(N8nMCPError, ValueError):
    """Operation arguments are malformed; raised before any remote call."""
