"""Resolve the effective n8n API key for one remote call."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Final

from n8n_mcp.core.errors import AuthenticationRequired

if TYPE_CHECKING:
    from n8n_mcp.core.sessions import SessionCredentialStore

_API_KEY_HEADERS: Final[tuple[str, ...]] = ("n8n-api-key", "n8n_api_key")
_BEARER_PREFIX: Final[str] = "bearer "


def _lowered(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {str(key).lower(): value for key, value in headers.items() if isinstance(value, str)}


def extract_api_key_from_headers(headers: Mapping[str, str] | None) -> str | None:
    """Return the API key carried by request headers, if any.

    The n8n-specific key headers win over `Authorization: Bearer <token>`.
    """
    lowered = _lowered(headers)
    for name in _API_KEY_HEADERS:
        value = lowered.get(name, "").strip()
        if value:
            return value

    authorization = lowered.get("authorization", "").strip()
    if authorization.lower().startswith(_BEARER_PREFIX):
        token = authorization[len(_BEARER_PREFIX) :].strip()
        if token:
            return token
    return None


def resolve_credential(
    session_id: str | None,
    headers: Mapping[str, str] | None,
    store: SessionCredentialStore,
    default: str | None = None,
) -> str:
    """Pick the credential for a call: session, then headers, then default.

    Raises `AuthenticationRequired` when none of the sources has one.
    """
    if session_id is not None:
        stored = store.get(session_id)
        if stored:
            return stored

    from_headers = extract_api_key_from_headers(headers)
    if from_headers:
        return from_headers

    if default:
        return default

    raise AuthenticationRequired()
