"""Shared API dependency providers."""

from __future__ import annotations

from n8n_mcp.config import Settings, get_settings
from n8n_mcp.core.dispatcher import OperationDispatcher
from n8n_mcp.core.n8n_client import N8nClientFactory
from n8n_mcp.core.sessions import SessionCredentialStore
from n8n_mcp.mcp.tools.handlers import build_dispatcher

_SETTINGS = get_settings()
_SESSION_STORE = SessionCredentialStore(ttl_seconds=_SETTINGS.session_ttl_seconds)
_DISPATCHER = build_dispatcher(_SETTINGS, N8nClientFactory(_SETTINGS))


def get_app_settings() -> Settings:
    return _SETTINGS


def get_session_store() -> SessionCredentialStore:
    return _SESSION_STORE


def get_dispatcher() -> OperationDispatcher:
    return _DISPATCHER
