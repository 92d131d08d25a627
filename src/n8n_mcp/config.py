"""Process-wide configuration."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the n8n MCP server.

    Both the base URL and the default API key are optional; without a key the
    server only serves callers that supply one per session or per request.
    """

    n8n_base_url: str = Field(default="http://localhost:5678", alias="N8N_BASE_URL")
    n8n_api_key: str | None = Field(default=None, alias="N8N_API_KEY")
    request_timeout_seconds: float = Field(default=10.0, alias="N8N_REQUEST_TIMEOUT_SECONDS")
    session_ttl_seconds: int | None = Field(default=None, alias="N8N_MCP_SESSION_TTL_SECONDS")
    log_level: str = Field(default="INFO", alias="N8N_MCP_LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="N8N_MCP_HOST")
    port: int = Field(default=3000, alias="N8N_MCP_PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def api_root(self) -> str:
        return f"{self.n8n_base_url.rstrip('/')}/api/v1"

    @property
    def default_credential(self) -> str | None:
        key = (self.n8n_api_key or "").strip()
        return key or None


@dataclass(frozen=True, slots=True)
class ListDefaults:
    """Default page sizes for list operations."""

    workflows: int = 50
    executions: int = 10
    credentials: int = 50
    max_executions: int = 100


LIST_DEFAULTS = ListDefaults()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
