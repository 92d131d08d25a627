"""FastAPI app entrypoint."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from n8n_mcp.api.routes.mcp_transport import router as mcp_transport_router
from n8n_mcp.config import get_settings
from n8n_mcp.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging(get_settings().log_level)
    app = FastAPI(title="n8n MCP", version="0.1.0")
    app.include_router(mcp_transport_router)

    @app.get("/api/v1/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/v1/mcp/.well-known", tags=["system"])
    async def mcp_discovery() -> dict[str, str]:
        return {
            "name": "n8n-mcp",
            "transport": "streamable-http",
            "endpoint": "/mcp",
        }

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("n8n_mcp.api.app:app", host=settings.host, port=settings.port, reload=False)
