"""
DocuTalk backend: retrieval-augmented chat over ingested documents.
"""

# Suppress LiteLLM verbose logging BEFORE any transitive import of litellm.
# litellm._logging reads LITELLM_LOG at import time and defaults to DEBUG.
import os
from pathlib import Path as _Path

from dotenv import dotenv_values as _dotenv_values

_env_path = _Path(__file__).parent.parent / ".env"
_env_values = _dotenv_values(_env_path) if _env_path.exists() else {}

# FEATURE_SUPPRESS_LITELLM_LOGGING (default: true)
_suppress_litellm = (
    os.environ.get("FEATURE_SUPPRESS_LITELLM_LOGGING")
    or _env_values.get("FEATURE_SUPPRESS_LITELLM_LOGGING")
    or "true"
).lower() in ("true", "1", "yes")

if _suppress_litellm and "LITELLM_LOG" not in os.environ:
    os.environ["LITELLM_LOG"] = "ERROR"

del _Path, _dotenv_values, _env_path, _env_values, _suppress_litellm

# ruff: noqa: E402
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from docutalk.core.otel_config import setup_opentelemetry
from docutalk.infrastructure.app_factory import app_factory
from docutalk.routes.bridge_routes import router as bridge_router
from docutalk.routes.chat_routes import router as chat_router
from docutalk.routes.health_routes import router as health_router
from docutalk.version import VERSION

load_dotenv()

_settings = app_factory.get_config_manager().app_settings
otel_config = setup_opentelemetry(
    "docutalk-backend",
    VERSION,
    log_level=_settings.log_level,
    debug_mode=_settings.debug_mode,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting DocuTalk backend v%s", VERSION)

    config = app_factory.get_config_manager()
    status = config.validate_config()
    for name, ok in status.items():
        if not ok:
            logger.warning("Configuration check failed: %s", name)

    session_store = app_factory.get_session_store()
    await session_store.start()

    yield

    logger.info("Shutting down DocuTalk backend")
    await session_store.stop()


app = FastAPI(
    title="DocuTalk Backend",
    description="Retrieval-augmented chat over ingested documents",
    version=VERSION,
    lifespan=lifespan,
)

otel_config.instrument_fastapi(app)
otel_config.instrument_httpx()

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(bridge_router)


if __name__ == "__main__":
    import uvicorn

    # Set DOCUTALK_HOST=0.0.0.0 where the server must be reachable externally
    host = os.getenv("DOCUTALK_HOST", "127.0.0.1")
    port = int(os.getenv("PORT", 8000))

    uvicorn.run(app, host=host, port=port)
