"""Unified logging & OpenTelemetry setup.

Provides:
- Structured JSON logging with optional trace/span identifiers
- Config-derived log level
- File output (project_root/logs/app.jsonl) with APP_LOG_DIR override
- FastAPI & HTTPX instrumentation hooks
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider

_EXCLUDED_RECORD_KEYS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module", "lineno",
    "funcName", "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "exc_info", "exc_text", "stack_info", "getMessage", "taskName",
}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        span = trace.get_current_span()
        trace_id = span_id = None
        if span and span.is_recording():
            sc = span.get_span_context()
            if sc.is_valid:
                trace_id = f"{sc.trace_id:032x}"
                span_id = f"{sc.span_id:016x}"

        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process_id": os.getpid(),
        }
        if trace_id:
            entry["trace_id"] = trace_id
        if span_id:
            entry["span_id"] = span_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for k, v in record.__dict__.items():
            if k not in _EXCLUDED_RECORD_KEYS:
                entry[f"extra_{k}"] = v
        return json.dumps(entry, default=str)


class OpenTelemetryConfig:
    """Configure OpenTelemetry + structured logging."""

    def __init__(
        self,
        service_name: str = "docutalk",
        service_version: str = "1.0.0",
        log_level: Optional[str] = None,
        debug_mode: bool = False,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.is_development = debug_mode or os.getenv("ENVIRONMENT", "production").lower() in {"dev", "development"}
        self.log_level = self._get_log_level(log_level)
        if os.getenv("APP_LOG_DIR"):
            self.logs_dir = Path(os.getenv("APP_LOG_DIR"))
        else:
            # docutalk/core/otel_config.py -> project root is 2 levels up
            self.logs_dir = Path(__file__).resolve().parents[2] / "logs"
        self.log_file = self.logs_dir / "app.jsonl"
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self._setup_telemetry()
        self._setup_logging()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _get_log_level(self, level_name: Optional[str]) -> int:
        name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
        level = getattr(logging, name, None)
        return level if isinstance(level, int) else logging.INFO

    def _setup_telemetry(self) -> None:
        resource = Resource.create(
            {
                SERVICE_NAME: self.service_name,
                SERVICE_VERSION: self.service_version,
                "environment": "development" if self.is_development else "production",
            }
        )
        trace.set_tracer_provider(TracerProvider(resource=resource))

    def _setup_logging(self) -> None:
        root = logging.getLogger()
        for h in root.handlers[:]:
            root.removeHandler(h)

        file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(self.log_level)
        root.addHandler(file_handler)
        root.setLevel(self.log_level)

        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        console.setLevel(self.log_level if self.is_development else logging.WARNING)
        root.addHandler(console)

        for noisy in ("httpx", "httpcore", "LiteLLM"):
            logging.getLogger(noisy).setLevel(logging.WARNING)

        LoggingInstrumentor().instrument(set_logging_format=False)

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def instrument_fastapi(self, app) -> None:  # noqa: ANN001
        FastAPIInstrumentor.instrument_app(app)

    def instrument_httpx(self) -> None:
        HTTPXClientInstrumentor().instrument()

    def get_log_file_path(self) -> Path:
        return self.log_file


def setup_opentelemetry(
    service_name: str = "docutalk",
    service_version: str = "1.0.0",
    log_level: Optional[str] = None,
    debug_mode: bool = False,
) -> OpenTelemetryConfig:
    """Configure logging and tracing for the process."""
    return OpenTelemetryConfig(service_name, service_version, log_level=log_level, debug_mode=debug_mode)
