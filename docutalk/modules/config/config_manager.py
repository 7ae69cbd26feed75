"""
Centralized configuration management using Pydantic models.

Settings come from environment variables and an optional ``.env`` file. Values
that hold secrets may use the ``${ENV_VAR}`` indirection resolved by
``resolve_env_var`` so the raw secret never has to live in the settings file.
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def resolve_env_var(value: Optional[str], required: bool = True) -> Optional[str]:
    """
    Resolve environment variables in config values.

    Supports patterns like:
    - "${ENV_VAR_NAME}" -> replaced with os.environ.get("ENV_VAR_NAME")
    - "literal-string" -> returned as-is
    - None -> returned as-is

    Only complete patterns are resolved; "prefix-${VAR}" is a literal.

    Raises:
        ValueError: If the pattern names an unset variable and required=True
    """
    if value is None:
        return None

    pattern = r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}'
    match = re.fullmatch(pattern, value)

    if match:
        env_var_name = match.group(1)
        env_value = os.environ.get(env_var_name)

        if env_value is None:
            if required:
                raise ValueError(
                    f"Environment variable '{env_var_name}' is not set but required in config"
                )
            return None

        return env_value

    return value


class AppSettings(BaseSettings):
    """Main application settings loaded from environment variables."""

    # Application settings
    app_name: str = "Docutalk"
    port: int = 8000
    debug_mode: bool = False
    log_level: str = "INFO"
    feature_metrics_logging_enabled: bool = Field(
        False,
        description="Enable [METRIC] log lines for turns, LLM calls, tool calls and errors",
        validation_alias=AliasChoices("FEATURE_METRICS_LOGGING_ENABLED"),
    )
    feature_suppress_litellm_logging: bool = Field(
        default=True,
        description="Suppress LiteLLM verbose stdout/debug output by setting LITELLM_LOG=ERROR",
        validation_alias=AliasChoices("FEATURE_SUPPRESS_LITELLM_LOGGING"),
    )

    # Generation
    llm_model: str = "deepseek/deepseek-chat"
    llm_api_key: Optional[str] = None  # supports ${ENV_VAR}
    llm_api_base: Optional[str] = None
    llm_temperature: float = 0.7
    llm_max_tokens: int = 2000
    llm_request_timeout: float = 120.0
    # Max seconds to wait for the next streamed chunk before failing the turn
    llm_stream_idle_timeout: float = 60.0

    # Retrieval
    retrieval_url: str = "http://localhost:8001"
    retrieval_collection: str = Field(
        "rag-collection",
        validation_alias=AliasChoices("RETRIEVAL_COLLECTION", "CHROMA_COLLECTION"),
    )
    retrieval_top_k: int = 4
    retrieval_bearer_token: Optional[str] = None  # supports ${ENV_VAR}
    retrieval_timeout: float = 30.0
    summary_top_k: int = 6

    # Sessions
    session_max_messages: int = 10
    session_timeout_seconds: float = 30 * 60
    session_sweep_interval_seconds: float = 5 * 60

    # Whether the synthesis pass reuses the first pass's passages or searches again
    synthesis_retrieval_policy: Literal["reuse", "refetch"] = "reuse"

    # Prompts
    prompt_base_path: str = "prompts"
    system_prompt_filename: str = "system.md"

    # Data-stream bridge
    bridge_upstream_url: str = "http://127.0.0.1:8000/api/chat"
    bridge_upstream_timeout: float = 300.0

    @field_validator("session_max_messages", "retrieval_top_k", "summary_top_k")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "env_prefix": "",
        "populate_by_name": True,
    }


class ConfigManager:
    """Centralized configuration manager with proper error handling."""

    def __init__(self, project_root: Optional[Path] = None):
        self._project_root = project_root or Path(__file__).resolve().parents[3]
        self._app_settings: Optional[AppSettings] = None

    @property
    def project_root(self) -> Path:
        return self._project_root

    @property
    def app_settings(self) -> AppSettings:
        """Get application settings (cached)."""
        if self._app_settings is None:
            self._app_settings = AppSettings()
            logger.info("Application settings loaded successfully")
        return self._app_settings

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path against the project root when relative."""
        path = Path(value)
        if not path.is_absolute():
            path = self._project_root / path
        return path

    def reload_configs(self) -> None:
        """Drop cached settings so the next access reloads them."""
        self._app_settings = None
        logger.info("Configuration cache cleared, will reload on next access")

    def validate_config(self) -> Dict[str, bool]:
        """Validate configuration and return status."""
        status = {}

        try:
            settings = self.app_settings
            status["app_settings"] = True
        except Exception as e:
            logger.error(f"App settings validation failed: {e}", exc_info=True)
            status["app_settings"] = False
            return status

        try:
            status["llm_api_key"] = resolve_env_var(settings.llm_api_key, required=False) is not None
        except ValueError as e:
            logger.error(f"LLM API key validation failed: {e}")
            status["llm_api_key"] = False
        if not status["llm_api_key"]:
            logger.warning("No LLM API key configured; relying on provider environment variables")

        return status


# Global configuration manager instance
config_manager = ConfigManager()


def get_app_settings() -> AppSettings:
    """Get application settings."""
    return config_manager.app_settings
