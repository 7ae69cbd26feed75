"""
LiteLLM-based generation client.

LiteLLM gives one calling convention over many providers; the configured
model string (e.g. "deepseek/deepseek-chat") selects the provider.
"""

import logging
import warnings
from typing import Any, Dict, List, Optional

# litellm touches Pydantic v2.11+ deprecated attributes on every streaming
# chunk; the warnings are cosmetic and flood the logs.
try:
    from pydantic import PydanticDeprecatedSince211
    warnings.filterwarnings("ignore", category=PydanticDeprecatedSince211)
except ImportError:
    pass  # Pydantic <2.11 does not define this category

import litellm
from litellm import acompletion

from docutalk.core.metrics_logger import METRIC_LLM_CALL, log_metric
from docutalk.modules.config.config_manager import AppSettings, resolve_env_var

from .litellm_streaming import LiteLLMStreamingMixin

logger = logging.getLogger(__name__)

litellm.drop_params = True  # Drop unsupported params instead of erroring


class LiteLLMCaller(LiteLLMStreamingMixin):
    """Generation client for plain and streaming completions."""

    def __init__(self, settings: Optional[AppSettings] = None):
        if settings is None:
            from docutalk.modules.config import config_manager
            settings = config_manager.app_settings
        self.settings = settings
        self.model_name = settings.llm_model

        if settings.feature_suppress_litellm_logging:
            litellm.set_verbose = False
        else:
            litellm.set_verbose = settings.debug_mode

    def _get_model_kwargs(self, temperature: Optional[float] = None) -> Dict[str, Any]:
        """Build provider kwargs shared by every call."""
        kwargs: Dict[str, Any] = {
            "temperature": self.settings.llm_temperature if temperature is None else temperature,
            "max_tokens": self.settings.llm_max_tokens,
            "timeout": self.settings.llm_request_timeout,
        }
        api_key = resolve_env_var(self.settings.llm_api_key, required=False)
        if api_key:
            kwargs["api_key"] = api_key
        if self.settings.llm_api_base:
            kwargs["api_base"] = self.settings.llm_api_base
        return kwargs

    async def call_plain(
        self,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> str:
        """Plain, non-streaming completion."""
        model_kwargs = self._get_model_kwargs(temperature)
        try:
            total_chars = sum(len(str(msg.get("content") or "")) for msg in messages)
            logger.info("Plain LLM call: %d messages, %d chars", len(messages), total_chars)

            response = await acompletion(
                model=self.model_name,
                messages=messages,
                **model_kwargs,
            )
            content = response.choices[0].message.content or ""
            log_metric(METRIC_LLM_CALL, session_id, model=self.model_name, message_count=len(messages))
            return content
        except Exception as exc:
            logger.error("Error calling LLM: %s", exc, exc_info=True)
            raise
