"""Prompt provider for loading and caching the system prompt.

Centralizes prompt path resolution so the orchestrator stays focused on
the turn state machine.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from docutalk.modules.config import ConfigManager

logger = logging.getLogger(__name__)

BASE_RAG_INSTRUCTION = (
    "You are a helpful AI assistant with access to a knowledge base. Use the following "
    "context to answer the user's question accurately and concisely.\n"
    "If the context doesn't contain enough information to answer the question, politely "
    "say that you don't have enough information rather than making up an answer."
)

SYNTHESIS_INSTRUCTION = (
    "You are a helpful assistant. Use the tool results and document context below to "
    "answer the user's question naturally and completely."
)

PROMPT_SEPARATOR = "\n\n---\n\n"


class PromptProvider:
    """Loads and caches prompt templates based on application configuration."""

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager
        self._cache: Dict[str, Optional[str]] = {}
        self.base_path = config_manager.resolve_path(
            config_manager.app_settings.prompt_base_path
        )

    def _load_template(self, filename: str) -> Optional[str]:
        if filename in self._cache:
            return self._cache[filename]
        path = Path(self.base_path) / filename
        content: Optional[str] = None
        if not path.exists():
            logger.warning("Prompt template not found: %s", path)
        else:
            try:
                content = path.read_text(encoding="utf-8").strip() or None
            except OSError as e:
                logger.error("Failed reading prompt template %s: %s", path, e)
        self._cache[filename] = content
        return content

    def get_system_prompt(self) -> str:
        """Custom system prompt (if present) followed by the base RAG instruction."""
        custom = self._load_template(self.config_manager.app_settings.system_prompt_filename)
        if custom:
            return f"{custom}{PROMPT_SEPARATOR}{BASE_RAG_INSTRUCTION}"
        return BASE_RAG_INSTRUCTION

    def get_synthesis_prompt(self, context: str) -> str:
        return f"{SYNTHESIS_INSTRUCTION}\n\nDocument context:\n{context}"

    def clear_cache(self) -> None:
        self._cache.clear()
