"""Application factory for dependency injection and wiring."""

import logging

from docutalk.application.chat.orchestrator import TurnOrchestrator
from docutalk.application.chat.utilities.tool_executor import ToolInvoker
from docutalk.infrastructure.sessions.in_memory_repository import InMemorySessionStore
from docutalk.infrastructure.transport.data_stream_bridge import DataStreamBridge
from docutalk.modules.config import ConfigManager, resolve_env_var
from docutalk.modules.llm.litellm_caller import LiteLLMCaller
from docutalk.modules.prompts.prompt_provider import PromptProvider
from docutalk.modules.rag.client import HttpRetrievalClient
from docutalk.modules.tools import ToolRegistry, create_document_tools

logger = logging.getLogger(__name__)


class AppFactory:
    """Application factory that wires dependencies (simple in-memory DI)."""

    def __init__(self) -> None:
        # Configuration
        self.config_manager = ConfigManager()
        settings = self.config_manager.app_settings

        self.llm_caller = LiteLLMCaller(settings)

        self.retrieval_client = HttpRetrievalClient(
            base_url=settings.retrieval_url,
            collection=settings.retrieval_collection,
            top_k=settings.retrieval_top_k,
            bearer_token=resolve_env_var(settings.retrieval_bearer_token, required=False),
            timeout=settings.retrieval_timeout,
        )

        # Static tool registry; tools share the retrieval client and LLM
        self.tool_registry = ToolRegistry(
            create_document_tools(self.retrieval_client, self.llm_caller, settings.summary_top_k)
        )

        self.prompt_provider = PromptProvider(self.config_manager)

        # Shared session store for every turn; its sweep is started by the app lifespan
        self.session_store = InMemorySessionStore(
            max_messages=settings.session_max_messages,
            timeout_seconds=settings.session_timeout_seconds,
            sweep_interval_seconds=settings.session_sweep_interval_seconds,
        )

        self.bridge = DataStreamBridge(
            upstream_url=settings.bridge_upstream_url,
            timeout=settings.bridge_upstream_timeout,
        )

        logger.info(
            "AppFactory initialized: model=%s, tools=%s",
            settings.llm_model, ", ".join(self.tool_registry.names()),
        )

    def create_orchestrator(self) -> TurnOrchestrator:
        settings = self.config_manager.app_settings
        return TurnOrchestrator(
            session_store=self.session_store,
            retrieval=self.retrieval_client,
            llm=self.llm_caller,
            tool_registry=self.tool_registry,
            prompt_provider=self.prompt_provider,
            tool_invoker=ToolInvoker(self.tool_registry),
            stream_idle_timeout=settings.llm_stream_idle_timeout,
            synthesis_retrieval_policy=settings.synthesis_retrieval_policy,
        )

    # Accessors
    def get_config_manager(self) -> ConfigManager:  # noqa: D401
        return self.config_manager

    def get_llm_caller(self) -> LiteLLMCaller:  # noqa: D401
        return self.llm_caller

    def get_session_store(self) -> InMemorySessionStore:  # noqa: D401
        return self.session_store

    def get_bridge(self) -> DataStreamBridge:  # noqa: D401
        return self.bridge


app_factory = AppFactory()
