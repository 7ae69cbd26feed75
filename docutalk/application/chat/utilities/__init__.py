"""Pure helpers used by the chat orchestrator."""
