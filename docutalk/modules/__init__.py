"""Adapters for configuration, generation, retrieval, prompts and tools."""
