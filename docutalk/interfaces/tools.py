"""Tools interface protocols."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ToolProtocol(Protocol):
    """Shape every invocable tool exposes."""

    name: str
    description: str
    argument_schema: Dict[str, Any]

    async def invoke(self, arguments: Dict[str, Any]) -> str:
        """Execute the tool with given arguments."""
        ...

    def to_schema(self) -> Dict[str, Any]:
        """Get tool schema for the LLM."""
        ...


@runtime_checkable
class ToolRegistryProtocol(Protocol):
    """Protocol for the static tool registry."""

    def get(self, name: str) -> Optional[ToolProtocol]:
        ...

    def names(self) -> List[str]:
        ...

    def get_tools_schema(self) -> List[Dict[str, Any]]:
        ...
