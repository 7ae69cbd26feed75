"""Static tool registry.

Tools are plain dataclasses wrapping an async callable. The registry is a fixed
name -> tool map built at startup; there is no dynamic loading.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from docutalk.domain.errors import ToolExecutionError

logger = logging.getLogger(__name__)

# Argument key under which the session's client context reaches a tool
CLIENT_CONTEXT_ARG = "_client_context"

ToolFunc = Callable[[Dict[str, Any]], Awaitable[str]]


@dataclass
class Tool:
    """An invocable tool: name, description, JSON-schema arguments and implementation."""
    name: str
    description: str
    func: ToolFunc
    argument_schema: Dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_schema(self) -> Dict[str, Any]:
        """OpenAI function schema advertised to the model."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.argument_schema,
            },
        }

    def prepare_arguments(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Apply schema defaults and check required / enum constraints."""
        prepared = dict(arguments)
        properties = self.argument_schema.get("properties", {})

        for prop_name, prop_schema in properties.items():
            if prop_name not in prepared and "default" in prop_schema:
                prepared[prop_name] = prop_schema["default"]

        for required in self.argument_schema.get("required", []):
            if prepared.get(required) in (None, ""):
                raise ToolExecutionError(f"Missing required argument '{required}'")

        for prop_name, prop_schema in properties.items():
            allowed = prop_schema.get("enum")
            if allowed and prop_name in prepared and prepared[prop_name] not in allowed:
                raise ToolExecutionError(
                    f"Invalid value for '{prop_name}': expected one of {', '.join(map(str, allowed))}"
                )
        return prepared

    async def invoke(self, arguments: Dict[str, Any]) -> str:
        result = await self.func(self.prepare_arguments(arguments))
        return result if isinstance(result, str) else str(result)


class ToolRegistry:
    """Name -> Tool map."""

    def __init__(self, tools: Optional[Iterable[Tool]] = None):
        self._tools: Dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.debug("Registered tool %s", tool.name)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def get_tools_schema(self) -> List[Dict[str, Any]]:
        return [tool.to_schema() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
