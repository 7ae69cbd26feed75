"""Tools over the ingested document collection."""

import logging
import posixpath
from typing import Any, Dict, List

from docutalk.domain.errors import RetrievalError, ToolExecutionError
from docutalk.interfaces.llm import LLMProtocol
from docutalk.interfaces.rag import RetrievalClientProtocol
from docutalk.modules.rag.client import format_context

from .registry import Tool

logger = logging.getLogger(__name__)

SUMMARY_FORMAT_INSTRUCTIONS = {
    "brief": "Write a concise 2-3 sentence summary.",
    "detailed": "Write a thorough multi-paragraph summary covering all key points.",
    "bullet_points": "Write a summary as a bulleted list of key points, one per line.",
}


def _display_name(source: str) -> str:
    return posixpath.basename(source.replace("\\", "/")) or source


def build_list_documents_tool(retrieval: RetrievalClientProtocol) -> Tool:
    async def list_documents(arguments: Dict[str, Any]) -> str:
        try:
            sources = await retrieval.list_sources()
        except RetrievalError as exc:
            raise ToolExecutionError(f"Error listing documents: {exc.message}") from exc

        unique: List[str] = list(dict.fromkeys(sources))
        if not unique:
            return "No documents have been ingested yet."
        listing = "\n".join(f"{idx}. {_display_name(src)}" for idx, src in enumerate(unique, start=1))
        return f"The following documents are in the knowledge base:\n{listing}"

    return Tool(
        name="list_documents",
        description=(
            "List all document filenames that have been ingested into the knowledge base. "
            "Use this when the user asks what documents are available or what files have been uploaded."
        ),
        func=list_documents,
        argument_schema={"type": "object", "properties": {}},
    )


def build_summarize_topic_tool(
    retrieval: RetrievalClientProtocol,
    llm: LLMProtocol,
    top_k: int = 6,
) -> Tool:
    async def summarize_topic(arguments: Dict[str, Any]) -> str:
        topic = str(arguments["topic"])
        summary_format = arguments.get("format", "brief")

        try:
            passages = await retrieval.search(topic, top_k=top_k)
        except RetrievalError as exc:
            raise ToolExecutionError(f"Error summarizing topic: {exc.message}") from exc

        if not passages:
            return f'No relevant content found for topic: "{topic}"'

        prompt = (
            "You are summarizing content from documents. Based on the excerpts below, "
            f"{SUMMARY_FORMAT_INSTRUCTIONS[summary_format]}\n\n"
            f"Topic: {topic}\n\n"
            f"{format_context(passages, label='Excerpt')}\n\n"
            "Summary:"
        )
        logger.debug("summarize_topic: %d excerpts, format=%s", len(passages), summary_format)
        return await llm.call_plain([{"role": "user", "content": prompt}])

    return Tool(
        name="summarize_topic",
        description=(
            "Generate a focused summary of a specific topic from the ingested documents. "
            "Use this when the user asks for a summary or overview of a particular subject."
        ),
        func=summarize_topic,
        argument_schema={
            "type": "object",
            "properties": {
                "topic": {
                    "type": "string",
                    "description": "The topic to summarize from the documents",
                },
                "format": {
                    "type": "string",
                    "enum": list(SUMMARY_FORMAT_INSTRUCTIONS),
                    "default": "brief",
                    "description": "How verbose the summary should be",
                },
            },
            "required": ["topic"],
        },
    )


def create_document_tools(
    retrieval: RetrievalClientProtocol,
    llm: LLMProtocol,
    summary_top_k: int = 6,
) -> List[Tool]:
    """All built-in document tools."""
    return [
        build_list_documents_tool(retrieval),
        build_summarize_topic_tool(retrieval, llm, top_k=summary_top_k),
    ]
