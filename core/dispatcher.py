"""
Tool dispatch: request validation, parameter derivation and error mapping.

Each tool has a typed input model. Raw arguments are validated before the
orchestrator is touched, so a bad request never reaches the network.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from mcp.shared.exceptions import McpError
from mcp.types import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ErrorData,
    TextContent,
)
from pydantic import BaseModel, ValidationError

from core.errors import AdmissionTimeoutError, StackExchangeAPIError
from core.formatting import format_response
from core.orchestrator import SearchOrchestrator
from models.results import ResultRecord, SearchOptions
from models.search import (
    AnalyzeStackTraceInput,
    SearchByErrorInput,
    SearchByTagsInput,
)

__all__ = [
    "ToolDispatcher",
    "TOOL_INPUTS",
    "derive_error_tags",
    "stack_trace_signature",
]

logger = logging.getLogger(__name__)

TOOL_INPUTS: Dict[str, Type[BaseModel]] = {
    "search_by_error": SearchByErrorInput,
    "search_by_tags": SearchByTagsInput,
    "analyze_stack_trace": AnalyzeStackTraceInput,
}


def derive_error_tags(language: Optional[str], technologies: List[str]) -> List[str]:
    """Language (lower-cased) first, then technologies in the order given."""
    tags = [language.lower()] if language else []
    return tags + list(technologies)


def stack_trace_signature(stack_trace: str) -> str:
    """The first line of a stack trace names the error."""
    lines = stack_trace.splitlines()
    return lines[0] if lines else ""


def _invalid_params(message: str) -> McpError:
    return McpError(ErrorData(code=INVALID_PARAMS, message=message))


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "arguments"
        parts.append(f"{field}: {err['msg']}")
    return "Invalid arguments - " + "; ".join(parts)


class ToolDispatcher:
    """Validates tool requests and runs them through the search orchestrator."""

    def __init__(self, orchestrator: SearchOrchestrator):
        self.orchestrator = orchestrator
        self._handlers: Dict[str, Callable[[Any], Awaitable[str]]] = {
            "search_by_error": self.search_by_error,
            "search_by_tags": self.search_by_tags,
            "analyze_stack_trace": self.analyze_stack_trace,
        }

    async def dispatch(
        self, name: str, arguments: Optional[Dict[str, Any]]
    ) -> List[TextContent]:
        """
        Validate raw tool arguments and run the named tool.

        Returns:
            Content-block envelope holding the formatted text

        Raises:
            McpError: METHOD_NOT_FOUND for unknown tools, INVALID_PARAMS for
                missing or malformed arguments, INVALID_REQUEST for upstream
                failures
        """
        input_model = TOOL_INPUTS.get(name)
        if input_model is None:
            raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
        if arguments is None:
            raise _invalid_params("Arguments are required")

        try:
            request = input_model.model_validate(arguments)
        except ValidationError as e:
            raise _invalid_params(_validation_message(e)) from e

        text = await self._handlers[name](request)
        return [TextContent(type="text", text=text)]

    # ── Tools ──────────────────────────────────────────────────────────────

    async def search_by_error(self, request: SearchByErrorInput) -> str:
        tags = derive_error_tags(request.language, request.technologies)
        options = SearchOptions(
            min_score=request.min_score,
            limit=request.limit,
            include_comments=request.include_comments,
            response_format=request.response_format,
        )
        logger.info(f"search_by_error: '{request.error_message}' tags={tags}")
        records = await self._run(
            self.orchestrator.search(request.error_message, tags or None, options)
        )
        return format_response(records, options.response_format)

    async def search_by_tags(self, request: SearchByTagsInput) -> str:
        options = SearchOptions(
            min_score=request.min_score,
            limit=request.limit,
            include_comments=request.include_comments,
            response_format=request.response_format,
        )
        logger.info(f"search_by_tags: {request.tags}")
        records = await self._run(self.orchestrator.search_tagged(request.tags, options))
        return format_response(records, options.response_format)

    async def analyze_stack_trace(self, request: AnalyzeStackTraceInput) -> str:
        signature = stack_trace_signature(request.stack_trace)
        tags = [request.language.lower()]
        options = SearchOptions(
            min_score=request.min_score,
            limit=request.limit,
            include_comments=request.include_comments,
            response_format=request.response_format,
        )
        logger.info(f"analyze_stack_trace: '{signature}' tags={tags}")
        records = await self._run(self.orchestrator.search(signature, tags, options))
        return format_response(records, options.response_format)

    async def _run(self, search: Awaitable[List[ResultRecord]]) -> List[ResultRecord]:
        """Await a search, mapping upstream failures to MCP errors."""
        try:
            return await search
        except StackExchangeAPIError as e:
            logger.error(f"Stack Overflow API error: {e.message}")
            raise McpError(
                ErrorData(code=INVALID_REQUEST, message=f"Stack Overflow API error: {e.message}")
            ) from e
        except AdmissionTimeoutError as e:
            logger.error(str(e))
            raise McpError(ErrorData(code=INVALID_REQUEST, message=str(e))) from e
