#!/usr/bin/env python3
"""
Stack Overflow MCP Server

An MCP server that finds how other developers solved the error in front of
you. Searches Stack Overflow by error message, by tags, or by the signature
line of a stack trace, and returns each matching question together with its
answers (and optionally comments).

Features:
- Sliding-window admission control on every outbound API call
- Automatic retry when Stack Exchange answers 429 Too Many Requests
- Concurrent answer/comment fan-out per question
- JSON (full records) or Markdown (readable report) output
"""

import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from api import StackExchangeClient
from core import ResilientInvoker, SearchOrchestrator, ToolDispatcher
from models import (
    AnalyzeStackTraceInput,
    SearchByErrorInput,
    SearchByTagsInput,
    ServerConfig,
    load_config,
)
from utils import AdmissionGate

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger("stackoverflow_mcp")


# ============================================================================
# Server Assembly
# ============================================================================


def build_dispatcher(config: ServerConfig) -> ToolDispatcher:
    """Wire gate -> invoker -> client -> orchestrator -> dispatcher for one server."""
    limits = config.rate_limit
    gate = AdmissionGate(
        max_calls=limits.max_requests,
        window_seconds=limits.window_seconds,
    )
    invoker = ResilientInvoker(
        gate,
        cooldown_seconds=limits.retry_after_seconds,
        max_retries=limits.max_retries,
        max_admission_waits=limits.max_admission_waits,
    )
    client = StackExchangeClient(
        invoker,
        site=config.site,
        api_key=config.api_key,
        access_token=config.access_token,
        filters=config.filters,
        base_url=config.api_url,
        timeout=config.api_timeout,
    )
    return ToolDispatcher(SearchOrchestrator(client))


def create_server(config: Optional[ServerConfig] = None) -> FastMCP:
    """Create the MCP server with its three search tools."""
    config = config or load_config()
    dispatcher = build_dispatcher(config)
    mcp = FastMCP("stackoverflow_mcp")

    @mcp.tool(
        name="search_by_error",
        annotations={
            "title": "Search Stack Overflow by Error Message",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    )
    async def search_by_error(params: SearchByErrorInput) -> str:
        """
        Search Stack Overflow for questions about an error message.

        The optional language (lower-cased) and technologies are combined into
        a tag filter, language first. Results are ordered by votes and each
        question comes with all of its answers, highest voted first.

        Args:
            params: SearchByErrorInput with error_message, language, technologies,
                min_score, include_comments, limit, response_format

        Example:
            params = SearchByErrorInput(
                error_message="TypeError: 'NoneType' object is not subscriptable",
                language="Python",
                technologies=["django"],
                response_format="markdown",
            )

        Returns:
            JSON list of {question, answers, comments?} records, or a Markdown report.
        """
        return await dispatcher.search_by_error(params)

    @mcp.tool(
        name="search_by_tags",
        annotations={
            "title": "Search Stack Overflow by Tags",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    )
    async def search_by_tags(params: SearchByTagsInput) -> str:
        """
        List the highest voted Stack Overflow questions carrying all given tags.

        Args:
            params: SearchByTagsInput with tags, min_score, include_comments,
                limit, response_format

        Returns:
            JSON list of {question, answers, comments?} records, or a Markdown report.
        """
        return await dispatcher.search_by_tags(params)

    @mcp.tool(
        name="analyze_stack_trace",
        annotations={
            "title": "Find Solutions for a Stack Trace",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    )
    async def analyze_stack_trace(params: AnalyzeStackTraceInput) -> str:
        """
        Find Stack Overflow solutions for a stack trace.

        The first line of the trace (the error signature) is used as the
        search query, tagged with the lower-cased language.

        Args:
            params: AnalyzeStackTraceInput with stack_trace, language,
                include_comments, limit, response_format

        Returns:
            JSON list of {question, answers, comments?} records, or a Markdown report.
        """
        return await dispatcher.analyze_stack_trace(params)

    return mcp


def validate_environment(config: ServerConfig) -> List[str]:
    """Report the effective configuration on stderr before serving."""
    notes = [f"Site: {config.site}"]
    if config.api_key:
        notes.append("API key configured (10,000 requests/day)")
    else:
        notes.append("No STACKEXCHANGE_API_KEY set (300 requests/day per IP)")
    if config.access_token:
        notes.append("Access token configured")
    limits = config.rate_limit
    notes.append(
        f"Rate limit: {limits.max_requests} requests / {limits.window_seconds:g}s, "
        f"{limits.max_retries} retries on 429"
    )

    for note in notes:
        print(note, file=sys.stderr)
    return notes


def configure_logging(level: str) -> None:
    # stdout carries the MCP protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)
    validate_environment(config)

    mcp = create_server(config)
    logger.info("Stack Overflow MCP server running on stdio")
    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
