"""
Core services for the Stack Overflow MCP server.

    Reliability      Admission-gated calls with bounded 429 retry
    Orchestration    Search, score filter and answer/comment fan-out
    Formatting       JSON and Markdown rendering of result records
    Dispatch         Tool validation and parameter derivation
"""

from core.dispatcher import ToolDispatcher
from core.errors import AdmissionTimeoutError, OverloadError, StackExchangeAPIError
from core.formatting import format_response
from core.orchestrator import SearchOrchestrator
from core.reliability import ResilientInvoker

__all__ = [
    # Errors
    "StackExchangeAPIError",
    "OverloadError",
    "AdmissionTimeoutError",
    # Reliability
    "ResilientInvoker",
    # Pipeline
    "SearchOrchestrator",
    "format_response",
    "ToolDispatcher",
]
