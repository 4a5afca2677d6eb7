"""
Data models for the Stack Overflow MCP server.

Provides Pydantic models for tool request validation, the result
records produced by a search, and server configuration.
"""

from models.config import (
    FilterSettings,
    RateLimitSettings,
    ResponseFormat,
    ServerConfig,
    load_config,
)
from models.results import (
    Answer,
    Comment,
    CommentBundle,
    Question,
    ResultRecord,
    SearchOptions,
)
from models.search import (
    AnalyzeStackTraceInput,
    SearchByErrorInput,
    SearchByTagsInput,
)

__all__ = [
    # Configuration
    "ResponseFormat",
    "ServerConfig",
    "RateLimitSettings",
    "FilterSettings",
    "load_config",
    # Results
    "Question",
    "Answer",
    "Comment",
    "CommentBundle",
    "ResultRecord",
    "SearchOptions",
    # Tool inputs
    "SearchByErrorInput",
    "SearchByTagsInput",
    "AnalyzeStackTraceInput",
]
