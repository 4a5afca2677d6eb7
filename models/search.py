"""Tool input models for the Stack Overflow MCP server."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.config import ResponseFormat


class _ToolInput(BaseModel):
    """Options shared by every tool."""

    model_config = ConfigDict(
        str_strip_whitespace=True, validate_assignment=True, extra="forbid"
    )

    include_comments: bool = Field(
        default=False,
        description="Also fetch comments on each question and each of its answers (more API calls).",
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        description="Output format: 'json' (default, full records) or 'markdown' (readable report)",
    )
    limit: Optional[int] = Field(
        default=None,
        description="Maximum number of questions to fetch (1-100)",
        ge=1,
        le=100,
    )


class SearchByErrorInput(_ToolInput):
    """Input model for search_by_error."""

    error_message: str = Field(
        ...,
        description="Error message to search for (e.g., 'TypeError: cannot read property of undefined')",
        min_length=1,
        max_length=1000,
    )
    language: Optional[str] = Field(
        default=None,
        description="Programming language, used as a tag (e.g., 'Python', 'JavaScript')",
        max_length=50,
    )
    technologies: List[str] = Field(
        default_factory=list,
        description="Extra tags for frameworks or libraries (e.g., ['django', 'celery'])",
    )
    min_score: Optional[int] = Field(
        default=None,
        description="Skip questions scored below this value",
    )

    @field_validator("technologies")
    @classmethod
    def drop_blank_technologies(cls, v: List[str]) -> List[str]:
        """Blank entries would produce an empty tag in the filter."""
        return [t.strip() for t in v if t and t.strip()]


class SearchByTagsInput(_ToolInput):
    """Input model for search_by_tags."""

    tags: List[str] = Field(
        ...,
        description="Stack Overflow tags; questions must carry all of them (e.g., ['python', 'asyncio'])",
        min_length=1,
    )
    min_score: Optional[int] = Field(
        default=None,
        description="Skip questions scored below this value",
    )

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Require at least one non-blank tag."""
        tags = [t.strip() for t in v if t and t.strip()]
        if not tags:
            raise ValueError("tags must contain at least one non-empty tag")
        return tags


class AnalyzeStackTraceInput(_ToolInput):
    """Input model for analyze_stack_trace."""

    stack_trace: str = Field(
        ...,
        description="Full stack trace; its first line is used as the error signature",
        min_length=1,
    )
    language: str = Field(
        ...,
        description="Language the trace comes from (e.g., 'Java', 'Python')",
        min_length=1,
        max_length=50,
    )
    min_score: Optional[int] = Field(
        default=None,
        description="Skip questions scored below this value (no filtering by default)",
    )
