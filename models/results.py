"""Result records assembled from Stack Exchange questions, answers and comments."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.config import ResponseFormat

_ENTITY_CONFIG = ConfigDict(frozen=True, extra="ignore")


class Question(BaseModel):
    """A question as returned by the search or listing endpoints."""

    model_config = _ENTITY_CONFIG

    question_id: int
    title: str = ""
    body: str = ""
    score: int = 0
    answer_count: int = 0
    link: str = ""
    tags: List[str] = Field(default_factory=list)
    is_answered: bool = False


class Answer(BaseModel):
    model_config = _ENTITY_CONFIG

    answer_id: Optional[int] = None
    question_id: Optional[int] = None
    body: str = ""
    score: int = 0
    is_accepted: bool = False


class Comment(BaseModel):
    model_config = _ENTITY_CONFIG

    comment_id: Optional[int] = None
    post_id: Optional[int] = None
    body: str = ""
    score: int = 0


class CommentBundle(BaseModel):
    """Comments on a question plus each of its answers, keyed by answer id."""

    model_config = ConfigDict(frozen=True)

    question: List[Comment] = Field(default_factory=list)
    answers: Dict[int, List[Comment]] = Field(default_factory=dict)


class ResultRecord(BaseModel):
    """One question with its answers (descending score) and optional comments."""

    model_config = ConfigDict(frozen=True)

    question: Question
    answers: List[Answer] = Field(default_factory=list)
    comments: Optional[CommentBundle] = None


class SearchOptions(BaseModel):
    """Per-call knobs shared by every search path."""

    model_config = ConfigDict(frozen=True)

    min_score: Optional[int] = None
    limit: Optional[int] = Field(default=None, ge=1, le=100)
    include_comments: bool = False
    response_format: ResponseFormat = ResponseFormat.JSON
