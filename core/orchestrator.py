"""Search orchestration: primary lookup, score filter and answer/comment fan-out."""

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from models.results import (
    Answer,
    CommentBundle,
    Question,
    ResultRecord,
    SearchOptions,
)

if TYPE_CHECKING:
    from api.stackexchange import StackExchangeClient

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """
    Turns a question search into fully aggregated result records.

    Questions are expanded concurrently. Each record is only built once its
    answers (and comments, when requested) have all arrived, and the returned
    list keeps the upstream order. The first failing fetch aborts the whole
    search; callers never see partial aggregation.
    """

    def __init__(self, client: "StackExchangeClient"):
        self.client = client

    async def search(
        self,
        query: str,
        tags: Optional[Sequence[str]] = None,
        options: Optional[SearchOptions] = None,
    ) -> List[ResultRecord]:
        """Free-text search expanded into result records."""
        options = options or SearchOptions()
        questions = await self.client.search(query, tags=tags, limit=options.limit)
        return await self._aggregate(questions, options)

    async def search_tagged(
        self,
        tags: Sequence[str],
        options: Optional[SearchOptions] = None,
    ) -> List[ResultRecord]:
        """Tag listing expanded into result records."""
        options = options or SearchOptions()
        questions = await self.client.questions_by_tags(tags, limit=options.limit)
        return await self._aggregate(questions, options)

    async def _aggregate(
        self, questions: List[Question], options: SearchOptions
    ) -> List[ResultRecord]:
        # Upstream sorts by votes, but the filter stays per item
        retained = [q for q in questions if _meets_min_score(q, options.min_score)]
        skipped = len(questions) - len(retained)
        if skipped:
            logger.debug(f"Skipped {skipped} questions below min_score={options.min_score}")

        records = await asyncio.gather(
            *[self._build_record(q, options.include_comments) for q in retained]
        )
        return list(records)

    async def _build_record(self, question: Question, include_comments: bool) -> ResultRecord:
        answers = await self.client.fetch_answers(question.question_id)

        comments = None
        if include_comments:
            comments = await self._collect_comments(question, answers)

        return ResultRecord(question=question, answers=answers, comments=comments)

    async def _collect_comments(
        self, question: Question, answers: List[Answer]
    ) -> CommentBundle:
        answer_ids = [a.answer_id for a in answers if a.answer_id is not None]

        question_comments, *answer_comments = await asyncio.gather(
            self.client.fetch_comments(question.question_id),
            *[self.client.fetch_comments(answer_id) for answer_id in answer_ids],
        )

        return CommentBundle(
            question=question_comments,
            answers=dict(zip(answer_ids, answer_comments)),
        )


def _meets_min_score(question: Question, min_score: Optional[int]) -> bool:
    return min_score is None or question.score >= min_score
