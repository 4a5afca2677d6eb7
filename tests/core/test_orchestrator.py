"""Unit tests for the search orchestrator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.errors import StackExchangeAPIError
from core.orchestrator import SearchOrchestrator
from models.results import Answer, Comment, Question, SearchOptions
from tests.conftest import FakeStackExchange
from tests.factories import answer_item, comment_item, items, question_item


def _question(question_id: int, score: int) -> Question:
    return Question.model_validate(question_item(question_id, score))


def _answers(question_id: int, *answer_ids: int) -> list:
    return [Answer(answer_id=a, question_id=question_id, score=10 - i) for i, a in enumerate(answer_ids)]


@pytest.fixture
def client():
    """Spy client with no network behind it."""
    mock = MagicMock()
    mock.search = AsyncMock(return_value=[])
    mock.questions_by_tags = AsyncMock(return_value=[])
    mock.fetch_answers = AsyncMock(return_value=[])
    mock.fetch_comments = AsyncMock(return_value=[])
    return mock


class TestSearch:
    @pytest.mark.asyncio
    async def test_passes_query_tags_and_limit(self, client):
        orchestrator = SearchOrchestrator(client)

        await orchestrator.search("ImportError", ["python"], SearchOptions(limit=7))

        client.search.assert_awaited_once_with("ImportError", tags=["python"], limit=7)

    @pytest.mark.asyncio
    async def test_min_score_excludes_low_scores(self, client):
        client.search.return_value = [_question(1, 50), _question(2, 20), _question(3, 5)]
        orchestrator = SearchOrchestrator(client)

        records = await orchestrator.search("x", None, SearchOptions(min_score=10))

        assert [r.question.question_id for r in records] == [1, 2]
        fetched = sorted(call.args[0] for call in client.fetch_answers.await_args_list)
        assert fetched == [1, 2]

    @pytest.mark.asyncio
    async def test_min_score_is_inclusive(self, client):
        client.search.return_value = [_question(1, 10), _question(2, 9)]

        records = await SearchOrchestrator(client).search("x", None, SearchOptions(min_score=10))

        assert [r.question.question_id for r in records] == [1]

    @pytest.mark.asyncio
    async def test_filter_is_per_item_not_prefix(self, client):
        # Unsorted upstream: a low score in the middle must not cut the rest
        client.search.return_value = [_question(1, 30), _question(2, 1), _question(3, 25)]

        records = await SearchOrchestrator(client).search("x", None, SearchOptions(min_score=10))

        assert [r.question.question_id for r in records] == [1, 3]

    @pytest.mark.asyncio
    async def test_no_min_score_keeps_negative_questions(self, client):
        client.search.return_value = [_question(1, -3)]

        records = await SearchOrchestrator(client).search("x")

        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_preserves_upstream_order(self, client):
        client.search.return_value = [_question(1, 50), _question(2, 40), _question(3, 30)]

        async def slow_first(question_id):
            # Later questions finish first
            await asyncio.sleep(0.01 * (4 - question_id))
            return _answers(question_id, question_id * 10)

        client.fetch_answers.side_effect = slow_first

        records = await SearchOrchestrator(client).search("x")

        assert [r.question.question_id for r in records] == [1, 2, 3]
        assert [r.answers[0].answer_id for r in records] == [10, 20, 30]

    @pytest.mark.asyncio
    async def test_comments_absent_unless_requested(self, client):
        client.search.return_value = [_question(1, 5)]
        client.fetch_answers.return_value = _answers(1, 11)

        records = await SearchOrchestrator(client).search("x")

        assert records[0].comments is None
        client.fetch_comments.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_search_is_not_an_error(self, client):
        assert await SearchOrchestrator(client).search("nothing matches") == []
        client.fetch_answers.assert_not_awaited()


class TestCommentAggregation:
    @pytest.mark.asyncio
    async def test_bundle_has_one_key_per_answer(self, client):
        client.search.return_value = [_question(1, 5)]
        client.fetch_answers.return_value = _answers(1, 101, 102)

        async def comments_for(post_id):
            # Answer 101 resolves last
            await asyncio.sleep(0.02 if post_id == 101 else 0)
            return [Comment(comment_id=post_id * 10, post_id=post_id, body="c", score=1)]

        client.fetch_comments.side_effect = comments_for

        records = await SearchOrchestrator(client).search(
            "x", None, SearchOptions(include_comments=True)
        )

        bundle = records[0].comments
        assert bundle is not None
        assert list(bundle.answers) == [101, 102]
        assert bundle.answers[101][0].post_id == 101
        assert bundle.answers[102][0].post_id == 102
        assert bundle.question[0].post_id == 1

    @pytest.mark.asyncio
    async def test_answers_without_id_are_skipped(self, client):
        client.search.return_value = [_question(1, 5)]
        client.fetch_answers.return_value = [Answer(answer_id=None, question_id=1), *_answers(1, 7)]

        records = await SearchOrchestrator(client).search(
            "x", None, SearchOptions(include_comments=True)
        )

        assert list(records[0].comments.answers) == [7]
        fetched = sorted(call.args[0] for call in client.fetch_comments.await_args_list)
        assert fetched == [1, 7]

    @pytest.mark.asyncio
    async def test_question_without_answers_gets_empty_mapping(self, client):
        client.search.return_value = [_question(1, 5)]

        records = await SearchOrchestrator(client).search(
            "x", None, SearchOptions(include_comments=True)
        )

        assert records[0].comments.answers == {}
        assert records[0].comments.question == []


class TestFailureSemantics:
    @pytest.mark.asyncio
    async def test_answer_failure_aborts_search(self, client):
        client.search.return_value = [_question(1, 5), _question(2, 4)]

        async def answers(question_id):
            if question_id == 2:
                raise StackExchangeAPIError("boom", status_code=500)
            return []

        client.fetch_answers.side_effect = answers

        with pytest.raises(StackExchangeAPIError, match="boom"):
            await SearchOrchestrator(client).search("x")

    @pytest.mark.asyncio
    async def test_comment_failure_aborts_search(self, client):
        client.search.return_value = [_question(1, 5)]
        client.fetch_answers.return_value = _answers(1, 11)
        client.fetch_comments.side_effect = StackExchangeAPIError("no comments", status_code=400)

        with pytest.raises(StackExchangeAPIError):
            await SearchOrchestrator(client).search("x", None, SearchOptions(include_comments=True))

    @pytest.mark.asyncio
    async def test_search_failure_skips_fan_out(self, client):
        client.search.side_effect = StackExchangeAPIError("bad", status_code=400)

        with pytest.raises(StackExchangeAPIError):
            await SearchOrchestrator(client).search("x")

        client.fetch_answers.assert_not_awaited()


class TestTagListing:
    @pytest.mark.asyncio
    async def test_search_tagged_uses_listing(self, client):
        client.questions_by_tags.return_value = [_question(1, 3)]

        records = await SearchOrchestrator(client).search_tagged(["go"], SearchOptions(limit=2))

        client.questions_by_tags.assert_awaited_once_with(["go"], limit=2)
        client.search.assert_not_awaited()
        assert len(records) == 1


class TestEndToEndWithHttp:
    """Orchestrator over the real client and a fake API."""

    @pytest.mark.asyncio
    async def test_full_fan_out(self, make_client):
        api = FakeStackExchange(
            {
                "/search/advanced": items(question_item(1, 50), question_item(2, 3)),
                "/questions/1/answers": items(answer_item(11, 1, 9, accepted=True), answer_item(12, 1, 4)),
                "/posts/1/comments": items(comment_item(1001, 1)),
                "/posts/11/comments": items(comment_item(1101, 11)),
                "/posts/12/comments": items(),
            }
        )
        orchestrator = SearchOrchestrator(make_client(api))

        records = await orchestrator.search(
            "x", ["python"], SearchOptions(min_score=10, include_comments=True)
        )

        assert len(records) == 1
        record = records[0]
        assert [a.answer_id for a in record.answers] == [11, 12]
        assert record.comments.answers[11][0].comment_id == 1101
        assert record.comments.answers[12] == []
        assert sorted(api.paths()) == sorted(
            [
                "/search/advanced",
                "/questions/1/answers",
                "/posts/1/comments",
                "/posts/11/comments",
                "/posts/12/comments",
            ]
        )
