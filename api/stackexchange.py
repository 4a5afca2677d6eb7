"""
Stack Exchange API Integration.

Paginated question search, tag listing, answer and comment lookups
against one Stack Exchange site. Every request goes through the
Resilient Invoker, so admission control and overload retry apply to
searches and fan-out fetches alike.

API: https://api.stackexchange.com/docs
Rate Limits: 300/day (anonymous), 10,000/day (with API key)
"""

import logging
from typing import Any, Optional, Sequence

import httpx

from core.errors import (
    THROTTLE_ERROR_ID,
    OverloadError,
    StackExchangeAPIError,
)
from core.reliability import ResilientInvoker
from models.config import FilterSettings
from models.results import Answer, Comment, Question

__all__ = [
    "StackExchangeClient",
    "API_BASE",
]

# ══════════════════════════════════════════════════════════════════════════════
# Configuration
# ══════════════════════════════════════════════════════════════════════════════

API_BASE = "https://api.stackexchange.com/2.3"
API_TIMEOUT = 30.0

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# Client
# ══════════════════════════════════════════════════════════════════════════════


class StackExchangeClient:
    """
    Async client for one Stack Exchange site.

    Args:
        invoker: Resilient Invoker guarding every request
        site: Site key (default: stackoverflow)
        api_key: Optional app key for the higher daily quota
        access_token: Optional OAuth access token
        filters: Response filter tokens per endpoint
        base_url: API root
        timeout: Per-request timeout in seconds
        http_client: Shared httpx client; a short-lived one is opened per
            request when omitted
    """

    def __init__(
        self,
        invoker: ResilientInvoker,
        site: str = "stackoverflow",
        *,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        filters: Optional[FilterSettings] = None,
        base_url: str = API_BASE,
        timeout: float = API_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.invoker = invoker
        self.site = site
        self.api_key = api_key
        self.access_token = access_token
        self.filters = filters or FilterSettings()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    # ── Endpoints ──────────────────────────────────────────────────────────

    async def search(
        self,
        query: str,
        tags: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> list[Question]:
        """
        Free-text search, highest voted first.

        Args:
            query: Search text (usually an error message)
            tags: Tags every result must carry
            limit: Page size (max 100)
        """
        params = self._params(self.filters.search, q=query)
        if tags:
            params["tagged"] = ";".join(tags)
        if limit:
            params["pagesize"] = limit

        items = await self._get_items("/search/advanced", params)
        questions = [Question.model_validate(item) for item in items]
        logger.info(f"SO: Found {len(questions)} questions for '{query}'")
        return questions

    async def questions_by_tags(
        self,
        tags: Sequence[str],
        limit: Optional[int] = None,
    ) -> list[Question]:
        """List questions tagged with all of ``tags``, highest voted first."""
        params = self._params(self.filters.tagged, tagged=";".join(tags))
        if limit:
            params["pagesize"] = limit

        items = await self._get_items("/questions", params)
        questions = [Question.model_validate(item) for item in items]
        logger.info(f"SO: Found {len(questions)} questions tagged {list(tags)}")
        return questions

    async def fetch_answers(self, question_id: int) -> list[Answer]:
        """All answers for a question, highest voted first."""
        params = self._params(self.filters.answers)
        items = await self._get_items(f"/questions/{question_id}/answers", params)
        return [Answer.model_validate(item) for item in items]

    async def fetch_comments(self, post_id: int) -> list[Comment]:
        """All comments on a question or answer, highest voted first."""
        params = self._params(self.filters.comments)
        items = await self._get_items(f"/posts/{post_id}/comments", params)
        return [Comment.model_validate(item) for item in items]

    # ── Request plumbing ───────────────────────────────────────────────────

    def _params(self, filter_token: str, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {
            "site": self.site,
            "sort": "votes",
            "order": "desc",
            "filter": filter_token,
            **extra,
        }
        if self.api_key:
            params["key"] = self.api_key
        if self.access_token:
            params["access_token"] = self.access_token
        return params

    async def _get_items(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        data = await self.invoker.invoke(lambda: self._request(path, params))
        # A missing items list means nothing matched
        return data.get("items") or []

    async def _request(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url}")

        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise StackExchangeAPIError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise StackExchangeAPIError(f"Request failed: {e}") from e

        if response.status_code == 429:
            raise OverloadError("Too many requests", status_code=429)

        data = _json_body(response)

        if not response.is_success:
            message = data.get("error_message") or response.reason_phrase or "Unknown error"
            error_id = data.get("error_id")
            error_cls = (
                OverloadError if error_id == THROTTLE_ERROR_ID else StackExchangeAPIError
            )
            raise error_cls(
                message,
                status_code=response.status_code,
                error_id=error_id,
                error_name=data.get("error_name"),
            )

        if "quota_remaining" in data:
            logger.debug(f"Quota remaining: {data.get('quota_remaining')}")

        return data


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else decodes to an empty dict."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
