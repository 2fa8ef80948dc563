"""
HTTP client for the tag candidate search service.

The service exposes ``POST /search_tag`` taking ``{"query", "limit"}`` and
returning ``{"candidates": [...]}`` in rank order. Every failure maps to an
empty candidate list; nothing raises into the pipeline.
"""
import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from ..schemas import ConnectionCheckResult, SearchTagRequest, SearchTagResponse
from ..text_cleaning import unique_in_order

logger = logging.getLogger(__name__)


class TagSearchClient:
    """Async client for the vocabulary search endpoint."""

    def __init__(
        self,
        api_endpoint: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        :param api_endpoint: Base URL of the search service
        :param timeout: Per-request timeout in seconds
        :param client: Pre-built client (tests inject one with a MockTransport)
        """
        self._endpoint = api_endpoint.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def search_url(self) -> str:
        return f"{self._endpoint}/search_tag"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def search(self, query: str, limit: int = 5) -> List[str]:
        """
        Look up vocabulary candidates for a tag.

        :param query: Tag text
        :param limit: Maximum number of candidates
        :return: Candidates in rank order, duplicates removed; empty on any failure
        """
        try:
            request = SearchTagRequest(query=query, limit=limit)
            response = await self._get_client().post(
                self.search_url,
                json=request.model_dump(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = SearchTagResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Tag API error: {exc.response.status_code} for '{query}'")
            return []
        except httpx.RequestError as exc:
            logger.warning(f"Tag API request failed for '{query}': {exc!r}")
            return []
        except (ValidationError, ValueError) as exc:
            logger.warning(f"Tag API returned malformed response for '{query}': {exc}")
            return []

        return unique_in_order([c for c in payload.candidates if c and c.strip()])

    async def check_connection(self) -> ConnectionCheckResult:
        """Probe the service with a known tag and describe the outcome."""
        try:
            response = await self._get_client().post(
                self.search_url,
                json=SearchTagRequest(query="blonde_hair", limit=5).model_dump(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            return ConnectionCheckResult(
                ok=False, message="Connection timeout - check if the API server is running"
            )
        except httpx.RequestError:
            return ConnectionCheckResult(
                ok=False, message="Cannot connect to API - check endpoint URL and server status"
            )

        if not response.is_success:
            return ConnectionCheckResult(
                ok=False,
                message=f"API returned error: {response.status_code} {response.reason_phrase}",
            )

        try:
            payload = SearchTagResponse.model_validate(response.json())
        except (ValidationError, ValueError) as exc:
            return ConnectionCheckResult(ok=False, message=f"Connection failed: {exc}")

        return ConnectionCheckResult(
            ok=True,
            message=f"Connection successful! Found {len(payload.candidates)} candidates.",
            candidate_count=len(payload.candidates),
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
