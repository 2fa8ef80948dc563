"""
Tests for the tag search HTTP client.
"""
import asyncio

import httpx

from tag_autocompletion.search import TagSearchClient
from fakes import SearchServiceStub


def _client_with(handler) -> TagSearchClient:
    return TagSearchClient(
        "http://search.local/",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestTagSearchClient:
    """Tests for TagSearchClient.search."""

    def test_posts_query_and_limit(self):
        """Test the request shape and ranked, de-duplicated response."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, json={"candidates": ["padded walls", "room", "room", " "]})

        async def run():
            client = _client_with(handler)
            try:
                return await client.search("padded_room", limit=3)
            finally:
                await client.aclose()

        candidates = asyncio.run(run())

        assert seen["url"] == "http://search.local/search_tag"
        assert b'"query":"padded_room"' in seen["body"].replace(b" ", b"")
        assert b'"limit":3' in seen["body"].replace(b" ", b"")
        assert candidates == ["padded walls", "room"]

    def test_http_error_returns_empty(self):
        stub = SearchServiceStub(status_code=500)

        async def run():
            client = TagSearchClient("http://search.local", client=stub.client())
            return await client.search("smile")

        assert asyncio.run(run()) == []
        assert stub.queries == ["smile"]

    def test_transport_error_returns_empty(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert asyncio.run(_client_with(handler).search("smile")) == []

    def test_malformed_body_returns_empty(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": "not-a-list"})

        assert asyncio.run(_client_with(handler).search("smile")) == []

    def test_non_json_body_returns_empty(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        assert asyncio.run(_client_with(handler).search("smile")) == []


class TestCheckConnection:
    """Tests for TagSearchClient.check_connection."""

    def test_success_reports_candidate_count(self):
        stub = SearchServiceStub({"blonde_hair": ["blonde hair", "light blonde hair"]})

        async def run():
            client = TagSearchClient("http://search.local", client=stub.client())
            return await client.check_connection()

        result = asyncio.run(run())

        assert result.ok
        assert result.candidate_count == 2
        assert stub.queries == ["blonde_hair"]

    def test_timeout_is_reported(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        result = asyncio.run(_client_with(handler).check_connection())

        assert not result.ok
        assert "timeout" in result.message.lower()

    def test_unreachable_is_reported(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = asyncio.run(_client_with(handler).check_connection())

        assert not result.ok
        assert "Cannot connect" in result.message

    def test_http_status_is_reported(self):
        result = asyncio.run(
            TagSearchClient("http://search.local", client=SearchServiceStub(status_code=404).client())
            .check_connection()
        )

        assert not result.ok
        assert "404" in result.message
