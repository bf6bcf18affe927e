"""Unit tests for httpimport.fetcher."""

from __future__ import annotations

import httpx
import pytest
import respx

from httpimport.config import FetcherSettings
from httpimport.errors import ErrorCode, FetchError
from httpimport.fetcher import Fetcher, build_http_client

# ---------------------------------------------------------------------------
# build_http_client
# ---------------------------------------------------------------------------


class TestBuildHttpClient:
    async def test_client_configuration(self) -> None:
        client = build_http_client(FetcherSettings(user_agent="test-agent/0"))
        try:
            assert isinstance(client, httpx.AsyncClient)
            # follow_redirects is False (we handle redirects manually)
            assert client.follow_redirects is False
            assert client.headers["User-Agent"] == "test-agent/0"
        finally:
            await client.aclose()


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class TestFetcher:
    async def test_successful_fetch(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/mod.ts").mock(
                return_value=httpx.Response(
                    200,
                    content=b"export const a = 1",
                    headers={"content-type": "application/typescript"},
                )
            )
            fetched = await fetcher.get("https://example.com/mod.ts")

        assert fetched.response.content == b"export const a = 1"
        assert fetched.url == "https://example.com/mod.ts"
        assert fetched.redirected_from is None
        assert fetched.content_type == "application/typescript"

    async def test_404_raises_error(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/missing.ts").mock(return_value=httpx.Response(404))
            with pytest.raises(FetchError) as exc_info:
                await fetcher.get("https://example.com/missing.ts")

        error = exc_info.value
        assert error.code == ErrorCode.HTTP_NOT_FOUND
        assert error.status == 404
        assert error.status_text == "Not Found"
        assert error.url == "https://example.com/missing.ts"
        assert error.recoverable is False

    async def test_500_raises_recoverable_error(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/error.ts").mock(return_value=httpx.Response(500))
            with pytest.raises(FetchError) as exc_info:
                await fetcher.get("https://example.com/error.ts")

        assert exc_info.value.code == ErrorCode.HTTP_ERROR
        assert exc_info.value.recoverable is True

    async def test_network_error_raises_error(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/timeout.ts").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            with pytest.raises(FetchError) as exc_info:
                await fetcher.get("https://example.com/timeout.ts")

        assert exc_info.value.code == ErrorCode.NETWORK_ERROR
        assert exc_info.value.status is None
        assert exc_info.value.recoverable is True

    async def test_redirect_followed(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/react").mock(
                return_value=httpx.Response(
                    302, headers={"location": "https://example.com/react@18.2.0/index.js"}
                )
            )
            respx.get("https://example.com/react@18.2.0/index.js").mock(
                return_value=httpx.Response(200, text="export default {}")
            )
            fetched = await fetcher.get("https://example.com/react")

        assert fetched.url == "https://example.com/react@18.2.0/index.js"
        assert fetched.redirected_from == "https://example.com/react"
        assert fetched.response.text == "export default {}"

    async def test_relative_redirect_resolved(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/old/mod").mock(
                return_value=httpx.Response(301, headers={"location": "../new/mod.js"})
            )
            respx.get("https://example.com/new/mod.js").mock(
                return_value=httpx.Response(200, text="ok")
            )
            fetched = await fetcher.get("https://example.com/old/mod")

        assert fetched.url == "https://example.com/new/mod.js"
        assert fetched.redirected_from == "https://example.com/old/mod"

    async def test_too_many_redirects(self, http_client: httpx.AsyncClient) -> None:
        fetcher = Fetcher(http_client, FetcherSettings(max_redirects=3))
        with respx.mock:
            # Every hop redirects; the fourth one exceeds max_redirects=3
            for i in range(4):
                respx.get(f"https://example.com/r{i}").mock(
                    return_value=httpx.Response(
                        301, headers={"location": f"https://example.com/r{i + 1}"}
                    )
                )
            with pytest.raises(FetchError) as exc_info:
                await fetcher.get("https://example.com/r0")

        assert exc_info.value.code == ErrorCode.TOO_MANY_REDIRECTS

    async def test_error_envelope(self, fetcher: Fetcher) -> None:
        with respx.mock:
            respx.get("https://example.com/gone.ts").mock(return_value=httpx.Response(410))
            with pytest.raises(FetchError) as exc_info:
                await fetcher.get("https://example.com/gone.ts")

        envelope = exc_info.value.to_dict()["error"]
        assert envelope["code"] == "HTTP_ERROR"
        assert "410" in envelope["message"]
        assert envelope["recoverable"] is False
