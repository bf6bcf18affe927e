"""HTTP fetcher with explicit redirect tracking.

All network I/O goes through a single Fetcher instance. The Fetcher receives
an httpx.AsyncClient via constructor injection; the plugin lifespan owns the
client lifecycle. Redirects are followed by hand so the loader can tell a
redirected response (and its original URL) from a direct one.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

import httpx
import structlog

from httpimport.config import FetcherSettings
from httpimport.errors import ErrorCode, FetchError

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per plugin lifespan."""
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


@dataclass(frozen=True)
class FetchedResponse:
    """A successful response plus where it actually came from."""

    response: httpx.Response
    url: str  # Final URL after redirects
    redirected_from: str | None = None  # Requested URL, when a redirect was followed

    @property
    def content_type(self) -> str:
        return self.response.headers.get("content-type", "")

    def header(self, name: str) -> str | None:
        return self.response.headers.get(name)


class Fetcher:
    """GET with manual redirect handling; every failure raises ``FetchError``."""

    def __init__(self, client: httpx.AsyncClient, settings: FetcherSettings | None = None) -> None:
        self._client = client
        self._settings = settings or FetcherSettings()

    async def get(self, url: str) -> FetchedResponse:
        """Fetch ``url``, following up to ``max_redirects`` redirects.

        Returns the final 2xx response. Raises FetchError on non-2xx status,
        network errors, and redirect chains longer than ``max_redirects``.
        """
        current_url = url
        max_redirects = self._settings.max_redirects

        try:
            for hop in range(max_redirects + 1):
                response = await self._client.get(current_url)

                if response.is_redirect:
                    if hop == max_redirects:
                        raise FetchError(
                            url,
                            response.status_code,
                            response.reason_phrase,
                            code=ErrorCode.TOO_MANY_REDIRECTS,
                            suggestion="The URL has an unusually long redirect chain.",
                            recoverable=False,
                        )
                    next_url = urljoin(current_url, response.headers["location"])
                    log.debug("fetch_redirected", url=current_url, location=next_url)
                    current_url = next_url
                    continue

                if not response.is_success:
                    raise FetchError(url, response.status_code, response.reason_phrase)

                log.debug(
                    "fetch_complete",
                    url=url,
                    final_url=current_url,
                    status_code=response.status_code,
                    content_length=len(response.content),
                )
                return FetchedResponse(
                    response=response,
                    url=current_url,
                    redirected_from=url if hop else None,
                )

        except FetchError:
            raise
        except httpx.HTTPError as exc:
            raise FetchError(
                url,
                None,
                f"network error: {exc}",
                code=ErrorCode.NETWORK_ERROR,
            ) from exc

        # Unreachable but satisfies the type checker
        raise FetchError(url, None, "redirect loop", code=ErrorCode.TOO_MANY_REDIRECTS)
