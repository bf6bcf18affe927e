"""Transitive declaration-file crawl.

Starting from one declaration URL, fetch it into the cache, scan it for
relative ``import``/``export ... from`` specifiers, and repeat for every URL
reached that way. The walk is an explicit FIFO worklist bounded by the
session's visited set: every URL is claimed before its first suspension
point, so each reachable URL is fetched at most once per session even when
several loads crawl concurrently, and cycles terminate.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlsplit

import structlog

from httpimport.paths import path_for
from httpimport.scanner import RegexReferenceScanner

if TYPE_CHECKING:
    from pathlib import Path

    from httpimport.fetcher import Fetcher
    from httpimport.protocols import ReferenceScannerProtocol
    from httpimport.store import CacheWriter

log = structlog.get_logger()

_RELATIVE_PREFIXES = ("./", "../")


class CrawlSession:
    """Visited set for one crawl session. Never shrinks."""

    def __init__(self) -> None:
        self._visited: set[str] = set()

    def claim(self, url: str) -> bool:
        """Mark ``url`` visited. Returns False if it already was."""
        if url in self._visited:
            return False
        self._visited.add(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._visited

    def __len__(self) -> int:
        return len(self._visited)


def relative_references(specifiers: list[str], base_url: str) -> list[str]:
    """Resolve the relative specifiers against ``base_url``, deduplicated in order.

    Bare and absolute specifiers are not followed; neither is anything that
    does not resolve to an http(s) URL.
    """
    resolved: dict[str, None] = {}
    for specifier in specifiers:
        if not specifier.startswith(_RELATIVE_PREFIXES):
            continue
        url = urljoin(base_url, specifier)
        if urlsplit(url).scheme not in ("http", "https"):
            continue
        resolved[url] = None
    return list(resolved)


class DeclarationCrawler:
    def __init__(
        self,
        fetcher: Fetcher,
        writer: CacheWriter,
        cache_dir: Path,
        scanner: ReferenceScannerProtocol | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._writer = writer
        self._cache_dir = cache_dir
        self._scanner = scanner or RegexReferenceScanner()

    async def crawl(self, url: str, session: CrawlSession) -> list[str]:
        """Ensure ``url`` and every declaration it transitively references is cached.

        Returns the URLs visited by this call, in visit order. URLs already in
        ``session`` are skipped. A fetch or write failure propagates; artifacts
        written earlier in the crawl are kept.
        """
        visited: list[str] = []
        queue: deque[str] = deque([url])

        while queue:
            current = queue.popleft()
            if not session.claim(current):
                continue
            visited.append(current)

            text = await self._ensure_cached(current)
            references = relative_references(self._scanner.scan(text), current)
            queue.extend(ref for ref in references if ref not in session)

        log.info("types_crawled", url=url, visited=len(visited))
        return visited

    async def _ensure_cached(self, url: str) -> str:
        path = path_for(url, self._cache_dir)
        existing = self._writer.read_existing(path)
        if existing is not None:
            log.debug("types_cache_hit", url=url, path=str(path))
            return existing

        fetched = await self._fetcher.get(url)
        text = self._writer.persist(path, fetched.response.text)
        log.debug("types_cached", url=url, path=str(path))
        return text
