"""Host-facing facade.

The host build tool registers two hooks and forwards them here:
``resolve(specifier, importer)`` and ``load(url)``. How the host discovers and
invokes those hooks is its own business.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog

from httpimport import __version__
from httpimport.config import Settings
from httpimport.crawler import CrawlSession, DeclarationCrawler
from httpimport.fetcher import Fetcher, build_http_client
from httpimport.loader import ModuleLoader
from httpimport.meta import MetadataStore
from httpimport.resolver import join_namespace, resolve_specifier
from httpimport.store import CacheWriter

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    import httpx

    from httpimport.models.load import LoadResult

log = structlog.get_logger()


class HttpImportPlugin:
    """Wires fetcher, cache writer, metadata store and crawler for one host.

    Owns a single ``CrawlSession`` for its whole lifetime, so a declaration
    file is crawled at most once however many modules advertise it.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self.settings = settings
        self.session = CrawlSession()

        fetcher = Fetcher(http_client, settings.fetcher)
        writer = CacheWriter()
        self.metadata = MetadataStore(settings.cache.meta_dir)
        self.crawler = DeclarationCrawler(fetcher, writer, settings.cache.cache_dir)
        self.loader = ModuleLoader(
            fetcher,
            writer,
            self.metadata,
            self.crawler,
            self.session,
            settings,
        )

    def resolve(self, specifier: str, importer: str | None) -> str | None:
        return resolve_specifier(specifier, importer)

    async def load(self, url: str) -> LoadResult:
        return await self.loader.load(url)

    async def load_namespaced(self, namespace: str, path: str) -> LoadResult:
        """Load hook for hosts that strip the scheme into a namespace."""
        return await self.loader.load(join_namespace(namespace, path))

    async def crawl_types(self, url: str) -> list[str]:
        return await self.crawler.crawl(url, self.session)


@asynccontextmanager
async def open_plugin(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncGenerator[HttpImportPlugin, None]:
    """Create the plugin and tear down its HTTP client afterwards.

    A caller-supplied ``http_client`` is left open.
    """
    settings = settings or Settings()
    owns_client = http_client is None
    client = http_client or build_http_client(settings.fetcher)

    log.info(
        "plugin_starting",
        version=__version__,
        scope=settings.cache.scope,
        cache_dir=str(settings.cache.cache_dir),
    )
    try:
        yield HttpImportPlugin(settings, client)
    finally:
        if owns_client:
            await client.aclose()
        log.info("plugin_stopping")
