"""Shared test fixtures for the httpimport test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from httpimport.config import CacheSettings, Settings
from httpimport.crawler import CrawlSession, DeclarationCrawler
from httpimport.fetcher import Fetcher
from httpimport.loader import ModuleLoader
from httpimport.meta import MetadataStore
from httpimport.store import CacheWriter

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings whose global cache root lives under tmp_path."""
    return Settings(
        cache=CacheSettings(
            scope="global",
            global_root=str(tmp_path / "global"),
            local_root=str(tmp_path / "local"),
        )
    )


@pytest.fixture()
def cache_dir(settings: Settings) -> Path:
    return settings.cache.cache_dir


@pytest.fixture()
def writer() -> CacheWriter:
    return CacheWriter()


@pytest.fixture()
def metadata(settings: Settings) -> MetadataStore:
    return MetadataStore(settings.cache.meta_dir)


@pytest.fixture()
def session() -> CrawlSession:
    return CrawlSession()


@pytest.fixture()
async def http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def fetcher(http_client: httpx.AsyncClient, settings: Settings) -> Fetcher:
    return Fetcher(http_client, settings.fetcher)


@pytest.fixture()
def crawler(fetcher: Fetcher, writer: CacheWriter, cache_dir: Path) -> DeclarationCrawler:
    return DeclarationCrawler(fetcher, writer, cache_dir)


@pytest.fixture()
def loader(
    fetcher: Fetcher,
    writer: CacheWriter,
    metadata: MetadataStore,
    crawler: DeclarationCrawler,
    session: CrawlSession,
    settings: Settings,
) -> ModuleLoader:
    return ModuleLoader(fetcher, writer, metadata, crawler, session, settings)
