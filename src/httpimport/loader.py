"""Remote module loader.

``ModuleLoader.load`` runs one URL through fetch → redirect check →
content-type branch and leaves the result in the cache:

- ``application/json``: the value is restated as ``export default <json>``
  (4-space indent) and persisted at the requested URL's path, so the host can
  import it as code.
- redirected: a re-export stub ``export * from '<final url>'`` is persisted at
  the requested URL's path instead of duplicating the content.
- otherwise: the raw bytes are persisted at the URL's path. If the response
  advertises a declaration file (``X-TypeScript-Types`` by default), that file
  and everything it references is crawled first, and a companion stub with
  the declaration extension re-exports it.

Metadata is bookkeeping only: it is read for logging and rewritten after a
successful load, but never decides whether the network is hit.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlsplit

import structlog

from httpimport.errors import DecodeError
from httpimport.extensions import (
    extension_from_content_type,
    extension_from_path,
    replace_extension,
)
from httpimport.models.load import ContentKind, LoadResult
from httpimport.models.meta import Meta
from httpimport.paths import artifact_path, ensure_extension, path_for

if TYPE_CHECKING:
    from pathlib import Path

    from httpimport.config import Settings
    from httpimport.crawler import CrawlSession, DeclarationCrawler
    from httpimport.fetcher import FetchedResponse, Fetcher
    from httpimport.protocols import MetadataStoreProtocol
    from httpimport.store import CacheWriter

log = structlog.get_logger()


def is_json_content_type(content_type: str) -> bool:
    return content_type.split(";", 1)[0].strip().lower() == "application/json"


def json_module(value: object) -> str:
    """Render a decoded JSON value as an ES module with a default export."""
    return "export default " + json.dumps(value, indent=4, ensure_ascii=False)


def reexport_stub(target: str) -> str:
    return f"export * from '{target}'"


class ModuleLoader:
    def __init__(
        self,
        fetcher: Fetcher,
        writer: CacheWriter,
        metadata: MetadataStoreProtocol,
        crawler: DeclarationCrawler,
        session: CrawlSession,
        settings: Settings,
    ) -> None:
        self._fetcher = fetcher
        self._writer = writer
        self._metadata = metadata
        self._crawler = crawler
        self._session = session
        self._settings = settings

    @property
    def _cache_dir(self) -> Path:
        return self._settings.cache.cache_dir

    async def load(self, url: str) -> LoadResult:
        """Fetch ``url`` and persist it into the cache.

        Raises FetchError, DecodeError or PersistenceError; nothing is retried.
        """
        load_log = log.bind(url=url)

        previous = self._metadata.read(url)
        if previous is not None:
            load_log.debug("meta_hit", previous_time=previous.time, path=previous.path)

        fetched = await self._fetcher.get(url)
        types_url = ""

        if is_json_content_type(fetched.content_type):
            result = self._load_json(fetched)
        elif fetched.redirected_from is not None and not self._same_artifact(
            fetched.redirected_from, fetched.url
        ):
            result = self._load_redirect(fetched.redirected_from, fetched.url)
        else:
            result, types_url = await self._load_module(fetched)

        self._metadata.write(
            url,
            Meta(
                url=url,
                extension=_full_suffix(result.path),
                types=types_url,
                path=str(result.path),
                time=int(time.time() * 1000),
                ttl=self._settings.cache.ttl_hours * 3600,
            ),
        )
        load_log.info(
            "module_loaded",
            final_url=fetched.url,
            kind=result.kind,
            path=str(result.path),
            redirected=fetched.redirected_from is not None,
        )
        return result

    def _load_json(self, fetched: FetchedResponse) -> LoadResult:
        try:
            value = fetched.response.json()
        except ValueError as exc:
            raise DecodeError(fetched.url, str(exc)) from exc

        path = artifact_path(fetched.redirected_from or fetched.url, self._cache_dir)
        contents = self._writer.persist(path, json_module(value))
        return LoadResult(contents=contents, kind=ContentKind.SCRIPT, path=path)

    def _same_artifact(self, requested_url: str, final_url: str) -> bool:
        """True when a stub at ``requested_url`` would re-export itself.

        Query-only and trailing-slash redirects land on the same cache path;
        the final body is stored there directly.
        """
        return artifact_path(requested_url, self._cache_dir) == artifact_path(
            final_url, self._cache_dir
        )

    def _load_redirect(self, requested_url: str, final_url: str) -> LoadResult:
        path = artifact_path(requested_url, self._cache_dir)
        contents = self._writer.persist(path, reexport_stub(final_url))
        log.debug("redirect_stub_written", url=requested_url, target=final_url)
        return LoadResult(contents=contents, kind=ContentKind.SCRIPT, path=path)

    async def _load_module(self, fetched: FetchedResponse) -> tuple[LoadResult, str]:
        url = fetched.url
        # The URL suffix wins; the content type only fills in for suffix-less paths.
        extension = extension_from_path(
            urlsplit(url).path,
            default=extension_from_content_type(fetched.content_type),
        )
        path = ensure_extension(path_for(url, self._cache_dir), url, extension)

        types_url = ""
        types_location = fetched.header(self._settings.fetcher.types_header)
        if types_location:
            types_url = urljoin(url, types_location)
            await self._crawler.crawl(types_url, self._session)
            self._write_types_stub(path, types_url)

        contents = self._writer.persist(path, fetched.response.content)
        return LoadResult(contents=contents, kind=ContentKind.SCRIPT, path=path), types_url

    def _write_types_stub(self, module_path: Path, types_url: str) -> None:
        types_path = path_for(types_url, self._cache_dir)
        types_extension = extension_from_path(urlsplit(types_url).path, default=".d.ts")
        stub_path = replace_extension(module_path, types_extension)
        if stub_path in (types_path, module_path):
            # A stub here would shadow the declaration or the module itself.
            return
        self._writer.persist(stub_path, reexport_stub(types_path.as_posix()))
        log.debug("types_stub_written", path=str(stub_path), target=str(types_path))


def _full_suffix(path: Path) -> str:
    """Extension of a cached artifact, compound declaration suffixes included."""
    return extension_from_path(path.name, default="")
