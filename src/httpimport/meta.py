"""Per-URL metadata records.

One JSON file per URL at ``<meta_dir>/<sha256(url)>.json``. Reads collapse
every failure (missing file, corrupt JSON, schema mismatch) to ``None``;
writes overwrite unconditionally and raise ``PersistenceError`` on failure.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

import structlog

from httpimport.errors import PersistenceError
from httpimport.models.meta import Meta
from httpimport.store import write_atomic

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()


def url_hash(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class MetadataStore:
    """JSON-file metadata store implementing MetadataStoreProtocol."""

    def __init__(self, meta_dir: Path) -> None:
        self._meta_dir = meta_dir

    def path_for(self, url: str) -> Path:
        return self._meta_dir / f"{url_hash(url)}.json"

    def read(self, url: str) -> Meta | None:
        """Return the stored record for ``url``, or ``None`` if there is no usable one."""
        path = self.path_for(url)
        try:
            return Meta.model_validate_json(path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            # ValueError covers malformed JSON and pydantic ValidationError
            log.debug("meta_read_miss", url=url, path=str(path), exc_info=True)
            return None

    def write(self, url: str, meta: Meta) -> None:
        path = self.path_for(url)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_atomic(path, meta.model_dump_json().encode("utf-8"))
        except OSError as exc:
            raise PersistenceError(str(path), str(exc)) from exc
