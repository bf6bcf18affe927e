"""Write-once artifact persistence for the cache root.

An artifact that already exists at its path is authoritative: ``persist``
returns the stored content and never rewrites it. New artifacts are written
through a uniquely named temporary sibling and ``os.replace``, so readers never
observe a partial file and racing writers for the same path each leave a
complete one behind (last replace wins).
"""

from __future__ import annotations

import os
import secrets
from contextlib import suppress
from typing import TYPE_CHECKING, overload

import structlog

from httpimport.errors import PersistenceError

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()


class CacheWriter:
    """Idempotent "write if absent, else read existing" primitive."""

    @overload
    def persist(self, path: Path, contents: str) -> str: ...

    @overload
    def persist(self, path: Path, contents: bytes) -> bytes: ...

    def persist(self, path: Path, contents: str | bytes) -> str | bytes:
        """Store ``contents`` at ``path`` unless a readable file is already there.

        Returns the stored content, in the same type as ``contents``. Raises
        ``PersistenceError`` when the file cannot be written.
        """
        existing = self._read(path, binary=isinstance(contents, bytes))
        if existing is not None:
            log.debug("cache_hit", path=str(path))
            return existing

        data = contents.encode("utf-8") if isinstance(contents, str) else contents
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_atomic(path, data)
        except OSError as exc:
            raise PersistenceError(str(path), str(exc)) from exc

        log.debug("cache_write", path=str(path), size=len(data))
        return contents

    def read_existing(self, path: Path) -> str | None:
        """Return the stored text at ``path``, or ``None`` if nothing readable is there."""
        return self._read(path, binary=False)

    @staticmethod
    def _read(path: Path, *, binary: bool) -> str | bytes | None:
        if not path.is_file():
            return None
        try:
            return path.read_bytes() if binary else path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            # Unreadable files are treated as absent and rewritten.
            log.warning("cache_read_error", path=str(path), exc_info=True)
            return None


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a temporary sibling and ``os.replace``."""
    tmp_path = path.with_name(f".{path.name}.{secrets.token_hex(4)}.tmp")
    try:
        with tmp_path.open("wb") as file_obj:
            file_obj.write(data)
            file_obj.flush()
            os.fsync(file_obj.fileno())
        os.replace(tmp_path, path)
    finally:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)
