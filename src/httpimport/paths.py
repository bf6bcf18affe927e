"""URL → cache path mapping.

``<cache_root>/<scheme>/<host>[:<port>]/<segment>/.../<segment>[<ext>]``

Pure functions of the URL string: no I/O, no normalisation beyond what URL
parsing does (default ports dropped, dot segments collapsed).
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit

from httpimport.extensions import extension_from_path

_DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


def _host_segment(url: str) -> str:
    parts = urlsplit(url)
    host = parts.hostname or ""
    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme):
        host = f"{host}:{port}"
    return host


def _path_segments(pathname: str) -> list[str]:
    """Split a URL path into non-empty segments, collapsing ``.`` and ``..``.

    Keeps every mapped path inside the cache root.
    """
    segments: list[str] = []
    for segment in pathname.split("/"):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return segments


def path_for(url: str, cache_root: Path) -> Path:
    """Return the cache location of ``url`` without any extension handling."""
    parts = urlsplit(url)
    return Path(cache_root, parts.scheme, _host_segment(url), *_path_segments(parts.path))


def ensure_extension(path: Path, url: str, extension: str | None = None) -> Path:
    """Append the extension inferred from ``url`` unless ``path`` already ends with it.

    An explicit ``extension`` overrides inference.
    """
    if extension is None:
        extension = extension_from_path(urlsplit(url).path)
    if path.name.endswith(extension):
        return path
    return path.with_name(path.name + extension)


def artifact_path(url: str, cache_root: Path) -> Path:
    return ensure_extension(path_for(url, cache_root), url)
