"""Specifier resolution for modules imported from network URLs.

Pure functions. The host calls them from its resolve hook. No I/O.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

_HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)
_RELATIVE_RE = re.compile(r"^\.\.?/")
_ABSOLUTE_PATH_RE = re.compile(r"^/(?!/)")


def is_http_url(value: str) -> bool:
    return bool(_HTTP_RE.match(value))


def resolve_specifier(specifier: str, importer: str | None) -> str | None:
    """Rebase ``specifier`` onto the URL of the module importing it.

    Returns the canonical URL, or ``None`` when the specifier is not ours:
    the importer is not an http(s) module, or the specifier is bare
    (``"react"``) or uses another scheme.

    ``("./b.ts", "https://x.dev/a/a.ts")`` → ``"https://x.dev/a/b.ts"``
    ``("/b.ts", "https://x.dev/a/a.ts")`` → ``"https://x.dev/b.ts"``
    """
    if is_http_url(specifier):
        return specifier
    if importer is None or not is_http_url(importer):
        return None
    if _RELATIVE_RE.match(specifier) or _ABSOLUTE_PATH_RE.match(specifier):
        return urljoin(importer, specifier)
    return None


def join_namespace(namespace: str, path: str) -> str:
    """Rebuild a URL split by the host into a scheme namespace and a path.

    ``("https", "//x.dev/a.ts")`` → ``"https://x.dev/a.ts"``
    """
    return f"{namespace}:{path}"
