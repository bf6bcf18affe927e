"""Canonical file-extension inference for remote artifacts.

Two weak signals are available: the suffix of the URL path and the MIME type
of the response. Compound declaration suffixes (``.d.ts``, ``.d.mts``,
``.d.cts``) are recognised by looking at the whole basename, since a
last-dot split alone would classify ``index.d.ts`` as plain ``.ts``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_EXTENSION: Final = ".js"

# final suffix → (declaration form, plain form)
_TS_SUFFIXES: dict[str, tuple[str, str]] = {
    "ts": (".d.ts", ".ts"),
    "mts": (".d.mts", ".mts"),
    "cts": (".d.cts", ".cts"),
}

_PLAIN_SUFFIXES: frozenset[str] = frozenset(
    {"tsx", "js", "mjs", "cjs", "jsx", "json", "txt", "html"}
)

_CONTENT_SUBTYPES: dict[str, str] = {
    "json": ".json",
    "javascript": ".js",
    "typescript": ".ts",
    "text": ".txt",
    "html": ".html",
}


def extension_from_path(pathname: str, default: str = DEFAULT_EXTENSION) -> str:
    """Infer the extension of the last segment of a URL path.

    ``"a/b.d.ts"`` → ``".d.ts"``, ``"a/b.ts"`` → ``".ts"``, ``"a/b"`` → ``default``.
    Unknown suffixes also fall back to ``default``.
    """
    basename = pathname[pathname.rfind("/") + 1 :]
    dot = basename.rfind(".")
    if dot == -1:
        return default

    suffix = basename[dot + 1 :]
    if suffix in _TS_SUFFIXES:
        declaration, plain = _TS_SUFFIXES[suffix]
        return declaration if basename.endswith(declaration) else plain
    if suffix in _PLAIN_SUFFIXES:
        return "." + suffix
    return default


def extension_from_content_type(header: str | None, default: str = DEFAULT_EXTENSION) -> str:
    """Map a ``Content-Type`` header to an extension using its MIME subtype.

    ``"application/json; charset=utf-8"`` → ``".json"``.
    """
    if not header:
        return default
    subtype = header.split(";", 1)[0].strip().rsplit("/", 1)[-1].lower()
    return _CONTENT_SUBTYPES.get(subtype, default)


def replace_extension(path: Path, extension: str) -> Path:
    """Swap the suffix after the last dot of the final segment for ``extension``.

    A final segment without a dot gets ``extension`` appended.
    """
    name = path.name
    dot = name.rfind(".")
    if dot == -1:
        return path.with_name(name + extension)
    return path.with_name(name[:dot] + extension)
