from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ContentKind(StrEnum):
    JSON = "json"
    SCRIPT = "script"
    DECLARATION = "declaration"
    TEXT = "text"
    MARKUP = "markup"


@dataclass(frozen=True)
class LoadResult:
    """What the host receives for one loaded URL."""

    contents: str | bytes
    kind: ContentKind
    path: Path  # Artifact written (or found) in the cache for this URL
