from __future__ import annotations

from httpimport.models.load import ContentKind, LoadResult
from httpimport.models.meta import Meta
from httpimport.models.status import Status

__all__ = [
    # load
    "ContentKind",
    "LoadResult",
    # meta
    "Meta",
    # status
    "Status",
]
