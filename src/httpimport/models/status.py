from __future__ import annotations

from pydantic import BaseModel


class Status(BaseModel):
    """Contents of ``<root>/status.json``, written by ``httpimport init``."""

    status: str = "success"
    version: str
    timestamp: int  # Epoch milliseconds
    date: str  # RFC 1123, UTC
    root_path: str
    cache_path: str
    meta_path: str
