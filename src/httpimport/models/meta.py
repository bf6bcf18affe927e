from __future__ import annotations

from pydantic import BaseModel


class Meta(BaseModel):
    """Bookkeeping record stored per URL at ``<meta_dir>/<sha256(url)>.json``."""

    url: str
    extension: str
    imports: list[str] = []
    types: str = ""  # Absolute declaration URL, or "" when none was advertised
    path: str  # Artifact path written for this URL
    time: int  # Epoch milliseconds of the load
    ttl: int  # Seconds; recorded only, never used to expire the artifact
