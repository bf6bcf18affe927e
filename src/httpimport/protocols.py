"""Protocol interfaces for swappable components.

The loader and crawler reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory implementations
- The regex reference scanner to be replaced by a real parser without
  touching the crawler's control flow
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from httpimport.models.meta import Meta


class ReferenceScannerProtocol(Protocol):
    """Interface for module-specifier extraction from declaration text."""

    def scan(self, text: str) -> list[str]: ...


class MetadataStoreProtocol(Protocol):
    """Interface for the per-URL metadata backend."""

    def read(self, url: str) -> Meta | None: ...

    def write(self, url: str, meta: Meta) -> None: ...
