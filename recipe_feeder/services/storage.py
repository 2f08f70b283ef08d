"""
Document storage used for uploaded recipe documents.

Uploaded PDFs and photos live in object storage owned by the host
application. The pipeline only needs to read them back and to know their
public address, so storage is reached through a small protocol.
"""
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from ..exceptions import InvalidSourceError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredDocument:
    """An uploaded document read back from storage."""

    name: str
    content_type: str
    data: bytes


class DocumentStore(Protocol):
    """Read access to uploaded documents."""

    def read(self, path: str) -> StoredDocument:
        """Read a stored document by its storage path."""

    def public_url(self, path: str) -> str:
        """Return the address a stored document is served from."""


class LocalDocumentStore:
    """Document store backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path, base_url: str | None = None) -> None:
        """Initialize the store.

        Args:
            root: Directory that storage paths are relative to
            base_url: Public prefix for documents; file:// URLs when omitted
        """
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip('/') if base_url else None

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise InvalidSourceError("Document path is outside the document store.")
        return resolved

    def read(self, path: str) -> StoredDocument:
        resolved = self._resolve(path)
        try:
            data = resolved.read_bytes()
        except OSError as e:
            _LOGGER.warning("Could not read stored document %s: %s", path, e)
            raise InvalidSourceError("Could not read the uploaded document.") from e

        content_type, _ = mimetypes.guess_type(resolved.name)
        _LOGGER.debug("Read %d bytes from %s (%s)", len(data), path, content_type)
        return StoredDocument(
            name=resolved.name,
            content_type=content_type or 'application/octet-stream',
            data=data,
        )

    def public_url(self, path: str) -> str:
        if self.base_url:
            return f"{self.base_url}/{quote(path.lstrip('/'))}"
        return self._resolve(path).as_uri()
