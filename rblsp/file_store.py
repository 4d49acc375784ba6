"""In-memory store of the latest full text of each open document."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from rblsp.errors import DocumentNotFound


class FileStore:
    """Maps document URIs to their latest full text.

    Every write replaces the whole text; there is no versioning and no diffing.
    The store is not locked and must only be touched by one handler at a time.
    """

    def __init__(self, roots: Optional[Iterable[str]] = None):
        """Initialize an empty store.

        Args:
            roots: Project root paths the session was started with.
        """
        self.roots: List[str] = list(roots or [])
        self.logger = logging.getLogger("rblsp.file_store")
        self._texts: Dict[str, str] = {}

    def put(self, uri: str, text: str) -> None:
        """Replace the cached text for a document, creating the entry if needed.

        Args:
            uri: Document URI.
            text: Full document text.
        """
        self.logger.debug(f"Caching {len(text)} characters for {uri}")
        self._texts[uri] = text

    def get(self, uri: str) -> str:
        """Return the last text written for a document.

        Args:
            uri: Document URI.

        Returns:
            The full document text.

        Raises:
            DocumentNotFound: If no text was ever stored for the URI.
        """
        try:
            return self._texts[uri]
        except KeyError:
            raise DocumentNotFound(uri) from None

    def uris(self) -> List[str]:
        return list(self._texts)

    def items(self) -> Iterator[Tuple[str, str]]:
        """Iterate over a snapshot of (uri, text) pairs in insertion order."""
        return iter(list(self._texts.items()))

    def __contains__(self, uri: object) -> bool:
        return uri in self._texts

    def __len__(self) -> int:
        return len(self._texts)
