"""Base completion provider interface."""

import abc
from dataclasses import dataclass
from typing import List, Optional

from rblsp.file_store import FileStore
from rblsp.protocol.constants import CompletionItemKind


@dataclass(frozen=True)
class Candidate:
    """A completion candidate.

    Attributes:
        name: Text inserted on completion.
        detail: Optional additional information shown next to the name.
        kind: Classification used by the client to pick an icon.
    """

    name: str
    detail: Optional[str] = None
    kind: CompletionItemKind = CompletionItemKind.TEXT


class BaseCompletionProvider(abc.ABC):
    """Abstract base class for completion providers."""

    @abc.abstractmethod
    def complete(self, uri: str, line: int, character: int, document_store: FileStore) -> List[Candidate]:
        """Compute completion candidates for a position.

        Args:
            uri: URI of the document being edited.
            line: Line number (0-indexed).
            character: Character position (0-indexed).
            document_store: Store holding the latest text of open documents.

        Returns:
            Candidates in the order they should be presented.

        Raises:
            DocumentNotFound: If the document has no stored text.
        """
        pass
