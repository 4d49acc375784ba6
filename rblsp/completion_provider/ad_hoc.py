"""Constant completion from class, module and constant definitions.

Definitions are collected with regular expressions from every open document
and, when a workspace is given, from the Ruby files on disk. Files on disk are
read once per session; open documents always win over their disk copy.
"""

import logging
import re
from typing import Dict, Iterator, List, Optional, Set

from rblsp.completion_provider.base import BaseCompletionProvider, Candidate
from rblsp.file_store import FileStore
from rblsp.protocol.constants import CompletionItemKind
from rblsp.utils.workspace import WorkspaceManager

DEFINITION_PATTERN = re.compile(
    r"^\s*(?:(?:class|module)\s+(?P<scoped>[A-Z]\w*(?:::[A-Z]\w*)*)|(?P<constant>[A-Z][A-Z0-9_]*)\s*=(?![=~]))",
    re.MULTILINE,
)
PREFIX_PATTERN = re.compile(r"(?<![\w:])(?:[A-Z]\w*::)*[A-Z]\w*$")


class AdHocProvider(BaseCompletionProvider):
    """Completes capitalized identifiers with constants defined in the project."""

    def __init__(self, workspace: Optional[WorkspaceManager] = None):
        """Initialize the provider.

        Args:
            workspace: Workspace whose files are scanned in addition to open documents.
        """
        self.workspace = workspace
        self.logger = logging.getLogger("rblsp.completion_provider.ad_hoc")
        self._file_constants: Dict[str, List[str]] = {}

    def complete(self, uri: str, line: int, character: int, document_store: FileStore) -> List[Candidate]:
        prefix = current_prefix(document_store.get(uri), line, character)
        if not prefix:
            return []

        self.logger.debug(f"Completing constants for prefix {prefix!r}")

        seen = set()
        candidates = []
        for names in self._constants(document_store):
            for name in names:
                if name.startswith(prefix) and name not in seen:
                    seen.add(name)
                    candidates.append(Candidate(name=name, kind=CompletionItemKind.CLASS))
        return candidates

    def _constants(self, document_store: FileStore) -> Iterator[List[str]]:
        open_paths: Set[str] = set()
        for uri, text in document_store.items():
            try:
                open_paths.add(WorkspaceManager.uri_to_path(uri))
            except ValueError:
                pass
            yield find_constants(text)

        if self.workspace is None:
            return

        for path in self.workspace.get_ruby_files():
            if path in open_paths:
                continue
            if path not in self._file_constants:
                self._file_constants[path] = self._read_constants(path)
            yield self._file_constants[path]

    def _read_constants(self, path: str) -> List[str]:
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return find_constants(f.read())
        except OSError as e:
            self.logger.warning(f"Skipping unreadable file {path}: {e}")
            return []


def current_prefix(text: str, line: int, character: int) -> str:
    """Return the constant path that ends at the cursor, or an empty string."""
    lines = text.splitlines()
    if line < 0 or line >= len(lines):
        return ""

    match = PREFIX_PATTERN.search(lines[line][:max(character, 0)])
    if not match:
        return ""
    return match.group(0)


def find_constants(text: str) -> List[str]:
    """Return the names of classes, modules and constants defined in the text."""
    return [match.group("scoped") or match.group("constant") for match in DEFINITION_PATTERN.finditer(text)]
