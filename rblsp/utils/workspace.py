"""Workspace management utilities for the Ruby Language Server."""

import logging
import os
from typing import Iterable, List, Optional
from urllib.parse import quote, unquote, urlparse

RUBY_EXTENSIONS = {".rb", ".rake", ".gemspec", ".ru"}
IGNORED_DIRECTORIES = {".git", ".bundle", "node_modules", "tmp", "log"}


class WorkspaceManager:
    """Tracks the project roots and the Ruby files below them."""

    def __init__(self, roots: Iterable[str]):
        """Initialize the workspace manager.

        Args:
            roots: Paths to the project root directories.

        Raises:
            ValueError: If a root is not a directory.
        """
        self.roots = [os.path.abspath(root) for root in roots]
        self.logger = logging.getLogger("rblsp.workspace")
        self._ruby_files: Optional[List[str]] = None

        for root in self.roots:
            if not os.path.isdir(root):
                raise ValueError(f"Workspace path is not a directory: {root}")

        self.logger.info(f"Initialized workspace manager for: {', '.join(self.roots)}")

    def get_ruby_files(self, refresh: bool = False) -> List[str]:
        """Scan the roots for Ruby source files.

        The roots are walked once per session; later calls return the cached
        list unless a refresh is requested.

        Args:
            refresh: Walk the file system again.

        Returns:
            Sorted absolute paths of Ruby files.
        """
        if self._ruby_files is not None and not refresh:
            return list(self._ruby_files)

        files = set()
        for root in self.roots:
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames[:] = [d for d in dirnames if d not in IGNORED_DIRECTORIES]
                for filename in filenames:
                    if self.is_ruby_file(filename):
                        files.add(os.path.join(dirpath, filename))
        self._ruby_files = sorted(files)
        self.logger.info(f"Found {len(self._ruby_files)} Ruby files")
        return list(self._ruby_files)

    @staticmethod
    def is_ruby_file(file_path: str) -> bool:
        """Check whether a path names a Ruby source file.

        Args:
            file_path: Path to check.

        Returns:
            True if the extension is a Ruby one, False otherwise.
        """
        _, ext = os.path.splitext(file_path)
        return ext.lower() in RUBY_EXTENSIONS

    @staticmethod
    def path_to_uri(path: str) -> str:
        """Convert a file path to a file URI.

        Args:
            path: File path to convert.

        Returns:
            File URI.
        """
        return f"file://{quote(os.path.abspath(path))}"


    @staticmethod
    def uri_to_path(uri: str) -> str:
        """Convert a file URI to a file path.

        Args:
            uri: File URI to convert.

        Returns:
            File path.

        Raises:
            ValueError: If the URI does not use the file scheme.
        """
        parsed = urlparse(uri)
        if parsed.scheme != "file":
            raise ValueError(f"Not a file URI: {uri}")
        return unquote(parsed.path)
