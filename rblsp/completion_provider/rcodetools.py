"""Method completion backed by rcodetools' `rct-complete`."""

import logging
import subprocess
from typing import List

from rblsp.completion_provider.base import BaseCompletionProvider, Candidate
from rblsp.file_store import FileStore
from rblsp.protocol.constants import CompletionItemKind


class RcodetoolsProvider(BaseCompletionProvider):
    """Completes method names by running `rct-complete` over the document."""

    def __init__(self, command: str = "rct-complete"):
        """Initialize the provider.

        Args:
            command: Path to, or name of, the rct-complete executable.
        """
        self.command = command
        self.logger = logging.getLogger("rblsp.completion_provider.rcodetools")

    def complete(self, uri: str, line: int, character: int, document_store: FileStore) -> List[Candidate]:
        text = document_store.get(uri)

        # rct-complete counts lines from 1
        cmd = [self.command, "--completion-class-info", f"--line={line + 1}", f"--column={character}"]
        self.logger.debug(f"Running {' '.join(cmd)} for {uri}")

        try:
            process = subprocess.run(
                cmd,
                input=text,
                capture_output=True,
                text=True,
                check=False
            )
        except OSError as e:
            self.logger.warning(f"Cannot run {self.command}: {e}")
            return []

        if process.returncode != 0:
            self.logger.warning(f"rct-complete failed (code {process.returncode}): {process.stderr.strip()}")
            return []

        return parse_output(process.stdout)


def parse_output(output: str) -> List[Candidate]:
    """Parse `rct-complete --completion-class-info` output.

    Each line holds a method name, optionally followed by a tab and a
    description such as ``String#upcase``.
    """
    candidates = []
    for line in output.splitlines():
        if not line.strip():
            continue
        name, _, description = line.partition("\t")
        candidates.append(Candidate(
            name=name.strip(),
            detail=description.strip() or None,
            kind=CompletionItemKind.METHOD,
        ))
    return candidates
