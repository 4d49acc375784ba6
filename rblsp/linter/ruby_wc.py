"""Linter backed by `ruby -wc` syntax checking."""

import logging
import re
import subprocess
from typing import List

from rblsp.linter.base import BaseLinter, Issue

# e.g. "-:3: warning: assigned but unused variable - foo"
#      "-:7: syntax error, unexpected end-of-input"
ISSUE_PATTERN = re.compile(r"^-:(?P<line>\d+):\s*(?P<warning>warning:\s*)?(?P<message>.*)$")


class RubyWCLinter(BaseLinter):
    """Runs the Ruby interpreter in syntax-check mode with warnings enabled."""

    def __init__(self, ruby_executable: str = "ruby"):
        """Initialize the linter.

        Args:
            ruby_executable: Path to, or name of, the ruby executable.
        """
        self.command = [ruby_executable, "-wc"]
        self.logger = logging.getLogger("rblsp.linter.ruby_wc")

    @property
    def name(self) -> str:
        return "ruby-wc"

    def analyze(self, text: str) -> List[Issue]:
        """Check the text for syntax errors and warnings.

        Args:
            text: Ruby source.

        Returns:
            One issue per reported line.

        Raises:
            OSError: If the ruby executable cannot be started.
        """
        self.logger.debug(f"Running {' '.join(self.command)}")

        process = subprocess.run(
            self.command,
            input=text,
            capture_output=True,
            text=True,
            check=False  # ruby exits with 1 on syntax errors, which is expected
        )

        return parse_output(process.stderr)


def parse_output(output: str) -> List[Issue]:
    """Parse the diagnostics printed by `ruby -wc` for source read from stdin.

    Args:
        output: The captured stderr of the ruby process.

    Returns:
        Issues with zero-based line numbers. Lines that do not start with a
        location prefix (source excerpts, carets) are skipped.
    """
    issues = []
    for line in output.splitlines():
        match = ISSUE_PATTERN.match(line)
        if not match:
            continue

        issues.append(Issue(
            message=match.group("message").strip(),
            line=max(int(match.group("line")) - 1, 0),
            is_warning=match.group("warning") is not None,
        ))
    return issues
