"""Base linter interface."""

import abc
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Issue:
    """A problem found in a document.

    Attributes:
        message: Description of the problem.
        line: Zero-based line number.
        is_warning: True for warnings, False for errors.
    """

    message: str
    line: int
    is_warning: bool = False


class BaseLinter(abc.ABC):
    """Abstract base class for linters."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Get the name reported as the source of diagnostics.

        Returns:
            The linter name.
        """
        pass

    @abc.abstractmethod
    def analyze(self, text: str) -> List[Issue]:
        """Analyze the full text of a document.

        Args:
            text: The document text.

        Returns:
            The issues found, in the order the linter reported them.
        """
        pass
