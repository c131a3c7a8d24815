"""Line identity resolution.

A resolver turns a (file path, line) pair into the key used to correlate the
same line across commits. The tracker only talks to the abstract interface, so
a positional or LCS-based strategy can replace the content key later.
"""

from abc import ABC, abstractmethod


class LineIdentityResolver(ABC):
    """Abstract base class for line identity strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return strategy identifier used in reports and config."""
        pass

    @abstractmethod
    def resolve(self, path: str, line: str) -> str | None:
        """Return identity key for a line, or None if the line is not tracked."""
        pass

    def is_trackable(self, line: str) -> bool:
        """Blank and whitespace-only lines are never tracked."""
        return line.strip() != ""


class ContentIdentityResolver(LineIdentityResolver):
    """Identity is the file path joined with the exact line content.

    Whitespace-sensitive. Two textually identical lines in one file share a
    single identity, and an edited line becomes a different identity.

    Example:
        >>> ContentIdentityResolver().resolve("main.go", "\\treturn nil")
        'main.go:\\treturn nil'
    """

    @property
    def name(self) -> str:
        return "content"

    def resolve(self, path: str, line: str) -> str | None:
        if not self.is_trackable(line):
            return None
        return f"{path}:{line}"
