"""Exception hierarchy for Cursor chat extraction.

Error messages carry enough context (workspace, key) to be logged, but never
the raw payload of a store value.
"""

from pathlib import Path


class CursorChatError(Exception):
    """Base exception for all application-specific errors."""


class NotFoundError(CursorChatError):
    """Raised when a workspace, store, or conversation cannot be found."""


class ParseError(CursorChatError):
    """Raised when a known key holds a value that matches none of its accepted shapes."""

    def __init__(self, key: str, reason: str, workspace: str | None = None):
        self.key = key
        self.reason = reason
        self.workspace = workspace
        location = f" in {workspace}" if workspace else ""
        super().__init__(f"Failed to parse '{key}'{location}: {reason}")

    def with_workspace(self, workspace: Path | str) -> "ParseError":
        """Return a copy of this error annotated with the originating workspace."""
        return ParseError(self.key, self.reason, workspace=str(workspace))


class StoreError(CursorChatError):
    """Raised when a store file exists but cannot be opened or queried."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read store {self.path}: {reason}")
