"""Data models for Cursor chat extraction."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"


def ms_to_datetime(timestamp_ms: int) -> datetime:
    """Convert an epoch timestamp in milliseconds to an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class RawRow:
    """One key/value record from a workspace's ItemTable."""

    key: str
    value: str


@dataclass(frozen=True)
class Message:
    """A single role-tagged message in a conversation."""

    id: str
    role: str  # 'user', 'assistant' or 'system'
    content: str
    timestamp_ms: int = 0


@dataclass(frozen=True)
class Conversation:
    """A reconstructed chat tab.

    timestamp_ms is the last message's timestamp, or the stored conversation
    timestamp when there are no messages.
    """

    id: str
    title: str
    messages: list[Message] = field(default_factory=list)
    timestamp_ms: int = 0
    created_at: datetime = field(default_factory=lambda: ms_to_datetime(0))
    source_key: str = ""  # ItemTable key the conversation was parsed from

    @property
    def first_user_message(self) -> Message | None:
        for message in self.messages:
            if message.role == ROLE_USER and message.content.strip():
                return message
        return None


@dataclass(frozen=True)
class ConversationWithWorkspace:
    """A conversation tagged with the workspace it was read from."""

    conversation: Conversation
    workspace_path: str
    workspace_name: str

    @property
    def id(self) -> str:
        return self.conversation.id

    @property
    def title(self) -> str:
        return self.conversation.title

    @property
    def messages(self) -> list[Message]:
        return self.conversation.messages

    @property
    def timestamp_ms(self) -> int:
        return self.conversation.timestamp_ms

    @property
    def created_at(self) -> datetime:
        return self.conversation.created_at


@dataclass(frozen=True)
class TitleHint:
    """A user-authored title for a conversation, taken from composer metadata."""

    conversation_key: str
    title: str


@dataclass(frozen=True)
class WorkspaceInfo:
    """A located workspace and its human-readable name."""

    store_path: Path
    workspace_id: str
    name: str
    folder: str | None = None
