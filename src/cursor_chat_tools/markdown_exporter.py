"""Markdown exporter for Cursor conversations.

Exports conversations to markdown format with:
- Title heading and a metadata block (conversation ID, workspace, date)
- Messages separated by horizontal rules
- Message numbers and roles as bold headers
"""

from datetime import datetime
from pathlib import Path

from .scanner import Conversation, Message

_ROLE_LABELS = {"user": "User", "assistant": "Assistant", "system": "System"}


def _local_datetime(timestamp_ms: int) -> datetime | None:
    """Convert epoch milliseconds to a local datetime, or None when out of range."""
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000)
    except (ValueError, TypeError, OSError, OverflowError):
        return None


def _format_timestamp(value: int | None) -> str:
    """Format an epoch timestamp (milliseconds) to a human-readable date string."""
    if not value:
        return "Unknown"
    dt = _local_datetime(value)
    if dt is None:
        return str(value)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _role_label(role: str) -> str:
    return _ROLE_LABELS.get(role, role.capitalize() or "Unknown")


def conversation_to_markdown(conversation: Conversation, workspace_name: str | None = None) -> str:
    """Convert a conversation to markdown format.

    Args:
        conversation: The Conversation to convert.
        workspace_name: Optional workspace name for the metadata block.

    Returns:
        Markdown string representation of the conversation.
    """
    lines = [f"# {conversation.title}", ""]

    lines.append(f"- **Chat ID:** `{conversation.id}`")
    if workspace_name:
        lines.append(f"- **Workspace:** {workspace_name}")
    if conversation.timestamp_ms:
        lines.append(f"- **Date:** {_format_timestamp(conversation.timestamp_ms)}")
    lines.append(f"- **Messages:** {len(conversation.messages)}")

    lines.append("")
    lines.append("---")
    lines.append("")

    for i, message in enumerate(conversation.messages, 1):
        lines.append(message_to_markdown(message, message_number=i))

    return "\n".join(lines)


def message_to_markdown(message: Message, message_number: int = 0) -> str:
    """Convert a single message to markdown format.

    Args:
        message: The Message to convert.
        message_number: The 1-based message number (0 means don't include header).
    """
    lines = []

    if message_number > 0:
        lines.append(f"## Message {message_number}: **{_role_label(message.role).upper()}**")
        lines.append("")

    if message.timestamp_ms:
        lines.append(f"*{_format_timestamp(message.timestamp_ms)}*")
        lines.append("")

    lines.append(message.content)
    lines.append("")
    lines.append("---")
    lines.append("")

    return "\n".join(lines)


def content_preview(conversation: Conversation, max_length: int = 150) -> str:
    """Return a one-line "Role: text" preview of the conversation, cut at max_length."""
    parts = []
    for message in conversation.messages:
        text = " ".join(message.content.split())
        parts.append(f"{_role_label(message.role)}: {text}")
    preview = " | ".join(parts)
    if len(preview) > max_length:
        return preview[: max(max_length - 3, 0)] + "..."
    return preview


def export_conversation_to_file(
    conversation: Conversation,
    output_path: Path | str,
    workspace_name: str | None = None,
) -> None:
    """Export a single conversation to a markdown file."""
    markdown = conversation_to_markdown(conversation, workspace_name=workspace_name)
    Path(output_path).write_text(markdown, encoding="utf-8")


def _sanitize_filename(name: str, max_length: int = 50) -> str:
    """Sanitize a string to be safe for use as a filename.

    Replaces any characters that are not alphanumeric, hyphen, underscore,
    or period with underscores. Also limits the length.
    """
    safe_name = "".join(c if c.isalnum() or c in ("-", "_", ".") else "_" for c in name)
    return safe_name[:max_length]


def generate_conversation_filename(conversation: Conversation) -> str:
    """Generate a filename for a conversation's markdown export."""
    safe_name = _sanitize_filename(conversation.title) or "chat"
    short_id = _sanitize_filename(conversation.id, max_length=8)

    dt = _local_datetime(conversation.timestamp_ms) if conversation.timestamp_ms else None
    if dt is not None:
        return f"{dt.strftime('%Y%m%d')}_{safe_name}_{short_id}.md"
    return f"{safe_name}_{short_id}.md"
