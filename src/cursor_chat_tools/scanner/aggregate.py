"""Merge conversations produced by several schema parsers for one workspace."""

from collections.abc import Iterable

from .models import Conversation


def aggregate_conversations(conversations: Iterable[Conversation]) -> list[Conversation]:
    """Deduplicate conversations by id and sort them newest first.

    When ids collide the conversation with more messages is kept; on a tie the
    first one seen wins.
    """
    by_id: dict[str, Conversation] = {}
    for conversation in conversations:
        existing = by_id.get(conversation.id)
        if existing is None or len(conversation.messages) > len(existing.messages):
            by_id[conversation.id] = conversation

    return sorted(by_id.values(), key=lambda c: c.timestamp_ms, reverse=True)
