"""Heuristic role classification for messages that carry no explicit author.

Precedence is fixed and lives only here:

1. explicit role
2. assistant markers
3. user markers
4. alternation by position (when the caller knows the position)
5. long content is assistant
6. everything else is user
"""

from .models import ROLE_ASSISTANT, ROLE_USER

LONG_CONTENT_THRESHOLD = 200

ASSISTANT_MARKERS = (
    "I'll",
    "I can",
    "Let me",
    "Here's",
    "Here are",
    "You can",
    "This will",
    "To do this",
    "First,",
    "Next,",
    "Finally,",
    "```",
    "## ",
    "### ",
    "**",
    "- [",
    "1. ",
    "2. ",
    "3. ",
)

USER_MARKERS = (
    "?",
    "@",
    "Can you",
    "How do I",
    "What is",
    "Please",
    "I want",
    "I need",
    "Let's",
    "Could you",
    "Would you",
    "Show me",
    "Help me",
    "I'm trying",
)

_ASSISTANT_MARKERS_LOWER = tuple(m.lower() for m in ASSISTANT_MARKERS)
_USER_MARKERS_LOWER = tuple(m.lower() for m in USER_MARKERS)


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def marker_role(content: str) -> str | None:
    """Return the role implied by content markers alone, or None if there are none."""
    lowered = content.lower()
    if _contains_any(lowered, _ASSISTANT_MARKERS_LOWER):
        return ROLE_ASSISTANT
    if _contains_any(lowered, _USER_MARKERS_LOWER):
        return ROLE_USER
    return None


def alternating_role(position_index: int) -> str:
    """Default role for flat prompt lists: even positions are user, odd are assistant."""
    return ROLE_USER if position_index % 2 == 0 else ROLE_ASSISTANT


def classify_role(content: str, explicit_role: str | None = "", position_index: int | None = None) -> str:
    """Determine the role of a message.

    Args:
        content: Message text.
        explicit_role: Role stored with the message, returned unchanged when non-empty.
        position_index: Position in a flat sequence. When given, alternation
            replaces the length heuristic as the fallback.

    Returns:
        'user' or 'assistant' (or the explicit role).
    """
    if explicit_role:
        return explicit_role

    role = marker_role(content)
    if role:
        return role

    if position_index is not None:
        return alternating_role(position_index)

    if len(content) > LONG_CONTENT_THRESHOLD:
        return ROLE_ASSISTANT

    return ROLE_USER
