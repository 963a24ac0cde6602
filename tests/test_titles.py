"""Tests for title resolution and technical-concept extraction."""

from cursor_chat_tools.scanner import Conversation, Message, extract_technical_concepts, resolve_title
from cursor_chat_tools.scanner.models import ms_to_datetime

BASE_MS = 1736935200000  # 2025-01-15 10:00:00 UTC


def _conversation(title="AI Service Chat", messages=None, conversation_id="conv-1", timestamp_ms=BASE_MS):
    return Conversation(
        id=conversation_id,
        title=title,
        messages=messages or [],
        timestamp_ms=timestamp_ms,
        created_at=ms_to_datetime(timestamp_ms),
    )


def _msg(role, content, i=0):
    return Message(id=f"m{i}", role=role, content=content, timestamp_ms=BASE_MS + i)


class TestResolveTitle:
    """Tests for the title fallback chain."""

    def test_no_hints_no_messages_is_untitled(self):
        """Zero hints and zero messages resolve to 'Untitled Chat'."""
        assert resolve_title(_conversation()) == "Untitled Chat"
        assert resolve_title(_conversation(title="")) == "Untitled Chat"
        assert resolve_title(_conversation(), {}) == "Untitled Chat"

    def test_unique_hint_wins(self):
        """A single hint replaces the placeholder title."""
        conversation = _conversation(messages=[_msg("user", "Something else entirely")])
        assert resolve_title(conversation, {"id1": "My Title"}) == "My Title"

    def test_unique_hint_beats_own_title(self):
        """The externally supplied hint is consulted before the own title."""
        assert resolve_title(_conversation(title="Own title"), {"id1": "My Title"}) == "My Title"

    def test_hint_for_conversation_id(self):
        """With several hints, one keyed by the conversation id is used."""
        hints = {"other": "Other", "conv-1": "Mine"}
        assert resolve_title(_conversation(), hints) == "Mine"

    def test_multiple_unrelated_hints_are_ignored(self):
        """Several hints that don't match the id do not pick a title."""
        hints = {"a": "First", "b": "Second"}
        conversation = _conversation(messages=[_msg("user", "Explain decorators")])
        assert resolve_title(conversation, hints) == "Explain decorators"

    def test_own_title_used_when_not_placeholder(self):
        """A real stored title is kept."""
        conversation = _conversation(title="Refactor auth", messages=[_msg("user", "hello there")])
        assert resolve_title(conversation) == "Refactor auth"

    def test_first_sentence_of_first_user_message(self):
        """The first sentence of the first user message becomes the title."""
        conversation = _conversation(
            messages=[
                _msg("assistant", "Welcome back.", 0),
                _msg("user", "Add pagination to the list view. It is too slow.", 1),
            ]
        )
        assert resolve_title(conversation) == "Add pagination to the list view"

    def test_question_keeps_question_mark(self):
        """A question keeps its question mark."""
        conversation = _conversation(messages=[_msg("user", "Why is the cache stale? It was fine")])
        assert resolve_title(conversation) == "Why is the cache stale?"

    def test_long_sentence_truncated_to_60(self):
        """Titles longer than 60 characters are cut with an ellipsis."""
        content = "word " * 30
        title = resolve_title(_conversation(messages=[_msg("user", content)]))
        assert len(title) <= 60
        assert title.endswith("...")

    def test_concept_discussion(self):
        """Without user messages the most mentioned concept names the chat."""
        conversation = _conversation(
            messages=[
                _msg("assistant", "Docker builds the image. Python runs inside Docker.", 0),
                _msg("assistant", "Then push the docker image.", 1),
            ]
        )
        assert resolve_title(conversation) == "Docker Discussion"

    def test_development_session_fallback(self):
        """With nothing else to go on the date names the chat."""
        conversation = _conversation(messages=[_msg("system", "Composer session: agent mode")])
        assert resolve_title(conversation) == "Development Session 2025-01-15"

    def test_result_is_never_empty(self):
        """Every rule combination yields a non-empty title."""
        for title in ("", "AI Service Chat", "Composer Chat"):
            for messages in ([], [_msg("user", "   ")], [_msg("assistant", "ok")]):
                assert resolve_title(_conversation(title=title, messages=messages))


class TestExtractTechnicalConcepts:
    """Tests for extract_technical_concepts."""

    def test_ordered_by_frequency(self):
        """The most frequently mentioned concept comes first."""
        conversation = _conversation(
            messages=[_msg("user", "react react react and python", 0), _msg("assistant", "python", 1)]
        )
        assert extract_technical_concepts(conversation)[:2] == ["React", "Python"]

    def test_word_boundaries(self):
        """Terms inside longer words are not counted."""
        conversation = _conversation(messages=[_msg("user", "javascript only")])
        assert extract_technical_concepts(conversation) == ["JavaScript"]

    def test_empty(self):
        """A conversation without messages has no concepts."""
        assert extract_technical_concepts(_conversation()) == []
