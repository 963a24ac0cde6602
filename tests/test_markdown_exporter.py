"""Tests for the markdown exporter module."""

import pytest

from cursor_chat_tools import (
    Conversation,
    Message,
    content_preview,
    conversation_to_markdown,
    export_conversation_to_file,
    generate_conversation_filename,
    message_to_markdown,
)
from cursor_chat_tools.markdown_exporter import _format_timestamp, _sanitize_filename
from cursor_chat_tools.scanner.models import ms_to_datetime

# 2025-01-15 10:00:00 UTC; the same calendar day in most local timezones
BASE_MS = 1736935200000


@pytest.fixture
def sample_conversation():
    """Create a sample conversation for testing."""
    return Conversation(
        id="tab-123456789",
        title="Python functions",
        messages=[
            Message(id="m1", role="user", content="How do I create a Python function?", timestamp_ms=BASE_MS),
            Message(
                id="m2",
                role="assistant",
                content="Here's how to create a Python function:\n\n```python\ndef my_function():\n    pass\n```",
                timestamp_ms=BASE_MS + 60_000,
            ),
        ],
        timestamp_ms=BASE_MS + 60_000,
        created_at=ms_to_datetime(BASE_MS + 60_000),
        source_key="workbench.panel.aichat.view.aichat.chatdata",
    )


class TestFormatTimestamp:
    """Tests for _format_timestamp function."""

    def test_format_milliseconds_timestamp(self):
        """Test formatting milliseconds timestamp."""
        assert _format_timestamp(BASE_MS).startswith("2025-01-15")

    def test_format_early_milliseconds_timestamp(self):
        """Test that millisecond values before 2001 are still read as milliseconds."""
        # 2000-01-01 12:00:00 UTC
        assert _format_timestamp(946728000000).startswith("2000-01-01")

    def test_format_none_timestamp(self):
        """Test formatting None and zero timestamps."""
        assert _format_timestamp(None) == "Unknown"
        assert _format_timestamp(0) == "Unknown"

    def test_format_out_of_range_timestamp(self):
        """Test that a timestamp datetime cannot represent is returned unchanged."""
        assert _format_timestamp(10**25) == str(10**25)
        assert _format_timestamp(10**15) == str(10**15)


class TestConversationToMarkdown:
    """Tests for conversation_to_markdown function."""

    def test_basic_export(self, sample_conversation):
        """Test basic markdown export."""
        markdown = conversation_to_markdown(sample_conversation)
        assert markdown.startswith("# Python functions")
        assert "## Message 1: **USER**" in markdown
        assert "## Message 2: **ASSISTANT**" in markdown
        assert "How do I create a Python function?" in markdown
        assert "```python" in markdown

    def test_metadata_section(self, sample_conversation):
        """Test that the metadata block is included."""
        markdown = conversation_to_markdown(sample_conversation, workspace_name="my-project")
        assert "- **Chat ID:** `tab-123456789`" in markdown
        assert "- **Workspace:** my-project" in markdown
        assert "- **Date:** 2025-01-15" in markdown
        assert "- **Messages:** 2" in markdown

    def test_workspace_omitted_when_unknown(self, sample_conversation):
        """Test that no workspace line is written without a name."""
        assert "**Workspace:**" not in conversation_to_markdown(sample_conversation)

    def test_horizontal_rules(self, sample_conversation):
        """Test that messages are separated by horizontal rules."""
        markdown = conversation_to_markdown(sample_conversation)
        # One after the metadata block plus one per message
        assert markdown.count("\n---\n") == 3

    def test_system_placeholder_message(self):
        """Test that composer placeholders render with a System header."""
        conversation = Conversation(
            id="c1",
            title="Agent Chat",
            messages=[Message(id="c1-summary", role="system", content="Composer session: agent mode")],
            created_at=ms_to_datetime(0),
        )
        markdown = conversation_to_markdown(conversation)
        assert "## Message 1: **SYSTEM**" in markdown
        assert "**Date:**" not in markdown


class TestMessageToMarkdown:
    """Tests for message_to_markdown function."""

    def test_without_header(self):
        """Test that message number 0 omits the header."""
        markdown = message_to_markdown(Message(id="m", role="user", content="hello"))
        assert "## Message" not in markdown
        assert markdown.startswith("hello")

    def test_unknown_role_capitalized(self):
        """Test that unrecognised roles are capitalized."""
        markdown = message_to_markdown(Message(id="m", role="tool", content="ran"), message_number=3)
        assert "## Message 3: **TOOL**" in markdown


class TestContentPreview:
    """Tests for content_preview function."""

    def test_preview_joins_messages(self, sample_conversation):
        """Test that the preview lists role-prefixed messages on one line."""
        preview = content_preview(sample_conversation, max_length=500)
        assert preview.startswith("User: How do I create a Python function? | Assistant: Here's how")
        assert "\n" not in preview

    def test_preview_truncated(self, sample_conversation):
        """Test that long previews are cut with an ellipsis."""
        preview = content_preview(sample_conversation, max_length=40)
        assert len(preview) == 40
        assert preview.endswith("...")


class TestExportConversationToFile:
    """Tests for export_conversation_to_file function."""

    def test_export_to_file(self, sample_conversation, tmp_path):
        """Test exporting to a file."""
        output_path = tmp_path / "test.md"
        export_conversation_to_file(sample_conversation, output_path, workspace_name="my-project")

        assert output_path.exists()
        content = output_path.read_text(encoding="utf-8")
        assert "# Python functions" in content
        assert "my-project" in content


class TestGenerateConversationFilename:
    """Tests for generate_conversation_filename function."""

    def test_filename_with_date(self, sample_conversation):
        """Test filename includes date, title and short id."""
        filename = generate_conversation_filename(sample_conversation)
        assert filename == "20250115_Python_functions_tab-1234.md"

    def test_filename_without_date(self):
        """Test filename without a timestamp."""
        conversation = Conversation(id="abc", title="Untitled Chat", created_at=ms_to_datetime(0))
        assert generate_conversation_filename(conversation) == "Untitled_Chat_abc.md"

    def test_filename_with_out_of_range_timestamp(self):
        """Test that an unrepresentable timestamp leaves the date out."""
        conversation = Conversation(id="abc", title="Far future", timestamp_ms=10**15, created_at=ms_to_datetime(0))
        assert generate_conversation_filename(conversation) == "Far_future_abc.md"

    def test_filename_sanitization(self):
        """Test that unsafe characters are removed from filename."""
        conversation = Conversation(id="x/y", title="path/to:file?", created_at=ms_to_datetime(0))
        filename = generate_conversation_filename(conversation)
        assert "/" not in filename
        assert ":" not in filename
        assert "?" not in filename


class TestSanitizeFilename:
    """Tests for _sanitize_filename function."""

    def test_safe_characters_unchanged(self):
        """Test that safe characters are preserved."""
        assert _sanitize_filename("my-file_name.txt") == "my-file_name.txt"

    def test_unsafe_characters_replaced(self):
        """Test that unsafe characters are replaced with underscores."""
        assert _sanitize_filename("file/with:bad*chars") == "file_with_bad_chars"

    def test_max_length_enforced(self):
        """Test that the default max length is enforced."""
        assert len(_sanitize_filename("a" * 100)) == 50

    def test_empty_string(self):
        """Test empty string handling."""
        assert _sanitize_filename("") == ""
