"""Cursor Chat Tools - reconstruct Cursor AI pane chats from workspace storage.

This package reads the state.vscdb key/value stores Cursor keeps per workspace:
- Scanner: locate workspaces, read the known keys read-only, parse every
  historical schema, classify roles and resolve titles
- Reader: list, search and fetch chats across all workspaces
- Markdown Exporter: convert conversations to markdown format
"""

from loguru import logger

__version__ = "0.1.0"

from .errors import CursorChatError, NotFoundError, ParseError, StoreError
from .markdown_exporter import (
    content_preview,
    conversation_to_markdown,
    export_conversation_to_file,
    generate_conversation_filename,
    message_to_markdown,
)
from .reader import WorkspaceReader
from .scanner import (
    Conversation,
    ConversationWithWorkspace,
    Message,
    RawRow,
    TitleHint,
    WorkspaceInfo,
    classify_role,
    extract_technical_concepts,
    find_workspaces,
    get_cursor_storage_path,
    get_latest_workspace,
    read_workspace,
    resolve_title,
)

# Library code stays quiet unless the application enables logging
logger.disable(__name__)

__all__ = [
    # Package
    "__version__",
    # Errors
    "CursorChatError",
    "NotFoundError",
    "ParseError",
    "StoreError",
    # Scanner - Data models
    "Conversation",
    "ConversationWithWorkspace",
    "Message",
    "RawRow",
    "TitleHint",
    "WorkspaceInfo",
    # Scanner - Discovery, reading & heuristics
    "classify_role",
    "extract_technical_concepts",
    "find_workspaces",
    "get_cursor_storage_path",
    "get_latest_workspace",
    "read_workspace",
    "resolve_title",
    # Reader
    "WorkspaceReader",
    # Markdown Exporter
    "content_preview",
    "conversation_to_markdown",
    "export_conversation_to_file",
    "generate_conversation_filename",
    "message_to_markdown",
]
