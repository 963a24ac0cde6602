"""Scanner package to find and reconstruct Cursor AI pane chats.

Cursor keeps AI pane state as undocumented JSON values inside each
workspace's state.vscdb. The shape of those values has changed across
Cursor releases, so several schema parsers exist side by side.
"""

from .aggregate import aggregate_conversations
from .discovery import (
    STORAGE_ENV_VAR,
    find_workspaces,
    get_cursor_storage_path,
    get_latest_workspace,
    get_workspace_info,
)
from .models import (
    Conversation,
    ConversationWithWorkspace,
    Message,
    RawRow,
    TitleHint,
    WorkspaceInfo,
)
from .parsers import (
    CHATDATA_KEY,
    COMPOSER_KEY,
    GENERATIONS_KEY,
    KNOWN_KEYS,
    PROMPTS_KEY,
    SCHEMA_PARSERS,
    ChatDataParser,
    ComposerParser,
    GenerationLogParser,
    PromptListParser,
    SchemaParser,
    extract_title_hints,
)
from .roles import classify_role, marker_role
from .store import STORE_FILENAME, fetch_rows, open_store, read_workspace
from .titles import extract_technical_concepts, resolve_title

__all__ = [
    "CHATDATA_KEY",
    "COMPOSER_KEY",
    "GENERATIONS_KEY",
    "KNOWN_KEYS",
    "PROMPTS_KEY",
    "SCHEMA_PARSERS",
    "STORAGE_ENV_VAR",
    "STORE_FILENAME",
    "ChatDataParser",
    "ComposerParser",
    "Conversation",
    "ConversationWithWorkspace",
    "GenerationLogParser",
    "Message",
    "PromptListParser",
    "RawRow",
    "SchemaParser",
    "TitleHint",
    "WorkspaceInfo",
    "aggregate_conversations",
    "classify_role",
    "extract_technical_concepts",
    "extract_title_hints",
    "fetch_rows",
    "find_workspaces",
    "get_cursor_storage_path",
    "get_latest_workspace",
    "get_workspace_info",
    "marker_role",
    "open_store",
    "read_workspace",
    "resolve_title",
]
