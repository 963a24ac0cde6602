"""Pytest configuration and shared fixtures."""

import json
import os
import sqlite3
from pathlib import Path

import pytest

CHATDATA_KEY = "workbench.panel.aichat.view.aichat.chatdata"
PROMPTS_KEY = "aiService.prompts"
GENERATIONS_KEY = "aiService.generations"
COMPOSER_KEY = "composer.composerData"

# 2025-01-15 10:00:00 UTC
BASE_MS = 1736935200000


def make_state_db(path: Path, items: dict[str, object]) -> Path:
    """Create a state.vscdb with an ItemTable holding the given items.

    Non-string values are JSON-encoded; strings are stored as-is so tests can
    write malformed payloads.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
    for key, value in items.items():
        text = value if isinstance(value, str) else json.dumps(value)
        conn.execute("INSERT INTO ItemTable (key, value) VALUES (?, ?)", (key, text))
    conn.commit()
    conn.close()
    return path


def make_workspace(
    root: Path,
    workspace_id: str,
    items: dict[str, object],
    folder: str | None = None,
    mtime: float | None = None,
) -> Path:
    """Create a workspace directory with a state.vscdb (and optional workspace.json)."""
    workspace_dir = root / workspace_id
    store = make_state_db(workspace_dir / "state.vscdb", items)
    if folder:
        (workspace_dir / "workspace.json").write_text(json.dumps({"folder": folder}))
    if mtime is not None:
        os.utime(store, (mtime, mtime))
    return store


def chat_tab(tab_id: str, title: str, timestamp_ms: int, messages: int = 2) -> dict:
    """Build a chat-data tab with alternating user/assistant messages."""
    return {
        "id": tab_id,
        "title": title,
        "timestamp": timestamp_ms,
        "messages": [
            {
                "id": f"{tab_id}-m{i}",
                "role": "user" if i % 2 == 0 else "assistant",
                "content": f"Message {i} of {title}",
                "timestamp": timestamp_ms - (messages - 1 - i) * 1000,
            }
            for i in range(messages)
        ],
    }


@pytest.fixture
def storage_root(tmp_path):
    """Return an empty workspaceStorage directory."""
    root = tmp_path / "workspaceStorage"
    root.mkdir()
    return root


@pytest.fixture
def populated_storage(storage_root):
    """Create a storage root with two healthy workspaces and distinct timestamps."""
    make_workspace(
        storage_root,
        "aaa111",
        {CHATDATA_KEY: {"tabs": [chat_tab("tab-a1", "Fix login bug", BASE_MS + 10_000), chat_tab("tab-a2", "Write docs", BASE_MS + 30_000)]}},
        folder="file:///home/user/projects/alpha",
        mtime=1_700_000_000,
    )
    make_workspace(
        storage_root,
        "bbb222",
        {CHATDATA_KEY: {"tabs": [chat_tab("tab-b1", "Database migration", BASE_MS + 20_000, messages=4)]}},
        folder="file:///home/user/projects/beta",
        mtime=1_700_000_500,
    )
    return storage_root
