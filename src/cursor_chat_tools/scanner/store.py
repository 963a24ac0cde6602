"""Read-only access to a workspace's state.vscdb and per-workspace reconstruction.

Cursor (like VS Code) keeps workspace state in an SQLite database with a
single key/value table named ItemTable.
"""

import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

from loguru import logger

from ..errors import NotFoundError, ParseError, StoreError
from .aggregate import aggregate_conversations
from .models import Conversation, RawRow
from .parsers import COMPOSER_KEY, KNOWN_KEYS, SCHEMA_PARSERS, extract_title_hints
from .titles import resolve_title

STORE_FILENAME = "state.vscdb"


@contextmanager
def open_store(store_path: Path | str) -> Iterator[sqlite3.Connection]:
    """Open a store file read-only and close it when done.

    Raises:
        NotFoundError: If the file does not exist.
        StoreError: If SQLite cannot open the file.
    """
    path = Path(store_path)
    if not path.is_file():
        raise NotFoundError(f"Store file not found: {path}")

    uri = f"{path.resolve().as_uri()}?mode=ro"
    try:
        conn = sqlite3.connect(uri, uri=True)
    except sqlite3.Error as exc:
        raise StoreError(path, str(exc)) from exc
    try:
        yield conn
    finally:
        conn.close()


def _decode(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def fetch_rows(store_path: Path | str, keys: Iterable[str] = KNOWN_KEYS) -> dict[str, RawRow]:
    """Look up each key in ItemTable; keys that are not present are left out.

    Raises:
        NotFoundError: If the store file does not exist.
        StoreError: If the file is not a readable database or lacks ItemTable.
    """
    rows: dict[str, RawRow] = {}
    with open_store(store_path) as conn:
        try:
            cursor = conn.cursor()
            for key in keys:
                cursor.execute("SELECT value FROM ItemTable WHERE key = ?", (key,))
                row = cursor.fetchone()
                if row is None:
                    continue
                value = _decode(row[0])
                if value is not None:
                    rows[key] = RawRow(key=key, value=value)
        except sqlite3.Error as exc:
            # Corrupted file or unexpected schema
            raise StoreError(store_path, str(exc)) from exc
    return rows


def _title_hints(rows: dict[str, RawRow], store_path: Path | str) -> dict[str, str]:
    row = rows.get(COMPOSER_KEY)
    if row is None:
        return {}
    try:
        hints = extract_title_hints(row.value)
    except ParseError as exc:
        logger.debug("No title hints from {}: {}", store_path, exc.reason)
        return {}
    return {hint.conversation_key: hint.title for hint in hints}


def read_workspace(store_path: Path | str) -> list[Conversation]:
    """Reconstruct every conversation stored in one workspace.

    Every known key that is present contributes; a key whose value cannot be
    parsed is logged and skipped without affecting the others.

    Args:
        store_path: Path to the workspace's state.vscdb.

    Returns:
        Deduplicated conversations, newest first.

    Raises:
        NotFoundError: If the store file does not exist.
        StoreError: If the store cannot be opened or queried.
    """
    rows = fetch_rows(store_path)
    hints = _title_hints(rows, store_path)

    conversations: list[Conversation] = []
    for parser in SCHEMA_PARSERS:
        row = rows.get(parser.key)
        if row is None:
            continue
        try:
            parsed = parser.parse(row.value, hints)
        except ParseError as exc:
            logger.warning("{}", exc.with_workspace(store_path))
            continue

        parser_hints = hints if parser.uses_title_hints else None
        for conversation in parsed:
            conversations.append(replace(conversation, title=resolve_title(conversation, parser_hints)))
        logger.debug("{}: {} conversation(s) from {}", store_path, len(parsed), parser.key)

    return aggregate_conversations(conversations)
