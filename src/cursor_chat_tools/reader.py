"""Public entry point for reading Cursor chats across workspaces."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger

from .errors import CursorChatError, NotFoundError
from .markdown_exporter import conversation_to_markdown
from .scanner import (
    Conversation,
    ConversationWithWorkspace,
    find_workspaces,
    get_cursor_storage_path,
    get_latest_workspace,
    get_workspace_info,
    read_workspace,
)


class WorkspaceReader:
    """Reads chats from every Cursor workspace under one storage root.

    Args:
        storage_path: The workspaceStorage root, or a single state.vscdb to
            read on its own. Defaults to the platform's Cursor location.
        max_workers: Number of workspaces read concurrently; 1 reads them
            one after another.
    """

    def __init__(self, storage_path: Path | str | None = None, max_workers: int = 1):
        self.storage_path = Path(storage_path) if storage_path else get_cursor_storage_path()
        self.max_workers = max(1, max_workers)

    def find_workspaces(self) -> list[Path]:
        """Return workspace store paths in locator order."""
        return find_workspaces(self.storage_path)

    def get_latest_workspace(self) -> Path:
        """Return the most recently modified workspace store."""
        return get_latest_workspace(self.storage_path)

    def read_workspace(self, store_path: Path | str) -> list[Conversation]:
        """Return the conversations of one workspace, newest first."""
        return read_workspace(store_path)

    def _read_or_skip(self, store_path: Path) -> list[Conversation] | None:
        try:
            return self.read_workspace(store_path)
        except CursorChatError as exc:
            logger.warning("Skipping workspace {}: {}", store_path, exc)
            return None

    def _read_all(self, workspaces: list[Path]) -> list[tuple[Path, list[Conversation] | None]]:
        """Read every workspace, in locator order, with failures as None."""
        read = self._read_or_skip
        if self.max_workers == 1 or len(workspaces) < 2:
            return [(path, read(path)) for path in workspaces]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(zip(workspaces, executor.map(read, workspaces)))

    def get_latest_chat(self) -> Conversation:
        """Return the most recent conversation of the most recently used workspace.

        Raises:
            NotFoundError: If there is no workspace or it holds no conversations.
        """
        latest = self.get_latest_workspace()
        conversations = self.read_workspace(latest)
        if not conversations:
            raise NotFoundError(f"No chats found in latest workspace {latest}")
        return conversations[0]

    def get_chat_by_id(self, chat_id: str) -> tuple[Conversation, Path]:
        """Find a conversation by id.

        Workspaces are scanned in locator order; ones that fail to read are
        skipped.

        Returns:
            The conversation and the store path of the workspace holding it.

        Raises:
            NotFoundError: If no workspace holds the id.
        """
        for store_path in self.find_workspaces():
            conversations = self._read_or_skip(store_path)
            for conversation in conversations or []:
                if conversation.id == chat_id:
                    return conversation, store_path
        raise NotFoundError(f"Chat with ID {chat_id} not found")

    def list_all_chats(self) -> list[ConversationWithWorkspace]:
        """Return the conversations of every workspace, newest first.

        Workspaces that fail to read contribute nothing.
        """
        all_chats = []
        for store_path, conversations in self._read_all(self.find_workspaces()):
            if not conversations:
                continue
            info = get_workspace_info(store_path)
            all_chats.extend(
                ConversationWithWorkspace(
                    conversation=conversation,
                    workspace_path=str(store_path),
                    workspace_name=info.name,
                )
                for conversation in conversations
            )

        all_chats.sort(key=lambda chat: chat.timestamp_ms, reverse=True)
        return all_chats

    def search_chats(self, query: str) -> list[ConversationWithWorkspace]:
        """Return chats whose title or transcript contains query (case-insensitive)."""
        needle = query.lower()
        return [
            chat
            for chat in self.list_all_chats()
            if needle in chat.title.lower() or needle in conversation_to_markdown(chat.conversation).lower()
        ]
