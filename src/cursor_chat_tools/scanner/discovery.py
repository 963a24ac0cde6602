"""Workspace discovery under Cursor's workspaceStorage directory."""

import os
import platform
from pathlib import Path
from urllib.parse import unquote

import orjson

from ..errors import NotFoundError
from .models import WorkspaceInfo
from .store import STORE_FILENAME

STORAGE_ENV_VAR = "CURSOR_WORKSPACE_STORAGE"


def get_cursor_storage_path() -> Path:
    """Get the path to Cursor's workspace storage directory.

    The CURSOR_WORKSPACE_STORAGE environment variable overrides the
    platform default.
    """
    override = os.environ.get(STORAGE_ENV_VAR)
    if override:
        return Path(override).expanduser()

    system = platform.system()
    home = Path.home()

    if system == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "Cursor" / "User" / "workspaceStorage"
    elif system == "Darwin":  # macOS
        return home / "Library" / "Application Support" / "Cursor" / "User" / "workspaceStorage"
    elif system == "Linux":
        return home / ".config" / "Cursor" / "User" / "workspaceStorage"

    return home / ".cursor" / "workspaceStorage"


def find_workspaces(storage_path: Path | str) -> list[Path]:
    """Find workspace store files.

    Args:
        storage_path: The workspaceStorage root, or a single state.vscdb file
            to use on its own.

    Returns:
        Paths to state.vscdb files, ordered by workspace directory name.

    Raises:
        NotFoundError: If the root cannot be read.
    """
    root = Path(storage_path)
    if root.is_file():
        return [root]

    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise NotFoundError(f"Cannot read workspace storage {root}: {exc.strerror or exc}") from exc

    workspaces = []
    for workspace_dir in entries:
        if not workspace_dir.is_dir():
            continue
        store = workspace_dir / STORE_FILENAME
        if store.is_file():
            workspaces.append(store)
    return workspaces


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0


def get_latest_workspace(storage_path: Path | str) -> Path:
    """Return the most recently modified workspace store.

    Raises:
        NotFoundError: If the root cannot be read or holds no stores.
    """
    workspaces = find_workspaces(storage_path)
    if not workspaces:
        raise NotFoundError(f"No workspaces found in {storage_path}")
    return max(workspaces, key=_mtime)


def _parse_workspace_json(workspace_dir: Path) -> str | None:
    """Parse workspace.json to get the workspace folder path."""
    workspace_json = workspace_dir / "workspace.json"
    if not workspace_json.exists():
        return None
    try:
        with workspace_json.open("rb") as f:
            data = orjson.loads(f.read())
    except (orjson.JSONDecodeError, OSError):
        return None
    if not isinstance(data, dict):
        return None

    # folder is a URI like file:///path/to/workspace; multi-root workspaces use "workspace"
    folder = data.get("folder") or data.get("workspace") or ""
    if not isinstance(folder, str) or not folder:
        return None
    if folder.startswith("file://"):
        folder = folder[7:]
        if platform.system() == "Windows" and folder.startswith("/"):
            # Windows paths like /C:/path
            folder = folder[1:]
    # URL decode the path (e.g., %3A -> :, %20 -> space)
    return unquote(folder) or None


def get_workspace_info(store_path: Path | str) -> WorkspaceInfo:
    """Describe the workspace a store file belongs to.

    The display name is the workspace folder's name from workspace.json,
    falling back to the storage directory name.
    """
    path = Path(store_path)
    workspace_dir = path.parent
    folder = _parse_workspace_json(workspace_dir)
    name = Path(folder.rstrip("/\\")).name if folder else ""
    return WorkspaceInfo(
        store_path=path,
        workspace_id=workspace_dir.name,
        name=name.removesuffix(".code-workspace") or workspace_dir.name,
        folder=folder,
    )
