"""
JSON file storage adapter for PinSpace.
Simple file-based storage for local development, demos and tests.

Every read-modify-write runs under one lock per data directory and lands on
disk through a temp file + atomic rename, so a reader never sees a
half-written document and two writers never interleave.

The lock lives in this process only, and each write rewrites the whole
collection file. Several worker processes (e.g. `uvicorn --workers 4`) on one
data directory can therefore lose concurrent updates, even to different
boards. Run a single worker, or use the sqlite backend for multi-worker
deployments.
"""
import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from core.errors import NotFound

_LOCKS: Dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(data_dir: Path) -> threading.RLock:
    with _LOCKS_GUARD:
        lock = _LOCKS.get(data_dir)
        if lock is None:
            lock = threading.RLock()
            _LOCKS[data_dir] = lock
        return lock


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonAdapter:
    """
    JSON file-based storage adapter.
    Stores each collection in its own JSON file under the data directory.
    Safe for threads within one process, not across processes.
    """

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the JSON adapter.

        Args:
            data_dir: Directory to store JSON files
        """
        self.data_dir = Path(data_dir).resolve()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = _lock_for(self.data_dir)

        # File paths
        self.boards_file = self.data_dir / "boards.json"
        self.workspaces_file = self.data_dir / "workspaces.json"
        self.wall_configs_file = self.data_dir / "wall-configs.json"

        # Initialize files if they don't exist
        with self._lock:
            for file, empty in (
                (self.boards_file, []),
                (self.workspaces_file, []),
                (self.wall_configs_file, {}),
            ):
                if not file.exists():
                    self._write_file(file, empty)

    def _read_file(self, filepath: Path, default: Any) -> Any:
        """Read and parse a JSON file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return default

    def _write_file(self, filepath: Path, data: Any) -> None:
        """Write data to a JSON file atomically."""
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=filepath.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            # Atomic rename
            os.replace(tmp_name, filepath)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _mutate_record(
        self,
        filepath: Path,
        key: str,
        record_id: str,
        what: str,
        mutate: Callable[[Dict[str, Any]], None],
    ) -> Dict[str, Any]:
        """Locked read-check-write of a single record in a list collection."""
        with self._lock:
            rows = self._read_file(filepath, [])
            row = next((r for r in rows if r.get(key) == record_id), None)
            if row is None:
                raise NotFound(f"{what} {record_id} not found")
            mutate(row)
            row["updated_at"] = _now()
            self._write_file(filepath, rows)
            return dict(row)

    # ========== Boards ==========

    def create_board(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        row = dict(record)
        row.setdefault("position", None)
        row["created_at"] = now
        row["updated_at"] = now
        with self._lock:
            boards = self._read_file(self.boards_file, [])
            boards.append(row)
            self._write_file(self.boards_file, boards)
        return dict(row)

    def get_board(self, board_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            boards = self._read_file(self.boards_file, [])
        row = next((b for b in boards if b.get("board_id") == board_id), None)
        return dict(row) if row else None

    def list_boards(
        self,
        workspace_id: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            boards = self._read_file(self.boards_file, [])
        if workspace_id is not None:
            boards = [b for b in boards if b.get("workspace_id") == workspace_id]
        if owner_id is not None:
            boards = [b for b in boards if b.get("owner_id") == owner_id]
        boards.sort(key=lambda b: b.get("created_at") or "", reverse=True)
        return boards

    def update_placement(
        self,
        board_id: str,
        placement: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        new_position = dict(placement) if placement is not None else None

        def _replace(row: Dict[str, Any]) -> None:
            row["position"] = new_position

        return self._mutate_record(self.boards_file, "board_id", board_id, "Board", _replace)

    def delete_board(self, board_id: str) -> None:
        with self._lock:
            boards = self._read_file(self.boards_file, [])
            kept = [b for b in boards if b.get("board_id") != board_id]
            if len(kept) == len(boards):
                raise NotFound(f"Board {board_id} not found")
            self._write_file(self.boards_file, kept)

    # ========== Wall configs ==========

    def get_wall_config(self, studio_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            configs = self._read_file(self.wall_configs_file, {})
        return configs.get(studio_id)

    def update_wall_config(self, studio_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
        doc = json.loads(json.dumps(config))
        with self._lock:
            configs = self._read_file(self.wall_configs_file, {})
            configs[studio_id] = doc
            self._write_file(self.wall_configs_file, configs)
        return doc

    # ========== Workspaces ==========

    def create_workspace(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        row = dict(record)
        row.setdefault("members", [])
        row["created_at"] = now
        row["updated_at"] = now
        with self._lock:
            workspaces = self._read_file(self.workspaces_file, [])
            workspaces.append(row)
            self._write_file(self.workspaces_file, workspaces)
        return dict(row)

    def get_workspace(self, workspace_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            workspaces = self._read_file(self.workspaces_file, [])
        row = next((w for w in workspaces if w.get("workspace_id") == workspace_id), None)
        return dict(row) if row else None

    def get_workspace_by_invite(self, invite_code: str) -> Optional[Dict[str, Any]]:
        code = (invite_code or "").strip().upper()
        with self._lock:
            workspaces = self._read_file(self.workspaces_file, [])
        row = next((w for w in workspaces if (w.get("invite_code") or "").upper() == code), None)
        return dict(row) if row else None

    def list_workspaces(self, public_only: bool = False) -> List[Dict[str, Any]]:
        with self._lock:
            workspaces = self._read_file(self.workspaces_file, [])
        if public_only:
            workspaces = [w for w in workspaces if w.get("is_public")]
        return workspaces

    def add_member(self, workspace_id: str, member: Dict[str, Any]) -> Dict[str, Any]:
        def _add(row: Dict[str, Any]) -> None:
            members = row.setdefault("members", [])
            if not any(m.get("user_id") == member.get("user_id") for m in members):
                members.append(dict(member))

        return self._mutate_record(self.workspaces_file, "workspace_id", workspace_id, "Workspace", _add)

    def update_workspace(self, workspace_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        def _update(row: Dict[str, Any]) -> None:
            row.update(updates)

        return self._mutate_record(self.workspaces_file, "workspace_id", workspace_id, "Workspace", _update)

    # ========== Health ==========

    def ping(self) -> None:
        if not self.data_dir.is_dir():
            raise RuntimeError(f"Data directory missing: {self.data_dir}")
