# services/api/adapters/sqlite/__init__.py
from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    event,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine

from core.errors import NotFound

# ---- Engine (SQLite) with WAL & pragmas -------------------------------------

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)


def make_engine(db_url: str) -> Engine:
    # Create data dir if sqlite file
    if db_url.startswith("sqlite:///"):
        file_path = db_url.replace("sqlite:///", "", 1)
        _ensure_dir(file_path)

    engine = create_engine(
        db_url,
        future=True,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False},
    )

    # Apply pragmas per-connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore
        if isinstance(dbapi_connection, sqlite3.Connection):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA busy_timeout=5000;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return engine

# ---- Schema via SQLAlchemy Core ---------------------------------------------

metadata = MetaData()

workspaces = Table(
    "workspaces",
    metadata,
    Column("workspace_id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("type", String, nullable=False, default="class"),
    Column("created_by", String),
    Column("studio_id", String, nullable=False),
    Column("invite_code", String, nullable=False, unique=True),
    Column("is_public", Integer, nullable=False, default=0),  # 0/1
    Column("published_at", String),
    Column("instructor", String),
    Column("semester", String),
    Column("network_metadata", Text),  # JSON
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

workspace_members = Table(
    "workspace_members",
    metadata,
    Column("workspace_id", String, ForeignKey("workspaces.workspace_id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String, primary_key=True),
    Column("name", String),
    Column("role", String, nullable=False, default="student"),
    Column("joined_at", String),
)

boards = Table(
    "boards",
    metadata,
    Column("board_id", String, primary_key=True),
    Column("workspace_id", String, nullable=False),
    Column("owner_id", String),
    Column("owner_name", String),
    Column("owner_color", String),
    Column("student_name", String),
    Column("student_email", String),
    Column("title", String, nullable=False),
    Column("description", Text),
    Column("image_url", Text),
    Column("tags", Text),  # JSON list
    Column("original_width", Integer),
    Column("original_height", Integer),
    Column("aspect_ratio", Float),
    Column("physical_width", Float),
    Column("physical_height", Float),
    Column("dpi", Float),
    # Placement: written together in one UPDATE, NULL wall index = unpinned
    Column("pos_wall_index", Integer),
    Column("pos_x", Float),
    Column("pos_y", Float),
    Column("pos_width", Float),
    Column("pos_height", Float),
    Column("pos_side", String),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    CheckConstraint("pos_x IS NULL OR (pos_x >= 0 AND pos_x <= 1)", name="ck_pos_x"),
    CheckConstraint("pos_y IS NULL OR (pos_y >= 0 AND pos_y <= 1)", name="ck_pos_y"),
)

wall_configs = Table(
    "wall_configs",
    metadata,
    Column("studio_id", String, primary_key=True),
    Column("config", Text, nullable=False),  # JSON document
    Column("updated_at", DateTime, nullable=False),
)

Index("idx_boards_workspace", boards.c.workspace_id)
Index("idx_boards_owner", boards.c.owner_id)
Index("idx_workspaces_public", workspaces.c.is_public)

_POSITION_COLUMNS = {
    "wall_index": "pos_wall_index",
    "x": "pos_x",
    "y": "pos_y",
    "width": "pos_width",
    "height": "pos_height",
    "side": "pos_side",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(v: Any) -> Optional[str]:
    if isinstance(v, datetime):
        return v.isoformat()
    return v


def _position_values(placement: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    placement = placement or {}
    return {col: placement.get(key) for key, col in _POSITION_COLUMNS.items()}


def _board_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: v for k, v in row.items() if not k.startswith("pos_")}
    out["tags"] = json.loads(row["tags"]) if row.get("tags") else []
    out["created_at"] = _iso(row.get("created_at"))
    out["updated_at"] = _iso(row.get("updated_at"))
    if row.get("pos_wall_index") is None:
        out["position"] = None
    else:
        out["position"] = {key: row.get(col) for key, col in _POSITION_COLUMNS.items()}
    return out


# ---- Adapter implementation --------------------------------------------------

@dataclass(frozen=True)
class SqliteAdapter:
    """
    SQLite storage via SQLAlchemy Core.

    Each write runs in its own `engine.begin()` transaction; placement and
    wall-config writes are single statements, so the row is replaced in full
    or not at all.
    """
    engine: Engine

    @classmethod
    def from_url(cls, db_url: str) -> "SqliteAdapter":
        engine = make_engine(db_url)
        metadata.create_all(engine)
        return cls(engine=engine)

    def dispose(self) -> None:
        self.engine.dispose()

    # ========== Boards ==========

    def create_board(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        values = {c.name: record.get(c.name) for c in boards.columns if not c.name.startswith("pos_")}
        values["tags"] = json.dumps(record.get("tags") or [])
        values["created_at"] = now
        values["updated_at"] = now
        values.update(_position_values(record.get("position")))
        with self.engine.begin() as conn:
            conn.execute(insert(boards).values(**values))
            return self._get_board(conn, record["board_id"])  # type: ignore[return-value]

    def _get_board(self, conn: Connection, board_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(select(boards).where(boards.c.board_id == board_id)).mappings().first()
        return _board_from_row(dict(row)) if row else None

    def get_board(self, board_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            return self._get_board(conn, board_id)

    def list_boards(
        self,
        workspace_id: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        stmt = select(boards)
        if workspace_id is not None:
            stmt = stmt.where(boards.c.workspace_id == workspace_id)
        if owner_id is not None:
            stmt = stmt.where(boards.c.owner_id == owner_id)
        stmt = stmt.order_by(boards.c.created_at.desc())
        with self.engine.connect() as conn:
            return [_board_from_row(dict(r)) for r in conn.execute(stmt).mappings()]

    def update_placement(
        self,
        board_id: str,
        placement: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        values = _position_values(placement)
        values["updated_at"] = _now()
        with self.engine.begin() as conn:
            result = conn.execute(
                update(boards).where(boards.c.board_id == board_id).values(**values)
            )
            if result.rowcount == 0:
                raise NotFound(f"Board {board_id} not found")
            return self._get_board(conn, board_id)  # type: ignore[return-value]

    def delete_board(self, board_id: str) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(delete(boards).where(boards.c.board_id == board_id))
            if result.rowcount == 0:
                raise NotFound(f"Board {board_id} not found")

    # ========== Wall configs ==========

    def get_wall_config(self, studio_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            raw = conn.execute(
                select(wall_configs.c.config).where(wall_configs.c.studio_id == studio_id)
            ).scalar()
        return json.loads(raw) if raw else None

    def update_wall_config(self, studio_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
        raw = json.dumps(config)
        now = _now()
        stmt = sqlite_insert(wall_configs).values(studio_id=studio_id, config=raw, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[wall_configs.c.studio_id],
            set_={"config": raw, "updated_at": now},
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)
        return json.loads(raw)

    # ========== Workspaces ==========

    def _workspace_from_row(self, conn: Connection, row: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(row)
        out["is_public"] = bool(row.get("is_public"))
        out["network_metadata"] = json.loads(row["network_metadata"]) if row.get("network_metadata") else None
        out["created_at"] = _iso(row.get("created_at"))
        out["updated_at"] = _iso(row.get("updated_at"))
        members = conn.execute(
            select(workspace_members)
            .where(workspace_members.c.workspace_id == row["workspace_id"])
            .order_by(workspace_members.c.joined_at)
        ).mappings()
        out["members"] = [
            {k: v for k, v in dict(m).items() if k != "workspace_id"} for m in members
        ]
        return out

    def _get_workspace(self, conn: Connection, workspace_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            select(workspaces).where(workspaces.c.workspace_id == workspace_id)
        ).mappings().first()
        return self._workspace_from_row(conn, dict(row)) if row else None

    def create_workspace(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        values = {c.name: record.get(c.name) for c in workspaces.columns}
        values["is_public"] = 1 if record.get("is_public") else 0
        values["network_metadata"] = (
            json.dumps(record["network_metadata"]) if record.get("network_metadata") else None
        )
        values["created_at"] = now
        values["updated_at"] = now
        with self.engine.begin() as conn:
            conn.execute(insert(workspaces).values(**values))
            for member in record.get("members") or []:
                conn.execute(insert(workspace_members).values(workspace_id=record["workspace_id"], **member))
            return self._get_workspace(conn, record["workspace_id"])  # type: ignore[return-value]

    def get_workspace(self, workspace_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            return self._get_workspace(conn, workspace_id)

    def get_workspace_by_invite(self, invite_code: str) -> Optional[Dict[str, Any]]:
        code = (invite_code or "").strip().upper()
        with self.engine.connect() as conn:
            row = conn.execute(
                select(workspaces).where(workspaces.c.invite_code == code)
            ).mappings().first()
            return self._workspace_from_row(conn, dict(row)) if row else None

    def list_workspaces(self, public_only: bool = False) -> List[Dict[str, Any]]:
        stmt = select(workspaces)
        if public_only:
            stmt = stmt.where(workspaces.c.is_public == 1)
        with self.engine.connect() as conn:
            rows = [dict(r) for r in conn.execute(stmt).mappings()]
            return [self._workspace_from_row(conn, r) for r in rows]

    def add_member(self, workspace_id: str, member: Dict[str, Any]) -> Dict[str, Any]:
        stmt = sqlite_insert(workspace_members).values(workspace_id=workspace_id, **member)
        stmt = stmt.on_conflict_do_nothing(
            index_elements=[workspace_members.c.workspace_id, workspace_members.c.user_id]
        )
        with self.engine.begin() as conn:
            if self._get_workspace(conn, workspace_id) is None:
                raise NotFound(f"Workspace {workspace_id} not found")
            conn.execute(stmt)
            conn.execute(
                update(workspaces)
                .where(workspaces.c.workspace_id == workspace_id)
                .values(updated_at=_now())
            )
            return self._get_workspace(conn, workspace_id)  # type: ignore[return-value]

    def update_workspace(self, workspace_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in updates.items() if k in workspaces.c and k != "workspace_id"}
        if "is_public" in values:
            values["is_public"] = 1 if values["is_public"] else 0
        if "network_metadata" in values:
            meta = values["network_metadata"]
            values["network_metadata"] = json.dumps(meta) if meta else None
        values["updated_at"] = _now()
        with self.engine.begin() as conn:
            result = conn.execute(
                update(workspaces).where(workspaces.c.workspace_id == workspace_id).values(**values)
            )
            if result.rowcount == 0:
                raise NotFound(f"Workspace {workspace_id} not found")
            return self._get_workspace(conn, workspace_id)  # type: ignore[return-value]

    # ========== Health ==========

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
