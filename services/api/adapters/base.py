"""
Storage adapter interface for PinSpace.
Defines the contract that all storage backends must implement.
"""

from typing import Protocol, List, Dict, Any, Optional


class StorageAdapter(Protocol):
    """
    Protocol defining the interface for all storage adapters.

    This allows swapping between the JSON file store and SQLite without
    changing the router or core code.

    Consistency model (all backends):
    - Every write is an atomic read-check-write on one record.
    - Concurrent writes to the same board (or studio) are linearized by
      arrival; the later write wins in full. Two collaborators dragging the
      same board at the same time silently lose one of the moves.
    - No locking tokens and no version stamps.
    - Reads reflect the most recently completed write.
    - The JSON backend gives these guarantees within one process only; its
      lock is in-memory and every write rewrites the whole collection file.
      Multi-worker deployments need the sqlite backend.

    All records cross this boundary as snake_case dicts.
    """

    # ========== Boards ==========

    def create_board(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new board record.

        The record must carry `board_id`; `position` may be None or a
        placement dict (wall_index, x, y, width, height, side).

        Returns:
            The stored record (with created_at/updated_at filled in).
        """
        ...

    def get_board(self, board_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a board by id.

        Returns:
            Dict with board fields, or None if not found.
        """
        ...

    def list_boards(
        self,
        workspace_id: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List boards, optionally filtered by workspace and/or owner,
        newest first.
        """
        ...

    def update_placement(
        self,
        board_id: str,
        placement: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Replace a board's whole placement (None un-pins it).

        Raises:
            NotFound: no board with that id

        Returns:
            The updated board record.
        """
        ...

    def delete_board(self, board_id: str) -> None:
        """
        Delete a board together with its placement.

        Raises:
            NotFound: no board with that id
        """
        ...

    # ========== Wall configs ==========

    def get_wall_config(self, studio_id: str) -> Optional[Dict[str, Any]]:
        """
        Stored wall-config document for a studio:
            { "walls": [{ "height": .., "width": .. }, ...], "layoutType": .. }

        Returns:
            The document, or None if the studio never saved one.
        """
        ...

    def update_wall_config(self, studio_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace a studio's wall config in full (no per-wall merge).

        Returns:
            The stored document.
        """
        ...

    # ========== Workspaces ==========

    def create_workspace(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new workspace record (must carry `workspace_id`)."""
        ...

    def get_workspace(self, workspace_id: str) -> Optional[Dict[str, Any]]:
        ...

    def get_workspace_by_invite(self, invite_code: str) -> Optional[Dict[str, Any]]:
        ...

    def list_workspaces(self, public_only: bool = False) -> List[Dict[str, Any]]:
        ...

    def add_member(self, workspace_id: str, member: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add a member (no-op if `user_id` is already a member).

        Raises:
            NotFound: no workspace with that id
        """
        ...

    def update_workspace(self, workspace_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Overwrite only the provided keys.

        Raises:
            NotFound: no workspace with that id
        """
        ...

    # ========== Health ==========

    def ping(self) -> None:
        """Raise if the backend is not reachable."""
        ...
