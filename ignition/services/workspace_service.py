import json

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ignition.core.constants import StoreKey
from ignition.core.exceptions.domain import ResourceNotFoundError
from ignition.schemas.workspace import Workspace
from ignition.services.persistence import (
    PersistenceSync,
    belongs_to,
    read_collection,
    write_collection,
)
from ignition.services.store import KeyValueStore
from ignition.services.workspace_session import WorkspaceSession


class WorkspaceService:
    """Workspace list and the persisted "last viewed workspace" selection."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def list_workspaces(self) -> list[Workspace]:
        workspaces = []
        for record in await read_collection(self._store, StoreKey.WORKSPACES):
            try:
                workspaces.append(Workspace.model_validate(record))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed workspace record: {e}")
        return sorted(workspaces, key=lambda w: w.order)

    async def get_workspace(self, workspace_id: int) -> Workspace:
        for workspace in await self.list_workspaces():
            if workspace.id == workspace_id:
                return workspace
        raise ResourceNotFoundError("Workspace", str(workspace_id))

    async def create_workspace(self, name: str) -> Workspace | None:
        """Add a workspace at the end of the list. A blank name is refused."""
        if not name.strip():
            return None

        records = await read_collection(self._store, StoreKey.WORKSPACES)
        ids = [r["id"] for r in records if isinstance(r, dict) and isinstance(r.get("id"), int)]
        workspace = Workspace(id=max(ids, default=0) + 1, name=name.strip(), order=len(records) + 1)

        records.append(workspace.to_record())
        await write_collection(self._store, StoreKey.WORKSPACES, records)
        logger.info(f"Workspace created: {workspace.name} (id={workspace.id})")
        return workspace

    async def rename_workspace(self, workspace_id: int, name: str) -> bool:
        if not name.strip():
            return False

        records = await read_collection(self._store, StoreKey.WORKSPACES)
        for record in records:
            if isinstance(record, dict) and record.get("id") == workspace_id:
                record["name"] = name.strip()
                await write_collection(self._store, StoreKey.WORKSPACES, records)
                return True
        raise ResourceNotFoundError("Workspace", str(workspace_id))

    async def workspace_deletion_impact(self, workspace_id: int) -> tuple[int, int]:
        """``(boards, cards)`` that deleting the workspace would remove."""
        ws = str(workspace_id)
        boards = await read_collection(self._store, StoreKey.ALL_BOARDS)
        cards = await read_collection(self._store, StoreKey.ALL_CARDS)
        return (
            sum(1 for r in boards if belongs_to(r, ws)),
            sum(1 for r in cards if belongs_to(r, ws)),
        )

    async def delete_workspace(
        self, workspace_id: int, *, session: WorkspaceSession | None = None
    ) -> bool:
        """Delete a workspace together with all of its boards and cards.

        When ``session`` has that workspace open, its working set is discarded.
        """
        records = await read_collection(self._store, StoreKey.WORKSPACES)
        kept = [r for r in records if not (isinstance(r, dict) and r.get("id") == workspace_id)]
        if len(kept) == len(records):
            raise ResourceNotFoundError("Workspace", str(workspace_id))

        await write_collection(self._store, StoreKey.WORKSPACES, kept)

        sync = session.sync if session is not None else PersistenceSync(self._store)
        await sync.delete_workspace_cascade(workspace_id)
        if session is not None and session.workspace_id == str(workspace_id):
            session.close()

        if await self.get_selected_workspace() is None:
            await self.set_selected_workspace(None)

        logger.info(f"Workspace {workspace_id} deleted")
        return True

    async def get_selected_workspace(self) -> int | None:
        """The workspace to reopen on startup, if it still exists."""
        raw = await self._store.get(StoreKey.SELECTED_WORKSPACE)
        if raw is None:
            return None
        try:
            selected = json.loads(raw)
        except ValueError:
            logger.warning("Selected workspace record is malformed, ignoring it")
            return None
        if not isinstance(selected, int) or isinstance(selected, bool):
            return None

        existing = {w.id for w in await self.list_workspaces()}
        return selected if selected in existing else None

    async def set_selected_workspace(self, workspace_id: int | None) -> None:
        if workspace_id is None:
            await self._store.delete(StoreKey.SELECTED_WORKSPACE)
        else:
            await self._store.set(StoreKey.SELECTED_WORKSPACE, json.dumps(workspace_id))
