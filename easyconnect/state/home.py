"""Home screen state: joined groups, pending invites, loading flag and last error."""
from pydantic import BaseModel
from typing import List, Optional
from fastapi import HTTPException
from easyconnect.modules.groups.schemas import GroupResponse, GroupInvite, GroupCreate
from easyconnect.modules.groups.service import GroupService
from easyconnect.modules.invites.service import InviteService
from easyconnect.state.store import StateContainer
import asyncio
import logging

logger = logging.getLogger(__name__)


class HomeSnapshot(BaseModel):
    groups: List[GroupResponse] = []
    pending_invites: List[GroupInvite] = []
    is_loading: bool = False
    error_message: Optional[str] = None


class HomeState:
    def __init__(self, group_service: GroupService, invite_service: InviteService):
        self.group_service = group_service
        self.invite_service = invite_service
        self.container: StateContainer[HomeSnapshot] = StateContainer(HomeSnapshot())

    @property
    def snapshot(self) -> HomeSnapshot:
        return self.container.get()

    def subscribe(self, callback):
        return self.container.subscribe(callback)

    async def refresh(self, user_id: str) -> HomeSnapshot:
        """Reload groups and invites; a failure is kept as error_message"""
        self.container.update(lambda s: s.model_copy(update={"is_loading": True, "error_message": None}))
        try:
            home = await self.group_service.fetch_home(user_id)
        except HTTPException as e:
            logger.error(f"Home refresh failed for {user_id}: {e.detail}")
            return self.container.update(
                lambda s: s.model_copy(update={"is_loading": False, "error_message": str(e.detail)})
            )
        return self.container.update(lambda s: s.model_copy(update={
            "groups": home.groups,
            "pending_invites": home.pending_invites,
            "is_loading": False
        }))

    async def create_group(self, group_data: GroupCreate, user_id: str) -> Optional[str]:
        """Create a group, then reload; returns the new id or None on failure"""
        try:
            created = await asyncio.to_thread(self.group_service.create_group, group_data, user_id)
        except HTTPException as e:
            self.container.update(lambda s: s.model_copy(update={"error_message": str(e.detail)}))
            return None
        await self.refresh(user_id)
        return created.id

    async def respond_to_invite(self, group_id: str, user_id: str, accept: bool) -> None:
        try:
            await asyncio.to_thread(self.invite_service.respond_to_invite, group_id, user_id, accept)
        except HTTPException as e:
            self.container.update(lambda s: s.model_copy(update={"error_message": str(e.detail)}))
            return
        await self.refresh(user_id)

    async def delete_group(self, group_id: str, user_id: str) -> None:
        try:
            await asyncio.to_thread(self.group_service.delete_group, group_id)
        except HTTPException as e:
            self.container.update(lambda s: s.model_copy(update={"error_message": str(e.detail)}))
            return
        await self.refresh(user_id)
