from supabase import Client
from easyconnect.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupCreated, GroupRow, GroupResponse,
    HomeResponse, JoinResponse, MembershipWithGroup, DiscoverSort,
    GroupVisibility, JoinMethod, MemberRole, MemberStatus
)
from easyconnect.modules.invites.service import InviteService
from easyconnect.core.serialization import decode_row, decode_rows, utc_now_iso
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
import asyncio
import logging

logger = logging.getLogger(__name__)

GROUP_COLUMNS = "id, name, description, visibility, join_method, group_type_id, created_at, created_by"
RECENT_ACTIVITY_DAYS = 30


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_group(self, group_data: GroupCreate, user_id: str) -> GroupCreated:
        """Create a group and make its creator the admin"""
        try:
            result = self.supabase.table("groups").insert({
                "name": group_data.name,
                "description": group_data.description,
                "visibility": group_data.visibility.value,
                "join_method": group_data.join_method.value,
                "group_type_id": group_data.group_type_id,
                "created_by": user_id,
                "created_at": utc_now_iso()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to get group ID")

            group_id = result.data[0]["id"]

            # No compensation: a failure here leaves the group without an admin
            self.supabase.table("group_members").insert({
                "group_id": group_id,
                "user_id": user_id,
                "role": MemberRole.ADMIN.value,
                "status": MemberStatus.JOINED.value
            }).execute()

            logger.info(f"Group {group_id} created by {user_id}")
            return GroupCreated(id=group_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating group: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_group_row(self, group_id: str) -> GroupRow:
        """Get the raw group row by ID"""
        try:
            result = self.supabase.table("groups")\
                .select(GROUP_COLUMNS)\
                .eq("id", group_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Group not found")

            return decode_row(GroupRow, result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def fetch_group(self, group_id: str, viewer_id: str) -> GroupResponse:
        """Get a group with the viewer's membership and member count"""
        group = self.get_group_row(group_id)
        try:
            membership = self.supabase.table("group_members")\
                .select("role, status")\
                .eq("group_id", group_id)\
                .eq("user_id", viewer_id)\
                .limit(1)\
                .execute()
            row = membership.data[0] if membership.data else {}

            return GroupResponse(
                **group.model_dump(),
                role=row.get("role"),
                status=row.get("status"),
                member_count=self.count_members(group_id),
                activity_count=self.count_activities(group_id)
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_group(self, group_id: str, group_data: GroupUpdate) -> GroupRow:
        """Update group"""
        try:
            update_data = group_data.model_dump(exclude_none=True, mode="json")
            if not update_data:
                return self.get_group_row(group_id)

            result = self.supabase.table("groups")\
                .update(update_data)\
                .eq("id", group_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Group not found")

            return decode_row(GroupRow, result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_group(self, group_id: str) -> None:
        """Delete group members, then activities, then the group itself"""
        try:
            self.supabase.table("group_members")\
                .delete()\
                .eq("group_id", group_id)\
                .execute()

            self.supabase.table("activities")\
                .delete()\
                .eq("group_id", group_id)\
                .execute()

            self.supabase.table("groups")\
                .delete()\
                .eq("id", group_id)\
                .execute()

            logger.info(f"Group {group_id} deleted")
        except Exception as e:
            logger.error(f"Error deleting group {group_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def count_members(self, group_id: str) -> int:
        """Number of joined members of a group"""
        result = self.supabase.table("group_members")\
            .select("user_id", count="exact", head=True)\
            .eq("group_id", group_id)\
            .eq("status", MemberStatus.JOINED.value)\
            .execute()
        return result.count or 0

    def count_activities(self, group_id: str) -> int:
        result = self.supabase.table("activities")\
            .select("id", count="exact", head=True)\
            .eq("group_id", group_id)\
            .execute()
        return result.count or 0

    def fetch_user_groups(self, user_id: str) -> List[GroupResponse]:
        """Groups the user has joined, with their role and per-group counts"""
        try:
            result = self.supabase.table("group_members")\
                .select(f"role, status, groups!inner({GROUP_COLUMNS})")\
                .eq("user_id", user_id)\
                .eq("status", MemberStatus.JOINED.value)\
                .execute()

            memberships = decode_rows(MembershipWithGroup, result.data)
            return [
                GroupResponse(
                    **membership.groups.model_dump(),
                    role=membership.role,
                    status=membership.status,
                    member_count=self.count_members(membership.groups.id),
                    activity_count=self.count_activities(membership.groups.id)
                )
                for membership in memberships
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching groups for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    async def fetch_home(self, user_id: str) -> HomeResponse:
        """Fetch joined groups and pending invites concurrently"""
        invite_service = InviteService(self.supabase)
        groups, invites = await asyncio.gather(
            asyncio.to_thread(self.fetch_user_groups, user_id),
            asyncio.to_thread(invite_service.fetch_pending_invites, user_id)
        )
        return HomeResponse(groups=groups, pending_invites=invites)

    def discover_groups(
        self,
        user_id: str,
        join_method: Optional[JoinMethod] = None,
        sort_by: DiscoverSort = DiscoverSort.CREATED_AT,
        descending: bool = True,
        recent_activity: bool = False
    ) -> List[GroupResponse]:
        """Public groups the user has no membership in; recent_activity keeps groups active in the last 30 days"""
        try:
            memberships = self.supabase.table("group_members")\
                .select("group_id")\
                .eq("user_id", user_id)\
                .execute()
            known_ids = {m["group_id"] for m in (memberships.data or [])}

            query = self.supabase.table("groups")\
                .select(GROUP_COLUMNS)\
                .eq("visibility", GroupVisibility.PUBLIC.value)
            if join_method:
                query = query.eq("join_method", join_method.value)
            result = query.execute()

            if recent_activity:
                cutoff = (datetime.now(timezone.utc) - timedelta(days=RECENT_ACTIVITY_DAYS)).isoformat()
                active = self.supabase.table("activities")\
                    .select("group_id")\
                    .gte("created_at", cutoff)\
                    .execute()
                active_ids = {a["group_id"] for a in (active.data or [])}
            else:
                active_ids = None

            groups = [
                GroupResponse(
                    **group.model_dump(),
                    member_count=self.count_members(group.id),
                    activity_count=self.count_activities(group.id)
                )
                for group in decode_rows(GroupRow, result.data)
                if group.id not in known_ids and (active_ids is None or group.id in active_ids)
            ]

            def sort_key(group: GroupResponse):
                value = getattr(group, sort_by.value)
                return (value is not None, value)

            groups.sort(key=sort_key, reverse=descending)
            return groups
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def request_to_join(self, group_id: str, user_id: str) -> JoinResponse:
        """Join a public group directly, or ask to join one that needs approval"""
        group = self.get_group_row(group_id)
        if group.visibility != GroupVisibility.PUBLIC:
            raise HTTPException(status_code=403, detail="This group is private")

        try:
            existing = self.supabase.table("group_members")\
                .select("status")\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()

            if existing.data:
                raise HTTPException(
                    status_code=400,
                    detail=f"Membership already exists with status '{existing.data[0]['status']}'"
                )

            status = MemberStatus.JOINED if group.join_method == JoinMethod.DIRECT else MemberStatus.REQUESTED
            self.supabase.table("group_members").insert({
                "group_id": group_id,
                "user_id": user_id,
                "role": MemberRole.MEMBER.value,
                "status": status.value,
                "created_at": utc_now_iso()
            }).execute()

            logger.info(f"User {user_id} join request for group {group_id}: {status}")
            return JoinResponse(group_id=group_id, status=status)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
