from supabase import Client
from easyconnect.modules.members.schemas import (
    Member, MemberSource, Profile, GroupMember, GroupMemberRow,
    CoMemberRow, MembershipRow, JoinRequest, JoinRequestRow, unique_members
)
from easyconnect.modules.groups.schemas import MemberRole, MemberStatus
from easyconnect.core.serialization import decode_rows
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class MemberService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_members(self, group_id: str, status: Optional[MemberStatus] = None) -> List[GroupMember]:
        """Membership rows of a group, optionally only those with one status"""
        try:
            query = self.supabase.table("group_members")\
                .select("user_id, role, status, profiles!inner(email, username)")\
                .eq("group_id", group_id)
            if status:
                query = query.eq("status", status.value)
            result = query.execute()

            return [
                GroupMember(
                    user_id=row.user_id,
                    email=row.profiles.email,
                    name=row.profiles.username or row.profiles.email,
                    role=row.role,
                    status=row.status
                )
                for row in decode_rows(GroupMemberRow, result.data)
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing members of group {group_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def add_members(self, group_id: str, user_ids: List[str]) -> List[MembershipRow]:
        """Add already-known users straight in as joined members"""
        try:
            result = self.supabase.table("group_members").insert([
                {
                    "group_id": group_id,
                    "user_id": user_id,
                    "role": MemberRole.MEMBER.value,
                    "status": MemberStatus.JOINED.value
                }
                for user_id in user_ids
            ]).execute()

            logger.info(f"Added {len(user_ids)} members to group {group_id}")
            return decode_rows(MembershipRow, result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding members to group {group_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, group_id: str, user_id: str) -> None:
        try:
            result = self.supabase.table("group_members")\
                .delete()\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Member not found")

            logger.info(f"Removed {user_id} from group {group_id}")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def respond_to_join_request(self, group_id: str, user_id: str, approve: bool) -> MemberStatus:
        """Approve or decline a pending join request"""
        status = MemberStatus.JOINED if approve else MemberStatus.DECLINED
        try:
            result = self.supabase.table("group_members")\
                .update({"status": status.value})\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .eq("status", MemberStatus.REQUESTED.value)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Join request not found")

            logger.info(f"Join request of {user_id} for group {group_id}: {status}")
            return status
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def fetch_existing_members(self, user_id: str) -> List[Member]:
        """People the user already shares a joined group with"""
        try:
            my_groups = self.supabase.table("group_members")\
                .select("group_id")\
                .eq("user_id", user_id)\
                .eq("status", MemberStatus.JOINED.value)\
                .execute()
            group_ids = list(dict.fromkeys(row["group_id"] for row in (my_groups.data or [])))
            if not group_ids:
                return []

            result = self.supabase.table("group_members")\
                .select("user_id, profiles!inner(id, email, username)")\
                .in_("group_id", group_ids)\
                .eq("status", MemberStatus.JOINED.value)\
                .neq("user_id", user_id)\
                .execute()

            return unique_members([
                Member(
                    id=row.user_id,
                    email=row.profiles.email,
                    name=row.profiles.display_name,
                    source=MemberSource.EXISTING_GROUP
                )
                for row in decode_rows(CoMemberRow, result.data)
            ])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching existing members for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def fetch_all_users(self, user_id: str) -> List[Member]:
        """Every registered profile except the user's own"""
        try:
            result = self.supabase.table("profiles")\
                .select("id, email, username")\
                .neq("id", user_id)\
                .order("email")\
                .execute()

            return [
                Member(
                    id=profile.id,
                    email=profile.email,
                    name=profile.display_name,
                    source=MemberSource.EXISTING_GROUP
                )
                for profile in decode_rows(Profile, result.data)
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def fetch_join_requests(self, user_id: str) -> List[JoinRequest]:
        """The user's own join requests still waiting for an admin, newest first"""
        try:
            result = self.supabase.table("group_members")\
                .select("created_at, status, groups!inner(id, name, description, visibility, join_method, created_at, created_by)")\
                .eq("user_id", user_id)\
                .eq("status", MemberStatus.REQUESTED.value)\
                .order("created_at", desc=True)\
                .execute()

            return [
                JoinRequest(group=row.groups, status=row.status, requested_at=row.created_at)
                for row in decode_rows(JoinRequestRow, result.data)
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching join requests for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
