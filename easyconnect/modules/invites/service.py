from supabase import Client
from easyconnect.modules.invites.schemas import InviteStatus, InviteResult, PendingInviteRow
from easyconnect.modules.groups.schemas import GroupInvite, MemberRole, MemberStatus
from easyconnect.core.serialization import decode_rows
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

INVITE_COLUMNS = "id, name, description, visibility, join_method, created_at, created_by"


class InviteService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def invite_members(self, group_id: str, emails: List[str]) -> List[InviteResult]:
        """
        Invite users by email.

        Emails that belong to a profile get an invited membership row; the rest
        are reported back as needing an invitation to the app itself.
        """
        try:
            # Stored emails keep the case they were typed with; ilike matches any case.
            # `_` in an address is a wildcard here, the exact lookup below discards extra rows.
            profiles = self.supabase.table("profiles")\
                .select("id, email")\
                .or_(",".join(f'email.ilike."{email}"' for email in emails))\
                .execute()
            profile_ids = {
                (p.get("email") or "").lower(): p["id"]
                for p in (profiles.data or [])
            }

            rows = [
                {
                    "group_id": group_id,
                    "user_id": profile_ids[email],
                    "role": MemberRole.MEMBER.value,
                    "status": MemberStatus.INVITED.value
                }
                for email in emails if email in profile_ids
            ]
            if rows:
                self.supabase.table("group_members").insert(rows).execute()

            logger.info(f"Invited {len(rows)} of {len(emails)} emails to group {group_id}")
            return [
                InviteResult(
                    email=email,
                    status=InviteStatus.INVITED if email in profile_ids else InviteStatus.NEEDS_SYSTEM_INVITE
                )
                for email in emails
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error inviting members to group {group_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def fetch_pending_invites(self, user_id: str) -> List[GroupInvite]:
        """Groups the user has been invited to and not answered yet"""
        try:
            result = self.supabase.table("group_members")\
                .select(f"groups!inner({INVITE_COLUMNS})")\
                .eq("user_id", user_id)\
                .eq("status", MemberStatus.INVITED.value)\
                .execute()

            return [row.groups for row in decode_rows(PendingInviteRow, result.data)]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching invites for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def respond_to_invite(self, group_id: str, user_id: str, accept: bool) -> MemberStatus:
        """Accept or decline a pending invitation"""
        status = MemberStatus.JOINED if accept else MemberStatus.DECLINED
        try:
            result = self.supabase.table("group_members")\
                .update({"status": status.value})\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .eq("status", MemberStatus.INVITED.value)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Invitation not found")

            logger.info(f"User {user_id} {status} group {group_id}")
            return status
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def resend_invite(self, group_id: str, user_id: str) -> None:
        """Put an invited or declined member back into the invited state"""
        try:
            result = self.supabase.table("group_members")\
                .update({"status": MemberStatus.INVITED.value})\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .in_("status", [MemberStatus.INVITED.value, MemberStatus.DECLINED.value])\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Invitation not found")

            logger.info(f"Invite to group {group_id} resent to {user_id}")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
