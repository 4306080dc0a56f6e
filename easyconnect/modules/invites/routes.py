from fastapi import APIRouter, Depends
from easyconnect.database.supabase_client import get_supabase
from easyconnect.modules.invites.schemas import InviteRequest, InviteResult, InviteResponse
from easyconnect.modules.invites.service import InviteService
from easyconnect.modules.groups.schemas import GroupInvite
from easyconnect.core.dependencies import get_current_user_id, check_group_admin
from supabase import Client
from typing import List

router = APIRouter(tags=["invites"])


def get_invite_service(supabase: Client = Depends(get_supabase)) -> InviteService:
    return InviteService(supabase)


@router.get("/invites", response_model=List[GroupInvite])
async def list_pending_invites(
    user_id: str = Depends(get_current_user_id),
    service: InviteService = Depends(get_invite_service)
):
    """Pending invitations of the current user"""
    return service.fetch_pending_invites(user_id)


@router.post("/groups/{group_id}/invites", response_model=List[InviteResult], status_code=201)
async def invite_members(
    group_id: str,
    invite_data: InviteRequest,
    admin_id: str = Depends(check_group_admin),
    service: InviteService = Depends(get_invite_service)
):
    """Invite users by email (group admin only)"""
    return service.invite_members(group_id, invite_data.emails)


@router.post("/invites/{group_id}/respond")
async def respond_to_invite(
    group_id: str,
    response: InviteResponse,
    user_id: str = Depends(get_current_user_id),
    service: InviteService = Depends(get_invite_service)
):
    """Accept or decline an invitation"""
    status = service.respond_to_invite(group_id, user_id, response.accept)
    return {"group_id": group_id, "status": status}


@router.post("/groups/{group_id}/invites/{user_id}/resend")
async def resend_invite(
    group_id: str,
    user_id: str,
    admin_id: str = Depends(check_group_admin),
    service: InviteService = Depends(get_invite_service)
):
    """Resend an invitation to an invited or declined member (group admin only)"""
    service.resend_invite(group_id, user_id)
    return {"message": "Invite resent"}
