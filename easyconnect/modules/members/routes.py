from fastapi import APIRouter, Depends
from easyconnect.database.supabase_client import get_supabase
from easyconnect.modules.members.schemas import (
    Member, GroupMember, MembersAdd, MembershipRow, JoinRequest, JoinRequestResponse
)
from easyconnect.modules.groups.schemas import MemberStatus
from easyconnect.modules.members.service import MemberService
from easyconnect.core.dependencies import (
    get_current_user_id, check_group_admin, check_group_member, check_admin_or_self
)
from supabase import Client
from typing import List, Optional

router = APIRouter(tags=["members"])


def get_member_service(supabase: Client = Depends(get_supabase)) -> MemberService:
    return MemberService(supabase)


@router.get("/groups/{group_id}/members", response_model=List[GroupMember])
async def list_members(
    group_id: str,
    status: Optional[MemberStatus] = None,
    member_id: str = Depends(check_group_member),
    service: MemberService = Depends(get_member_service)
):
    """List group members, e.g. status=requested for pending requests (group members only)"""
    return service.list_members(group_id, status=status)


@router.post("/groups/{group_id}/members", response_model=List[MembershipRow], status_code=201)
async def add_members(
    group_id: str,
    members: MembersAdd,
    admin_id: str = Depends(check_group_admin),
    service: MemberService = Depends(get_member_service)
):
    """Add known users as joined members (group admin only)"""
    return service.add_members(group_id, members.user_ids)


@router.delete("/groups/{group_id}/members/{user_id}", status_code=204)
async def remove_member(
    group_id: str,
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove a member (group admin), or leave the group (self)"""
    check_admin_or_self(group_id, user_id, current_user_id, supabase)
    service.remove_member(group_id, user_id)
    return None


@router.post("/groups/{group_id}/requests/{user_id}")
async def respond_to_join_request(
    group_id: str,
    user_id: str,
    response: JoinRequestResponse,
    admin_id: str = Depends(check_group_admin),
    service: MemberService = Depends(get_member_service)
):
    """Approve or decline a join request (group admin only)"""
    status = service.respond_to_join_request(group_id, user_id, response.approve)
    return {"group_id": group_id, "user_id": user_id, "status": status}


@router.get("/members/existing", response_model=List[Member])
async def existing_members(
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
):
    """People the current user shares a group with"""
    return service.fetch_existing_members(user_id)


@router.get("/members/directory", response_model=List[Member])
async def member_directory(
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
):
    """All other registered users"""
    return service.fetch_all_users(user_id)


@router.get("/members/requests", response_model=List[JoinRequest])
async def my_join_requests(
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
):
    """The current user's pending join requests"""
    return service.fetch_join_requests(user_id)
