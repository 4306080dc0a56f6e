from fastapi import APIRouter, Depends
from easyconnect.database.supabase_client import get_supabase
from easyconnect.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupCreated, GroupRow, GroupResponse,
    HomeResponse, JoinResponse, DiscoverSort, JoinMethod
)
from easyconnect.modules.groups.service import GroupService
from easyconnect.core.dependencies import get_current_user_id, check_group_admin
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.post("", response_model=GroupCreated, status_code=201)
async def create_group(
    group_data: GroupCreate,
    user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group; the creator becomes its admin"""
    return service.create_group(group_data, user_id)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """List groups the user has joined"""
    return service.fetch_user_groups(user_id)


@router.get("/home", response_model=HomeResponse)
async def home(
    user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Joined groups and pending invites in one round trip"""
    return await service.fetch_home(user_id)


@router.get("/discover", response_model=List[GroupResponse])
async def discover_groups(
    join_method: Optional[JoinMethod] = None,
    sort_by: DiscoverSort = DiscoverSort.CREATED_AT,
    descending: bool = True,
    recent_activity: bool = False,
    user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Public groups the user is not part of yet"""
    return service.discover_groups(
        user_id,
        join_method=join_method,
        sort_by=sort_by,
        descending=descending,
        recent_activity=recent_activity
    )


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Get group by ID with the caller's membership"""
    return service.fetch_group(group_id, user_id)


@router.put("/{group_id}", response_model=GroupRow)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    user_id: str = Depends(check_group_admin),
    service: GroupService = Depends(get_group_service)
):
    """Update group (group admin only)"""
    return service.update_group(group_id, group_data)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    user_id: str = Depends(check_group_admin),
    service: GroupService = Depends(get_group_service)
):
    """Delete group with its members and activities (group admin only)"""
    service.delete_group(group_id)
    return None


@router.post("/{group_id}/join", response_model=JoinResponse, status_code=201)
async def join_group(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Join a public group, or request to join one that needs approval"""
    return service.request_to_join(group_id, user_id)
