from fastapi import APIRouter, Depends
from easyconnect.database.supabase_client import get_supabase
from easyconnect.modules.group_types.schemas import GroupType
from easyconnect.modules.group_types.service import GroupTypeService
from easyconnect.core.dependencies import get_current_user_id
from supabase import Client
from typing import List

router = APIRouter(prefix="/group-types", tags=["group-types"])


def get_group_type_service(supabase: Client = Depends(get_supabase)) -> GroupTypeService:
    return GroupTypeService(supabase)


@router.get("", response_model=List[GroupType])
async def list_group_types(
    user_id: str = Depends(get_current_user_id),
    service: GroupTypeService = Depends(get_group_type_service)
):
    """List the group types offered when creating a group"""
    return service.list_group_types()
