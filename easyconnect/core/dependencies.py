"""
Core dependencies for route protection and group permission checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from easyconnect.database.supabase_client import get_supabase
from easyconnect.modules.auth.schemas import AuthUser
from easyconnect.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthUser:
    """Resolve the authenticated user from the bearer token"""
    return auth_service.get_current_user(credentials.credentials)


def get_current_user_id(current_user: AuthUser = Depends(get_current_user)) -> str:
    return current_user.id


def get_membership(group_id: str, user_id: str, supabase: Client) -> Optional[Dict[str, Any]]:
    """Return the user's membership row (role, status) for a group, if any"""
    result = supabase.table("group_members")\
        .select("role, status")\
        .eq("group_id", group_id)\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    return result.data[0] if result.data else None


def is_group_admin(group_id: str, user_id: str, supabase: Client) -> bool:
    membership = get_membership(group_id, user_id, supabase)
    return bool(membership) and membership.get("role") == "admin" and membership.get("status") == "joined"


def check_group_admin(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> str:
    """Check that the user is a joined admin of the group"""
    if is_group_admin(group_id, user_id, supabase):
        return user_id

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a group admin to perform this action"
    )


def check_group_member(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> str:
    """Check that the user has joined the group"""
    membership = get_membership(group_id, user_id, supabase)
    if membership and membership.get("status") == "joined":
        return user_id

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a member of this group"
    )


def check_admin_or_self(group_id: str, target_user_id: str, user_id: str, supabase: Client) -> str:
    """Admins may act on any member; everyone else only on themself"""
    if target_user_id == user_id or is_group_admin(group_id, user_id, supabase):
        return user_id

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only a group admin can remove other members"
    )
