from enum import StrEnum
from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime


class GroupVisibility(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class JoinMethod(StrEnum):
    DIRECT = "direct"
    INVITATION = "invitation"


class MemberRole(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"


class MemberStatus(StrEnum):
    INVITED = "invited"
    JOINED = "joined"
    DECLINED = "declined"
    REQUESTED = "requested"


class GroupCreate(BaseModel):
    name: str
    description: Optional[str] = None
    visibility: GroupVisibility = GroupVisibility.PRIVATE
    join_method: JoinMethod = JoinMethod.INVITATION
    group_type_id: int

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a group name")
        return value

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    visibility: Optional[GroupVisibility] = None
    join_method: Optional[JoinMethod] = None
    group_type_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Group name cannot be empty")
        return value.strip() if value is not None else None


class GroupCreated(BaseModel):
    id: str


class GroupRow(BaseModel):
    """A `groups` row as stored"""
    id: str
    name: str
    description: Optional[str] = None
    visibility: GroupVisibility = GroupVisibility.PRIVATE
    join_method: JoinMethod = JoinMethod.INVITATION
    group_type_id: Optional[int] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    @field_validator("visibility", "join_method", mode="before")
    @classmethod
    def missing_enum_uses_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class GroupResponse(GroupRow):
    """A group as seen by one user: their membership plus derived counts"""
    role: Optional[MemberRole] = None
    status: Optional[MemberStatus] = None
    member_count: int = 0
    activity_count: int = 0

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN


class GroupInvite(BaseModel):
    """A pending invitation of the current user to a group"""
    id: str
    name: str
    description: Optional[str] = None
    visibility: GroupVisibility = GroupVisibility.PRIVATE
    join_method: JoinMethod = JoinMethod.INVITATION
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


class HomeResponse(BaseModel):
    groups: List[GroupResponse]
    pending_invites: List[GroupInvite]


class JoinResponse(BaseModel):
    group_id: str
    status: MemberStatus


class DiscoverSort(StrEnum):
    CREATED_AT = "created_at"
    MEMBER_COUNT = "member_count"
    ACTIVITY_COUNT = "activity_count"


class MembershipWithGroup(BaseModel):
    """`group_members` row with its group embedded (groups!inner)"""
    role: MemberRole
    status: MemberStatus
    groups: GroupRow
