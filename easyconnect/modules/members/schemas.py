from enum import StrEnum
from pydantic import BaseModel, field_validator
from typing import Optional, List
from easyconnect.modules.groups.schemas import GroupInvite, MemberRole, MemberStatus
from datetime import datetime


class MemberSource(StrEnum):
    EXISTING_GROUP = "existing_group"
    CONTACTS = "contacts"
    MANUAL = "manual"


class Member(BaseModel):
    """
    A candidate the admin can pick when inviting or adding people.

    Two candidates are the same person when their ids match, whatever the
    source they came from.
    """
    id: str
    email: str
    name: str
    source: MemberSource
    is_selected: bool = False

    def __eq__(self, other):
        if not isinstance(other, Member):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


def unique_members(members: List[Member]) -> List[Member]:
    """Drop repeated ids, keeping the first occurrence"""
    seen = set()
    unique = []
    for member in members:
        if member.id not in seen:
            seen.add(member.id)
            unique.append(member)
    return unique


class Profile(BaseModel):
    id: str
    email: str
    username: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.username or self.email


class ProfileRef(BaseModel):
    email: str
    username: Optional[str] = None


class GroupMemberRow(BaseModel):
    """`group_members` row with its profile embedded (profiles!inner)"""
    user_id: str
    role: MemberRole
    status: MemberStatus
    profiles: ProfileRef


class CoMemberRow(BaseModel):
    user_id: str
    profiles: Profile


class GroupMember(BaseModel):
    user_id: str
    email: str
    name: str
    role: MemberRole
    status: MemberStatus

    class Config:
        from_attributes = True


class MembershipRow(BaseModel):
    group_id: str
    user_id: str
    role: MemberRole
    status: MemberStatus


class MembersAdd(BaseModel):
    user_ids: List[str]

    @field_validator("user_ids")
    @classmethod
    def at_least_one(cls, value: List[str]) -> List[str]:
        unique = list(dict.fromkeys(v for v in value if v))
        if not unique:
            raise ValueError("Select at least one member")
        return unique


class JoinRequestResponse(BaseModel):
    approve: bool


class JoinRequestRow(BaseModel):
    """`group_members` row with status=requested and its group embedded"""
    created_at: Optional[datetime] = None
    status: MemberStatus
    groups: GroupInvite


class JoinRequest(BaseModel):
    group: GroupInvite
    status: MemberStatus
    requested_at: Optional[datetime] = None
