from enum import StrEnum
from pydantic import BaseModel, EmailStr, field_validator
from typing import List
from easyconnect.modules.groups.schemas import GroupInvite


class InviteStatus(StrEnum):
    INVITED = "invited"
    NEEDS_SYSTEM_INVITE = "needs_system_invite"


class InviteRequest(BaseModel):
    emails: List[EmailStr]

    @field_validator("emails")
    @classmethod
    def normalize_emails(cls, value: List[str]) -> List[str]:
        """Trim, lower-case and de-duplicate, keeping first-seen order"""
        normalized = []
        for email in value:
            email = email.strip().lower()
            if email not in normalized:
                normalized.append(email)
        if not normalized:
            raise ValueError("Select at least one email to invite")
        return normalized


class InviteResult(BaseModel):
    email: str
    status: InviteStatus


class InviteResponse(BaseModel):
    accept: bool


class PendingInviteRow(BaseModel):
    """`group_members` row with its group embedded (groups!inner)"""
    groups: GroupInvite
