from pydantic import BaseModel, EmailStr
from typing import Optional, List


class DeviceContact(BaseModel):
    """A contact as read from the phone's address book by the client"""
    identifier: str
    given_name: str = ""
    family_name: str = ""
    email_addresses: List[str] = []


class ContactsImport(BaseModel):
    contacts: List[DeviceContact]


class ManualCandidate(BaseModel):
    email: EmailStr
    name: Optional[str] = None
