from fastapi import APIRouter, Depends
from easyconnect.modules.contacts.schemas import ContactsImport, ManualCandidate
from easyconnect.modules.contacts.service import ContactService
from easyconnect.modules.members.schemas import Member
from easyconnect.core.dependencies import get_current_user_id
from typing import List

router = APIRouter(prefix="/contacts", tags=["contacts"])


def get_contact_service() -> ContactService:
    return ContactService()


@router.post("/candidates", response_model=List[Member])
async def candidates_from_contacts(
    payload: ContactsImport,
    user_id: str = Depends(get_current_user_id),
    service: ContactService = Depends(get_contact_service)
):
    """Invite candidates from the caller's address book"""
    return service.candidates_from_contacts(payload.contacts)


@router.post("/manual", response_model=Member)
async def manual_candidate(
    payload: ManualCandidate,
    user_id: str = Depends(get_current_user_id),
    service: ContactService = Depends(get_contact_service)
):
    """Invite candidate from a typed-in email"""
    return service.manual_candidate(payload.email, payload.name)
