from easyconnect.modules.contacts.schemas import DeviceContact
from easyconnect.modules.members.schemas import Member, MemberSource, unique_members
from typing import List, Optional
import uuid
import logging

logger = logging.getLogger(__name__)


class ContactService:
    """Turns address-book entries and typed-in emails into invite candidates"""

    def candidate_from_contact(self, contact: DeviceContact) -> Optional[Member]:
        emails = [e.strip() for e in contact.email_addresses if e and e.strip()]
        if not emails:
            return None
        return Member(
            id=contact.identifier,
            email=emails[0],
            name=f"{contact.given_name} {contact.family_name}".strip(),
            source=MemberSource.CONTACTS
        )

    def candidates_from_contacts(self, contacts: List[DeviceContact]) -> List[Member]:
        """One candidate per contact with an email, unique by contact id"""
        candidates = [self.candidate_from_contact(contact) for contact in contacts]
        members = unique_members([c for c in candidates if c is not None])
        logger.debug(f"{len(members)} of {len(contacts)} contacts have an email")
        return members

    def manual_candidate(self, email: str, name: Optional[str] = None) -> Member:
        email = email.strip()
        return Member(
            id=str(uuid.uuid4()),
            email=email,
            name=(name or "").strip() or email,
            source=MemberSource.MANUAL,
            is_selected=True
        )
