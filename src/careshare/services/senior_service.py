import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from careshare.core.errors import NotFoundError
from careshare.database.models import Senior

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "email", "street_address", "city", "state", "zip_code")


def clean_email(email: Optional[str]) -> Optional[str]:
    if email and email.strip():
        return email.strip()
    return None


class SeniorService:
    """Senior records keyed by normalized phone number"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, senior_id: int) -> Senior:
        senior = self.db.get(Senior, senior_id)
        if not senior:
            raise NotFoundError("Senior not found")
        return senior

    def find_by_phone(self, phone_number: str) -> Optional[Senior]:
        return self.db.scalars(select(Senior).where(Senior.phone_number == phone_number)).first()

    def list_all(self) -> List[Senior]:
        return list(self.db.scalars(select(Senior).order_by(Senior.id.desc())))

    def create(self, phone_number: str, **profile) -> Senior:
        values = {field: profile.get(field) for field in PROFILE_FIELDS}
        values["email"] = clean_email(values["email"])
        senior = Senior(phone_number=phone_number, is_active=True, **values)
        self.db.add(senior)
        self.db.flush()
        logger.info(f"Created senior {senior.id} for {phone_number}")
        return senior

    def upsert_by_phone(self, phone_number: str, **profile) -> Tuple[Senior, bool]:
        """
        Create the senior for this phone or fill in the supplied fields.

        Fields left empty in the request keep their stored value. Returns the
        senior and whether it was newly created.
        """
        senior = self.find_by_phone(phone_number)
        if senior is None:
            senior = self.create(phone_number, **profile)
            self.db.commit()
            return senior, True

        updates = {field: profile.get(field) for field in PROFILE_FIELDS}
        updates["email"] = clean_email(updates["email"])
        for field, value in updates.items():
            if value is not None:
                setattr(senior, field, value)
        self.db.commit()
        logger.info(f"Updated senior {senior.id} for {phone_number}")
        return senior, False
