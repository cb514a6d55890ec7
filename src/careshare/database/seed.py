"""
Recreate the CareShare tables and load demo data.

Usage: python -m careshare.database.seed
"""
from datetime import datetime, timezone
import logging

from sqlalchemy.orm import Session

from careshare.database.config import Base, DatabaseManager
from careshare.database.models import Appointment, AppointmentStatus, Senior, Skill, SkillName, Volunteer

logger = logging.getLogger(__name__)

SENIORS = [
    {"first_name": "Arthur", "last_name": "Pendragon", "zip_code": "90210", "phone_number": "+12015551234"},
    {"first_name": "Eleanor", "last_name": "Vance", "zip_code": "10001", "phone_number": "+15558675309"},
]

VOLUNTEERS = [
    {
        "first_name": "David", "last_name": "Chen", "zip_code": "90211",
        "email": "david@example.com", "phone_number": "+19085555678",
        "skills": [SkillName.GARDENING, SkillName.COMPANIONSHIP],
    },
    {
        "first_name": "Maria", "last_name": "Garcia", "zip_code": "10002",
        "email": "maria@example.com", "phone_number": "+12125559999",
        "skills": [SkillName.DRIVING, SkillName.GROCERY_SHOPPING, SkillName.TECH_HELP],
    },
]


def seed(session: Session):
    skills = {name: Skill(name=name.value) for name in SkillName}
    session.add_all(skills.values())

    seniors = {row["first_name"]: Senior(is_active=True, **row) for row in SENIORS}
    session.add_all(seniors.values())

    for row in VOLUNTEERS:
        row = dict(row)
        skill_names = row.pop("skills")
        session.add(Volunteer(is_active=True, skills=[skills[name] for name in skill_names], **row))

    session.add(Appointment(
        senior=seniors["Arthur"],
        appointment_datetime=datetime(2025, 10, 7, 10, 0, tzinfo=timezone.utc),
        status=AppointmentStatus.REQUESTED.value,
        notes_for_volunteer="Need a ride to the community center for a social event.",
    ))


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    manager = DatabaseManager()
    manager.initialize()
    try:
        logger.info("Recreating tables and seeding database...")
        Base.metadata.drop_all(manager.engine)
        Base.metadata.create_all(manager.engine)
        with manager.get_session_context() as session:
            seed(session)
        logger.info("Database seeding complete")
    finally:
        manager.close()


if __name__ == "__main__":
    main()
