import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from careshare.core.errors import NotFoundError
from careshare.database.models import Skill, Volunteer, volunteer_skills
from careshare.schemas.records import VolunteerMatch
from careshare.services.zip_service import ZipRadiusService

logger = logging.getLogger(__name__)


class VolunteerService:
    """Volunteer lookups by skill and zip radius"""

    def __init__(self, db: Session, zip_radius: ZipRadiusService):
        self.db = db
        self.zip_radius = zip_radius

    def get(self, volunteer_id: int) -> Volunteer:
        volunteer = self.db.get(Volunteer, volunteer_id)
        if not volunteer:
            raise NotFoundError("Volunteer not found")
        return volunteer

    def list_all(self) -> List[Volunteer]:
        return list(self.db.scalars(select(Volunteer).order_by(Volunteer.id.desc())))

    def nearby_zips(self, zip_code: Optional[str], radius: float) -> Optional[List[str]]:
        if not zip_code:
            return None
        return self.zip_radius.radius(zip_code, radius)

    def search(
        self,
        skill: Optional[str] = None,
        zips: Optional[Sequence[str]] = None
    ) -> List[VolunteerMatch]:
        """Active volunteers, optionally restricted to a skill and a set of zips"""
        query = select(Volunteer).where(Volunteer.is_active.is_(True))

        if skill:
            with_skill = (
                select(volunteer_skills.c.volunteer_id)
                .join(Skill, Skill.id == volunteer_skills.c.skill_id)
                .where(Skill.name == skill)
            )
            query = query.where(Volunteer.id.in_(with_skill))

        # An empty zip set means no zip filter
        if zips:
            query = query.where(Volunteer.zip_code.in_(list(zips)))

        query = query.order_by(Volunteer.id.desc())
        volunteers = self.db.scalars(query).all()
        logger.info(f"Volunteer search skill={skill} zips={len(zips) if zips else 0} -> {len(volunteers)} found")
        return [VolunteerMatch.from_volunteer(v) for v in volunteers]

    def search_near(self, skill: Optional[str], zip_code: Optional[str], radius: float) -> List[VolunteerMatch]:
        return self.search(skill=skill, zips=self.nearby_zips(zip_code, radius))

    def search_with_expansion(
        self,
        skill: Optional[str],
        zip_code: Optional[str],
        radius: int,
        expansion_steps: Iterable[int] = (5, 10, 15)
    ) -> List[VolunteerMatch]:
        """
        Search used by the inbound flow.

        Tries the matched skill within the radius, then within each widened
        radius, and finally falls back to any active volunteer within the
        original radius (or anywhere when no zip is known).
        """
        zips = self.nearby_zips(zip_code, radius)
        volunteers: List[VolunteerMatch] = []

        if skill:
            volunteers = self.search(skill=skill, zips=zips)

            if not volunteers and zip_code:
                for extra in expansion_steps:
                    widened = self.zip_radius.radius(zip_code, radius + extra)
                    volunteers = self.search(skill=skill, zips=widened)
                    if volunteers:
                        logger.info(f"Found {len(volunteers)} {skill} volunteers after widening radius to {radius + extra}")
                        break

        if not skill or not volunteers:
            volunteers = self.search(zips=zips)

        return volunteers
