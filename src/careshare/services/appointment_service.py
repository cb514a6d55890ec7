import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from careshare.core.errors import NotFoundError
from careshare.database.models import Appointment, AppointmentStatus, Senior, Volunteer
from careshare.services.appointment_workflow import check_transition

logger = logging.getLogger(__name__)


class AppointmentService:
    """Appointment scheduling, status changes and listings"""

    def __init__(self, db: Session, strict_transitions: bool = False):
        self.db = db
        self.strict_transitions = strict_transitions

    def get(self, appointment_id: int) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def senior_address(self, senior_id: int) -> Optional[str]:
        senior = self.db.get(Senior, senior_id)
        if senior and senior.address_parts:
            return ", ".join(senior.address_parts)
        return None

    def schedule(
        self,
        senior_id: int,
        volunteer_id: int,
        appointment_datetime: datetime,
        location: Optional[str] = None,
        notes_for_volunteer: Optional[str] = None
    ) -> Appointment:
        """Add a Scheduled appointment; location defaults to the senior's address"""
        appointment = Appointment(
            senior_id=senior_id,
            volunteer_id=volunteer_id,
            appointment_datetime=appointment_datetime,
            location=location or self.senior_address(senior_id),
            status=AppointmentStatus.SCHEDULED.value,
            notes_for_volunteer=notes_for_volunteer,
        )
        self.db.add(appointment)
        self.db.flush()
        logger.info(f"Scheduled appointment {appointment.id} senior={senior_id} volunteer={volunteer_id}")
        return appointment

    def set_status(self, appointment_id: int, status: str) -> Appointment:
        appointment = self.get(appointment_id)
        check_transition(appointment.status, status, self.strict_transitions)
        logger.info(f"Appointment {appointment_id}: {appointment.status} -> {status}")
        appointment.status = status
        self.db.commit()
        return appointment

    def confirm(self, appointment_id: int) -> Appointment:
        return self.set_status(appointment_id, AppointmentStatus.CONFIRMED.value)

    def list_all(self) -> List[Appointment]:
        query = (
            select(Appointment)
            .options(selectinload(Appointment.senior), selectinload(Appointment.volunteer))
            .order_by(Appointment.appointment_datetime.desc())
        )
        return list(self.db.scalars(query))

    def for_senior(self, senior_id: int) -> List[Appointment]:
        query = (
            select(Appointment)
            .options(selectinload(Appointment.volunteer))
            .where(Appointment.senior_id == senior_id)
            .order_by(Appointment.appointment_datetime.desc())
        )
        return list(self.db.scalars(query))

    def for_volunteer(self, volunteer_id: int) -> List[Appointment]:
        query = (
            select(Appointment)
            .options(selectinload(Appointment.senior))
            .where(Appointment.volunteer_id == volunteer_id)
            .order_by(Appointment.appointment_datetime.desc())
        )
        return list(self.db.scalars(query))

    def stats(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        def count(query) -> int:
            return self.db.scalar(query) or 0

        return {
            "totalSeniors": count(select(func.count(Senior.id)).where(Senior.is_active.is_(True))),
            "activeVolunteers": count(select(func.count(Volunteer.id)).where(Volunteer.is_active.is_(True))),
            "upcomingAppointments": count(
                select(func.count(Appointment.id)).where(
                    Appointment.status.in_([AppointmentStatus.SCHEDULED.value, AppointmentStatus.CONFIRMED.value])
                )
            ),
            "completedThisMonth": count(
                select(func.count(Appointment.id)).where(
                    Appointment.status == AppointmentStatus.COMPLETED.value,
                    Appointment.appointment_datetime >= month_start
                )
            ),
        }
