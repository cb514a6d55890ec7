"""
Serialized shapes of stored records.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

from careshare.database.models import AppointmentStatus


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SeniorOut(Record):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VolunteerOut(Record):
    id: int
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    email: str
    bio: Optional[str] = None
    zip_code: Optional[str] = None
    background_check_status: str
    is_active: bool
    created_at: Optional[datetime] = None


class VolunteerMatch(Record):
    """A volunteer as returned by search tools and stored in conversation snapshots"""
    id: int
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    zip_code: Optional[str] = None
    skills: List[str] = []

    @classmethod
    def from_volunteer(cls, volunteer) -> "VolunteerMatch":
        return cls(
            id=volunteer.id,
            first_name=volunteer.first_name,
            last_name=volunteer.last_name,
            phone_number=volunteer.phone_number,
            zip_code=volunteer.zip_code,
            skills=volunteer.skill_names,
        )


class AcceptedVolunteer(BaseModel):
    volunteer_id: int
    first_name: str
    last_name: str
    phone_number: Optional[str] = None


class AppointmentOut(Record):
    id: int
    senior_id: int
    volunteer_id: Optional[int] = None
    appointment_datetime: datetime
    duration_minutes: Optional[int] = None
    location: Optional[str] = None
    status: AppointmentStatus
    notes_for_volunteer: Optional[str] = None
    feedback_from_senior: Optional[str] = None
    feedback_from_volunteer: Optional[str] = None
    created_at: Optional[datetime] = None


class AppointmentWithNames(AppointmentOut):
    senior_first_name: Optional[str] = None
    senior_last_name: Optional[str] = None
    volunteer_first_name: Optional[str] = None
    volunteer_last_name: Optional[str] = None

    @classmethod
    def from_appointment(cls, appointment, include_senior: bool = True, include_volunteer: bool = True):
        data = AppointmentOut.model_validate(appointment).model_dump()
        if include_senior and appointment.senior is not None:
            data["senior_first_name"] = appointment.senior.first_name
            data["senior_last_name"] = appointment.senior.last_name
        if include_volunteer and appointment.volunteer is not None:
            data["volunteer_first_name"] = appointment.volunteer.first_name
            data["volunteer_last_name"] = appointment.volunteer.last_name
        return cls(**data)


class ConversationOut(Record):
    id: int
    senior_id: Optional[int] = None
    caller_phone_number: str
    request_details: str
    matched_skill: Optional[str] = None
    nearby_volunteers: List[Any] = []
    status: str
    scheduled_appointment_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConversationCallOut(Record):
    id: int
    conversation_id: int
    volunteer_id: Optional[int] = None
    outcome: str
    notes: Optional[str] = None
    call_sid: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class CallAttemptOut(Record):
    id: int
    senior_id: int
    volunteer_id: int
    outcome: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class StatsOut(BaseModel):
    totalSeniors: int
    activeVolunteers: int
    upcomingAppointments: int
    completedThisMonth: int
