"""
Request bodies for the voice agent tool surface.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from careshare.config.call_modes import CallMode
from careshare.database.models import SkillName

LoggedOutcome = Literal["ACCEPTED", "DECLINED", "NO_ANSWER", "VOICEMAIL"]


class FindAndParseRequest(BaseModel):
    caller_phone_number: str
    request_details: str


class ListVolunteersRequest(BaseModel):
    skill: Optional[SkillName] = None
    zip: Optional[str] = None
    radius: Optional[int] = Field(default=None, gt=0, le=200)


class UpsertSeniorRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    phone_number: str
    email: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class StartInboundConversationRequest(BaseModel):
    caller_phone_number: str
    request_details: str
    create_if_missing: Optional[bool] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    zip: Optional[str] = None
    radius: Optional[int] = Field(default=None, gt=0, le=200)

    @property
    def wants_new_senior(self) -> bool:
        return bool(self.create_if_missing or self.first_name or self.last_name or self.zip_code)


class LogVolunteerCallRequest(BaseModel):
    conversation_id: int
    volunteer_id: int
    outcome: LoggedOutcome
    notes: Optional[str] = None


class FinalizeConversationRequest(BaseModel):
    conversation_id: int
    chosen_volunteer_id: int
    appointment_datetime: datetime
    location: Optional[str] = None
    notes_for_volunteer: Optional[str] = None
    senior_id: Optional[int] = None


class OutboundCallTestRequest(BaseModel):
    to_number: Optional[str] = None


class OutboundCallRequest(BaseModel):
    conversation_id: int
    volunteer_id: int
    to_number: Optional[str] = None


class OutboundSeniorCallbackRequest(BaseModel):
    conversation_id: int
    senior_id: Optional[int] = None
    to_number: Optional[str] = None


class PersonalizationRequest(BaseModel):
    caller_id: str
    agent_id: str
    called_number: str
    call_sid: str
    mode: Optional[CallMode] = None
    conversation_id: Optional[int] = None
    volunteer_id: Optional[int] = None


class LogCallOutcomeRequest(BaseModel):
    senior_id: int
    volunteer_id: int
    outcome: LoggedOutcome
    notes: Optional[str] = None


class ScheduleAppointmentRequest(BaseModel):
    senior_id: int
    volunteer_id: int
    appointment_datetime: datetime
    notes_for_volunteer: Optional[str] = None
    location: Optional[str] = None


class ConfirmAppointmentRequest(BaseModel):
    appointment_id: int
