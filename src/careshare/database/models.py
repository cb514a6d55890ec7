"""
SQLAlchemy models for CareShare tables.
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Table, Text
)
from sqlalchemy.orm import relationship

from careshare.database.config import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SkillName(str, enum.Enum):
    DRIVING = "Driving"
    GROCERY_SHOPPING = "Grocery Shopping"
    TECH_HELP = "Tech Help"
    GARDENING = "Gardening"
    COMPANIONSHIP = "Companionship"


class BackgroundCheckStatus(str, enum.Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    FAILED = "Failed"


class AppointmentStatus(str, enum.Enum):
    REQUESTED = "Requested"
    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    DECLINED = "Declined"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class ConversationStatus(str, enum.Enum):
    OPEN = "OPEN"
    SCHEDULED = "SCHEDULED"


class CallOutcome(str, enum.Enum):
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    NO_ANSWER = "NO_ANSWER"
    VOICEMAIL = "VOICEMAIL"
    PENDING = "PENDING"


class CallRole(str, enum.Enum):
    VOLUNTEER = "VOLUNTEER"
    SENIOR_CALLBACK = "SENIOR_CALLBACK"


volunteer_skills = Table(
    "volunteer_skills",
    Base.metadata,
    Column("volunteer_id", Integer, ForeignKey("volunteers.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Senior(Base):
    __tablename__ = "seniors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Names stay nullable so a caller can be registered from the phone number alone
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    phone_number = Column(String(32), unique=True, nullable=True, index=True)
    email = Column(Text, nullable=True)
    street_address = Column(Text, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    zip_code = Column(String(10), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    appointments = relationship("Appointment", back_populates="senior", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def address_parts(self):
        return [p for p in (self.street_address, self.city, self.state, self.zip_code) if p]

    @property
    def has_complete_address(self) -> bool:
        return len(self.address_parts) == 4


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=True)


class Volunteer(Base):
    __tablename__ = "volunteers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    phone_number = Column(String(32), nullable=True)
    email = Column(Text, nullable=False)
    bio = Column(Text, nullable=True)
    zip_code = Column(String(10), nullable=True, index=True)
    background_check_status = Column(Text, nullable=False, default=BackgroundCheckStatus.NOT_STARTED.value)
    availability_schedule = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    skills = relationship("Skill", secondary=volunteer_skills, lazy="selectin", order_by="Skill.id")
    appointments = relationship("Appointment", back_populates="volunteer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def skill_names(self):
        return [skill.name for skill in self.skills]


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    senior_id = Column(Integer, ForeignKey("seniors.id", ondelete="CASCADE"), nullable=False, index=True)
    volunteer_id = Column(Integer, ForeignKey("volunteers.id"), nullable=True, index=True)
    appointment_datetime = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    location = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=AppointmentStatus.REQUESTED.value)
    notes_for_volunteer = Column(Text, nullable=True)
    feedback_from_senior = Column(Text, nullable=True)
    feedback_from_volunteer = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    senior = relationship("Senior", back_populates="appointments")
    volunteer = relationship("Volunteer", back_populates="appointments")


class InboundConversation(Base):
    __tablename__ = "inbound_conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    senior_id = Column(Integer, ForeignKey("seniors.id", ondelete="SET NULL"), nullable=True)
    caller_phone_number = Column(String(32), nullable=False)
    request_details = Column(Text, nullable=False)
    matched_skill = Column(Text, nullable=True)
    nearby_volunteers = Column(JSON, nullable=False, default=list)
    status = Column(String(16), nullable=False, default=ConversationStatus.OPEN.value)
    scheduled_appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    calls = relationship(
        "ConversationCall",
        back_populates="conversation",
        order_by="ConversationCall.id.desc()",
        cascade="all, delete-orphan"
    )


class ConversationCall(Base):
    __tablename__ = "conversation_calls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(Integer, ForeignKey("inbound_conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    # Empty for senior callbacks
    volunteer_id = Column(Integer, ForeignKey("volunteers.id"), nullable=True)
    outcome = Column(String(16), nullable=False)
    notes = Column(Text, nullable=True)
    call_sid = Column(String(64), nullable=True, index=True)
    role = Column(String(32), nullable=False, default=CallRole.VOLUNTEER.value)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    conversation = relationship("InboundConversation", back_populates="calls")
    volunteer = relationship("Volunteer")


class CallAttempt(Base):
    __tablename__ = "call_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    senior_id = Column(Integer, ForeignKey("seniors.id", ondelete="CASCADE"), nullable=False)
    volunteer_id = Column(Integer, ForeignKey("volunteers.id", ondelete="CASCADE"), nullable=False)
    outcome = Column(String(16), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
