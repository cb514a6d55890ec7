import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from careshare.config.settings import Settings
from careshare.core.errors import NoSeniorError, NotFoundError
from careshare.database.models import (
    Appointment, CallAttempt, CallOutcome, CallRole, ConversationCall,
    ConversationStatus, InboundConversation, Senior, Volunteer
)
from careshare.schemas.agent import StartInboundConversationRequest
from careshare.schemas.records import AcceptedVolunteer
from careshare.services.appointment_service import AppointmentService
from careshare.services.senior_service import SeniorService
from careshare.services.skill_matcher import match_skill
from careshare.services.volunteer_service import VolunteerService

logger = logging.getLogger(__name__)


class ConversationService:
    """Inbound conversation workflow: intake, volunteer calls, finalization"""

    def __init__(self, db: Session, volunteers: VolunteerService, settings: Settings):
        self.db = db
        self.volunteers = volunteers
        self.settings = settings
        self.seniors = SeniorService(db)
        self.appointments = AppointmentService(db, settings.strict_appointment_transitions)

    def get(self, conversation_id: int) -> InboundConversation:
        conversation = self.db.get(InboundConversation, conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    def find_by_call_sid(self, call_sid: str) -> Optional[ConversationCall]:
        if not call_sid:
            return None
        return self.db.scalars(
            select(ConversationCall).where(ConversationCall.call_sid == call_sid).limit(1)
        ).first()

    def start_inbound(self, phone_number: str, request: StartInboundConversationRequest) -> dict:
        """
        Record an inbound request and snapshot nearby volunteers.

        `phone_number` is the caller's normalized number. A senior is created
        only when the caller is unknown and the request asks for it.
        """
        senior = self.seniors.find_by_phone(phone_number)
        if senior is None and request.wants_new_senior:
            senior = self.seniors.create(
                phone_number,
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email,
                street_address=request.street_address,
                city=request.city,
                state=request.state,
                zip_code=request.zip_code,
            )

        matched_skill = match_skill(request.request_details)
        search_zip = request.zip or (senior.zip_code if senior else None)
        radius = request.radius or self.settings.default_search_radius
        logger.info(f"Inbound request skill={matched_skill} zip={search_zip} radius={radius}")

        volunteers = self.volunteers.search_with_expansion(
            skill=matched_skill,
            zip_code=search_zip,
            radius=radius,
            expansion_steps=self.settings.radius_expansion_steps
        )
        snapshot = [v.model_dump() for v in volunteers]

        conversation = InboundConversation(
            senior_id=senior.id if senior else None,
            caller_phone_number=phone_number,
            request_details=request.request_details,
            matched_skill=matched_skill,
            nearby_volunteers=snapshot,
            status=ConversationStatus.OPEN.value,
        )
        self.db.add(conversation)
        self.db.commit()
        logger.info(f"Opened conversation {conversation.id} with {len(snapshot)} candidate volunteers")

        return {
            "conversation_id": conversation.id,
            "senior": senior,
            "matched_skill": matched_skill,
            "volunteers": snapshot,
        }

    def log_volunteer_call(
        self,
        conversation_id: int,
        volunteer_id: int,
        outcome: str,
        notes: Optional[str] = None
    ) -> ConversationCall:
        conversation = self.get(conversation_id)
        self.volunteers.get(volunteer_id)

        call = ConversationCall(
            conversation_id=conversation_id,
            volunteer_id=volunteer_id,
            outcome=outcome,
            notes=notes,
            role=CallRole.VOLUNTEER.value,
        )
        self.db.add(call)
        conversation.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        logger.info(f"Conversation {conversation_id}: volunteer {volunteer_id} -> {outcome}")
        return call

    def record_pending_call(
        self,
        conversation_id: int,
        role: CallRole,
        call_sid: Optional[str],
        volunteer_id: Optional[int] = None
    ) -> ConversationCall:
        call = ConversationCall(
            conversation_id=conversation_id,
            volunteer_id=volunteer_id,
            outcome=CallOutcome.PENDING.value,
            call_sid=call_sid,
            role=role.value,
        )
        self.db.add(call)
        self.db.commit()
        return call

    def accepted_volunteers(self, conversation_id: int) -> List[AcceptedVolunteer]:
        rows = self.db.execute(
            select(ConversationCall.volunteer_id, Volunteer.first_name, Volunteer.last_name, Volunteer.phone_number)
            .join(Volunteer, Volunteer.id == ConversationCall.volunteer_id)
            .where(
                ConversationCall.conversation_id == conversation_id,
                ConversationCall.outcome == CallOutcome.ACCEPTED.value
            )
            .order_by(ConversationCall.id.desc())
        ).all()
        return [
            AcceptedVolunteer(volunteer_id=r[0], first_name=r[1], last_name=r[2], phone_number=r[3])
            for r in rows
        ]

    def finalize(
        self,
        conversation_id: int,
        chosen_volunteer_id: int,
        appointment_datetime: datetime,
        location: Optional[str] = None,
        notes_for_volunteer: Optional[str] = None,
        senior_id: Optional[int] = None
    ) -> Appointment:
        """Schedule the chosen volunteer and close the conversation in one transaction"""
        conversation = self.get(conversation_id)
        senior_id = senior_id or conversation.senior_id
        if not senior_id:
            raise NoSeniorError()
        self.volunteers.get(chosen_volunteer_id)

        try:
            appointment = self.appointments.schedule(
                senior_id=senior_id,
                volunteer_id=chosen_volunteer_id,
                appointment_datetime=appointment_datetime,
                location=location,
                notes_for_volunteer=notes_for_volunteer,
            )
            conversation.scheduled_appointment_id = appointment.id
            conversation.status = ConversationStatus.SCHEDULED.value
            conversation.updated_at = datetime.now(timezone.utc)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Conversation {conversation_id} scheduled as appointment {appointment.id}")
        return appointment

    def callback_senior(self, conversation: InboundConversation, senior_id: Optional[int] = None) -> Senior:
        senior_id = senior_id or conversation.senior_id
        if not senior_id:
            raise NoSeniorError("Senior id/number required")
        return self.seniors.get(senior_id)

    def log_call_attempt(
        self,
        senior_id: int,
        volunteer_id: int,
        outcome: str,
        notes: Optional[str] = None
    ) -> CallAttempt:
        attempt = CallAttempt(senior_id=senior_id, volunteer_id=volunteer_id, outcome=outcome, notes=notes)
        self.db.add(attempt)
        self.db.commit()
        return attempt
