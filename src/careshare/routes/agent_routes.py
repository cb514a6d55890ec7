"""
Tool endpoints called by the ElevenLabs voice agent.

Every tool answers with the `{success, data}` / `{success: false, error}`
envelope and HTTP 200 (201 for creations), including on failure.
"""
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from careshare.config.settings import Settings
from careshare.core.dependencies import (
    get_app_settings, get_appointment_service, get_conversation_service,
    get_outbound_service, get_phone_normalizer, get_senior_service, get_volunteer_service
)
from careshare.core.envelope import agent_exception, agent_success
from careshare.core.errors import InvalidPhoneError, NoSkillError, NotFoundError
from careshare.database.config import get_db
from careshare.database.models import CallRole
from careshare.routes.ui_routes import parse_id
from careshare.schemas.agent import (
    ConfirmAppointmentRequest, FinalizeConversationRequest, FindAndParseRequest,
    ListVolunteersRequest, LogCallOutcomeRequest, LogVolunteerCallRequest,
    OutboundCallRequest, OutboundCallTestRequest, OutboundSeniorCallbackRequest,
    ScheduleAppointmentRequest, StartInboundConversationRequest, UpsertSeniorRequest
)
from careshare.schemas.records import (
    AppointmentOut, CallAttemptOut, ConversationCallOut, ConversationOut, SeniorOut, VolunteerOut
)
from careshare.services.appointment_service import AppointmentService
from careshare.services.conversation_service import ConversationService
from careshare.services.outbound_call_service import ElevenLabsOutboundService
from careshare.services.phone_service import PhoneNormalizer
from careshare.services.senior_service import SeniorService
from careshare.services.skill_matcher import match_skill
from careshare.services.volunteer_service import VolunteerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["agent"])


def senior_out(senior):
    return SeniorOut.model_validate(senior) if senior is not None else None


@router.get("/agent/hello")
async def hello():
    """Sanity check for proxies and tool configuration"""
    return {"message": "hello from agent route"}


@router.post("/agent/find-and-parse")
def find_and_parse(
    body: FindAndParseRequest,
    db: Session = Depends(get_db),
    phones: PhoneNormalizer = Depends(get_phone_normalizer),
    seniors: SeniorService = Depends(get_senior_service),
    volunteers: VolunteerService = Depends(get_volunteer_service)
):
    logger.info("AGENT TOOL: findSeniorAndParseRequest")
    try:
        phone = phones.require(body.caller_phone_number)
        senior = seniors.find_by_phone(phone)
        if senior is None:
            raise NotFoundError("Senior not found")

        skill = match_skill(body.request_details)
        if not skill:
            raise NoSkillError()

        return agent_success({
            "senior": senior_out(senior),
            "matched_skill": skill,
            "potential_volunteers": volunteers.search(skill=skill),
        })
    except Exception as e:
        return agent_exception("find-and-parse", e, db)


def _list_volunteers(tool: str, body: ListVolunteersRequest, db: Session, volunteers: VolunteerService, settings: Settings):
    logger.info(f"AGENT TOOL: {tool}")
    try:
        radius = body.radius or settings.default_search_radius
        skill = body.skill.value if body.skill else None
        return agent_success(volunteers.search_near(skill, body.zip, radius))
    except Exception as e:
        return agent_exception(tool, e, db)


@router.post("/agent/list-volunteers")
def list_volunteers(
    body: ListVolunteersRequest,
    db: Session = Depends(get_db),
    volunteers: VolunteerService = Depends(get_volunteer_service),
    settings: Settings = Depends(get_app_settings)
):
    return _list_volunteers("listVolunteers", body, db, volunteers, settings)


@router.post("/agent/find-volunteers")
def find_volunteers(
    body: ListVolunteersRequest,
    db: Session = Depends(get_db),
    volunteers: VolunteerService = Depends(get_volunteer_service),
    settings: Settings = Depends(get_app_settings)
):
    return _list_volunteers("findVolunteers", body, db, volunteers, settings)


@router.post("/agent/create-senior")
def create_senior(
    body: UpsertSeniorRequest,
    db: Session = Depends(get_db),
    phones: PhoneNormalizer = Depends(get_phone_normalizer),
    seniors: SeniorService = Depends(get_senior_service)
):
    logger.info("AGENT TOOL: createSenior (upsert by phone)")
    try:
        phone = phones.require(body.phone_number)
        profile = body.model_dump(exclude={"phone_number"})
        senior, created = seniors.upsert_by_phone(phone, **profile)
        return agent_success(senior_out(senior), upserted="created" if created else "updated")
    except Exception as e:
        return agent_exception("create-senior", e, db)


@router.post("/agent/start-inbound-conversation")
def start_inbound_conversation(
    body: StartInboundConversationRequest,
    db: Session = Depends(get_db),
    phones: PhoneNormalizer = Depends(get_phone_normalizer),
    conversations: ConversationService = Depends(get_conversation_service)
):
    logger.info("AGENT TOOL: startInboundConversation")
    try:
        phone = phones.require(body.caller_phone_number)
        result = conversations.start_inbound(phone, body)
        result["senior"] = senior_out(result["senior"])
        return agent_success(result, status_code=201)
    except Exception as e:
        return agent_exception("start-inbound-conversation", e, db)


@router.post("/agent/log-volunteer-call")
def log_volunteer_call(
    body: LogVolunteerCallRequest,
    db: Session = Depends(get_db),
    conversations: ConversationService = Depends(get_conversation_service)
):
    logger.info("AGENT TOOL: logVolunteerCall")
    try:
        call = conversations.log_volunteer_call(body.conversation_id, body.volunteer_id, body.outcome, body.notes)
        return agent_success(ConversationCallOut.model_validate(call), status_code=201)
    except Exception as e:
        return agent_exception("log-volunteer-call", e, db)


@router.get("/agent/conversation/{conversation_id}")
def get_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
    conversations: ConversationService = Depends(get_conversation_service)
):
    logger.info("AGENT TOOL: getConversation")
    try:
        conversation = conversations.get(parse_id(conversation_id, "conversation"))
        return agent_success({
            "conversation": ConversationOut.model_validate(conversation),
            "calls": [ConversationCallOut.model_validate(c) for c in conversation.calls],
        })
    except Exception as e:
        return agent_exception("get-conversation", e, db)


@router.get("/agent/conversation/{conversation_id}/accepted")
def get_accepted_volunteers(
    conversation_id: str,
    db: Session = Depends(get_db),
    conversations: ConversationService = Depends(get_conversation_service)
):
    logger.info("AGENT TOOL: getAcceptedVolunteers")
    try:
        return agent_success(conversations.accepted_volunteers(parse_id(conversation_id, "conversation")))
    except Exception as e:
        return agent_exception("get-accepted-volunteers", e, db)


@router.get("/volunteer/{volunteer_id}")
def get_volunteer(
    volunteer_id: str,
    db: Session = Depends(get_db),
    volunteers: VolunteerService = Depends(get_volunteer_service)
):
    logger.info("AGENT TOOL: getVolunteer")
    try:
        volunteer = volunteers.get(parse_id(volunteer_id, "volunteer"))
        return agent_success(VolunteerOut.model_validate(volunteer))
    except Exception as e:
        return agent_exception("get-volunteer", e, db)


@router.post("/agent/finalize-conversation")
def finalize_conversation(
    body: FinalizeConversationRequest,
    db: Session = Depends(get_db),
    conversations: ConversationService = Depends(get_conversation_service)
):
    logger.info("AGENT TOOL: finalizeConversation")
    try:
        appointment = conversations.finalize(
            conversation_id=body.conversation_id,
            chosen_volunteer_id=body.chosen_volunteer_id,
            appointment_datetime=body.appointment_datetime,
            location=body.location,
            notes_for_volunteer=body.notes_for_volunteer,
            senior_id=body.senior_id,
        )
        return agent_success(AppointmentOut.model_validate(appointment), status_code=201)
    except Exception as e:
        return agent_exception("finalize-conversation", e, db)


@router.post("/agent/schedule-appointment")
def schedule_appointment(
    body: ScheduleAppointmentRequest,
    db: Session = Depends(get_db),
    seniors: SeniorService = Depends(get_senior_service),
    volunteers: VolunteerService = Depends(get_volunteer_service),
    appointments: AppointmentService = Depends(get_appointment_service)
):
    logger.info("AGENT TOOL: scheduleAppointment")
    try:
        seniors.get(body.senior_id)
        volunteers.get(body.volunteer_id)
        appointment = appointments.schedule(
            senior_id=body.senior_id,
            volunteer_id=body.volunteer_id,
            appointment_datetime=body.appointment_datetime,
            location=body.location,
            notes_for_volunteer=body.notes_for_volunteer,
        )
        db.commit()
        # Portal clients read the appointment row directly
        return JSONResponse(
            status_code=201,
            content=jsonable_encoder(AppointmentOut.model_validate(appointment))
        )
    except Exception as e:
        return agent_exception("schedule-appointment", e, db)


@router.post("/agent/confirm-appointment")
def confirm_appointment(
    body: ConfirmAppointmentRequest,
    db: Session = Depends(get_db),
    appointments: AppointmentService = Depends(get_appointment_service)
):
    logger.info("AGENT TOOL: confirmAppointment")
    try:
        appointment = appointments.confirm(body.appointment_id)
        return agent_success(AppointmentOut.model_validate(appointment))
    except Exception as e:
        return agent_exception("confirm-appointment", e, db)


@router.post("/agent/outbound-call-test")
async def outbound_call_test(
    body: OutboundCallTestRequest,
    outbound: ElevenLabsOutboundService = Depends(get_outbound_service),
    settings: Settings = Depends(get_app_settings)
):
    logger.info("AGENT TOOL: outboundCallTest")
    try:
        result = await outbound.place_call(body.to_number or settings.outbound_test_number, label="outbound-call-test")
        return JSONResponse(status_code=200, content=result.to_response())
    except Exception as e:
        return agent_exception("outbound-call-test", e)


@router.post("/agent/outbound-call")
async def outbound_call(
    body: OutboundCallRequest,
    db: Session = Depends(get_db),
    outbound: ElevenLabsOutboundService = Depends(get_outbound_service),
    conversations: ConversationService = Depends(get_conversation_service)
):
    """Dial a candidate volunteer for a conversation and log a PENDING call"""
    logger.info("AGENT TOOL: outboundCall (conversation-driven)")
    try:
        outbound.ensure_configured()
        conversation = conversations.get(body.conversation_id)
        volunteer = conversations.volunteers.get(body.volunteer_id)
        dial_number = body.to_number or volunteer.phone_number
        if not dial_number:
            raise InvalidPhoneError("Volunteer has no phone number on file")

        result = await outbound.place_call(dial_number, label="outbound-call")
        conversations.record_pending_call(conversation.id, CallRole.VOLUNTEER, result.call_sid, volunteer.id)
        return JSONResponse(status_code=200, content=result.to_response())
    except Exception as e:
        return agent_exception("outbound-call", e, db)


@router.post("/agent/outbound-callback-senior")
async def outbound_callback_senior(
    body: OutboundSeniorCallbackRequest,
    db: Session = Depends(get_db),
    outbound: ElevenLabsOutboundService = Depends(get_outbound_service),
    conversations: ConversationService = Depends(get_conversation_service)
):
    """Call the senior back to present the volunteers who accepted"""
    logger.info("AGENT TOOL: outboundCallbackSenior")
    try:
        outbound.ensure_configured()
        conversation = conversations.get(body.conversation_id)
        senior = conversations.callback_senior(conversation, body.senior_id)
        dial_number = body.to_number or senior.phone_number
        if not dial_number:
            raise InvalidPhoneError("Senior has no phone number on file")

        result = await outbound.place_call(dial_number, label="outbound-callback-senior")
        conversations.record_pending_call(conversation.id, CallRole.SENIOR_CALLBACK, result.call_sid)
        return JSONResponse(status_code=200, content=result.to_response())
    except Exception as e:
        return agent_exception("outbound-callback-senior", e, db)


@router.post("/agent/log-call-outcome")
def log_call_outcome(
    body: LogCallOutcomeRequest,
    db: Session = Depends(get_db),
    seniors: SeniorService = Depends(get_senior_service),
    conversations: ConversationService = Depends(get_conversation_service)
):
    logger.info("AGENT TOOL: logCallOutcome")
    try:
        seniors.get(body.senior_id)
        conversations.volunteers.get(body.volunteer_id)
        attempt = conversations.log_call_attempt(body.senior_id, body.volunteer_id, body.outcome, body.notes)
        return agent_success(CallAttemptOut.model_validate(attempt), status_code=201)
    except Exception as e:
        return agent_exception("log-call-outcome", e, db)
