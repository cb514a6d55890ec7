"""
Conversation initiation data for the ElevenLabs personalization webhook.

ElevenLabs calls the webhook at the start of every phone call. The response
picks the call mode, the system prompt and the opening line for the agent.
"""
import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from careshare.config.call_modes import (
    TOOLS_ONLY_INSTRUCTION, CallMode, CallModeProfile, get_profile
)
from careshare.config.settings import Settings
from careshare.core.errors import InvalidSignatureError, SignatureError
from careshare.database.models import CallRole, InboundConversation, Senior, Volunteer
from careshare.schemas.agent import PersonalizationRequest
from careshare.services.conversation_service import ConversationService
from careshare.services.phone_service import PhoneNormalizer
from careshare.services.senior_service import SeniorService

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "elevenlabs-signature"

ROLE_MODES = {
    CallRole.VOLUNTEER.value: CallMode.VOLUNTEER_OUTBOUND,
    CallRole.SENIOR_CALLBACK.value: CallMode.SENIOR_CALLBACK,
}


def verify_signature(secret: Optional[str], signature: Optional[str], raw_body: bytes) -> None:
    """Check `sha256=<hex hmac>` over the raw body; skipped unless both secret and header exist"""
    if not secret or not signature:
        return
    digest = hmac.new(secret.encode("utf-8"), raw_body or b"", hashlib.sha256).hexdigest()
    try:
        matches = hmac.compare_digest(f"sha256={digest}", signature)
    except TypeError as e:
        logger.error(f"personalization webhook: signature error: {str(e)}")
        raise SignatureError(str(e)) from e
    if not matches:
        logger.error("personalization webhook: signature mismatch")
        raise InvalidSignatureError()


def render_prompt(profile: CallModeProfile, facts: List[str]) -> str:
    lines = [profile.allowed_tools_line, TOOLS_ONLY_INSTRUCTION, *facts]
    return f"{profile.prompt} {' '.join(lines)}".strip()


def format_utc(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PersonalizationService:
    def __init__(self, db: Session, conversations: ConversationService, phones: PhoneNormalizer, settings: Settings):
        self.db = db
        self.conversations = conversations
        self.phones = phones
        self.settings = settings

    def _conversation(self, conversation_id: Optional[int]) -> Optional[InboundConversation]:
        if not conversation_id:
            return None
        return self.db.get(InboundConversation, conversation_id)

    def _volunteer(self, volunteer_id: Optional[int]) -> Optional[Volunteer]:
        if not volunteer_id:
            return None
        return self.db.get(Volunteer, volunteer_id)

    def build(self, request: PersonalizationRequest, now: Optional[datetime] = None) -> dict:
        caller = self.phones.normalize(request.caller_id) or request.caller_id
        senior = SeniorService(self.db).find_by_phone(caller)
        conversation = self._conversation(request.conversation_id)
        volunteer = self._volunteer(request.volunteer_id)

        # A call we placed ourselves tells us the phase and its context
        mode = request.mode or CallMode.INBOUND
        prior_call = self.conversations.find_by_call_sid(request.call_sid)
        if prior_call is not None:
            mode = ROLE_MODES.get(prior_call.role, mode)
            conversation = self._conversation(prior_call.conversation_id) or conversation
            volunteer = self._volunteer(prior_call.volunteer_id) or volunteer

        logger.info(f"Personalizing call {request.call_sid} as {mode.value}")
        profile = get_profile(mode)

        if mode == CallMode.VOLUNTEER_OUTBOUND:
            facts = self._volunteer_facts(senior, volunteer, conversation)
        elif mode == CallMode.SENIOR_CALLBACK:
            facts = self._callback_facts(senior, conversation)
        else:
            facts = self._inbound_facts(caller, senior, conversation, now or datetime.now(timezone.utc))

        return {
            "type": "conversation_initiation_client_data",
            "dynamic_variables": {},
            "conversation_config_override": {
                "agent": {
                    "prompt": {"prompt": render_prompt(profile, facts)},
                    "first_message": profile.first_message,
                    "language": "en",
                },
            },
        }

    def _inbound_facts(
        self,
        caller: str,
        senior: Optional[Senior],
        conversation: Optional[InboundConversation],
        now: datetime
    ) -> List[str]:
        facts = [
            f"Current time (UTC): {format_utc(now)}. Timezone: {self.settings.agent_timezone}. "
            f"Caller phone: {caller}."
        ]
        if senior is not None and senior.full_name:
            facts.append(
                f"Possible match on file: {senior.full_name} (id {senior.id}). Confirm identity before proceeding."
            )
        if senior is not None and not senior.has_complete_address:
            facts.append(
                "Address appears incomplete or missing; politely collect street address, city, state, zip, "
                "then update the record using createSenior (upsert by phone)."
            )
        if conversation is not None and conversation.matched_skill:
            facts.append(f"Parsed skill (if mentioned): {conversation.matched_skill}.")
        return facts

    def _volunteer_facts(
        self,
        senior: Optional[Senior],
        volunteer: Optional[Volunteer],
        conversation: Optional[InboundConversation]
    ) -> List[str]:
        facts = []
        if senior is not None and senior.full_name:
            facts.append(f"Senior: {senior.full_name}.")
        if volunteer is not None and volunteer.full_name:
            facts.append(f"Volunteer: {volunteer.full_name}.")
        if conversation is not None and conversation.matched_skill:
            facts.append(f"Skill/Task: {conversation.matched_skill}.")
        return facts

    def _callback_facts(self, senior: Optional[Senior], conversation: Optional[InboundConversation]) -> List[str]:
        facts = []
        if senior is not None and senior.full_name:
            facts.append(f"Senior: {senior.full_name}.")
        if conversation is not None and isinstance(conversation.nearby_volunteers, list):
            facts.append(f"Nearby volunteers considered: {len(conversation.nearby_volunteers)}.")
        return facts
