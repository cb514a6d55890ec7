"""
Per-mode voice agent configuration.

Each call the ElevenLabs agent handles belongs to one phase of the calling
workflow. The prompt, opening line and tool allow-list for each phase live
here as data; `services.personalization_service` only adds call facts.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class CallMode(str, Enum):
    INBOUND = "INBOUND"
    VOLUNTEER_OUTBOUND = "VOLUNTEER_OUTBOUND"
    SENIOR_CALLBACK = "SENIOR_CALLBACK"


TOOLS_ONLY_INSTRUCTION = "Use MCP tools only. Do not make HTTP requests or non-MCP tools."


@dataclass(frozen=True)
class CallModeProfile:
    mode: CallMode
    prompt: str
    first_message: str
    allowed_tools: Tuple[str, ...]

    @property
    def allowed_tools_line(self) -> str:
        return f"Allowed tools this call: {', '.join(self.allowed_tools)}."


CALL_MODE_PROFILES: Dict[CallMode, CallModeProfile] = {
    CallMode.INBOUND: CallModeProfile(
        mode=CallMode.INBOUND,
        prompt=(
            "You are the CareShare assistant for inbound senior calls. "
            "1) Greet warmly. "
            "2) If caller_id is available, DO NOT ask for the phone number; instead, repeat it back "
            "and confirm before proceeding. "
            "3) Confirm identity and key profile details even if a record exists. "
            "4) Gather the task details, preferred date/time, constraints, and confirm the zip code. "
            "DO NOT ask the senior for a search radius; the system handles radius automatically "
            "(and may expand it). If the senior's address is missing or incomplete, POLITELY COLLECT "
            "street address, city, state, and zip; if it exists, do not re-ask. "
            "5) Interpret phrases like \"today\" and \"tomorrow\" using the provided current time/timezone. "
            "6) IMPORTANT: CALL startInboundConversation exactly once with caller_phone_number and "
            "request_details to create the conversation and store nearby volunteers. "
            "7) DO NOT call logVolunteerCall, finalizeConversation, scheduleAppointment, "
            "confirmAppointment, updateAppointmentStatus, or outbound-call endpoints during inbound. "
            "8) NEVER mention internal IDs, tool names, or technical terms to the senior "
            "(e.g., do not say \"conversation_id\"). "
            "9) Close by telling the senior they will be contacted once a volunteer accepts."
        ),
        first_message="Hello! How can I help you today?",
        allowed_tools=("createSenior", "startInboundConversation"),
    ),
    CallMode.VOLUNTEER_OUTBOUND: CallModeProfile(
        mode=CallMode.VOLUNTEER_OUTBOUND,
        prompt=(
            "You are the CareShare assistant calling a volunteer. Briefly describe the senior's "
            "request, the needed skill, and proposed timing. Ask if they are available and willing. "
            "If voicemail, politely hang up. DO NOT schedule or finalize during this call. "
            "After the call, log the outcome using logVolunteerCall. "
            "Forbidden this call: startInboundConversation, finalizeConversation, scheduleAppointment, "
            "confirmAppointment. NEVER mention internal IDs/tool names to the volunteer."
        ),
        first_message="Hello, this is CareShare. I'm calling regarding a request we received.",
        allowed_tools=("logVolunteerCall", "getVolunteer (optional)", "getConversation (optional)"),
    ),
    CallMode.SENIOR_CALLBACK: CallModeProfile(
        mode=CallMode.SENIOR_CALLBACK,
        prompt=(
            "You are calling the senior back with results. Present only volunteers who ACCEPTED "
            "(from getAcceptedVolunteers). Ask the senior to choose one. When they choose, schedule "
            "using finalizeConversation (with the chosen volunteer) and then confirmAppointment. "
            "Forbidden this call: startInboundConversation, logVolunteerCall. "
            "NEVER mention internal IDs/tool names to the senior."
        ),
        first_message="Hello again, this is CareShare. I have some options for you.",
        allowed_tools=(
            "getAcceptedVolunteers",
            "finalizeConversation",
            "confirmAppointment",
            "getConversation (optional)",
        ),
    ),
}


def get_profile(mode: CallMode) -> CallModeProfile:
    return CALL_MODE_PROFILES.get(mode, CALL_MODE_PROFILES[CallMode.INBOUND])
