"""
FastAPI dependencies resolving the services built at startup.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from careshare.config.settings import Settings
from careshare.database.config import get_db
from careshare.services.appointment_service import AppointmentService
from careshare.services.conversation_service import ConversationService
from careshare.services.outbound_call_service import ElevenLabsOutboundService
from careshare.services.phone_service import PhoneNormalizer
from careshare.services.senior_service import SeniorService
from careshare.services.volunteer_service import VolunteerService
from careshare.services.zip_service import ZipRadiusService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_phone_normalizer(request: Request) -> PhoneNormalizer:
    return request.app.state.phone_normalizer


def get_zip_radius(request: Request) -> ZipRadiusService:
    return request.app.state.zip_radius


def get_outbound_service(request: Request) -> ElevenLabsOutboundService:
    return request.app.state.outbound_service


def get_senior_service(db: Session = Depends(get_db)) -> SeniorService:
    return SeniorService(db)


def get_volunteer_service(
    db: Session = Depends(get_db),
    zip_radius: ZipRadiusService = Depends(get_zip_radius)
) -> VolunteerService:
    return VolunteerService(db, zip_radius)


def get_appointment_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
) -> AppointmentService:
    return AppointmentService(db, settings.strict_appointment_transitions)


def get_conversation_service(
    db: Session = Depends(get_db),
    volunteers: VolunteerService = Depends(get_volunteer_service),
    settings: Settings = Depends(get_app_settings)
) -> ConversationService:
    return ConversationService(db, volunteers, settings)
