from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
import logging

from careshare.config.settings import Settings
from careshare.core.dependencies import get_app_settings, get_conversation_service, get_phone_normalizer
from careshare.core.envelope import agent_error, agent_exception
from careshare.core.errors import InvalidBodyError, InvalidSignatureError
from careshare.database.config import get_db
from careshare.schemas.agent import PersonalizationRequest
from careshare.services.conversation_service import ConversationService
from careshare.services.personalization_service import (
    SIGNATURE_HEADER, PersonalizationService, verify_signature
)
from careshare.services.phone_service import PhoneNormalizer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/agent", tags=["personalization"])


@router.post("/personalization")
async def personalization_webhook(
    request: Request,
    db: Session = Depends(get_db),
    phones: PhoneNormalizer = Depends(get_phone_normalizer),
    conversations: ConversationService = Depends(get_conversation_service),
    settings: Settings = Depends(get_app_settings)
):
    """
    Conversation initiation webhook called by ElevenLabs at call start.

    The signature is checked against the raw body before it is parsed, so the
    body is read directly instead of through a request model.
    """
    logger.info("AGENT TOOL: personalization webhook")
    raw_body = await request.body()

    try:
        verify_signature(settings.elevenlabs_webhook_secret, request.headers.get(SIGNATURE_HEADER), raw_body)
    except InvalidSignatureError as e:
        return JSONResponse(status_code=e.status_code, content={"success": False, "error": e.to_dict()})

    try:
        body = PersonalizationRequest.model_validate_json(raw_body or b"{}")
    except ValidationError as e:
        return agent_error(InvalidBodyError(details=jsonable_encoder(e.errors(include_url=False))))

    try:
        service = PersonalizationService(db, conversations, phones, settings)
        return JSONResponse(status_code=200, content=service.build(body))
    except Exception as e:
        return agent_exception("personalization", e, db)
