"""
Response envelope for the voice agent tool surface.

Agent tools always receive HTTP 200 (201 for creations); success or failure
is carried in the body so the ElevenLabs tool caller can read it.
"""
import logging
from typing import Any, Optional

from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from careshare.core.errors import CareShareError

logger = logging.getLogger(__name__)

AGENT_PATH_PREFIX = "/api/agent/"


def is_agent_path(path: str) -> bool:
    return path.startswith(AGENT_PATH_PREFIX)


def agent_success(data: Any, status_code: int = 200, **extra: Any) -> JSONResponse:
    body = {"success": True, "data": data}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def agent_failure(code: str, message: str, details: Any = None, **extra: Any) -> JSONResponse:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    error.update(extra)
    return JSONResponse(status_code=200, content=jsonable_encoder({"success": False, "error": error}))


def agent_error(error: CareShareError) -> JSONResponse:
    return JSONResponse(status_code=200, content=jsonable_encoder({"success": False, "error": error.to_dict()}))


def agent_exception(tool: str, exc: Exception, db: Optional[Session] = None) -> JSONResponse:
    """Convert an exception raised inside an agent tool into an error envelope"""
    if db is not None:
        db.rollback()

    if isinstance(exc, CareShareError):
        logger.warning(f"{tool}: {exc.code} {exc.message}")
        return agent_error(exc)

    logger.error(f"{tool} error: {str(exc)}", exc_info=True)
    return agent_failure("INTERNAL_ERROR", str(exc))
