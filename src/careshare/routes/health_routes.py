from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
import logging

from careshare.config.settings import Settings
from careshare.core.dependencies import get_app_settings, get_appointment_service
from careshare.database.config import check_connection
from careshare.schemas.records import StatsOut
from careshare.services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.head("/")
async def root_head():
    return Response(status_code=200)


@router.get("/")
async def root(settings: Settings = Depends(get_app_settings)):
    return {"ok": True, "service": settings.app_name}


@router.get("/api/health")
def health_check(request: Request):
    """Confirm database connectivity"""
    try:
        with request.app.state.session_factory() as session:
            check_connection(session)
        return {"ok": True, "database": "connected"}
    except Exception as e:
        logger.error(f"[health] Health check failed: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={"ok": False, "database": "disconnected", "error": str(e)}
        )


@router.get("/api/stats", response_model=StatsOut)
def get_stats(appointments: AppointmentService = Depends(get_appointment_service)):
    return appointments.stats()
