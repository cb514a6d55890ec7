"""
Routes backing the senior, volunteer and admin portals.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import logging

from careshare.core.dependencies import (
    get_appointment_service, get_senior_service, get_volunteer_service
)
from careshare.core.errors import InvalidIdError
from careshare.database.models import AppointmentStatus
from careshare.schemas.records import AppointmentOut, AppointmentWithNames, SeniorOut, VolunteerOut
from careshare.services.appointment_service import AppointmentService
from careshare.services.senior_service import SeniorService
from careshare.services.volunteer_service import VolunteerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["portal"])


class StatusUpdateRequest(BaseModel):
    status: AppointmentStatus


def parse_id(raw: str, label: str) -> int:
    """Positive integer path ids; anything else is INVALID_ID"""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidIdError(f"Invalid {label} id")
    if value <= 0:
        raise InvalidIdError(f"Invalid {label} id")
    return value


@router.get("/seniors", response_model=List[SeniorOut])
def list_seniors(seniors: SeniorService = Depends(get_senior_service)):
    return seniors.list_all()


@router.get("/volunteers", response_model=List[VolunteerOut])
def list_volunteers(volunteers: VolunteerService = Depends(get_volunteer_service)):
    return volunteers.list_all()


@router.get("/volunteers/nearby/{zip_code}")
def volunteers_nearby(
    zip_code: str,
    radius: Optional[float] = 10,
    volunteers: VolunteerService = Depends(get_volunteer_service)
):
    """Zip codes within `radius` miles of `zip_code`"""
    if radius is None or radius <= 0:
        return JSONResponse(status_code=400, content={"error": "radius must be a positive number"})
    return volunteers.zip_radius.radius(zip_code, radius)


@router.get("/appointments", response_model=List[AppointmentWithNames])
def list_appointments(appointments: AppointmentService = Depends(get_appointment_service)):
    return [AppointmentWithNames.from_appointment(a) for a in appointments.list_all()]


@router.get("/senior/{senior_id}/appointments", response_model=List[AppointmentWithNames])
def senior_appointments(senior_id: str, appointments: AppointmentService = Depends(get_appointment_service)):
    rows = appointments.for_senior(parse_id(senior_id, "senior"))
    return [AppointmentWithNames.from_appointment(a, include_senior=False) for a in rows]


@router.get("/volunteer/{volunteer_id}/appointments", response_model=List[AppointmentWithNames])
def volunteer_appointments(volunteer_id: str, appointments: AppointmentService = Depends(get_appointment_service)):
    rows = appointments.for_volunteer(parse_id(volunteer_id, "volunteer"))
    return [AppointmentWithNames.from_appointment(a, include_volunteer=False) for a in rows]


@router.post("/appointments/{appointment_id}/status", response_model=AppointmentOut)
def update_appointment_status(
    appointment_id: str,
    body: StatusUpdateRequest,
    appointments: AppointmentService = Depends(get_appointment_service)
):
    appointment = appointments.set_status(parse_id(appointment_id, "appointment"), body.status.value)
    return appointment
