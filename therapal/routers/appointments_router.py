from typing import List, Optional
from fastapi import APIRouter, Depends
import logging

from ..application.context import Actor
from ..application.ports.appointments_repo import AppointmentDto
from ..application.services.booking_service import BookingService
from ..application.services.dashboard_service import AppointmentView, DashboardService
from ..application.services.status_service import StatusService
from ..schemas.appointments.appointment import AppointmentCreate, AppointmentResponse, BookingResponse
from .deps import get_booking_service, get_current_actor, get_dashboard_service, get_status_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def to_response(a: AppointmentDto, view: Optional[AppointmentView] = None) -> AppointmentResponse:
    return AppointmentResponse(
        id=a.id,
        patient_id=a.patient_id,
        doctor_id=a.doctor_id,
        appointment_date=a.appointment_date.strftime("%Y-%m-%d"),
        appointment_time=a.appointment_time,
        duration=a.duration,
        notes=a.notes,
        total_amount=a.total_amount,
        status=a.status,
        payment_status=a.payment_status,
        payment_id=a.payment_id,
        created_at=a.created_at,
        patient_name=view.patient_name if view else None,
        doctor_name=view.doctor_name if view else None,
        doctor_specialization=view.doctor_specialization if view else None,
    )


@router.post("/", response_model=BookingResponse, status_code=201)
async def book_appointment(
    appointment_data: AppointmentCreate,
    actor: Actor = Depends(get_current_actor),
    booking: BookingService = Depends(get_booking_service),
):
    result = await booking.book(
        actor,
        doctor_id=appointment_data.doctor_id,
        appointment_date_str=appointment_data.appointment_date,
        appointment_time=appointment_data.appointment_time,
        duration=appointment_data.duration,
        notes=appointment_data.notes,
    )
    return BookingResponse(
        appointment=to_response(result.appointment),
        payment_url=result.payment_url,
        payment_error=result.payment_error,
    )


@router.get("/", response_model=List[AppointmentResponse])
def get_my_appointments(
    actor: Actor = Depends(get_current_actor),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return [to_response(v.appointment, v) for v in dashboard.my_appointments(actor)]


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    statuses: StatusService = Depends(get_status_service),
):
    return to_response(statuses.confirm(actor, appointment_id))


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    statuses: StatusService = Depends(get_status_service),
):
    return to_response(statuses.cancel(actor, appointment_id))


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    statuses: StatusService = Depends(get_status_service),
):
    return to_response(statuses.complete(actor, appointment_id))
