from typing import Any, Dict
from fastapi import APIRouter, Depends

from ..application.context import Actor
from ..application.services.dashboard_service import DashboardService
from ..application.services.doctor_service import DoctorService
from ..application.services.status_service import StatusService
from ..schemas.appointments.appointment import AdminSummary, AppointmentResponse, PaymentStatusUpdate
from ..schemas.doctors.doctor import DoctorResponse, DoctorStatusUpdate
from . import appointments_router, doctors_router, profiles_router
from .deps import get_current_actor, get_dashboard_service, get_doctor_service, get_status_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/overview")
def get_overview(
    actor: Actor = Depends(get_current_actor),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    overview = dashboard.admin_overview(actor)
    return {
        "users": [profiles_router.to_response(p) for p in overview.users],
        "doctors": [doctors_router.to_response(d) for d in overview.doctors],
        "appointments": [appointments_router.to_response(v.appointment, v) for v in overview.appointments],
        "summary": AdminSummary(
            total_revenue=overview.total_revenue,
            pending_revenue=overview.pending_revenue,
            status_counts=overview.status_counts,
            pending_doctors=overview.pending_doctors,
        ),
    }


@router.put("/doctors/{doctor_id}/status", response_model=DoctorResponse)
def set_doctor_status(
    doctor_id: str,
    body: DoctorStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    statuses: StatusService = Depends(get_status_service),
    doctors: DoctorService = Depends(get_doctor_service),
):
    d = statuses.set_doctor_approval(actor, doctor_id, body.status)
    return doctors_router.to_response(doctors.describe(d))


@router.put("/appointments/{appointment_id}/payment-status", response_model=AppointmentResponse)
def set_payment_status(
    appointment_id: str,
    body: PaymentStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    statuses: StatusService = Depends(get_status_service),
):
    return appointments_router.to_response(statuses.set_payment_status(actor, appointment_id, body.payment_status))
