from dataclasses import dataclass, field
from typing import Callable, Optional
from datetime import datetime, date
import logging

from ...exceptions import PaymentInitiationError, ValidationError
from ..context import Actor, ROLE_USER
from ..policies import require_role
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.doctor_repo import DoctorRepository
from .payment_service import PaymentService

logger = logging.getLogger(__name__)

ALLOWED_DURATIONS = (30, 60, 90)


def compute_total(hourly_rate: float, duration: int) -> float:
    return round(hourly_rate * duration / 60, 2)


@dataclass
class BookingResult:
    appointment: AppointmentDto
    payment_url: Optional[str] = None
    payment_error: Optional[str] = None


@dataclass
class BookingService:
    repo: AppointmentsRepository
    doctor_repo: DoctorRepository
    payments: PaymentService
    today: Callable[[], date] = field(default=date.today)

    def _validate(self, doctor_id: str, appointment_date_str: str, appointment_time: str, duration: int) -> date:
        if not doctor_id:
            raise ValidationError("Please select a doctor")
        if not appointment_date_str or not appointment_time:
            raise ValidationError("Appointment date and time are required")

        try:
            appointment_date = datetime.strptime(appointment_date_str, "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError("Invalid appointment date format. Use YYYY-MM-DD")

        if appointment_date < self.today():
            raise ValidationError("Appointment date cannot be in the past")

        try:
            datetime.strptime(appointment_time, "%H:%M")
        except ValueError:
            raise ValidationError("Invalid appointment time format. Use HH:MM")

        if duration not in ALLOWED_DURATIONS:
            raise ValidationError(f"Invalid duration. Must be one of: {list(ALLOWED_DURATIONS)}")
        return appointment_date

    async def book(self, actor: Actor, doctor_id: str, appointment_date_str: str, appointment_time: str, duration: int = 60, notes: Optional[str] = None) -> BookingResult:
        require_role(actor, ROLE_USER)
        appointment_date = self._validate(doctor_id, appointment_date_str, appointment_time, duration)

        doctor = self.doctor_repo.get(doctor_id)
        if not doctor:
            raise ValidationError("Doctor not found")
        if not doctor.is_approved:
            raise ValidationError("Doctor is not available for booking")

        total_amount = compute_total(doctor.hourly_rate, duration)
        appointment = self.repo.create(
            patient_id=actor.user_id,
            doctor_id=doctor.user_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            duration=duration,
            notes=(notes or "").strip() or None,
            total_amount=total_amount,
        )
        logger.info(f"Appointment {appointment.id} booked by {actor.user_id} with doctor {doctor.user_id} ({total_amount})")

        # the booking stands whatever happens to the payment
        try:
            initiation = await self.payments.initiate(appointment, actor)
        except PaymentInitiationError as e:
            logger.warning(f"Payment initiation failed for appointment {appointment.id}: {e.message}")
            return BookingResult(appointment=appointment, payment_error=e.message)

        return BookingResult(appointment=initiation.appointment, payment_url=initiation.payment_url)
