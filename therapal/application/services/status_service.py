from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional
import logging

from ...exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..context import Actor, ROLE_ADMIN
from ..policies import require_assigned_doctor_or_admin, require_role
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.audit_logger import AuditLogger
from ..ports.doctor_repo import DoctorRepository, DoctorDto

logger = logging.getLogger(__name__)

APPOINTMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "cancelled": frozenset(),
    "completed": frozenset(),
}

PAYMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"paid", "failed"}),
    "paid": frozenset(),
    "failed": frozenset(),
}

DOCTOR_STATUSES = ("pending", "approved", "rejected")


@dataclass
class StatusService:
    repo: AppointmentsRepository
    doctor_repo: DoctorRepository
    audit: Optional[AuditLogger] = None

    def _audit(self, action: str, actor: Actor, target_id: str, success: bool, details: dict) -> None:
        if self.audit is not None:
            self.audit.log(action, actor.user_id, target_id, success=success, details=details)

    def _load(self, appointment_id: str) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt

    def _move(self, actor: Actor, appointment_id: str, target: str) -> AppointmentDto:
        appt = self._load(appointment_id)
        require_assigned_doctor_or_admin(actor, appt)
        allowed = APPOINTMENT_TRANSITIONS.get(appt.status, frozenset())
        if target not in allowed:
            self._audit("appointment_status", actor, appointment_id, False, {"from": appt.status, "to": target})
            raise InvalidTransitionError(f"Cannot move appointment from {appt.status} to {target}")

        updated = self.repo.update_status(appointment_id, target)
        if not updated:
            raise NotFoundError("Appointment not found")
        self._audit("appointment_status", actor, appointment_id, True, {"from": appt.status, "to": target})
        logger.info(f"Appointment {appointment_id}: {appt.status} -> {target} by {actor.user_id}")
        return updated

    def confirm(self, actor: Actor, appointment_id: str) -> AppointmentDto:
        return self._move(actor, appointment_id, "confirmed")

    def cancel(self, actor: Actor, appointment_id: str) -> AppointmentDto:
        # payment status is left alone
        return self._move(actor, appointment_id, "cancelled")

    def complete(self, actor: Actor, appointment_id: str) -> AppointmentDto:
        return self._move(actor, appointment_id, "completed")

    def set_payment_status(self, actor: Actor, appointment_id: str, payment_status: str) -> AppointmentDto:
        require_role(actor, ROLE_ADMIN)
        if payment_status not in PAYMENT_TRANSITIONS:
            raise ValidationError(f"Invalid payment status. Must be one of: {list(PAYMENT_TRANSITIONS)}")
        appt = self._load(appointment_id)
        if payment_status not in PAYMENT_TRANSITIONS.get(appt.payment_status, frozenset()):
            raise InvalidTransitionError(f"Cannot move payment from {appt.payment_status} to {payment_status}")

        updated = self.repo.update_payment_status(appointment_id, payment_status)
        if not updated:
            raise NotFoundError("Appointment not found")
        self._audit("payment_status", actor, appointment_id, True, {"from": appt.payment_status, "to": payment_status})
        return updated

    def set_doctor_approval(self, actor: Actor, doctor_id: str, status: str) -> DoctorDto:
        require_role(actor, ROLE_ADMIN)
        if status not in DOCTOR_STATUSES:
            raise ValidationError(f"Invalid doctor status. Must be one of: {list(DOCTOR_STATUSES)}")
        updated = self.doctor_repo.update_status(doctor_id, status)
        if not updated:
            raise NotFoundError("Doctor not found")
        self._audit("doctor_approval", actor, doctor_id, True, {"to": status})
        logger.info(f"Doctor {doctor_id} marked {status} by {actor.user_id}")
        return updated
