from typing import Optional

from ..exceptions import AuthorizationError
from .context import Actor, ROLE_ADMIN, ROLE_DOCTOR
from .ports.appointments_repo import AppointmentDto


def require_role(actor: Optional[Actor], *roles: str) -> Actor:
    if actor is None:
        raise AuthorizationError("Sign in required")
    if actor.role not in roles:
        raise AuthorizationError("Access forbidden: insufficient role")
    return actor


def is_party(actor: Actor, appointment: AppointmentDto) -> bool:
    return actor.user_id in (appointment.patient_id, appointment.doctor_id)


def require_party(actor: Actor, appointment: AppointmentDto, allow_admin: bool = True) -> None:
    if allow_admin and actor.is_admin:
        return
    if not is_party(actor, appointment):
        raise AuthorizationError("Only the patient or the assigned doctor may access this appointment")


def require_assigned_doctor_or_admin(actor: Actor, appointment: AppointmentDto) -> None:
    if actor.role == ROLE_ADMIN:
        return
    if actor.role == ROLE_DOCTOR and actor.user_id == appointment.doctor_id:
        return
    raise AuthorizationError("Only the assigned doctor or an admin may change this appointment")
