from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..context import Actor, ROLE_ADMIN, ROLE_DOCTOR, ROLE_USER
from ..policies import require_role
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.doctor_repo import DoctorRepository
from ..ports.profile_repo import ProfileRepository, ProfileDto
from ..references import resolve_names
from .doctor_service import DoctorService, DoctorView


@dataclass
class AppointmentView:
    appointment: AppointmentDto
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None


@dataclass
class AdminOverview:
    users: List[ProfileDto]
    doctors: List[DoctorView]
    appointments: List[AppointmentView]
    total_revenue: float
    pending_revenue: float
    status_counts: Dict[str, int] = field(default_factory=dict)
    pending_doctors: int = 0


@dataclass
class DashboardService:
    repo: AppointmentsRepository
    doctor_repo: DoctorRepository
    profiles: ProfileRepository

    def _with_names(self, appts: List[AppointmentDto]) -> List[AppointmentView]:
        patients = resolve_names(self.profiles, (a.patient_id for a in appts), default="Unknown Patient")
        doctors = resolve_names(self.profiles, (a.doctor_id for a in appts), default="Unknown Doctor")
        found = self.doctor_repo.get_many({a.doctor_id for a in appts}) if appts else {}
        specializations = {doctor_id: d.specialization for doctor_id, d in found.items()}
        return [
            AppointmentView(
                appointment=a,
                patient_name=patients.get(a.patient_id, "Unknown Patient"),
                doctor_name=doctors.get(a.doctor_id, "Unknown Doctor"),
                doctor_specialization=specializations.get(a.doctor_id),
            )
            for a in appts
        ]

    def my_appointments(self, actor: Actor) -> List[AppointmentView]:
        require_role(actor, ROLE_USER, ROLE_DOCTOR)
        if actor.role == ROLE_DOCTOR:
            return self._with_names(self.repo.list_for_doctor(actor.user_id))
        return self._with_names(self.repo.list_for_patient(actor.user_id))

    def admin_overview(self, actor: Actor) -> AdminOverview:
        require_role(actor, ROLE_ADMIN)
        appts = self.repo.list_all()
        doctors = DoctorService(self.doctor_repo, self.profiles).list_all(actor)

        counts: Dict[str, int] = {}
        for a in appts:
            counts[a.status] = counts.get(a.status, 0) + 1

        return AdminOverview(
            users=self.profiles.list_all(),
            doctors=doctors,
            appointments=self._with_names(appts),
            total_revenue=round(sum(a.total_amount for a in appts if a.payment_status == "paid"), 2),
            pending_revenue=round(sum(a.total_amount for a in appts if a.payment_status == "pending"), 2),
            status_counts=counts,
            pending_doctors=len([d for d in doctors if d.status == "pending"]),
        )
