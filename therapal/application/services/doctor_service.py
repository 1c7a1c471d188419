from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime

from ...exceptions import ConflictError, ValidationError
from ..context import Actor, ROLE_DOCTOR, ROLE_ADMIN
from ..policies import require_role
from ..ports.doctor_repo import DoctorRepository, DoctorDto
from ..ports.profile_repo import ProfileRepository
from ..references import resolve_names

DEFAULT_LANGUAGES = ["English"]


@dataclass
class DoctorView:
    user_id: str
    full_name: str
    specialization: str
    bio: Optional[str]
    experience_years: int
    hourly_rate: float
    languages: List[str] = field(default_factory=list)
    status: str = "pending"
    created_at: Optional[datetime] = None


@dataclass
class DoctorService:
    doctor_repo: DoctorRepository
    profiles: ProfileRepository

    def _views(self, doctors: List[DoctorDto]) -> List[DoctorView]:
        names = resolve_names(self.profiles, (d.user_id for d in doctors), default="Unknown Doctor")
        return [
            DoctorView(
                user_id=d.user_id,
                full_name=names.get(d.user_id, "Unknown Doctor"),
                specialization=d.specialization,
                bio=d.bio,
                experience_years=d.experience_years,
                hourly_rate=d.hourly_rate,
                languages=list(d.languages),
                status=d.status,
                created_at=d.created_at,
            )
            for d in doctors
        ]

    def describe(self, doctor: DoctorDto) -> DoctorView:
        return self._views([doctor])[0]

    def list_bookable(self) -> List[DoctorView]:
        return self._views(self.doctor_repo.list_by_status("approved"))

    def list_all(self, actor: Actor) -> List[DoctorView]:
        require_role(actor, ROLE_ADMIN)
        return self._views(self.doctor_repo.list_all())

    def apply(self, actor: Actor, specialization: str, bio: Optional[str], experience_years: int, hourly_rate: float, languages: Optional[List[str]] = None) -> DoctorDto:
        """File a doctor application; it stays ``pending`` until an admin decides."""
        require_role(actor, ROLE_DOCTOR)
        if not specialization or not specialization.strip():
            raise ValidationError("Specialization is required")
        if hourly_rate is None or hourly_rate <= 0:
            raise ValidationError("Hourly rate must be positive")
        if experience_years is not None and experience_years < 0:
            raise ValidationError("Experience cannot be negative")
        langs = [lang.strip() for lang in (languages or []) if lang and lang.strip()] or list(DEFAULT_LANGUAGES)

        if self.doctor_repo.get(actor.user_id):
            raise ConflictError("Doctor application already exists")
        return self.doctor_repo.create(
            user_id=actor.user_id,
            specialization=specialization.strip(),
            bio=(bio or "").strip() or None,
            experience_years=experience_years or 0,
            hourly_rate=float(hourly_rate),
            languages=langs,
        )
