from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from ...exceptions import AuthenticationError, NotFoundError
from ..context import ROLE_DOCTOR, ROLE_USER
from ..ports.doctor_repo import DoctorRepository
from ..ports.profile_repo import ProfileRepository, ProfileDto

logger = logging.getLogger(__name__)

SELF_ASSIGNABLE_ROLES = (ROLE_USER, ROLE_DOCTOR)
DEFAULT_HOURLY_RATE = 50.0


@dataclass
class ProfileService:
    profiles: ProfileRepository
    doctor_repo: DoctorRepository

    def get(self, profile_id: str) -> ProfileDto:
        profile = self.profiles.get_by_id(profile_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def provision(self, claims: Dict[str, Any]) -> ProfileDto:
        """Return the caller's profile, creating it from sign-up metadata on first use."""
        user_id = claims.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token: missing user ID")
        meta = claims.get("user_metadata") or {}
        existing = self.profiles.get_by_id(user_id)
        if existing:
            # an earlier sign-up may have stored the profile but not the application
            if existing.role == ROLE_DOCTOR and meta.get("specialization") and not self.doctor_repo.get(user_id):
                self._file_application(user_id, meta)
            return existing

        role = meta.get("role") if meta.get("role") in SELF_ASSIGNABLE_ROLES else ROLE_USER
        profile = self.profiles.create(
            profile_id=user_id,
            email=claims.get("email") or "",
            full_name=meta.get("full_name"),
            phone=meta.get("phone"),
            role=role,
        )
        logger.info(f"Provisioned {role} profile {user_id}")

        if role == ROLE_DOCTOR and meta.get("specialization"):
            self._file_application(user_id, meta)
        return profile

    def _file_application(self, user_id: str, meta: Dict[str, Any]) -> None:
        self.doctor_repo.create(
            user_id=user_id,
            specialization=meta["specialization"],
            bio=meta.get("bio"),
            experience_years=_as_int(meta.get("experience_years")),
            hourly_rate=_as_rate(meta.get("hourly_rate")),
            languages=meta.get("languages") or ["English"],
        )
        logger.info(f"Filed pending doctor application for {user_id}")


def _as_int(value: Optional[Any]) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _as_rate(value: Optional[Any]) -> float:
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return DEFAULT_HOURLY_RATE
    return rate if rate > 0 else DEFAULT_HOURLY_RATE
