from dataclasses import dataclass
from typing import Optional

from .ports.profile_repo import ProfileDto

ROLE_USER = "user"
ROLE_DOCTOR = "doctor"
ROLE_ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """The signed-in caller, resolved once per request and passed into every workflow."""

    user_id: str
    role: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: ProfileDto) -> "Actor":
        return cls(
            user_id=profile.id,
            role=profile.role,
            email=profile.email,
            full_name=profile.full_name,
            phone=profile.phone,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
