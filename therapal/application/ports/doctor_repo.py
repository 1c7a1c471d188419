from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol
from datetime import datetime


@dataclass
class DoctorDto:
    user_id: str
    specialization: str
    bio: Optional[str]
    experience_years: int
    hourly_rate: float
    languages: List[str] = field(default_factory=list)
    status: str = "pending"
    created_at: Optional[datetime] = None

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"


class DoctorRepository(Protocol):
    def get(self, user_id: str) -> Optional[DoctorDto]:
        ...

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, DoctorDto]:
        ...

    def list_by_status(self, status: str) -> List[DoctorDto]:
        ...

    def list_all(self) -> List[DoctorDto]:
        ...

    def create(self, user_id: str, specialization: str, bio: Optional[str], experience_years: int, hourly_rate: float, languages: List[str]) -> DoctorDto:
        ...

    def update_status(self, user_id: str, status: str) -> Optional[DoctorDto]:
        ...
