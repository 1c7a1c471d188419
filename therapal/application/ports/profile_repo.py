from typing import Dict, Iterable, List, Optional, Protocol
from datetime import datetime


class ProfileDto:
    def __init__(self, id: str, email: str, full_name: Optional[str], phone: Optional[str],
                 role: str, created_at: Optional[datetime] = None):
        self.id = id
        self.email = email
        self.full_name = full_name
        self.phone = phone
        self.role = role
        self.created_at = created_at


class ProfileRepository(Protocol):
    def get_by_id(self, profile_id: str) -> Optional[ProfileDto]:
        ...

    def get_many(self, profile_ids: Iterable[str]) -> Dict[str, ProfileDto]:
        ...

    def list_all(self) -> List[ProfileDto]:
        ...

    def create(self, profile_id: str, email: str, full_name: Optional[str], phone: Optional[str], role: str) -> ProfileDto:
        ...
