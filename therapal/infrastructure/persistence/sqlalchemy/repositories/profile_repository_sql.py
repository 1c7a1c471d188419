from typing import Dict, Iterable, List, Optional
from sqlmodel import Session, select

from .....db.models import Profile
from .....application.ports.profile_repo import ProfileRepository, ProfileDto
from .base import persistence_guard


class SqlProfileRepository(ProfileRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, p: Profile) -> ProfileDto:
        return ProfileDto(
            id=p.id,
            email=p.email,
            full_name=p.full_name,
            phone=p.phone,
            role=p.role,
            created_at=p.created_at,
        )

    def get_by_id(self, profile_id: str) -> Optional[ProfileDto]:
        with persistence_guard(self.session, "load profile"):
            p = self.session.exec(select(Profile).where(Profile.id == profile_id)).first()
            return self._to_dto(p) if p else None

    def get_many(self, profile_ids: Iterable[str]) -> Dict[str, ProfileDto]:
        ids = list(set(profile_ids))
        if not ids:
            return {}
        with persistence_guard(self.session, "load profiles"):
            rows = self.session.exec(select(Profile).where(Profile.id.in_(ids))).all()
            return {p.id: self._to_dto(p) for p in rows}

    def list_all(self) -> List[ProfileDto]:
        with persistence_guard(self.session, "list profiles"):
            rows = self.session.exec(select(Profile).order_by(Profile.created_at.desc())).all()
            return [self._to_dto(p) for p in rows]

    def create(self, profile_id: str, email: str, full_name: Optional[str], phone: Optional[str], role: str) -> ProfileDto:
        with persistence_guard(self.session, "create profile"):
            p = Profile(id=profile_id, email=email, full_name=full_name, phone=phone, role=role)
            self.session.add(p)
            self.session.commit()
            self.session.refresh(p)
            return self._to_dto(p)
