from typing import Dict, Iterable, List, Optional
from datetime import datetime, timezone
from sqlmodel import Session, select

from .....db.models import Doctor
from .....application.ports.doctor_repo import DoctorRepository, DoctorDto
from .base import persistence_guard


class SqlDoctorRepository(DoctorRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, d: Doctor) -> DoctorDto:
        return DoctorDto(
            user_id=d.user_id,
            specialization=d.specialization,
            bio=d.bio,
            experience_years=d.experience_years,
            hourly_rate=d.hourly_rate,
            languages=list(d.languages or []),
            status=d.status,
            created_at=d.created_at,
        )

    def get(self, user_id: str) -> Optional[DoctorDto]:
        with persistence_guard(self.session, "load doctor"):
            d = self.session.exec(select(Doctor).where(Doctor.user_id == user_id)).first()
            return self._to_dto(d) if d else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, DoctorDto]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        with persistence_guard(self.session, "load doctors"):
            rows = self.session.exec(select(Doctor).where(Doctor.user_id.in_(ids))).all()
            return {d.user_id: self._to_dto(d) for d in rows}

    def list_by_status(self, status: str) -> List[DoctorDto]:
        with persistence_guard(self.session, "list doctors"):
            rows = self.session.exec(select(Doctor).where(Doctor.status == status)).all()
            return [self._to_dto(d) for d in rows]

    def list_all(self) -> List[DoctorDto]:
        with persistence_guard(self.session, "list doctors"):
            rows = self.session.exec(select(Doctor).order_by(Doctor.created_at.desc())).all()
            return [self._to_dto(d) for d in rows]

    def create(self, user_id: str, specialization: str, bio: Optional[str], experience_years: int, hourly_rate: float, languages: List[str]) -> DoctorDto:
        with persistence_guard(self.session, "create doctor"):
            d = Doctor(
                user_id=user_id,
                specialization=specialization,
                bio=bio,
                experience_years=experience_years,
                hourly_rate=hourly_rate,
                languages=list(languages),
                status="pending",
            )
            self.session.add(d)
            self.session.commit()
            self.session.refresh(d)
            return self._to_dto(d)

    def update_status(self, user_id: str, status: str) -> Optional[DoctorDto]:
        with persistence_guard(self.session, "update doctor status"):
            d = self.session.exec(select(Doctor).where(Doctor.user_id == user_id)).first()
            if not d:
                return None
            d.status = status
            d.updated_at = datetime.now(timezone.utc)
            self.session.add(d)
            self.session.commit()
            self.session.refresh(d)
            return self._to_dto(d)
