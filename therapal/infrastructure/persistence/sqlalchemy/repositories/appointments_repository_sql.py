from typing import List, Optional
from datetime import date, datetime, timezone
from sqlmodel import Session, select

from .....db.models import Appointment
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
)
from .base import persistence_guard


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_date=a.appointment_date,
            appointment_time=a.appointment_time,
            duration=a.duration,
            notes=a.notes,
            total_amount=a.total_amount,
            status=a.status,
            payment_status=a.payment_status,
            payment_id=a.payment_id,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def _get(self, appointment_id: str) -> Optional[Appointment]:
        return self.session.exec(select(Appointment).where(Appointment.id == appointment_id)).first()

    def _update(self, appointment_id: str, action: str, **fields) -> Optional[AppointmentDto]:
        with persistence_guard(self.session, action):
            a = self._get(appointment_id)
            if not a:
                return None
            for name, value in fields.items():
                setattr(a, name, value)
            a.updated_at = datetime.now(timezone.utc)
            self.session.add(a)
            self.session.commit()
            self.session.refresh(a)
            return self._appt_to_dto(a)

    def create(self, patient_id: str, doctor_id: str, appointment_date: date, appointment_time: str, duration: int, notes: Optional[str], total_amount: float) -> AppointmentDto:
        with persistence_guard(self.session, "create appointment"):
            appt = Appointment(
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                duration=duration,
                notes=notes,
                total_amount=total_amount,
                status="pending",
                payment_status="pending",
            )
            self.session.add(appt)
            self.session.commit()
            self.session.refresh(appt)
            return self._appt_to_dto(appt)

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        with persistence_guard(self.session, "load appointment"):
            a = self._get(appointment_id)
            return self._appt_to_dto(a) if a else None

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        with persistence_guard(self.session, "list appointments"):
            rows = self.session.exec(
                select(Appointment)
                .where(Appointment.patient_id == patient_id)
                .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
            ).all()
            return [self._appt_to_dto(r) for r in rows]

    def list_for_doctor(self, doctor_id: str) -> List[AppointmentDto]:
        with persistence_guard(self.session, "list appointments"):
            rows = self.session.exec(
                select(Appointment)
                .where(Appointment.doctor_id == doctor_id)
                .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
            ).all()
            return [self._appt_to_dto(r) for r in rows]

    def list_all(self) -> List[AppointmentDto]:
        with persistence_guard(self.session, "list appointments"):
            rows = self.session.exec(
                select(Appointment).order_by(Appointment.appointment_date.desc())
            ).all()
            return [self._appt_to_dto(r) for r in rows]

    def update_status(self, appointment_id: str, status: str) -> Optional[AppointmentDto]:
        return self._update(appointment_id, "update appointment status", status=status)

    def update_payment_status(self, appointment_id: str, payment_status: str) -> Optional[AppointmentDto]:
        return self._update(appointment_id, "update payment status", payment_status=payment_status)

    def set_payment_reference(self, appointment_id: str, payment_id: str) -> Optional[AppointmentDto]:
        return self._update(appointment_id, "record payment reference", payment_id=payment_id)
