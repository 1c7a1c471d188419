from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime, date


@dataclass
class AppointmentDto:
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: date
    appointment_time: str
    duration: int
    notes: Optional[str]
    total_amount: float
    status: str
    payment_status: str
    payment_id: Optional[str]
    created_at: datetime
    updated_at: datetime


class AppointmentsRepository:
    def create(self, patient_id: str, doctor_id: str, appointment_date: date, appointment_time: str, duration: int, notes: Optional[str], total_amount: float) -> AppointmentDto:
        ...

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        ...

    def list_for_doctor(self, doctor_id: str) -> List[AppointmentDto]:
        ...

    def list_all(self) -> List[AppointmentDto]:
        ...

    def update_status(self, appointment_id: str, status: str) -> Optional[AppointmentDto]:
        ...

    def update_payment_status(self, appointment_id: str, payment_status: str) -> Optional[AppointmentDto]:
        ...

    def set_payment_reference(self, appointment_id: str, payment_id: str) -> Optional[AppointmentDto]:
        ...
