# therapal/db/models/health/appointment.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, date, timezone
import uuid


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="profiles.id", index=True)
    doctor_id: str = Field(foreign_key="doctors.user_id", index=True)
    appointment_date: date
    appointment_time: str
    duration: int = Field(default=60)
    notes: Optional[str] = None
    total_amount: float
    status: str = Field(default="pending")
    payment_status: str = Field(default="pending")
    payment_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
