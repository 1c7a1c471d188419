# therapal/schemas/appointments/appointment.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime


class AppointmentCreate(BaseModel):
    doctor_id: str
    appointment_date: str  # YYYY-MM-DD
    appointment_time: str  # HH:MM
    duration: int = 60
    notes: Optional[str] = Field(default=None, max_length=2000)


class AppointmentResponse(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: str
    appointment_time: str
    duration: int
    notes: Optional[str] = None
    total_amount: float
    status: str
    payment_status: str
    payment_id: Optional[str] = None
    created_at: datetime
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None


class BookingResponse(BaseModel):
    appointment: AppointmentResponse
    payment_url: Optional[str] = None
    payment_error: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    payment_status: str


class AdminSummary(BaseModel):
    total_revenue: float
    pending_revenue: float
    status_counts: Dict[str, int]
    pending_doctors: int
