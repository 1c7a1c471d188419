# therapal/schemas/doctors/doctor.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class DoctorApplication(BaseModel):
    specialization: str = Field(min_length=1)
    bio: Optional[str] = None
    experience_years: int = Field(default=0, ge=0)
    hourly_rate: float
    languages: List[str] = []


class DoctorResponse(BaseModel):
    user_id: str
    full_name: str
    specialization: str
    bio: Optional[str] = None
    experience_years: int = 0
    hourly_rate: float
    languages: List[str] = []
    status: str
    created_at: Optional[datetime] = None


class DoctorStatusUpdate(BaseModel):
    status: str
