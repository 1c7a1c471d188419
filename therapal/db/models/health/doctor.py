# therapal/db/models/health/doctor.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime, timezone


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    user_id: str = Field(foreign_key="profiles.id", primary_key=True)
    specialization: str
    bio: Optional[str] = None
    experience_years: int = Field(default=0)
    hourly_rate: float
    languages: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(default="pending", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
