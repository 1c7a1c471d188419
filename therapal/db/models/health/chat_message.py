# therapal/db/models/health/chat_message.py
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone
import uuid


class ChatMessage(SQLModel, table=True):
    __tablename__ = "chat_messages"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    appointment_id: str = Field(foreign_key="appointments.id", index=True)
    sender_id: str = Field(foreign_key="profiles.id")
    message: str
    sent_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
