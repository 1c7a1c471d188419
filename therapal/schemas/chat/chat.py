# therapal/schemas/chat/chat.py
from pydantic import BaseModel, Field
from datetime import datetime


class ChatMessageCreate(BaseModel):
    message: str = Field(max_length=4000)


class ChatMessageResponse(BaseModel):
    id: str
    appointment_id: str
    sender_id: str
    sender_name: str
    message: str
    sent_at: datetime
