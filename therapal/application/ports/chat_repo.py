from dataclasses import dataclass
from typing import List, Protocol
from datetime import datetime


@dataclass
class ChatMessageDto:
    id: str
    appointment_id: str
    sender_id: str
    message: str
    sent_at: datetime


class ChatRepository(Protocol):
    def list_for_appointment(self, appointment_id: str) -> List[ChatMessageDto]:
        """Messages of one appointment, oldest first."""
        ...

    def create(self, appointment_id: str, sender_id: str, message: str) -> ChatMessageDto:
        ...
