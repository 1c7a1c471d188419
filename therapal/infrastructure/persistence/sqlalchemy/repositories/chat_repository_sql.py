from typing import List
from sqlmodel import Session, select

from .....db.models import ChatMessage
from .....application.ports.chat_repo import ChatRepository, ChatMessageDto
from .base import persistence_guard


class SqlChatRepository(ChatRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, m: ChatMessage) -> ChatMessageDto:
        return ChatMessageDto(
            id=m.id,
            appointment_id=m.appointment_id,
            sender_id=m.sender_id,
            message=m.message,
            sent_at=m.sent_at,
        )

    def list_for_appointment(self, appointment_id: str) -> List[ChatMessageDto]:
        with persistence_guard(self.session, "load messages"):
            rows = self.session.exec(
                select(ChatMessage)
                .where(ChatMessage.appointment_id == appointment_id)
                .order_by(ChatMessage.sent_at.asc())
            ).all()
            return [self._to_dto(m) for m in rows]

    def create(self, appointment_id: str, sender_id: str, message: str) -> ChatMessageDto:
        with persistence_guard(self.session, "send message"):
            m = ChatMessage(appointment_id=appointment_id, sender_id=sender_id, message=message)
            self.session.add(m)
            self.session.commit()
            self.session.refresh(m)
            return self._to_dto(m)
