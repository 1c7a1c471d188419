from dataclasses import dataclass
from typing import Callable, List, Optional
from datetime import datetime
import logging
import threading

from ...exceptions import DomainError, NotFoundError, ValidationError
from ..context import Actor
from ..policies import require_party
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.change_feed import ChangeEvent, ChangeFeed, Subscription
from ..ports.chat_repo import ChatRepository, ChatMessageDto
from ..ports.profile_repo import ProfileRepository
from ..references import resolve_names

logger = logging.getLogger(__name__)

CHAT_TABLE = "chat_messages"


@dataclass
class ChatMessageView:
    id: str
    appointment_id: str
    sender_id: str
    sender_name: str
    message: str
    sent_at: datetime


class ChatWatch:
    """Live view of one appointment's messages; ``close()`` stops further refreshes."""

    def __init__(self, refresh: Callable[[], None]):
        self._refresh = refresh
        self._lock = threading.Lock()
        self._subscription: Optional[Subscription] = None
        self.closed = False

    def attach(self, subscription: Subscription) -> None:
        self._subscription = subscription

    def on_event(self, event: ChangeEvent) -> None:
        if self.closed or event.event != "INSERT":
            return
        with self._lock:
            if self.closed:
                return
            self._refresh()

    def close(self) -> None:
        self.closed = True
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None


@dataclass
class ChatService:
    chat_repo: ChatRepository
    repo: AppointmentsRepository
    profiles: ProfileRepository
    feed: ChangeFeed

    def _load(self, appointment_id: str) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt

    def _views(self, rows: List[ChatMessageDto]) -> List[ChatMessageView]:
        names = resolve_names(self.profiles, (m.sender_id for m in rows))
        ordered = sorted(rows, key=lambda m: m.sent_at)
        return [
            ChatMessageView(
                id=m.id,
                appointment_id=m.appointment_id,
                sender_id=m.sender_id,
                sender_name=names.get(m.sender_id, "Unknown"),
                message=m.message,
                sent_at=m.sent_at,
            )
            for m in ordered
        ]

    def list_messages(self, actor: Actor, appointment_id: str) -> List[ChatMessageView]:
        appt = self._load(appointment_id)
        require_party(actor, appt)
        return self._views(self.chat_repo.list_for_appointment(appointment_id))

    def send(self, actor: Actor, appointment_id: str, text: str) -> ChatMessageView:
        body = (text or "").strip()
        if not body:
            raise ValidationError("Message cannot be empty")
        appt = self._load(appointment_id)
        if appt.status != "confirmed":
            raise ValidationError("Chat is only available for confirmed appointments")
        require_party(actor, appt, allow_admin=False)

        row = self.chat_repo.create(appointment_id, actor.user_id, body)
        self.feed.publish(CHAT_TABLE, appointment_id, {
            "id": row.id,
            "appointment_id": row.appointment_id,
            "sender_id": row.sender_id,
            "sent_at": row.sent_at.isoformat(),
        })
        return ChatMessageView(
            id=row.id,
            appointment_id=row.appointment_id,
            sender_id=row.sender_id,
            sender_name=actor.full_name or "Unknown",
            message=row.message,
            sent_at=row.sent_at,
        )

    def watch(
        self,
        actor: Actor,
        appointment_id: str,
        on_messages: Callable[[List[ChatMessageView]], None],
        reload: Optional[Callable[[Actor, str], List[ChatMessageView]]] = None,
    ) -> ChatWatch:
        """Re-read the whole feed and hand it to ``on_messages`` on every new message.

        ``reload`` replaces ``list_messages`` for each refetch.
        """
        appt = self._load(appointment_id)
        require_party(actor, appt)
        read = reload or self.list_messages

        def refresh() -> None:
            try:
                messages = read(actor, appointment_id)
            except DomainError as e:
                logger.error(f"Chat refresh failed for appointment {appointment_id}: {e.message}")
                return
            on_messages(messages)

        watch = ChatWatch(refresh)
        watch.attach(self.feed.subscribe(CHAT_TABLE, appointment_id, watch.on_event))
        return watch
