import asyncio
import logging
from typing import Callable, List, Tuple

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from ..exceptions import DomainError
from ..utils import decode_jwt_token
from ..application.context import Actor
from ..application.services.chat_service import ChatMessageView, ChatService, ChatWatch
from ..schemas.chat.chat import ChatMessageCreate, ChatMessageResponse
from .deps import (
    actor_from_claims,
    build_chat_service,
    get_chat_service,
    get_current_actor,
    get_session_factory,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Chat"])


def to_response(m: ChatMessageView) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=m.id,
        appointment_id=m.appointment_id,
        sender_id=m.sender_id,
        sender_name=m.sender_name,
        message=m.message,
        sent_at=m.sent_at,
    )


@router.get("/{appointment_id}/messages", response_model=List[ChatMessageResponse])
def list_messages(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    chat: ChatService = Depends(get_chat_service),
):
    return [to_response(m) for m in chat.list_messages(actor, appointment_id)]


@router.post("/{appointment_id}/messages", response_model=ChatMessageResponse, status_code=201)
def send_message(
    appointment_id: str,
    body: ChatMessageCreate,
    actor: Actor = Depends(get_current_actor),
    chat: ChatService = Depends(get_chat_service),
):
    return to_response(chat.send(actor, appointment_id, body.message))


def _serialize(messages: List[ChatMessageView]) -> List[dict]:
    return [to_response(m).model_dump(mode="json") for m in messages]


@router.websocket("/{appointment_id}/messages/ws")
async def message_updates(
    websocket: WebSocket,
    appointment_id: str,
    token: str = Query(...),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """Push the full message list whenever a new message lands."""
    claims = decode_jwt_token(token)
    if not claims or not claims.get("sub"):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    feed = websocket.app.state.change_feed
    loop = asyncio.get_running_loop()
    updates: "asyncio.Queue[List[ChatMessageView]]" = asyncio.Queue()

    def push(messages: List[ChatMessageView]) -> None:
        loop.call_soon_threadsafe(updates.put_nowait, messages)

    # every read gets its own session; nothing is held between events
    def reload(actor: Actor, appt_id: str) -> List[ChatMessageView]:
        with session_factory() as session:
            return build_chat_service(session, feed).list_messages(actor, appt_id)

    def open_watch() -> Tuple[List[ChatMessageView], ChatWatch]:
        with session_factory() as session:
            actor = actor_from_claims(claims, session)
            chat = build_chat_service(session, feed)
            initial = chat.list_messages(actor, appointment_id)
            return initial, chat.watch(actor, appointment_id, push, reload=reload)

    try:
        initial, watch = await run_in_threadpool(open_watch)
    except DomainError as e:
        logger.info(f"Chat socket refused for {appointment_id}: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    async def send_updates() -> None:
        await websocket.send_json(_serialize(initial))
        while True:
            messages = await updates.get()
            await websocket.send_json(_serialize(messages))

    await websocket.accept()
    sender = asyncio.create_task(send_updates())
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        watch.close()
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        logger.info(f"Chat socket closed for {appointment_id}")
