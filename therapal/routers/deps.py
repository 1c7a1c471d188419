from typing import Any, Callable, Dict, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from ..config import settings
from ..database import get_session, new_session
from ..exceptions import AuthenticationError
from ..utils import decode_jwt_token
from ..application.context import Actor
from ..application.ports.change_feed import ChangeFeed
from ..application.ports.payment_provider import PaymentProvider
from ..application.services.booking_service import BookingService
from ..application.services.chat_service import ChatService
from ..application.services.dashboard_service import DashboardService
from ..application.services.doctor_service import DoctorService
from ..application.services.payment_service import PaymentService
from ..application.services.profile_service import ProfileService
from ..application.services.status_service import StatusService
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.payments.irembopay_provider import IremboPayProvider
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.chat_repository_sql import SqlChatRepository
from ..infrastructure.persistence.sqlalchemy.repositories.doctor_repository_sql import SqlDoctorRepository
from ..infrastructure.persistence.sqlalchemy.repositories.profile_repository_sql import SqlProfileRepository

oauth2_scheme = HTTPBearer(auto_error=False)


def get_token_claims(credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")
    if not payload.get("sub"):
        raise AuthenticationError("Invalid token: missing user ID")
    return payload


def actor_from_claims(claims: Dict[str, Any], session: Session) -> Actor:
    profile = SqlProfileRepository(session).get_by_id(claims["sub"])
    if not profile:
        raise AuthenticationError("Profile not set up; call POST /profiles/me first")
    return Actor.from_profile(profile)


def get_current_actor(
    claims: Dict[str, Any] = Depends(get_token_claims),
    session: Session = Depends(get_session),
) -> Actor:
    return actor_from_claims(claims, session)


def get_change_feed(request: Request) -> ChangeFeed:
    return request.app.state.change_feed


def get_session_factory() -> Callable[[], Session]:
    return new_session


def get_payment_provider() -> PaymentProvider:
    return IremboPayProvider()


def get_payment_service(
    session: Session = Depends(get_session),
    provider: PaymentProvider = Depends(get_payment_provider),
) -> PaymentService:
    return PaymentService(
        repo=SqlAppointmentsRepository(session),
        provider=provider,
        payment_account=settings.IREMBOPAY_PAYMENT_ACCOUNT,
        transaction_prefix=settings.PAYMENT_TRANSACTION_PREFIX,
        expiry_hours=settings.PAYMENT_EXPIRY_HOURS,
        language=settings.PAYMENT_LANGUAGE,
    )


def get_booking_service(
    session: Session = Depends(get_session),
    payments: PaymentService = Depends(get_payment_service),
) -> BookingService:
    return BookingService(
        repo=SqlAppointmentsRepository(session),
        doctor_repo=SqlDoctorRepository(session),
        payments=payments,
    )


def get_status_service(session: Session = Depends(get_session)) -> StatusService:
    return StatusService(
        repo=SqlAppointmentsRepository(session),
        doctor_repo=SqlDoctorRepository(session),
        audit=StdAuditLogger(),
    )


def build_chat_service(session: Session, feed: ChangeFeed) -> ChatService:
    return ChatService(
        chat_repo=SqlChatRepository(session),
        repo=SqlAppointmentsRepository(session),
        profiles=SqlProfileRepository(session),
        feed=feed,
    )


def get_chat_service(
    session: Session = Depends(get_session),
    feed: ChangeFeed = Depends(get_change_feed),
) -> ChatService:
    return build_chat_service(session, feed)


def get_doctor_service(session: Session = Depends(get_session)) -> DoctorService:
    return DoctorService(doctor_repo=SqlDoctorRepository(session), profiles=SqlProfileRepository(session))


def get_dashboard_service(session: Session = Depends(get_session)) -> DashboardService:
    return DashboardService(
        repo=SqlAppointmentsRepository(session),
        doctor_repo=SqlDoctorRepository(session),
        profiles=SqlProfileRepository(session),
    )


def get_profile_service(session: Session = Depends(get_session)) -> ProfileService:
    return ProfileService(profiles=SqlProfileRepository(session), doctor_repo=SqlDoctorRepository(session))
