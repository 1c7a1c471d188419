from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional
import logging

from ...exceptions import PaymentInitiationError, PersistenceError
from ...schemas.payments.invoice import (
    InvoiceCustomer,
    InvoicePaymentItem,
    InvoiceRequest,
)
from ..context import Actor
from ..ports.appointments_repo import AppointmentDto, AppointmentsRepository
from ..ports.payment_provider import PaymentProvider

logger = logging.getLogger(__name__)

FALLBACK_EMAIL = "user@email.com"
FALLBACK_PHONE = "0780000001"
FALLBACK_NAME = "Therapal User"
SESSION_ITEM_CODE = "THERAPY-SESSION"
SESSION_DESCRIPTION = "Therapy session payment"


def to_minor_units(amount: float) -> int:
    """Currency units -> provider minor units, rounding half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_expiry(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PaymentInitiation:
    appointment: AppointmentDto
    payment_id: str
    payment_url: Optional[str] = None


@dataclass
class PaymentService:
    repo: AppointmentsRepository
    provider: PaymentProvider
    payment_account: str
    transaction_prefix: str = "THERAPAL-"
    expiry_hours: int = 24
    language: str = "EN"
    clock: Callable[[], datetime] = field(default=_utcnow)

    def transaction_id(self, appointment_id: str) -> str:
        return f"{self.transaction_prefix}{appointment_id}"

    def build_invoice(self, appointment: AppointmentDto, customer: Actor) -> InvoiceRequest:
        return InvoiceRequest(
            transactionId=self.transaction_id(appointment.id),
            paymentAccountIdentifier=self.payment_account,
            customer=InvoiceCustomer(
                email=customer.email or FALLBACK_EMAIL,
                phoneNumber=customer.phone or FALLBACK_PHONE,
                name=customer.full_name or FALLBACK_NAME,
            ),
            paymentItems=[
                InvoicePaymentItem(
                    unitAmount=to_minor_units(appointment.total_amount),
                    quantity=1,
                    code=SESSION_ITEM_CODE,
                )
            ],
            description=SESSION_DESCRIPTION,
            expiryAt=format_expiry(self.clock() + timedelta(hours=self.expiry_hours)),
            language=self.language,
        )

    async def initiate(self, appointment: AppointmentDto, customer: Actor) -> PaymentInitiation:
        """Create the provider invoice once and record its id on the appointment.

        Payment status is left at ``pending``; confirmation arrives out of band.
        """
        invoice = self.build_invoice(appointment, customer)
        response = await self.provider.create_invoice(invoice)
        if not response.success or response.data is None:
            raise PaymentInitiationError(response.message or "Payment initialization failed")

        try:
            updated = self.repo.set_payment_reference(appointment.id, response.data.id)
        except PersistenceError as e:
            logger.error(f"Invoice {response.data.id} created but not recorded on appointment {appointment.id}: {e}")
            raise PaymentInitiationError("Payment was created but could not be linked to the appointment")

        logger.info(f"Invoice {response.data.id} created for appointment {appointment.id}")
        return PaymentInitiation(
            appointment=updated or appointment,
            payment_id=response.data.id,
            payment_url=response.data.paymentUrl,
        )
