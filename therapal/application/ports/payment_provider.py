from typing import Protocol

from ...schemas.payments.invoice import InvoiceRequest, InvoiceResponse


class PaymentProvider(Protocol):
    async def create_invoice(self, request: InvoiceRequest) -> InvoiceResponse:
        """Submit one invoice. Raises PaymentInitiationError on any failure."""
        ...
