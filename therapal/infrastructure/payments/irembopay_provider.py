import asyncio
import logging
from typing import Any, Callable, Optional

import aiohttp
from pydantic import ValidationError as SchemaError

from ...config import settings
from ...exceptions import PaymentInitiationError
from ...application.ports.payment_provider import PaymentProvider
from ...schemas.payments.invoice import InvoiceRequest, InvoiceResponse

logger = logging.getLogger(__name__)

SECRET_HEADER = "irembopay-secretKey"


class IremboPayProvider(PaymentProvider):
    """Creates invoices on the IremboPay API. One attempt per call, no retry."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session_factory: Optional[Callable[..., Any]] = None,
    ):
        self.api_url = api_url or settings.IREMBOPAY_API_URL
        self.secret_key = secret_key if secret_key is not None else settings.IREMBOPAY_SECRET_KEY
        self.timeout_seconds = timeout_seconds or settings.PAYMENT_TIMEOUT_SECONDS
        self.session_factory = session_factory or aiohttp.ClientSession

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            SECRET_HEADER: self.secret_key,
        }

    async def create_invoice(self, request: InvoiceRequest) -> InvoiceResponse:
        if not self.secret_key:
            raise PaymentInitiationError("Payment provider is not configured")

        payload = request.model_dump()
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with self.session_factory(timeout=timeout) as session:
                async with session.post(self.api_url, json=payload, headers=self._headers()) as response:
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = None
                    status = response.status
        except asyncio.TimeoutError:
            logger.error(f"IremboPay timed out for {request.transactionId}")
            raise PaymentInitiationError("Payment provider timed out")
        except aiohttp.ClientError as e:
            logger.error(f"IremboPay request failed for {request.transactionId}: {e}")
            raise PaymentInitiationError("Could not reach the payment provider")

        if not isinstance(body, dict):
            logger.error(f"IremboPay returned an unreadable body (HTTP {status}) for {request.transactionId}")
            raise PaymentInitiationError("Invalid response from payment provider")

        try:
            result = InvoiceResponse.model_validate(body)
        except SchemaError:
            logger.error(f"IremboPay response did not match the invoice schema: {body}")
            raise PaymentInitiationError(body.get("message") or "Invalid response from payment provider")

        if status >= 400 or not result.success:
            logger.warning(f"IremboPay rejected {request.transactionId} (HTTP {status}): {result.message}")
            raise PaymentInitiationError(result.message or "Payment initialization failed")
        return result
