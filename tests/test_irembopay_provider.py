import asyncio

import aiohttp
import pytest

from therapal.exceptions import PaymentInitiationError
from therapal.infrastructure.payments.irembopay_provider import SECRET_HEADER, IremboPayProvider
from therapal.schemas.payments.invoice import (
    InvoiceCustomer,
    InvoicePaymentItem,
    InvoiceRequest,
)

API_URL = "https://irembopay.test/payments/invoices"


def sample_request():
    return InvoiceRequest(
        transactionId="THERAPAL-A1",
        paymentAccountIdentifier="TST-RWF",
        customer=InvoiceCustomer(email="pat@example.com", phoneNumber="0788000000", name="Pat"),
        paymentItems=[InvoicePaymentItem(unitAmount=900000, quantity=1, code="THERAPY-SESSION")],
        description="Therapy session payment",
        expiryAt="2025-03-02T08:30:00.000Z",
    )


class FakeResponse:
    def __init__(self, status, body=None, error=None):
        self.status = status
        self._body = body
        self._error = error

    async def json(self, content_type=None):
        if self._error:
            raise self._error
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, post_error=None):
        self.response = response
        self.post_error = post_error
        self.calls = []
        self.timeout = None

    def __call__(self, timeout=None):
        self.timeout = timeout
        return self

    def post(self, url, json=None, headers=None):
        self.calls.append((url, json, headers))
        if self.post_error:
            raise self.post_error
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def make_provider(session, secret="sk-test"):
    return IremboPayProvider(api_url=API_URL, secret_key=secret, timeout_seconds=5, session_factory=session)


def test_invoice_created():
    session = FakeSession(FakeResponse(200, {"success": True, "data": {"id": "inv-9", "paymentUrl": "https://pay/inv-9"}}))
    result = asyncio.run(make_provider(session).create_invoice(sample_request()))

    assert result.success is True
    assert result.data.id == "inv-9"
    url, payload, headers = session.calls[0]
    assert url == API_URL
    assert payload["transactionId"] == "THERAPAL-A1"
    assert payload["paymentItems"][0]["unitAmount"] == 900000
    assert headers[SECRET_HEADER] == "sk-test"
    assert session.timeout.total == 5


def test_missing_secret_never_calls_provider():
    session = FakeSession(FakeResponse(200, {"success": True}))
    with pytest.raises(PaymentInitiationError):
        asyncio.run(make_provider(session, secret="").create_invoice(sample_request()))
    assert session.calls == []


def test_timeout_maps_to_payment_error():
    session = FakeSession(post_error=asyncio.TimeoutError())
    with pytest.raises(PaymentInitiationError) as exc:
        asyncio.run(make_provider(session).create_invoice(sample_request()))
    assert exc.value.message == "Payment provider timed out"
    assert len(session.calls) == 1


def test_connection_error_maps_to_payment_error():
    session = FakeSession(post_error=aiohttp.ClientConnectionError("refused"))
    with pytest.raises(PaymentInitiationError):
        asyncio.run(make_provider(session).create_invoice(sample_request()))


def test_declined_invoice_carries_provider_message():
    session = FakeSession(FakeResponse(400, {"success": False, "message": "Invalid account"}))
    with pytest.raises(PaymentInitiationError) as exc:
        asyncio.run(make_provider(session).create_invoice(sample_request()))
    assert exc.value.message == "Invalid account"


def test_unreadable_body_rejected():
    session = FakeSession(FakeResponse(502, error=ValueError("not json")))
    with pytest.raises(PaymentInitiationError):
        asyncio.run(make_provider(session).create_invoice(sample_request()))
