import asyncio
from datetime import datetime, timezone

import pytest

from therapal.application.context import Actor
from therapal.application.services.payment_service import (
    PaymentService,
    format_expiry,
    to_minor_units,
)
from therapal.exceptions import PaymentInitiationError
from therapal.schemas.payments.invoice import InvoiceResponse

from fakes import FakeApptRepo, FakeProvider, patient

FIXED_NOW = datetime(2025, 3, 1, 8, 30, 0, tzinfo=timezone.utc)


def make_service(repo, provider):
    return PaymentService(repo=repo, provider=provider, payment_account="TST-RWF", clock=lambda: FIXED_NOW)


def test_minor_units_round_half_up():
    assert to_minor_units(9000.0) == 900000
    assert to_minor_units(12.345) == 1235
    assert to_minor_units(0.005) == 1
    assert to_minor_units(19.99) == 1999


def test_expiry_is_utc_with_z_suffix():
    assert format_expiry(FIXED_NOW) == "2025-03-01T08:30:00.000Z"


def test_invoice_carries_booking_details():
    repo = FakeApptRepo()
    appt = repo.add("A7", total_amount=9000.0)
    svc = make_service(repo, FakeProvider())

    invoice = svc.build_invoice(appt, patient(email="pat@x.rw", full_name="Pat", phone="0788123456"))

    assert invoice.transactionId == "THERAPAL-A7"
    assert invoice.paymentAccountIdentifier == "TST-RWF"
    assert invoice.customer.email == "pat@x.rw"
    assert invoice.customer.phoneNumber == "0788123456"
    assert invoice.customer.name == "Pat"
    assert len(invoice.paymentItems) == 1
    item = invoice.paymentItems[0]
    assert (item.unitAmount, item.quantity, item.code) == (900000, 1, "THERAPY-SESSION")
    assert invoice.description == "Therapy session payment"
    assert invoice.expiryAt == "2025-03-02T08:30:00.000Z"
    assert invoice.language == "EN"


def test_invoice_falls_back_when_customer_details_missing():
    repo = FakeApptRepo()
    appt = repo.add("A1")
    svc = make_service(repo, FakeProvider())

    invoice = svc.build_invoice(appt, Actor(user_id="p1", role="user"))

    assert invoice.customer.email == "user@email.com"
    assert invoice.customer.phoneNumber == "0780000001"
    assert invoice.customer.name == "Therapal User"


def test_initiate_records_invoice_id():
    repo = FakeApptRepo()
    appt = repo.add("A1")
    svc = make_service(repo, FakeProvider())

    result = asyncio.run(svc.initiate(appt, patient()))

    assert result.payment_id == "inv-1"
    assert result.payment_url == "https://pay.example/inv-1"
    assert repo.get_by_id("A1").payment_id == "inv-1"
    assert repo.get_by_id("A1").payment_status == "pending"


def test_rejected_invoice_leaves_appointment_untouched():
    repo = FakeApptRepo()
    appt = repo.add("A1")
    provider = FakeProvider(response=InvoiceResponse(success=False, message="Account disabled"))
    svc = make_service(repo, provider)

    with pytest.raises(PaymentInitiationError) as exc:
        asyncio.run(svc.initiate(appt, patient()))

    assert exc.value.message == "Account disabled"
    assert repo.get_by_id("A1").payment_id is None


def test_unrecorded_invoice_reported_as_payment_failure():
    repo = FakeApptRepo()
    appt = repo.add("A1")
    repo.fail_reference = True
    svc = make_service(repo, FakeProvider())

    with pytest.raises(PaymentInitiationError):
        asyncio.run(svc.initiate(appt, patient()))
    assert repo.get_by_id("A1").payment_id is None
