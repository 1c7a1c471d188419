from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from therapal.application.context import Actor
from therapal.application.ports.appointments_repo import AppointmentDto
from therapal.application.ports.chat_repo import ChatMessageDto
from therapal.application.ports.doctor_repo import DoctorDto
from therapal.application.ports.profile_repo import ProfileDto
from therapal.exceptions import PaymentInitiationError, PersistenceError
from therapal.schemas.payments.invoice import InvoiceResponse, InvoiceResponseData


def patient(user_id: str = "p1", **kw) -> Actor:
    return Actor(user_id=user_id, role="user", email=kw.get("email", "pat@example.com"),
                 full_name=kw.get("full_name", "Pat Ient"), phone=kw.get("phone", "0788000000"))


def doctor(user_id: str = "d1") -> Actor:
    return Actor(user_id=user_id, role="doctor", email="doc@example.com", full_name="Doc Tor")


def admin(user_id: str = "a1") -> Actor:
    return Actor(user_id=user_id, role="admin", email="admin@example.com", full_name="Ad Min")


class FakeApptRepo:
    def __init__(self, ids: Optional[List[str]] = None):
        self._ids = list(ids or [])
        self._n = 1
        self.appts: Dict[str, AppointmentDto] = {}
        self.fail_create = False
        self.fail_reference = False

    def _next_id(self) -> str:
        if self._ids:
            return self._ids.pop(0)
        nid = f"appt-{self._n}"
        self._n += 1
        return nid

    def create(self, patient_id, doctor_id, appointment_date, appointment_time, duration, notes, total_amount):
        if self.fail_create:
            raise PersistenceError("Failed to create appointment")
        now = datetime.utcnow()
        a = AppointmentDto(self._next_id(), patient_id, doctor_id, appointment_date, appointment_time,
                           duration, notes, total_amount, "pending", "pending", None, now, now)
        self.appts[a.id] = a
        return a

    def add(self, appt_id: str, patient_id: str = "p1", doctor_id: str = "d1", status: str = "pending",
            payment_status: str = "pending", total_amount: float = 100.0):
        now = datetime.utcnow()
        a = AppointmentDto(appt_id, patient_id, doctor_id, now.date(), "10:00", 60, None,
                           total_amount, status, payment_status, None, now, now)
        self.appts[appt_id] = a
        return a

    def get_by_id(self, appointment_id):
        return self.appts.get(appointment_id)

    def list_for_patient(self, patient_id):
        return [a for a in self.appts.values() if a.patient_id == patient_id]

    def list_for_doctor(self, doctor_id):
        return [a for a in self.appts.values() if a.doctor_id == doctor_id]

    def list_all(self):
        return list(self.appts.values())

    def update_status(self, appointment_id, status):
        a = self.appts.get(appointment_id)
        if a:
            a.status = status
        return a

    def update_payment_status(self, appointment_id, payment_status):
        a = self.appts.get(appointment_id)
        if a:
            a.payment_status = payment_status
        return a

    def set_payment_reference(self, appointment_id, payment_id):
        if self.fail_reference:
            raise PersistenceError("Failed to record payment reference")
        a = self.appts.get(appointment_id)
        if a:
            a.payment_id = payment_id
        return a


class FakeDoctorRepo:
    def __init__(self, *doctors: DoctorDto):
        self.doctors = {d.user_id: d for d in doctors}
        self.get_calls = 0
        self.batch_calls = 0
        self.fail_next_create = False

    def get(self, user_id):
        self.get_calls += 1
        return self.doctors.get(user_id)

    def get_many(self, user_ids):
        self.batch_calls += 1
        return {i: self.doctors[i] for i in user_ids if i in self.doctors}

    def list_by_status(self, status):
        return [d for d in self.doctors.values() if d.status == status]

    def list_all(self):
        return list(self.doctors.values())

    def create(self, user_id, specialization, bio, experience_years, hourly_rate, languages):
        if self.fail_next_create:
            self.fail_next_create = False
            raise PersistenceError("Failed to create doctor")
        d = DoctorDto(user_id, specialization, bio, experience_years, hourly_rate, list(languages), "pending")
        self.doctors[user_id] = d
        return d

    def update_status(self, user_id, status):
        d = self.doctors.get(user_id)
        if d:
            d.status = status
        return d


def approved_doctor(user_id: str = "d1", rate: float = 6000.0, status: str = "approved") -> DoctorDto:
    return DoctorDto(user_id=user_id, specialization="Counselling", bio=None, experience_years=5,
                     hourly_rate=rate, languages=["English", "Kinyarwanda"], status=status)


class FakeProfileRepo:
    def __init__(self, *profiles: ProfileDto):
        self.profiles = {p.id: p for p in profiles}
        self.batch_calls = 0

    def get_by_id(self, profile_id):
        return self.profiles.get(profile_id)

    def get_many(self, profile_ids: Iterable[str]):
        self.batch_calls += 1
        return {i: self.profiles[i] for i in profile_ids if i in self.profiles}

    def list_all(self):
        return list(self.profiles.values())

    def create(self, profile_id, email, full_name, phone, role):
        p = ProfileDto(profile_id, email, full_name, phone, role, datetime.utcnow())
        self.profiles[profile_id] = p
        return p


class FakeChatRepo:
    def __init__(self):
        self.rows: List[ChatMessageDto] = []
        self._n = 1
        self._clock = datetime(2025, 1, 1, 9, 0, 0)

    def add(self, appointment_id: str, sender_id: str, message: str, sent_at: datetime):
        m = ChatMessageDto(f"m{self._n}", appointment_id, sender_id, message, sent_at)
        self._n += 1
        self.rows.append(m)
        return m

    def list_for_appointment(self, appointment_id):
        return [m for m in self.rows if m.appointment_id == appointment_id]

    def create(self, appointment_id, sender_id, message):
        self._clock += timedelta(minutes=1)
        return self.add(appointment_id, sender_id, message, self._clock)


class FakeProvider:
    def __init__(self, response: Optional[InvoiceResponse] = None, error: Optional[Exception] = None):
        self.response = response or InvoiceResponse(
            success=True, data=InvoiceResponseData(id="inv-1", paymentUrl="https://pay.example/inv-1"))
        self.error = error
        self.requests = []

    async def create_invoice(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.response


def timing_out_provider() -> FakeProvider:
    return FakeProvider(error=PaymentInitiationError("Payment provider timed out"))


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, actor_id, target_id, success=True, details=None):
        self.entries.append((action, actor_id, target_id, success, details or {}))
