import pytest

from therapal.application.ports.profile_repo import ProfileDto
from therapal.application.services.dashboard_service import DashboardService
from therapal.exceptions import AuthorizationError

from fakes import FakeApptRepo, FakeDoctorRepo, FakeProfileRepo, admin, approved_doctor, doctor, patient


def make_service():
    repo = FakeApptRepo()
    repo.add("A1", patient_id="p1", doctor_id="d1", status="confirmed", payment_status="paid", total_amount=9000.0)
    repo.add("A2", patient_id="p1", doctor_id="d1", status="pending", payment_status="pending", total_amount=3000.0)
    repo.add("A3", patient_id="p2", doctor_id="d1", status="cancelled", payment_status="failed", total_amount=6000.0)
    profiles = FakeProfileRepo(
        ProfileDto("p1", "p1@example.com", "Pat Ient", None, "user"),
        ProfileDto("d1", "d1@example.com", "Doc Tor", None, "doctor"),
    )
    doctors = FakeDoctorRepo(approved_doctor("d1"), approved_doctor("d2", status="pending"))
    return DashboardService(repo=repo, doctor_repo=doctors, profiles=profiles)


def test_patient_sees_own_appointments_with_names():
    views = make_service().my_appointments(patient("p1"))
    assert {v.appointment.id for v in views} == {"A1", "A2"}
    assert views[0].doctor_name == "Doc Tor"
    assert views[0].doctor_specialization == "Counselling"


def test_specializations_resolved_in_one_lookup():
    svc = make_service()
    svc.repo.add("A4", patient_id="p1", doctor_id="d2")
    svc.repo.add("A5", patient_id="p1", doctor_id="d9")

    views = {v.appointment.id: v for v in svc.my_appointments(patient("p1"))}

    assert svc.doctor_repo.batch_calls == 1
    assert svc.doctor_repo.get_calls == 0
    assert views["A4"].doctor_specialization == "Counselling"
    assert views["A5"].doctor_specialization is None


def test_doctor_sees_assigned_appointments():
    views = make_service().my_appointments(doctor("d1"))
    assert len(views) == 3
    names = {v.appointment.id: v.patient_name for v in views}
    assert names["A3"] == "Unknown Patient"


def test_admin_overview_totals():
    overview = make_service().admin_overview(admin())
    assert overview.total_revenue == 9000.0
    assert overview.pending_revenue == 3000.0
    assert overview.status_counts == {"confirmed": 1, "pending": 1, "cancelled": 1}
    assert overview.pending_doctors == 1
    assert len(overview.users) == 2


def test_overview_is_admin_only():
    with pytest.raises(AuthorizationError):
        make_service().admin_overview(doctor("d1"))
