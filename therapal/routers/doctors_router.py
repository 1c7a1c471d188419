from typing import List
from fastapi import APIRouter, Depends
import logging

from ..application.context import Actor
from ..application.services.doctor_service import DoctorService, DoctorView
from ..schemas.doctors.doctor import DoctorApplication, DoctorResponse
from .deps import get_current_actor, get_doctor_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def to_response(d: DoctorView) -> DoctorResponse:
    return DoctorResponse(
        user_id=d.user_id,
        full_name=d.full_name,
        specialization=d.specialization,
        bio=d.bio,
        experience_years=d.experience_years,
        hourly_rate=d.hourly_rate,
        languages=d.languages,
        status=d.status,
        created_at=d.created_at,
    )


@router.get("/", response_model=List[DoctorResponse])
def get_bookable_doctors(
    actor: Actor = Depends(get_current_actor),
    doctors: DoctorService = Depends(get_doctor_service),
):
    return [to_response(d) for d in doctors.list_bookable()]


@router.post("/apply", response_model=DoctorResponse, status_code=201)
def apply_as_doctor(
    application: DoctorApplication,
    actor: Actor = Depends(get_current_actor),
    doctors: DoctorService = Depends(get_doctor_service),
):
    d = doctors.apply(
        actor,
        specialization=application.specialization,
        bio=application.bio,
        experience_years=application.experience_years,
        hourly_rate=application.hourly_rate,
        languages=application.languages,
    )
    logger.info(f"Doctor application filed by {actor.user_id}")
    return to_response(doctors.describe(d))
