from typing import Any, Dict
from fastapi import APIRouter, Depends

from ..application.context import Actor
from ..application.ports.profile_repo import ProfileDto
from ..application.services.profile_service import ProfileService
from ..schemas.profiles.profile import ProfileResponse
from .deps import get_current_actor, get_profile_service, get_token_claims

router = APIRouter(prefix="/profiles", tags=["Profiles"])


def to_response(p: ProfileDto) -> ProfileResponse:
    return ProfileResponse(
        id=p.id,
        email=p.email,
        full_name=p.full_name,
        phone=p.phone,
        role=p.role,
        created_at=p.created_at,
    )


@router.post("/me", response_model=ProfileResponse)
def provision_profile(
    claims: Dict[str, Any] = Depends(get_token_claims),
    profiles: ProfileService = Depends(get_profile_service),
):
    return to_response(profiles.provision(claims))


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(
    actor: Actor = Depends(get_current_actor),
    profiles: ProfileService = Depends(get_profile_service),
):
    return to_response(profiles.get(actor.user_id))
