from typing import Dict, Iterable, Optional

from .ports.profile_repo import ProfileRepository


def resolve_names(profiles: ProfileRepository, ids: Iterable[Optional[str]], default: str = "Unknown") -> Dict[str, str]:
    """Map each referenced profile id to a display name with a single batched lookup."""
    wanted = {i for i in ids if i}
    if not wanted:
        return {}
    found = profiles.get_many(wanted)
    names = {}
    for profile_id in wanted:
        profile = found.get(profile_id)
        names[profile_id] = (profile.full_name if profile and profile.full_name else default)
    return names
