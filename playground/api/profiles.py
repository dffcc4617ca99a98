"""
Profile API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..context import PlaygroundContext
from ..models.profile import PlaygroundSettings, Profile, ProfileCreate
from ..utils.custom_exceptions import ValidationError
from .dependencies import get_context

router = APIRouter(tags=["profiles"])


@router.get("/api/profiles", response_model=List[Profile])
async def list_profiles(context: PlaygroundContext = Depends(get_context)):
    return context.profiles.list()


@router.post("/api/profiles", response_model=Profile)
async def save_profile(data: ProfileCreate, context: PlaygroundContext = Depends(get_context)):
    """Snapshot the current settings under a name."""
    try:
        return context.profiles.save(data.name, context.settings)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/profiles/{profile_id}/apply", response_model=PlaygroundSettings)
async def apply_profile(profile_id: str, context: PlaygroundContext = Depends(get_context)):
    settings = context.profiles.apply(profile_id, context.settings)
    if settings is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return context.save_settings(settings)


@router.delete("/api/profiles/{profile_id}")
async def delete_profile(profile_id: str, context: PlaygroundContext = Depends(get_context)):
    if not context.profiles.delete(profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"deleted": True}
