from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.participants.schemas import GroupParticipant, ParticipantStatusUpdate
from app.modules.participants.service import ParticipantService
from app.core.dependencies import get_current_user
from app.core.errors import AccessDeniedError, NotFoundError
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/groups/{group_id}/participants", tags=["participants"])


def get_participant_service(supabase: Client = Depends(get_supabase)) -> ParticipantService:
    return ParticipantService(supabase)


@router.get("", response_model=List[GroupParticipant])
async def list_participants(
    group_id: str,
    service: ParticipantService = Depends(get_participant_service)
):
    """Participants of a group, creator included"""
    return service.get_group_participants(group_id)


@router.get("/status", response_model=GroupParticipant)
async def get_my_status(
    group_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service)
):
    participant = service.get_participant_status(group_id, user_data["email"])
    if participant is None:
        raise NotFoundError("You are not a participant of this group")
    return participant


@router.put("/status", status_code=204)
async def update_status(
    group_id: str,
    update: ParticipantStatusUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service)
):
    """Agree or decline; the group owner is notified and shares are recalculated"""
    email = update.email.strip().lower()
    if email != (user_data.get("email") or "").lower():
        raise AccessDeniedError("You can only answer for your own invitation")
    service.update_participant_status(group_id, email, update.status)
    return None


@router.post("/recalculate", status_code=204)
async def recalculate_contributions(
    group_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service)
):
    service.calculate_contributions(group_id)
    return None
