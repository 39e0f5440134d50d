"""
초대 라우트

가구 초대 코드 발급/조회/수락 API
"""

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.errors import NotFoundError, ValidationError
from core.storage.user_store import UserStore
from web.dependencies import get_current_user_id, get_db_write, get_invitation_service
from web.models.requests import InvitationCreateRequest
from web.models.responses import InvitationAcceptResponse, InvitationResponse
from web.services.invitation_service import InvitationService

router = APIRouter(prefix="/api/invitations", tags=["Invitations"])


async def _require_user(users: UserStore, user_id: int):
    user = await users.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User not found: {user_id}")
    return user


@router.post("", response_model=InvitationResponse, status_code=201)
async def create_invitation(
    request: InvitationCreateRequest,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteAdapter = Depends(get_db_write),
    service: InvitationService = Depends(get_invitation_service),
) -> dict:
    """초대 코드 발급 (가구가 없으면 생성)"""
    users = UserStore(db)
    inviter = await _require_user(users, user_id)

    invitation = await service.create_invitation(users, inviter, request.invited_username)
    return invitation.to_dict()


@router.get("", response_model=list[InvitationResponse])
async def list_invitations(
    user_id: int = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
) -> list[dict]:
    """내가 발급한 유효한 초대 코드"""
    return [inv.to_dict() for inv in service.list_for_inviter(user_id)]


@router.get("/{code}", response_model=InvitationResponse)
async def get_invitation(
    code: str,
    user_id: int = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
) -> dict:
    """초대 코드 검증 (없거나 만료되면 404)"""
    return service.validate(code).to_dict()


@router.post("/{code}/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    code: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteAdapter = Depends(get_db_write),
    service: InvitationService = Depends(get_invitation_service),
) -> dict:
    """초대 수락 (초대자의 가구에 합류)"""
    users = UserStore(db)
    user = await _require_user(users, user_id)

    if user.household_id is not None:
        raise ValidationError("이미 가구에 소속되어 있습니다")

    updated = await service.accept(users, code, user)
    return {"userId": updated.id, "householdId": updated.household_id}
