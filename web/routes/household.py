"""
가구 라우트

GET /api/household/members - 내 가구와 구성원 조회
"""

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.errors import NotFoundError
from core.storage.user_store import UserStore
from web.dependencies import get_current_user_id, get_db
from web.models.responses import HouseholdResponse

router = APIRouter(prefix="/api/household", tags=["Household"])


@router.get("/members", response_model=HouseholdResponse)
async def get_household_members(
    user_id: int = Depends(get_current_user_id),
    db: SQLiteAdapter = Depends(get_db),
) -> dict:
    """가구 구성원 (가구가 없으면 빈 목록)"""
    users = UserStore(db)

    user = await users.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User not found: {user_id}")

    if user.household_id is None:
        return {"id": None, "name": None, "members": []}

    household = await users.get_household(user.household_id)
    members = await users.list_members(user.household_id)

    return {
        "id": user.household_id,
        "name": household.name if household else None,
        "members": [{"id": m.id, "username": m.username, "name": m.name} for m in members],
    }
