from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..dependencies import get_stores
from ..services.auth_dependency import get_current_user
from ..services.auth_utils import AuthUser
from ..services.storage import Stores

router = APIRouter(
    prefix="/user",
    tags=["User"],
)


@router.get("/profile", summary="Current User Profile")
def user_profile(current_user: AuthUser = Depends(get_current_user)) -> Dict[str, Any]:
    return current_user.to_wire()


@router.get("/history", summary="Current User's Generated Results")
def user_history(
    current_user: AuthUser = Depends(get_current_user),
    stores: Stores = Depends(get_stores),
) -> Dict[str, Any]:
    """Newest first; results that have expired are left out."""
    entries = stores.history.get(current_user.uid) or []
    live = [entry for entry in reversed(entries) if stores.results.get(entry["resultId"]) is not None]
    return {"results": live, "count": len(live)}
