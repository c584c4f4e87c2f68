"""User Routes — per-user gamification stats."""

from fastapi import APIRouter, Depends

from hackshield.api.deps import get_current_user
from hackshield.models.user import User

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me/stats")
async def my_stats(user: User = Depends(get_current_user)):
    return {
        "hackathons_joined": user.hackathons_participated,
        "hackathons_won": user.hackathons_won,
        "projects_created": user.projects_created,
        "total_xp": user.xp,
        "level": user.level,
        "badges": user.badges,
        "reputation": user.reputation,
    }
