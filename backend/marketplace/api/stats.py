"""
Admin statistics endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.deps import require_admin
from marketplace.db.session import get_db
from marketplace.models.user import User
from marketplace.schemas.stats import StatsResponse
from marketplace.services.stats_service import StatsService


router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=StatsResponse, summary="Dashboard statistics (admin)")
async def get_stats(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> StatsResponse:
    return StatsResponse(**await StatsService(db).get_stats())
