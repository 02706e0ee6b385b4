"""
Router FastAPI per la dashboard
Progetto: Bengkel Manager (Gestionale Officina)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser
from bengkel.schemas.dashboard import DashboardStats
from bengkel.services.dashboard_service import dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "/stats",
    name="dashboard_statistiche",
    summary="Statistiche dashboard",
    description="Contatori, incasso totale e ultime 5 fatture.",
    response_model=DashboardStats,
)
async def get_stats(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> DashboardStats:
    return await dashboard_service.get_stats(db, current_user)
