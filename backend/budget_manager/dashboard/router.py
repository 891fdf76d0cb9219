import logging

from fastapi import APIRouter, HTTPException, status

from budget_manager.config import settings
from budget_manager.auth.dependencies import CurrentUserDep
from budget_manager.dashboard.dependencies import DashboardServiceDep
from budget_manager.dashboard.models import DashboardStats

logger = logging.getLogger(__name__)

dashboard_router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"]
)


@dashboard_router.get("", response_model=DashboardStats, summary="Statistiques du tableau de bord")
async def get_dashboard(service: DashboardServiceDep, current_user: CurrentUserDep):
    try:
        return await service.get_stats(current_user)
    except Exception as e:
        logger.error(f"[Dashboard API] Erreur stats user {current_user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=settings.DASHBOARD_ERROR_MSG)
