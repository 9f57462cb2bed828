"""Dashboard endpoint"""
from fastapi import APIRouter, Depends

from airdealer.api.deps import get_dashboard_service, require_approved_admin
from airdealer.schemas.dashboard import DashboardStatsResponse
from airdealer.services.access_gate import GateResult
from airdealer.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
def get_stats(
    service: DashboardService = Depends(get_dashboard_service),
    _: GateResult = Depends(require_approved_admin),
):
    """
    Headline figures for the admin home page.

    ``total_revenue`` sums final totals (falling back to totals) of completed
    and delivered orders, computed in decimal arithmetic.
    """
    return DashboardStatsResponse(**service.get_stats()._asdict())
