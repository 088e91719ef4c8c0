"""
Admin dashboard routes
"""
from datetime import datetime
from typing import Literal, Optional
from fastapi import APIRouter, Depends

from carrental.routes.dependencies import get_analytics_service
from carrental.schemas.analytics import DashboardStats, FleetSummary, LocationSummary, RevenueSummary
from carrental.services.analytics_service import AnalyticsService

router = APIRouter(
    prefix="/admin/api/dashboard",
    tags=["admin-dashboard"]
)

FleetMetric = Literal["utilization", "distance", "duration"]
LocationView = Literal["map", "list"]
TimeRange = Literal["day", "week", "month"]


@router.get("/fleet", response_model=FleetSummary)
def get_fleet_usage(
    metric: FleetMetric = "utilization",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Get fleet usage metrics"""
    return service.get_fleet_summary(metric, start, end)


@router.get("/locations", response_model=LocationSummary)
def get_location_analytics(
    view: LocationView = "map",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Get pickup/dropoff/revenue by location"""
    return service.get_location_summary(view, start, end)


@router.get("/revenue", response_model=RevenueSummary)
def get_revenue(
    range: TimeRange = "month",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Get revenue for the selected time range

    Args:
        range: Bucket size (day, week or month)
        start: Only count bookings created at or after this time
        end: Only count bookings created at or before this time
    """
    return service.get_revenue_summary(range, start, end)


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    range: TimeRange = "month",
    metric: FleetMetric = "utilization",
    view: LocationView = "map",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Get dashboard statistics"""
    return service.get_dashboard_stats(time_range=range, metric=metric, view=view, start=start, end=end)
