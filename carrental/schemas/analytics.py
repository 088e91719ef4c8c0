"""
Pydantic schemas for Analytics/Dashboard
"""
from __future__ import annotations
from typing import Optional, List
from pydantic import BaseModel


class CarUsageRecord(BaseModel):
    """Usage metrics of one car"""
    id: int
    name: str
    utilization_rate: float  # percent
    avg_distance: float  # km per rental
    avg_duration: float  # days per rental
    maintenance: int  # maintenance events in period


class CarMetricRow(BaseModel):
    """One table row of the fleet widget"""
    id: int
    name: str
    value: float  # value of the selected metric
    maintenance: int


class FleetSummary(BaseModel):
    """Fleet usage summary"""
    metric: str
    fleet_utilization: int
    avg_distance: int
    avg_duration: float
    total_maintenance_events: int
    top_performer: Optional[CarUsageRecord] = None
    cars: List[CarMetricRow]


class LocationRecord(BaseModel):
    """Pickup/dropoff activity of one location"""
    id: int
    name: str
    pickups: int
    dropoffs: int
    revenue: float
    growth: float  # percent vs previous period


class LocationShare(BaseModel):
    """Location with its share of the totals"""
    id: int
    name: str
    pickups: int
    dropoffs: int
    revenue: float
    growth: float
    pickup_share: int
    dropoff_share: int
    revenue_share: int


class LocationSummary(BaseModel):
    """Location performance summary"""
    view: str
    total_pickups: int
    total_dropoffs: int
    total_revenue: float
    overall_growth: int
    top_location: Optional[LocationRecord] = None
    locations: List[LocationShare]  # ranked by revenue


class RevenueBucket(BaseModel):
    """Revenue of one day/week/month"""
    label: str
    revenue: float


class RevenueSummary(BaseModel):
    """Revenue summary for the selected time range"""
    time_range: str
    total_revenue: float
    previous_period_revenue: float
    percentage_change: int
    max_revenue: float
    highest_bucket: Optional[RevenueBucket] = None
    buckets: List[RevenueBucket]
    average_booking_value: Optional[float] = None


class DashboardStats(BaseModel):
    """Dashboard statistics"""
    fleet: FleetSummary
    locations: LocationSummary
    revenue: RevenueSummary
