"""
Analytics service for dashboard statistics

The summary functions are pure transforms over whatever records the data
provider returns. Means and percentages round half up.
"""
import math
from datetime import datetime
from typing import List, Optional, Sequence

from carrental.schemas.analytics import (
    CarMetricRow,
    CarUsageRecord,
    DashboardStats,
    FleetSummary,
    LocationRecord,
    LocationShare,
    LocationSummary,
    RevenueBucket,
    RevenueSummary,
)
from carrental.services.analytics_provider import AnalyticsDataProvider, SampleAnalyticsProvider
from carrental.core.logging_config import logger

# Previous period is not tracked yet; it is approximated from the current total
PREVIOUS_PERIOD_RATIO = 0.92

FLEET_METRICS = {
    "utilization": "utilization_rate",
    "distance": "avg_distance",
    "duration": "avg_duration",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage_of(value: float, total: float) -> int:
    """Share of total as a whole percentage"""
    if not total:
        return 0
    return round_half_up(value / total * 100)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def fleet_summary(cars: List[CarUsageRecord], metric: str = "utilization") -> FleetSummary:
    """Fleet-wide averages, maintenance total and top car by utilization"""
    if metric not in FLEET_METRICS:
        raise ValueError(f"Unknown fleet metric: {metric}")
    field = FLEET_METRICS[metric]

    # max() keeps the first of equal records
    top = max(cars, key=lambda car: car.utilization_rate) if cars else None

    return FleetSummary(
        metric=metric,
        fleet_utilization=round_half_up(_mean([car.utilization_rate for car in cars])),
        avg_distance=round_half_up(_mean([car.avg_distance for car in cars])),
        avg_duration=round_half_up(_mean([car.avg_duration for car in cars]) * 10) / 10,
        total_maintenance_events=sum(car.maintenance for car in cars),
        top_performer=top,
        cars=[
            CarMetricRow(id=car.id, name=car.name, value=getattr(car, field), maintenance=car.maintenance)
            for car in cars
        ],
    )


def location_summary(locations: List[LocationRecord], view: str = "map") -> LocationSummary:
    """Totals, mean growth and per-location shares ranked by revenue"""
    total_pickups = sum(location.pickups for location in locations)
    total_dropoffs = sum(location.dropoffs for location in locations)
    total_revenue = sum(location.revenue for location in locations)

    ranked = sorted(locations, key=lambda location: location.revenue, reverse=True)

    return LocationSummary(
        view=view,
        total_pickups=total_pickups,
        total_dropoffs=total_dropoffs,
        total_revenue=total_revenue,
        overall_growth=round_half_up(_mean([location.growth for location in locations])),
        top_location=ranked[0] if ranked else None,
        locations=[
            LocationShare(
                **location.model_dump(),
                pickup_share=percentage_of(location.pickups, total_pickups),
                dropoff_share=percentage_of(location.dropoffs, total_dropoffs),
                revenue_share=percentage_of(location.revenue, total_revenue),
            )
            for location in ranked
        ],
    )


def revenue_summary(buckets: List[RevenueBucket], time_range: str = "month") -> RevenueSummary:
    """Total, placeholder prior-period comparison and best bucket"""
    total = sum(bucket.revenue for bucket in buckets)
    previous = total * PREVIOUS_PERIOD_RATIO
    change = percentage_of(total - previous, previous)

    highest = max(buckets, key=lambda bucket: bucket.revenue) if buckets else None

    return RevenueSummary(
        time_range=time_range,
        total_revenue=total,
        previous_period_revenue=previous,
        percentage_change=change,
        max_revenue=highest.revenue if highest else 0,
        highest_bucket=highest,
        buckets=buckets,
    )


class AnalyticsService:
    """Service for analytics and dashboard data"""

    def __init__(self, provider: Optional[AnalyticsDataProvider] = None):
        self.provider = provider or SampleAnalyticsProvider()

    def get_fleet_summary(
        self,
        metric: str = "utilization",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> FleetSummary:
        """Get fleet usage summary"""
        return fleet_summary(self.provider.fetch_fleet(start, end), metric)

    def get_location_summary(
        self,
        view: str = "map",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> LocationSummary:
        """Get location performance summary"""
        return location_summary(self.provider.fetch_locations(start, end), view)

    def get_revenue_summary(
        self,
        time_range: str = "month",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> RevenueSummary:
        """Get revenue summary"""
        summary = revenue_summary(self.provider.fetch_revenue(time_range, start, end), time_range)
        summary.average_booking_value = self.provider.fetch_average_booking_value(start, end)
        return summary

    def get_dashboard_stats(
        self,
        time_range: str = "month",
        metric: str = "utilization",
        view: str = "map",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> DashboardStats:
        """Get complete dashboard statistics"""
        logger.debug(f"Building dashboard stats (range={time_range}, metric={metric}, view={view})")
        return DashboardStats(
            fleet=self.get_fleet_summary(metric, start, end),
            locations=self.get_location_summary(view, start, end),
            revenue=self.get_revenue_summary(time_range, start, end),
        )


# Global instance
analytics_service = AnalyticsService()
