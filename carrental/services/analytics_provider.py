"""
Data providers for the admin analytics dashboard
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from carrental.core.logging_config import logger
from carrental.db.models import Booking, BookingStatus
from carrental.schemas.analytics import CarUsageRecord, LocationRecord, RevenueBucket

TIME_RANGES = ("day", "week", "month")

# Bookings that count as earned revenue
REVENUE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)


class AnalyticsDataProvider(ABC):
    """Source of raw dashboard records for a date range"""

    @abstractmethod
    def fetch_fleet(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[CarUsageRecord]:
        ...

    @abstractmethod
    def fetch_locations(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[LocationRecord]:
        ...

    @abstractmethod
    def fetch_revenue(
        self,
        time_range: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[RevenueBucket]:
        ...

    def fetch_average_booking_value(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Optional[float]:
        """Mean value of a revenue-earning booking, None when the source has no bookings"""
        return None


class SampleAnalyticsProvider(AnalyticsDataProvider):
    """
    Fixed demo datasets shown on the dashboard until a live source is wired in.
    The date range is accepted but ignored.
    """

    CARS = [
        CarUsageRecord(id=1, name="Tesla Model S", utilization_rate=87, avg_distance=532, avg_duration=3.2, maintenance=2),
        CarUsageRecord(id=2, name="BMW i8", utilization_rate=92, avg_distance=478, avg_duration=2.8, maintenance=1),
        CarUsageRecord(id=3, name="Mercedes EQS", utilization_rate=76, avg_distance=312, avg_duration=2.1, maintenance=3),
        CarUsageRecord(id=4, name="Audi e-tron", utilization_rate=81, avg_distance=421, avg_duration=2.5, maintenance=2),
        CarUsageRecord(id=5, name="Porsche Taycan", utilization_rate=94, avg_distance=587, avg_duration=3.7, maintenance=0),
    ]

    LOCATIONS = [
        LocationRecord(id=1, name="Downtown", pickups=342, dropoffs=287, revenue=28700, growth=12),
        LocationRecord(id=2, name="Airport", pickups=529, dropoffs=451, revenue=52900, growth=24),
        LocationRecord(id=3, name="Central Station", pickups=218, dropoffs=256, revenue=18600, growth=5),
        LocationRecord(id=4, name="South Beach", pickups=187, dropoffs=204, revenue=19200, growth=-3),
        LocationRecord(id=5, name="West End", pickups=134, dropoffs=158, revenue=12300, growth=8),
    ]

    REVENUE = {
        "day": [
            ("01", 3400), ("02", 2800), ("03", 3200), ("04", 4500), ("05", 4200),
            ("06", 3800), ("07", 5100), ("08", 4900), ("09", 5200), ("10", 4700),
            ("11", 5300), ("12", 6100), ("13", 5800), ("14", 6200),
        ],
        "week": [
            ("Week 1", 21900), ("Week 2", 25700), ("Week 3", 29400), ("Week 4", 32600),
        ],
        "month": [
            ("Jan", 82500), ("Feb", 89700), ("Mar", 97300),
            ("Apr", 109800), ("May", 118500), ("Jun", 127200),
        ],
    }

    def fetch_fleet(self, start=None, end=None) -> List[CarUsageRecord]:
        return [car.model_copy() for car in self.CARS]

    def fetch_locations(self, start=None, end=None) -> List[LocationRecord]:
        return [location.model_copy() for location in self.LOCATIONS]

    def fetch_revenue(self, time_range: str, start=None, end=None) -> List[RevenueBucket]:
        if time_range not in TIME_RANGES:
            raise ValueError(f"Unknown time range: {time_range}")
        return [RevenueBucket(label=label, revenue=revenue) for label, revenue in self.REVENUE[time_range]]


def bucket_label(moment: datetime, time_range: str) -> str:
    """Calendar bucket a timestamp falls into: day, ISO week or month"""
    if time_range == "day":
        return moment.strftime("%Y-%m-%d")
    if time_range == "week":
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    if time_range == "month":
        return moment.strftime("%Y-%m")
    raise ValueError(f"Unknown time range: {time_range}")


class DatabaseAnalyticsProvider(AnalyticsDataProvider):
    """
    Revenue from confirmed and completed bookings in the database.

    Bookings carry no location or odometer data, so fleet and location records
    come from the fallback provider.
    """

    def __init__(self, db: Session, fallback: Optional[AnalyticsDataProvider] = None):
        self.db = db
        self.fallback = fallback or SampleAnalyticsProvider()

    def _earning_bookings(self, start: Optional[datetime], end: Optional[datetime]) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.status.in_(REVENUE_STATUSES))

        if start:
            query = query.filter(Booking.created_at >= start)
        if end:
            query = query.filter(Booking.created_at <= end)

        return query.order_by(Booking.created_at, Booking.id).all()

    def fetch_fleet(self, start=None, end=None) -> List[CarUsageRecord]:
        return self.fallback.fetch_fleet(start, end)

    def fetch_locations(self, start=None, end=None) -> List[LocationRecord]:
        return self.fallback.fetch_locations(start, end)

    def fetch_revenue(self, time_range: str, start=None, end=None) -> List[RevenueBucket]:
        if time_range not in TIME_RANGES:
            raise ValueError(f"Unknown time range: {time_range}")

        totals: Dict[str, float] = {}
        for booking in self._earning_bookings(start, end):
            if booking.created_at is None:
                continue
            label = bucket_label(booking.created_at, time_range)
            totals[label] = totals.get(label, 0.0) + (booking.total_amount or 0)

        logger.debug(f"Built {len(totals)} {time_range} revenue buckets from bookings")
        # Labels sort chronologically within each range
        return [RevenueBucket(label=label, revenue=totals[label]) for label in sorted(totals)]

    def fetch_average_booking_value(self, start=None, end=None) -> Optional[float]:
        bookings = self._earning_bookings(start, end)
        if not bookings:
            return None
        return sum(booking.total_amount or 0 for booking in bookings) / len(bookings)
