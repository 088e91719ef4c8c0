from datetime import datetime

import pytest

from carrental.db.models import Booking, BookingStatus
from carrental.schemas.analytics import CarUsageRecord, LocationRecord, RevenueBucket
from carrental.services.analytics_provider import (
    AnalyticsDataProvider,
    DatabaseAnalyticsProvider,
    SampleAnalyticsProvider,
    bucket_label,
)
from carrental.services.analytics_service import (
    AnalyticsService,
    fleet_summary,
    location_summary,
    percentage_of,
    revenue_summary,
    round_half_up,
)


@pytest.fixture
def provider():
    return SampleAnalyticsProvider()


def car(id, rate, distance=100, duration=1.0, maintenance=0):
    return CarUsageRecord(
        id=id, name=f"Car {id}", utilization_rate=rate,
        avg_distance=distance, avg_duration=duration, maintenance=maintenance,
    )


def test_fleet_summary_of_sample_fleet(provider):
    summary = fleet_summary(provider.fetch_fleet())

    assert summary.fleet_utilization == 86
    assert summary.avg_distance == 466
    assert summary.avg_duration == 2.9
    assert summary.total_maintenance_events == 8
    assert summary.top_performer.name == "Porsche Taycan"
    assert summary.top_performer.utilization_rate == 94
    assert [row.value for row in summary.cars] == [87, 92, 76, 81, 94]


def test_fleet_summary_rows_follow_selected_metric(provider):
    summary = fleet_summary(provider.fetch_fleet(), metric="duration")

    assert summary.metric == "duration"
    assert [row.value for row in summary.cars] == [3.2, 2.8, 2.1, 2.5, 3.7]


def test_fleet_top_performer_tie_keeps_first_record():
    summary = fleet_summary([car(1, 80), car(2, 95), car(3, 95)])

    assert summary.top_performer.id == 2


def test_fleet_summary_rejects_unknown_metric(provider):
    with pytest.raises(ValueError):
        fleet_summary(provider.fetch_fleet(), metric="fuel")


def test_location_summary_of_sample_locations(provider):
    summary = location_summary(provider.fetch_locations())

    assert summary.total_pickups == 1410
    assert summary.total_dropoffs == 1356
    assert summary.total_revenue == 131700
    assert summary.overall_growth == 9
    assert summary.top_location.name == "Airport"
    assert [location.name for location in summary.locations] == [
        "Airport", "Downtown", "South Beach", "Central Station", "West End",
    ]
    downtown = next(location for location in summary.locations if location.name == "Downtown")
    assert downtown.pickup_share == 24
    assert downtown.revenue_share == 22


def test_percentage_of():
    assert percentage_of(342, 1410) == 24
    assert percentage_of(1, 8) == 13
    assert percentage_of(5, 0) == 0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(85.5) == 86
    assert round_half_up(-2.5) == -2


def test_revenue_summary_for_month_view(provider):
    monthly = provider.fetch_revenue("month")
    summary = revenue_summary(monthly, "month")

    assert summary.total_revenue == sum(bucket.revenue for bucket in monthly) == 625000
    assert summary.previous_period_revenue == pytest.approx(575000)
    assert summary.percentage_change == 9
    assert summary.max_revenue == 127200
    assert summary.highest_bucket.label == "Jun"


@pytest.mark.parametrize("time_range, buckets, total, highest", [
    ("day", 14, 65200, "14"),
    ("week", 4, 109600, "Week 4"),
])
def test_revenue_summary_for_other_views(provider, time_range, buckets, total, highest):
    summary = revenue_summary(provider.fetch_revenue(time_range), time_range)

    assert len(summary.buckets) == buckets
    assert summary.total_revenue == total
    assert summary.highest_bucket.label == highest


def test_empty_datasets_summarise_to_zero():
    fleet = fleet_summary([])
    locations = location_summary([])
    revenue = revenue_summary([], "day")

    assert fleet.fleet_utilization == 0 and fleet.top_performer is None
    assert locations.total_revenue == 0 and locations.top_location is None
    assert revenue.total_revenue == 0 and revenue.percentage_change == 0
    assert revenue.highest_bucket is None


def test_unknown_time_range_is_rejected(provider):
    with pytest.raises(ValueError):
        provider.fetch_revenue("year")


def test_service_uses_injected_provider():
    class SingleCarProvider(AnalyticsDataProvider):
        def fetch_fleet(self, start=None, end=None):
            return [car(7, 64, distance=250, duration=1.5, maintenance=1)]

        def fetch_locations(self, start=None, end=None):
            return [LocationRecord(id=1, name="Harbor", pickups=10, dropoffs=5, revenue=900, growth=-4)]

        def fetch_revenue(self, time_range, start=None, end=None):
            return [RevenueBucket(label="Q1", revenue=1000)]

    stats = AnalyticsService(SingleCarProvider()).get_dashboard_stats(time_range="week")

    assert stats.fleet.fleet_utilization == 64
    assert stats.fleet.top_performer.id == 7
    assert stats.locations.locations[0].pickup_share == 100
    assert stats.locations.overall_growth == -4
    assert stats.revenue.time_range == "week"
    assert stats.revenue.highest_bucket.label == "Q1"


def test_sample_provider_returns_copies(provider):
    provider.fetch_fleet()[0].utilization_rate = 0

    assert provider.fetch_fleet()[0].utilization_rate == 87


def test_provider_must_implement_every_fetch():
    class FleetOnlyProvider(AnalyticsDataProvider):
        def fetch_fleet(self, start=None, end=None):
            return []

    with pytest.raises(TypeError):
        FleetOnlyProvider()


def add_booking(db, amount, created_at, status=BookingStatus.CONFIRMED):
    db.add(Booking(user_id=1, car_id=1, total_amount=amount, status=status, created_at=created_at))
    db.commit()


@pytest.fixture
def bookings(db):
    add_booking(db, 200, datetime(2026, 3, 2, 9, 0))
    add_booking(db, 100, datetime(2026, 3, 2, 18, 30), status=BookingStatus.COMPLETED)
    add_booking(db, 300, datetime(2026, 3, 10, 12, 0))
    add_booking(db, 400, datetime(2026, 4, 1, 8, 0))
    add_booking(db, 999, datetime(2026, 3, 5, 8, 0), status=BookingStatus.PENDING)
    add_booking(db, 999, datetime(2026, 3, 6, 8, 0), status=BookingStatus.CANCELLED)
    return db


@pytest.mark.parametrize("time_range, expected", [
    ("day", [("2026-03-02", 300), ("2026-03-10", 300), ("2026-04-01", 400)]),
    ("week", [("2026-W10", 300), ("2026-W11", 300), ("2026-W14", 400)]),
    ("month", [("2026-03", 600), ("2026-04", 400)]),
])
def test_database_revenue_buckets_count_earning_bookings(bookings, time_range, expected):
    buckets = DatabaseAnalyticsProvider(bookings).fetch_revenue(time_range)

    assert [(bucket.label, bucket.revenue) for bucket in buckets] == expected


def test_database_revenue_respects_date_range(bookings):
    provider = DatabaseAnalyticsProvider(bookings)

    buckets = provider.fetch_revenue("month", start=datetime(2026, 3, 3), end=datetime(2026, 3, 31))

    assert [(bucket.label, bucket.revenue) for bucket in buckets] == [("2026-03", 300)]
    assert provider.fetch_average_booking_value(start=datetime(2026, 3, 3), end=datetime(2026, 3, 31)) == 300


def test_database_revenue_summary_includes_average_booking_value(bookings):
    summary = AnalyticsService(DatabaseAnalyticsProvider(bookings)).get_revenue_summary("month")

    assert summary.total_revenue == 1000
    assert summary.highest_bucket.label == "2026-03"
    assert summary.average_booking_value == 250


def test_database_provider_without_bookings(db):
    provider = DatabaseAnalyticsProvider(db)

    assert provider.fetch_revenue("day") == []
    assert provider.fetch_average_booking_value() is None
    assert len(provider.fetch_fleet()) == 5


def test_week_buckets_follow_iso_calendar():
    assert bucket_label(datetime(2026, 12, 31), "week") == "2026-W53"
    assert bucket_label(datetime(2027, 1, 4), "week") == "2027-W01"
    with pytest.raises(ValueError):
        bucket_label(datetime(2026, 1, 1), "year")


def test_sample_provider_has_no_average_booking_value(provider):
    assert AnalyticsService(provider).get_revenue_summary("week").average_booking_value is None
