"""
Shared route dependencies

Services are built once from the settings object and can be swapped via
app.dependency_overrides.
"""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from carrental.core.config import get_settings
from carrental.core.logging_config import logger
from carrental.db.session import get_db
from carrental.services.analytics_provider import DatabaseAnalyticsProvider
from carrental.services.analytics_service import AnalyticsService, analytics_service
from carrental.services.payment_service import PaymentService
from carrental.services.paypal_service import PayPalService


@lru_cache()
def get_paypal_service() -> PayPalService:
    """PayPal client configured from application settings"""
    return PayPalService(get_settings())


def get_payment_service() -> PaymentService:
    """Payment orchestration service"""
    return PaymentService(get_paypal_service(), get_settings())


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """
    Analytics service backed by the configured data provider

    ANALYTICS_SOURCE=database reads revenue from bookings; anything else
    serves the sample datasets.
    """
    source = get_settings().ANALYTICS_SOURCE.lower()
    if source == "database":
        return AnalyticsService(DatabaseAnalyticsProvider(db))
    if source != "sample":
        logger.warning(f"Unknown ANALYTICS_SOURCE '{source}', using sample data")
    return analytics_service
