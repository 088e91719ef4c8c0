import os

# Configure the app before anything from carrental is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ["DEBUG"] = "false"
os.environ["PAYPAL_CLIENT_ID"] = "test-client-id"
os.environ["PAYPAL_SECRET"] = "test-secret"
os.environ["PAYPAL_API_URL"] = "https://paypal.test"
os.environ["BASE_URL"] = "https://api.rental.test"
os.environ["FRONTEND_URL"] = "https://app.rental.test"

import pytest
from fastapi.testclient import TestClient

from carrental.core.config import get_settings
from carrental.db.models import Booking
from carrental.db.session import Base, SessionLocal, engine
from carrental.main import app
from carrental.routes.dependencies import get_payment_service
from carrental.services.payment_service import PaymentService


class FakePayPalGateway:
    """Records calls and answers like PayPalService without any HTTP"""

    def __init__(self):
        self.calls = []
        self.order_status = "CREATED"
        self.capture_status = "COMPLETED"
        self.create_error = None
        self.capture_error = None
        self._orders = 0

    def create_order(self, amount, currency="USD", description=None, booking_id=None, line_items=None):
        self.calls.append(("create_order", {
            "amount": amount,
            "currency": currency,
            "description": description,
            "booking_id": booking_id,
            "line_items": line_items,
        }))
        if self.create_error:
            raise self.create_error
        self._orders += 1
        order_id = f"ORDER-{self._orders}"
        approval_url = f"https://www.sandbox.paypal.com/checkoutnow?token={order_id}"
        return {
            "id": order_id,
            "status": self.order_status,
            "approval_url": approval_url,
            "links": [{"rel": "approve", "href": approval_url, "method": "GET"}],
        }

    def capture_order(self, order_id):
        self.calls.append(("capture_order", order_id))
        if self.capture_error:
            raise self.capture_error
        return {
            "status": self.capture_status,
            "capture_id": f"CAPTURE-{order_id}",
            "payer": {"email": "jane@example.com", "first_name": "Jane", "last_name": "Doe"},
        }


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakePayPalGateway()


@pytest.fixture
def payment_service(gateway):
    return PaymentService(gateway, get_settings())


@pytest.fixture
def client(payment_service):
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def booking(db):
    booking = Booking(user_id=1, car_id=3, total_amount=250.0)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


@pytest.fixture
def foreign_keys():
    """Enforce foreign keys on the shared in-memory connection, as Postgres would"""
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    yield
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
