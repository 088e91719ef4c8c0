"""
Database models for the car rental payments API
"""
from enum import Enum as PyEnum
from typing import Optional
from sqlalchemy import (
    Column, Integer, String, Boolean, Text, JSON, Float, DateTime,
    ForeignKey, Enum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carrental.db.session import Base


# Enums
class PaymentStatus(str, PyEnum):
    """Payment status enumeration"""
    CREATED = "CREATED"
    APPROVED = "APPROVED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @classmethod
    def from_gateway(cls, value: Optional[str]) -> "PaymentStatus":
        """Map a PayPal order status onto the local status set"""
        return _GATEWAY_STATUS_MAP.get((value or "").upper(), cls.FAILED)

    def can_transition_to(self, new: "PaymentStatus") -> bool:
        """Statuses only move forward; terminal statuses never change"""
        if self in (PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED):
            return new == self
        return _STATUS_RANK[new] >= _STATUS_RANK[self]


_GATEWAY_STATUS_MAP = {
    "CREATED": PaymentStatus.CREATED,
    "SAVED": PaymentStatus.CREATED,
    "PAYER_ACTION_REQUIRED": PaymentStatus.CREATED,
    "APPROVED": PaymentStatus.APPROVED,
    "COMPLETED": PaymentStatus.COMPLETED,
    "VOIDED": PaymentStatus.CANCELLED,
    "CANCELLED": PaymentStatus.CANCELLED,
    "DECLINED": PaymentStatus.FAILED,
    "FAILED": PaymentStatus.FAILED,
}

_STATUS_RANK = {
    PaymentStatus.CREATED: 0,
    PaymentStatus.APPROVED: 1,
    PaymentStatus.COMPLETED: 2,
    PaymentStatus.FAILED: 2,
    PaymentStatus.CANCELLED: 2,
}


class PaymentProvider(str, PyEnum):
    """Payment provider enumeration"""
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CREDIT_CARD = "credit_card"


class BookingStatus(str, PyEnum):
    """Booking status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingPaymentStatus(str, PyEnum):
    """Payment state of a booking"""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


# Models
class Booking(Base):
    """Booking model (owned by the booking feature, only projected onto here)"""
    __tablename__ = 'bookings'

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    car_id = Column(Integer, nullable=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    total_amount = Column(Float, nullable=True)
    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    payment_status = Column(
        Enum(BookingPaymentStatus),
        nullable=False,
        default=BookingPaymentStatus.PENDING
    )
    created_at = Column(DateTime, server_default=func.now(), nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)

    # Relationships
    status_history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade='all, delete-orphan',
        order_by="BookingStatusHistory.id"
    )


class BookingStatusHistory(Base):
    """Append-only log of booking status changes"""
    __tablename__ = 'booking_status_history'

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, index=True)
    status = Column(Enum(BookingStatus), nullable=False)
    date = Column(DateTime, server_default=func.now(), nullable=False)
    notes = Column(Text, nullable=True)

    booking = relationship("Booking", back_populates="status_history")


class Payment(Base):
    """Payment attempt keyed by the processor's order id"""
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(String, unique=True, nullable=False, index=True)
    # Bookings are owned elsewhere; no foreign key so unknown ids can still be paid for
    booking_id = Column(Integer, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    description = Column(String, nullable=True)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.CREATED, nullable=False, index=True)
    provider = Column(Enum(PaymentProvider), default=PaymentProvider.PAYPAL, nullable=False)
    payer_id = Column(String, nullable=True)
    details = Column(JSON, nullable=True)  # {captureId, payerEmail, payerName, payerFirstName, payerLastName}
    # Set while a completed capture still has to be projected onto its booking
    booking_update_pending = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=True, index=True)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)
