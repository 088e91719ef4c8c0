"""
Booking status projection for completed payments
"""
from datetime import datetime
from sqlalchemy.orm import Session

from carrental.db.models import Booking, BookingStatus, BookingPaymentStatus, BookingStatusHistory
from carrental.core.logging_config import logger


class BookingService:
    """Narrow write access to bookings owned by the booking feature"""

    @staticmethod
    def mark_booking_paid(db: Session, booking_id: int, notes: str) -> bool:
        """
        Mark a booking paid and confirmed and append a history entry

        Args:
            db: Database session (caller commits)
            booking_id: Booking to update
            notes: History note

        Returns:
            False if the booking does not exist
        """
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            logger.warning(f"Booking {booking_id} not found; skipping payment status update")
            return False

        booking.payment_status = BookingPaymentStatus.PAID
        booking.status = BookingStatus.CONFIRMED
        booking.status_history.append(BookingStatusHistory(
            status=BookingStatus.CONFIRMED,
            date=datetime.now(),
            notes=notes,
        ))
        db.flush()
        logger.info(f"Booking {booking_id} confirmed after payment")
        return True


# Global instance
booking_service = BookingService()
