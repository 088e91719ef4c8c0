"""
Payment orchestration service
Drives the two-phase PayPal create/capture flow, persists payment records
and confirms the related booking once funds are captured
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carrental.core.config import Settings
from carrental.core.exceptions import NotFoundError, PersistenceError, ValidationError
from carrental.core.logging_config import logger
from carrental.db.models import Payment, PaymentProvider, PaymentStatus
from carrental.schemas.payment import (
    PayerInfo,
    PaymentDetails,
    PayPalCreateResponse,
    PayPalDetailsResponse,
    PayPalExecuteResponse,
)
from carrental.services.booking_service import booking_service
from carrental.services.paypal_service import PayPalService

BOOKING_PAID_NOTE = "Payment completed via PayPal"


class PaymentService:
    """Service for PayPal payment operations"""

    def __init__(self, gateway: PayPalService, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    def create_payment(
        self,
        db: Session,
        amount: Optional[float],
        booking_id: Optional[int],
        currency: Optional[str] = "USD",
        description: Optional[str] = None,
        items: Optional[List[Dict[str, Any]]] = None,
    ) -> PayPalCreateResponse:
        """
        Open a PayPal order for a booking and record the payment attempt

        Raises:
            ValidationError: If amount or booking_id is missing
            GatewayError: If PayPal cannot be reached or rejects the order
            PersistenceError: If the payment cannot be stored
        """
        if not amount or not booking_id:
            raise ValidationError("Amount and bookingId are required")
        currency = currency or "USD"

        order = self.gateway.create_order(
            amount=amount,
            currency=currency,
            description=description,
            booking_id=booking_id,
            line_items=items,
        )

        created_at = datetime.now()
        payment = Payment(
            payment_id=order["id"],
            booking_id=booking_id,
            amount=amount,
            currency=currency,
            description=description,
            status=PaymentStatus.from_gateway(order["status"]),
            provider=PaymentProvider.PAYPAL,
            created_at=created_at,
        )
        try:
            db.add(payment)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving payment {order['id']}: {str(e)}")
            raise PersistenceError("Failed to save payment", error=str(e)) from e

        logger.info(f"Payment {order['id']} created for booking {booking_id} ({amount} {currency})")
        return PayPalCreateResponse(
            payment_id=order["id"],
            status=order["status"],
            approval_url=order["approval_url"],
            created_at=created_at,
        )

    def execute_payment(
        self,
        db: Session,
        payment_id: Optional[str],
        payer_id: Optional[str],
    ) -> PayPalExecuteResponse:
        """
        Capture an approved PayPal order and record the outcome

        When PayPal reports COMPLETED the booking update runs as a second
        step after the payment is committed. If that step fails the payment
        stays COMPLETED with booking_update_pending set.

        Raises:
            ValidationError: If payment_id or payer_id is missing
            NotFoundError: If no payment is stored under payment_id
            GatewayError: If the capture is rejected
            PersistenceError: If the payment cannot be read or updated
        """
        if not payment_id or not payer_id:
            raise ValidationError("Payment ID and Payer ID are required")

        payment = self._get_payment(db, payment_id)

        capture = self.gateway.capture_order(payment_id)
        gateway_status = capture["status"]
        payer = capture["payer"]

        new_status = PaymentStatus.from_gateway(gateway_status)
        if payment.status.can_transition_to(new_status):
            payment.status = new_status
        else:
            logger.warning(
                f"Ignoring status change {payment.status.value} -> {new_status.value} for payment {payment_id}"
            )

        completed_at = datetime.now()
        completed = gateway_status == "COMPLETED"
        payment.payer_id = payer_id
        payment.completed_at = completed_at
        payment.details = {
            "captureId": capture["capture_id"],
            "payerEmail": payer["email"],
            "payerName": " ".join(p for p in (payer["first_name"], payer["last_name"]) if p),
            "payerFirstName": payer["first_name"],
            "payerLastName": payer["last_name"],
        }
        payment.booking_update_pending = completed
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating payment {payment_id}: {str(e)}")
            raise PersistenceError("Failed to update payment", error=str(e)) from e

        if completed:
            self._confirm_booking(db, payment)

        return PayPalExecuteResponse(
            payment_id=payment_id,
            transaction_id=capture["capture_id"],
            status=gateway_status,
            completed_at=completed_at,
            payer=PayerInfo(
                email=payer["email"],
                first_name=payer["first_name"],
                last_name=payer["last_name"],
            ),
        )

    def get_payment_details(self, db: Session, payment_id: Optional[str]) -> PayPalDetailsResponse:
        """Read-only projection of a stored payment"""
        if not payment_id:
            raise ValidationError("Payment ID is required")

        payment = self._get_payment(db, payment_id)
        details = payment.details or {}

        payer = None
        if details.get("payerEmail"):
            first_name = details.get("payerFirstName")
            last_name = details.get("payerLastName")
            if first_name is None and last_name is None and details.get("payerName"):
                # Older records only carry the joined name
                first_name, _, last_name = details["payerName"].partition(" ")
            payer = PayerInfo(
                email=details["payerEmail"],
                first_name=first_name,
                last_name=last_name or None,
            )

        return PayPalDetailsResponse(
            payment=PaymentDetails(
                id=payment.payment_id,
                status=payment.status.value,
                amount=payment.amount,
                currency=payment.currency,
                created_at=payment.created_at,
                completed_at=payment.completed_at,
                payer=payer,
            )
        )

    def success_redirect_url(self, token: Optional[str], payer_id: Optional[str]) -> str:
        """Front-end success page, forwarding the PayPal query parameters"""
        params = {k: v for k, v in (("token", token), ("PayerID", payer_id)) if v}
        url = f"{self.settings.frontend_url}/payment/success"
        return f"{url}?{urlencode(params)}" if params else url

    def cancel_redirect_url(self) -> str:
        return f"{self.settings.frontend_url}/payment/cancel"

    def error_redirect_url(self) -> str:
        return f"{self.settings.frontend_url}/payment/error"

    def _get_payment(self, db: Session, payment_id: str) -> Payment:
        try:
            payment = db.query(Payment).filter(Payment.payment_id == payment_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Error loading payment {payment_id}: {str(e)}")
            raise PersistenceError("Failed to load payment", error=str(e)) from e
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def _confirm_booking(self, db: Session, payment: Payment) -> None:
        payment_id = payment.payment_id
        booking_id = payment.booking_id
        try:
            booking_service.mark_booking_paid(db, booking_id, notes=BOOKING_PAID_NOTE)
            payment.booking_update_pending = False
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Payment {payment_id} completed but booking {booking_id} update failed; "
                f"left pending: {str(e)}"
            )
