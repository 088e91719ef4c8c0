"""
Payment routes for PayPal integration
"""
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from carrental.core.exceptions import AppError, NotFoundError, ValidationError
from carrental.core.logging_config import logger
from carrental.db.session import get_db
from carrental.routes.dependencies import get_payment_service
from carrental.schemas.payment import (
    ErrorResponse,
    PayPalCreateRequest,
    PayPalCreateResponse,
    PayPalDetailsResponse,
    PayPalExecuteRequest,
    PayPalExecuteResponse,
)
from carrental.services.payment_service import PaymentService

router = APIRouter(
    prefix="/api/payments",
    tags=["payments"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/paypal/create", response_model=PayPalCreateResponse)
def create_paypal_payment(
    payload: PayPalCreateRequest,
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Create a PayPal order for a booking

    Returns the PayPal order id and the approval URL the payer is sent to.
    """
    try:
        return payment_service.create_payment(
            db,
            amount=payload.amount,
            booking_id=payload.booking_id,
            currency=payload.currency,
            description=payload.description,
            items=[item.model_dump() for item in payload.items],
        )
    except (ValidationError, NotFoundError):
        raise
    except Exception as e:
        logger.error(f"Error creating PayPal payment: {str(e)}", exc_info=True)
        raise AppError("Failed to create PayPal payment", error=getattr(e, "error", None) or str(e)) from e


@router.post("/paypal/execute", response_model=PayPalExecuteResponse)
def execute_paypal_payment(
    payload: PayPalExecuteRequest,
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """Capture an approved PayPal order"""
    try:
        return payment_service.execute_payment(
            db,
            payment_id=payload.payment_id,
            payer_id=payload.payer_id,
        )
    except (ValidationError, NotFoundError):
        raise
    except Exception as e:
        logger.error(f"Error executing PayPal payment: {str(e)}", exc_info=True)
        raise AppError("Failed to execute PayPal payment", error=getattr(e, "error", None) or str(e)) from e


@router.get("/paypal/details/{payment_id}", response_model=PayPalDetailsResponse)
def get_paypal_payment_details(
    payment_id: str,
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """Get stored details of a PayPal payment"""
    try:
        return payment_service.get_payment_details(db, payment_id)
    except (ValidationError, NotFoundError):
        raise
    except Exception as e:
        logger.error(f"Error getting PayPal payment details: {str(e)}", exc_info=True)
        raise AppError("Failed to get PayPal payment details", error=getattr(e, "error", None) or str(e)) from e


@router.get("/paypal/success")
def paypal_success(
    token: Optional[str] = None,
    PayerID: Optional[str] = None,
    payment_service: PaymentService = Depends(get_payment_service)
):
    """PayPal return URL: forward the payer to the front-end success page"""
    try:
        url = payment_service.success_redirect_url(token, PayerID)
    except Exception as e:
        logger.error(f"Error handling PayPal success: {str(e)}")
        url = payment_service.error_redirect_url()
    return RedirectResponse(url=url, status_code=302)


@router.get("/paypal/cancel")
def paypal_cancel(
    payment_service: PaymentService = Depends(get_payment_service)
):
    """PayPal cancel URL: forward the payer to the front-end cancel page"""
    try:
        url = payment_service.cancel_redirect_url()
    except Exception as e:
        logger.error(f"Error handling PayPal cancel: {str(e)}")
        url = payment_service.error_redirect_url()
    return RedirectResponse(url=url, status_code=302)
