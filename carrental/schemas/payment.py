"""
Pydantic schemas for PayPal payments

Request and response bodies use camelCase keys on the wire.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PaymentLineItem(_CamelModel):
    """Line item of an order"""
    name: str
    description: Optional[str] = None
    amount: float
    quantity: Optional[int] = None


class PayPalCreateRequest(_CamelModel):
    """Body of POST /paypal/create (required fields are checked by the service)"""
    amount: Optional[float] = None
    currency: Optional[str] = "USD"
    description: Optional[str] = None
    booking_id: Optional[int] = Field(default=None, alias="bookingId")
    items: List[PaymentLineItem] = Field(default_factory=list)


class PayPalCreateResponse(_CamelModel):
    success: bool = True
    payment_id: str = Field(alias="paymentId")
    status: str
    approval_url: str = Field(alias="approvalUrl")
    created_at: datetime = Field(alias="createdAt")


class PayPalExecuteRequest(_CamelModel):
    """Body of POST /paypal/execute"""
    payment_id: Optional[str] = Field(default=None, alias="paymentId")
    payer_id: Optional[str] = Field(default=None, alias="payerId")


class PayerInfo(_CamelModel):
    email: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")


class PayPalExecuteResponse(_CamelModel):
    success: bool = True
    payment_id: str = Field(alias="paymentId")
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    status: str
    completed_at: datetime = Field(alias="completedAt")
    payer: PayerInfo


class PaymentDetails(_CamelModel):
    id: str
    status: str
    amount: float
    currency: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    payer: Optional[PayerInfo] = None


class PayPalDetailsResponse(_CamelModel):
    success: bool = True
    payment: PaymentDetails


class ErrorResponse(BaseModel):
    """Uniform error envelope"""
    success: bool = False
    message: str
    error: Optional[str] = None
