"""
Application error taxonomy

Every error carries a human readable message, an optional underlying error
text and the HTTP status code the API answers with.
"""
from typing import Optional


class AppError(Exception):
    """Base application error (rendered as a 500 unless overridden)"""

    status_code: int = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error


class ValidationError(AppError):
    """Missing or invalid required input"""
    status_code = 400


class NotFoundError(AppError):
    """Referenced record does not exist"""
    status_code = 404


class GatewayError(AppError):
    """Failure talking to, or interpreting a response from, the payment processor"""
    status_code = 500


class AuthenticationError(GatewayError):
    """Access token exchange with the processor failed"""


class GatewayRequestError(GatewayError):
    """The processor rejected a request or answered with an unusable body"""

    def __init__(
        self,
        message: str,
        error: Optional[str] = None,
        http_status: Optional[int] = None,
        response_body: Optional[dict] = None
    ):
        super().__init__(message, error)
        self.http_status = http_status
        self.response_body = response_body or {}


class PersistenceError(AppError):
    """Database read/write failure"""
    status_code = 500
