"""
PayPal payment gateway service
Handles access token exchange, order creation and order capture against
the PayPal Orders v2 REST API
"""
import time
from typing import Any, Dict, List, Optional

import requests

from carrental.core.config import Settings
from carrental.core.exceptions import AuthenticationError, GatewayRequestError
from carrental.core.logging_config import logger

# Refresh a cached token this many seconds before PayPal expires it
TOKEN_EXPIRY_MARGIN = 60


class PayPalService:
    """PayPal REST client (single attempt per call, no retries)"""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        """Initialize PayPal service with credentials"""
        self.client_id = settings.PAYPAL_CLIENT_ID
        self.secret = settings.PAYPAL_SECRET
        self.api_url = settings.PAYPAL_API_URL.rstrip("/")
        self.brand_name = settings.PAYPAL_BRAND_NAME
        self.timeout = settings.PAYPAL_TIMEOUT
        self.cache_token = settings.PAYPAL_CACHE_ACCESS_TOKEN
        self.return_url = f"{settings.base_url}/api/payments/paypal/success"
        self.cancel_url = f"{settings.base_url}/api/payments/paypal/cancel"
        self.http = session or requests.Session()

        self._token: Optional[str] = None
        self._token_expires_at: float = 0.0

        if not self.client_id or not self.secret:
            logger.warning("PayPal credentials not fully configured. Payment integration may not work.")

    def acquire_access_token(self) -> str:
        """
        Exchange the client credentials for a bearer token

        Returns:
            Access token

        Raises:
            AuthenticationError: If the exchange fails for any reason
        """
        if self.cache_token and self._token and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            response = self.http.post(
                f"{self.api_url}/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                auth=(self.client_id, self.secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            token = data["access_token"]
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Error getting PayPal access token: {str(e)}")
            raise AuthenticationError("Failed to get PayPal access token", error=str(e)) from e

        if self.cache_token:
            expires_in = int(data.get("expires_in", 0))
            self._token = token
            self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)

        return token

    def build_order_payload(
        self,
        amount: float,
        currency: str,
        description: Optional[str],
        booking_id: Any,
        line_items: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Build a capture-on-approval order with one purchase unit for the booking"""
        items = []
        for item in line_items or []:
            quantity = item.get("quantity") or 1
            items.append({
                "name": item.get("name"),
                "description": item.get("description"),
                "unit_amount": {
                    "currency_code": currency,
                    "value": _format_amount(item.get("amount", 0) / quantity),
                },
                "quantity": str(quantity),
            })

        value = _format_amount(amount)
        return {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": str(booking_id),
                    "description": description,
                    "amount": {
                        "currency_code": currency,
                        "value": value,
                        "breakdown": {
                            "item_total": {"currency_code": currency, "value": value},
                        },
                    },
                    "items": items,
                }
            ],
            "application_context": {
                "brand_name": self.brand_name,
                "landing_page": "BILLING",
                "user_action": "PAY_NOW",
                "return_url": self.return_url,
                "cancel_url": self.cancel_url,
            },
        }

    def create_order(
        self,
        amount: float,
        currency: str = "USD",
        description: Optional[str] = None,
        booking_id: Any = None,
        line_items: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Create a PayPal order

        Returns:
            Dictionary with id, status, approval_url and the raw links
        """
        payload = self.build_order_payload(amount, currency, description, booking_id, line_items)
        data = self._post("/v2/checkout/orders", payload, action="create order")

        links = data.get("links") or []
        approval_url = next((link.get("href") for link in links if link.get("rel") == "approve"), None)
        if not approval_url:
            logger.error(f"PayPal order {data.get('id')} has no approve link: {links}")
            raise GatewayRequestError(
                "PayPal response did not include an approval link",
                response_body=data,
            )

        logger.info(f"PayPal order {data.get('id')} created for booking {booking_id}")
        return {
            "id": data.get("id"),
            "status": data.get("status"),
            "approval_url": approval_url,
            "links": links,
        }

    def capture_order(self, order_id: str) -> Dict[str, Any]:
        """
        Capture a previously approved order

        Returns:
            Dictionary with status, capture_id and payer identity
        """
        data = self._post(f"/v2/checkout/orders/{order_id}/capture", {}, action="capture order")

        try:
            capture_id = data["purchase_units"][0]["payments"]["captures"][0]["id"]
            payer = data.get("payer") or {}
            name = payer.get("name") or {}
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayRequestError(
                "Unexpected PayPal capture response",
                error=str(e),
                response_body=data,
            ) from e

        logger.info(f"PayPal order {order_id} captured with status {data.get('status')}")
        return {
            "status": data.get("status"),
            "capture_id": capture_id,
            "payer": {
                "email": payer.get("email_address"),
                "first_name": name.get("given_name"),
                "last_name": name.get("surname"),
            },
        }

    def _post(self, path: str, payload: Dict[str, Any], action: str) -> Dict[str, Any]:
        token = self.acquire_access_token()
        try:
            response = self.http.post(
                f"{self.api_url}{path}",
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {token}",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"PayPal {action} request failed: {str(e)}")
            raise GatewayRequestError(f"PayPal {action} request failed", error=str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            detail = body.get("message") or body.get("name") or response.text
            logger.error(f"PayPal {action} rejected ({response.status_code}): {detail}")
            raise GatewayRequestError(
                f"PayPal {action} rejected",
                error=detail,
                http_status=response.status_code,
                response_body=body,
            )
        return body


def _format_amount(value: float) -> str:
    return f"{float(value):.2f}"
