"""Razorpay payment gateway adapter.

Talks to the Razorpay REST API with ``requests`` using HTTP basic auth
(key id / key secret). Signatures are verified locally with the key secret,
so only order creation and payment lookup go over the network.
"""

import requests
import structlog

from payments.gateway.port import GatewayError, GatewayOrder, GatewayTimeout, PaymentGateway
from payments.gateway.signature import signature_matches

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    """Production Razorpay gateway adapter."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not key_id or not key_secret:
            raise ValueError("Razorpay key id and key secret are required")
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (key_id, key_secret)

    @property
    def public_key(self) -> str:
        return self.key_id

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.Timeout, requests.ConnectionError) as exc:
            logger.warning("Razorpay unreachable", method=method, path=path, error=str(exc))
            raise GatewayTimeout(f"Razorpay unreachable: {exc}") from exc
        except requests.RequestException as exc:
            raise GatewayError(f"Razorpay request failed: {exc}") from exc

        if response.status_code >= 500:
            logger.warning("Razorpay server error", method=method, path=path, status=response.status_code)
            raise GatewayTimeout(f"Razorpay answered {response.status_code}")
        if response.status_code >= 400:
            logger.warning("Razorpay rejected request", method=method, path=path, status=response.status_code)
            raise GatewayError(f"Razorpay answered {response.status_code}: {response.text[:200]}")
        return response.json()

    def create_gateway_order(self, amount_minor_units: int, currency: str, receipt_id: str) -> GatewayOrder:
        payload = self._request(
            "POST",
            "/orders",
            json={"amount": amount_minor_units, "currency": currency, "receipt": receipt_id},
        )
        return GatewayOrder(
            id=payload["id"],
            amount_minor_units=int(payload["amount"]),
            currency=payload["currency"],
            receipt_id=payload.get("receipt") or receipt_id,
            status=payload.get("status", "created"),
        )

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        return signature_matches(gateway_order_id, gateway_payment_id, signature, self.key_secret)

    def fetch_payment_status(self, gateway_payment_id: str) -> str:
        payload = self._request("GET", f"/payments/{gateway_payment_id}")
        return payload.get("status", "")
