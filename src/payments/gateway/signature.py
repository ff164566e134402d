"""HMAC-SHA256 payment signatures.

The gateway signs ``"{gateway_order_id}|{gateway_payment_id}"`` with the
merchant's key secret and returns the hex digest to the client.
"""

import hashlib
import hmac


def payment_signature(gateway_order_id: str, gateway_payment_id: str, secret: str) -> str:
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def signature_matches(gateway_order_id: str, gateway_payment_id: str, signature: str | None, secret: str) -> bool:
    """Constant-time comparison of a client-supplied signature."""
    if not signature or not secret:
        return False
    expected = payment_signature(gateway_order_id, gateway_payment_id, secret)
    return hmac.compare_digest(expected, signature)
