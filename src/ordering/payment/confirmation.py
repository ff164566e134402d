"""Payment Confirmation Gate.

Decides whether a (gateway order id, gateway payment id, signature) triple
handed back by a client proves a real payment for one of our intents.
Verification never mutates anything: the verified mapping is recorded when
the intent is consumed by the checkout.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from ordering.payment.intent import PaymentIntent
from payments.gateway import get_gateway
from payments.gateway.port import SETTLED_PAYMENT_STATUSES, GatewayError, GatewayTimeout, PaymentGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    reason: str | None = None
    already_processed: bool = False
    order_id: str | None = None
    intent: PaymentIntent | None = None

    @classmethod
    def failed(cls, reason: str) -> "VerificationResult":
        return cls(success=False, reason=reason)


class PaymentConfirmationGate:
    def __init__(self, gateway: PaymentGateway | None = None) -> None:
        self.gateway = gateway or get_gateway()

    def verify(self, gateway_order_id, gateway_payment_id, signature, owner_id=None) -> VerificationResult:
        log = logger.bind(gateway_order_id=gateway_order_id, gateway_payment_id=gateway_payment_id)

        intent = current_domain.repository_for(PaymentIntent).find_by_gateway_order_id(gateway_order_id)
        if intent is None or (owner_id is not None and str(intent.owner_id) != str(owner_id)):
            log.warning("Payment confirmation for unknown intent")
            return VerificationResult.failed("UnknownIntent")

        if intent.is_consumed:
            if intent.gateway_payment_id == gateway_payment_id:
                return VerificationResult(
                    success=True,
                    already_processed=True,
                    order_id=str(intent.order_id),
                    intent=intent,
                )
            log.warning("Payment intent already consumed by another payment")
            return VerificationResult.failed("IntentConsumed")

        if not self.gateway.verify_payment_signature(gateway_order_id, gateway_payment_id, signature):
            log.warning("Payment signature mismatch")
            return VerificationResult.failed("SignatureInvalid")

        try:
            status = self.gateway.fetch_payment_status(gateway_payment_id)
        except GatewayTimeout:
            log.warning("Gateway timed out while fetching payment")
            return VerificationResult.failed("GatewayTimeout")
        except GatewayError as exc:
            log.warning("Gateway refused payment lookup", error=str(exc))
            return VerificationResult.failed("PaymentNotCaptured")

        if status not in SETTLED_PAYMENT_STATUSES:
            log.warning("Payment not captured", payment_status=status)
            return VerificationResult.failed("PaymentNotCaptured")

        return VerificationResult(success=True, intent=intent)
