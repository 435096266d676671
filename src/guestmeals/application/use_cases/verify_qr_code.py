from __future__ import annotations

import logging

from guestmeals.application.dto.responses import QrVerificationResponse
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.application.mappers.subscription_mapper import to_subscription_response
from guestmeals.application.metrics.order_lifecycle import record_qr_verification
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.repositories import OrderRepository, SubscriptionRepository
from guestmeals.domain.qr.tokens import TokenNamespace, token_namespace
from guestmeals.domain.subscription.entities import SubscriptionStatus

logger = logging.getLogger(__name__)


class VerifyQrCode:
    """Resolve a scanned token against orders first, then subscriptions.

    An order token stays valid once issued. A subscription token is only valid
    while the subscription is active and inside its 30-day window.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        subscription_repository: SubscriptionRepository,
        clock: Clock,
    ) -> None:
        self._order_repository = order_repository
        self._subscription_repository = subscription_repository
        self._clock = clock

    def execute(self, qr_code: str) -> QrVerificationResponse:
        token = qr_code.strip()
        order = self._order_repository.get_by_qr_code(token) if token else None
        if order is not None:
            record_qr_verification(TokenNamespace.ORDER.value, True)
            return QrVerificationResponse(
                valid=True,
                type=TokenNamespace.ORDER.value,
                message=f"Valid order for room {order.delivery.room_number}.",
                data=to_order_response(order),
            )

        subscription = self._subscription_repository.get_by_qr_code(token) if token else None
        if subscription is not None:
            valid = subscription.is_redeemable(self._clock.now())
            if valid:
                message = f"Active {subscription.plan_name} subscription."
            elif subscription.status != SubscriptionStatus.ACTIVE:
                message = f"Subscription is {subscription.status.value}."
            else:
                message = "Subscription has expired."
            record_qr_verification(TokenNamespace.SUBSCRIPTION.value, valid)
            return QrVerificationResponse(
                valid=valid,
                type=TokenNamespace.SUBSCRIPTION.value,
                message=message,
                data=to_subscription_response(subscription),
            )

        namespace = token_namespace(token)
        logger.info(
            "qr_code_unknown",
            extra={"claimed_type": namespace.value if namespace else None},
        )
        record_qr_verification(None, False)
        return QrVerificationResponse(valid=False, type=None, message="QR code not recognised.")
