from __future__ import annotations

from guestmeals.application.dto.responses import KitchenQueueResponse
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.application.ports.repositories import OrderRepository
from guestmeals.application.use_cases.errors import InvalidPayloadError
from guestmeals.domain.order.entities import OrderStatus

_STATUS_MAP: dict[str, frozenset[OrderStatus]] = {
    "ALL": frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY}),
    "CONFIRMED": frozenset({OrderStatus.CONFIRMED}),
    "PREPARING": frozenset({OrderStatus.PREPARING}),
    "READY": frozenset({OrderStatus.READY}),
    "DELIVERED": frozenset({OrderStatus.DELIVERED}),
}


class InvalidKitchenQueueStatusError(InvalidPayloadError):
    pass


class KitchenQueue:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, status: str = "ALL") -> KitchenQueueResponse:
        normalized_status = status.upper()
        if normalized_status not in _STATUS_MAP:
            raise InvalidKitchenQueueStatusError(f"invalid kitchen queue status: {status}")

        orders = self._order_repository.list_by_status(_STATUS_MAP[normalized_status])
        return KitchenQueueResponse(orders=[to_order_response(order) for order in orders])
