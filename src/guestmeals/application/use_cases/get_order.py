from __future__ import annotations

from guestmeals.application.dto.responses import CustomerOrdersResponse, OrderResponse
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.application.ports.repositories import OrderRepository
from guestmeals.application.use_cases.errors import OrderNotFoundError
from guestmeals.domain.common.ids import CustomerId, OrderId


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return to_order_response(order)


class ListCustomerOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, customer_id: CustomerId) -> CustomerOrdersResponse:
        orders = self._order_repository.list_for_customer(customer_id)
        return CustomerOrdersResponse(orders=[to_order_response(order) for order in orders])
