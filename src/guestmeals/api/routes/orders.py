from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from guestmeals.api.dependencies import Container, current_trace_context, get_container
from guestmeals.application.dto.requests import (
    CreateOrderRequest,
    EmergencyOrderRequest,
    PlaceTimedOrderRequest,
)
from guestmeals.application.dto.responses import (
    CustomerOrdersResponse,
    EmergencyOrderPlacedResponse,
    OrderResponse,
    TimedOrderPlacedResponse,
)
from guestmeals.application.use_cases.create_order import CreateOrder
from guestmeals.application.use_cases.get_order import GetOrder, ListCustomerOrders
from guestmeals.application.use_cases.place_timed_order import PlaceEmergencyOrder, PlaceTimedOrder
from guestmeals.domain.common.ids import CustomerId, OrderId

router = APIRouter()


@router.post(
    "/v1/timed-orders",
    response_model=TimedOrderPlacedResponse,
    status_code=status.HTTP_201_CREATED,
)
def place_timed_order(
    request_dto: PlaceTimedOrderRequest,
    container: Container = Depends(get_container),
) -> TimedOrderPlacedResponse:
    use_case = PlaceTimedOrder(
        time_slot_repository=container.time_slot_repository,
        order_repository=container.order_repository,
        daily_bill_repository=container.daily_bill_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(request_dto=request_dto, trace_ctx=current_trace_context())


@router.post(
    "/v1/emergency-orders",
    response_model=EmergencyOrderPlacedResponse,
    status_code=status.HTTP_201_CREATED,
)
def place_emergency_order(
    request_dto: EmergencyOrderRequest,
    container: Container = Depends(get_container),
) -> EmergencyOrderPlacedResponse:
    use_case = PlaceEmergencyOrder(
        time_slot_repository=container.time_slot_repository,
        order_repository=container.order_repository,
        daily_bill_repository=container.daily_bill_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(request_dto=request_dto, trace_ctx=current_trace_context())


@router.post("/v1/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    request_dto: CreateOrderRequest,
    container: Container = Depends(get_container),
) -> OrderResponse:
    use_case = CreateOrder(
        order_repository=container.order_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(request_dto=request_dto, trace_ctx=current_trace_context())


@router.get("/v1/orders", response_model=CustomerOrdersResponse)
def list_customer_orders(
    customer_id: str = Query(alias="customerId", min_length=1),
    container: Container = Depends(get_container),
) -> CustomerOrdersResponse:
    use_case = ListCustomerOrders(order_repository=container.order_repository)
    return use_case.execute(customer_id=CustomerId(customer_id))


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, container: Container = Depends(get_container)) -> OrderResponse:
    return GetOrder(order_repository=container.order_repository).execute(order_id=OrderId(order_id))
