from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from guestmeals.api.dependencies import Container, current_trace_context, get_container
from guestmeals.application.dto.requests import UpdateOrderStatusRequest
from guestmeals.application.dto.responses import KitchenQueueResponse, OrderResponse
from guestmeals.application.use_cases.kitchen_queue import KitchenQueue
from guestmeals.application.use_cases.update_order_status import UpdateOrderStatus
from guestmeals.domain.common.ids import OrderId

router = APIRouter()


@router.get("/v1/kitchen/orders", response_model=KitchenQueueResponse)
def kitchen_queue(
    status: str = Query(default="ALL"),
    container: Container = Depends(get_container),
) -> KitchenQueueResponse:
    return KitchenQueue(order_repository=container.order_repository).execute(status=status)


@router.patch("/v1/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    request_dto: UpdateOrderStatusRequest,
    container: Container = Depends(get_container),
) -> OrderResponse:
    use_case = UpdateOrderStatus(
        order_repository=container.order_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(
        order_id=OrderId(order_id),
        status=request_dto.status,
        trace_ctx=current_trace_context(),
    )
