from __future__ import annotations

from fastapi import APIRouter, Depends

from guestmeals.api.dependencies import Container, current_trace_context, get_container
from guestmeals.application.dto.requests import MarkDeliveredRequest, VerifyQrCodeRequest
from guestmeals.application.dto.responses import OrderResponse, QrVerificationResponse
from guestmeals.application.use_cases.mark_delivered import MarkDelivered
from guestmeals.application.use_cases.verify_qr_code import VerifyQrCode
from guestmeals.domain.common.ids import AgentId, OrderId

router = APIRouter()


@router.post("/v1/qr/verify", response_model=QrVerificationResponse)
def verify_qr_code(
    request_dto: VerifyQrCodeRequest,
    container: Container = Depends(get_container),
) -> QrVerificationResponse:
    use_case = VerifyQrCode(
        order_repository=container.order_repository,
        subscription_repository=container.subscription_repository,
        clock=container.clock,
    )
    return use_case.execute(qr_code=request_dto.qr_code)


@router.post("/v1/orders/{order_id}/deliver", response_model=OrderResponse)
def mark_delivered(
    order_id: str,
    request_dto: MarkDeliveredRequest,
    container: Container = Depends(get_container),
) -> OrderResponse:
    use_case = MarkDelivered(
        order_repository=container.order_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(
        order_id=OrderId(order_id),
        agent_id=AgentId(request_dto.agent_id),
        trace_ctx=current_trace_context(),
    )
