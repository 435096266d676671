from __future__ import annotations

from datetime import datetime

from guestmeals.application.dto.responses import OrderItemResponse, OrderResponse
from guestmeals.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        customerId=str(order.customer_id),
        customerName=order.delivery.name,
        roomNumber=order.delivery.room_number,
        phoneNumber=order.delivery.phone_number,
        items=[
            OrderItemResponse(
                id=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                price=line.unit_price.amount,
                lineTotal=line.line_total.amount,
            )
            for line in order.lines
        ],
        totalAmount=order.total.amount,
        currency=order.total.currency,
        orderType=order.order_type.value,
        status=order.status.value,
        createdAt=order.created_at,
        estimatedDelivery=order.estimated_delivery,
        qrCode=order.qr_code,
        timeSlotId=str(order.time_slot_id) if order.time_slot_id is not None else None,
        serviceDate=order.service_date,
        deliveredBy=str(order.delivered_by) if order.delivered_by is not None else None,
        deliveredAt=order.delivered_at,
    )


def to_display_time(moment: datetime) -> str:
    """Clock time the way the front desk prints it, e.g. ``11:30 AM``."""
    return moment.strftime("%I:%M %p")
