from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from guestmeals.domain.common.ids import AgentId, CustomerId, MenuItemId, OrderId, TimeSlotId
from guestmeals.domain.common.money import Money
from guestmeals.domain.order.entities import (
    DeliveryDetails,
    Order,
    OrderLine,
    OrderStatus,
    OrderTransitionError,
    OrderType,
    build_lines,
    create_confirmed_order,
)
from guestmeals.domain.qr.tokens import (
    TokenNamespace,
    issue_order_token,
    issue_subscription_token,
    new_order_id,
    token_namespace,
)

IST = ZoneInfo("Asia/Kolkata")
NOW = datetime(2024, 6, 1, 9, 0, tzinfo=IST)


def _order(**overrides) -> Order:
    lines = build_lines([(MenuItemId("poha"), "Poha", 2, Money(amount=40))])
    fields = {
        "order_id": OrderId("ORD-1"),
        "customer_id": CustomerId("cus_001"),
        "delivery": DeliveryDetails(name="Asha", room_number="101"),
        "lines": lines,
        "declared_total": Money(amount=80),
        "order_type": OrderType.REGULAR,
        "qr_code": "QR-ORD-1-abc",
        "now": NOW,
    }
    fields.update(overrides)
    return create_confirmed_order(**fields)


def test_line_total_must_match_quantity() -> None:
    with pytest.raises(ValueError):
        OrderLine(
            item_id=MenuItemId("poha"),
            name="Poha",
            quantity=2,
            unit_price=Money(amount=40),
            line_total=Money(amount=40),
        )


def test_quantity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        build_lines([(MenuItemId("poha"), "Poha", 0, Money(amount=40))])


def test_declared_total_must_match_lines() -> None:
    with pytest.raises(ValueError):
        _order(declared_total=Money(amount=70))


def test_slot_and_service_date_come_together() -> None:
    with pytest.raises(ValueError):
        _order(time_slot_id=TimeSlotId("lunch"))

    order = _order(time_slot_id=TimeSlotId("lunch"), service_date=date(2024, 6, 1))
    assert order.is_slot_order


def test_new_order_is_confirmed() -> None:
    order = _order()

    assert order.status == OrderStatus.CONFIRMED
    assert order.version == 1
    assert order.item_count == 2
    assert not order.is_slot_order


def test_kitchen_moves_one_step_at_a_time() -> None:
    order = _order()

    preparing = order.advance_in_kitchen(OrderStatus.PREPARING)
    ready = preparing.advance_in_kitchen(OrderStatus.READY)

    assert ready.status == OrderStatus.READY
    with pytest.raises(OrderTransitionError):
        order.advance_in_kitchen(OrderStatus.READY)
    with pytest.raises(OrderTransitionError):
        ready.advance_in_kitchen(OrderStatus.PREPARING)
    with pytest.raises(OrderTransitionError):
        ready.advance_in_kitchen(OrderStatus.DELIVERED)


def test_mark_delivered_records_agent_and_time() -> None:
    delivered = _order().mark_delivered(AgentId("agt_7"), NOW)

    assert delivered.status == OrderStatus.DELIVERED
    assert delivered.delivered_by == AgentId("agt_7")
    assert delivered.delivered_at == NOW
    with pytest.raises(OrderTransitionError):
        delivered.mark_delivered(AgentId("agt_8"), NOW)


def test_status_rank_is_forward_only() -> None:
    ranks = [status.rank for status in OrderStatus]
    assert ranks == sorted(ranks)


def test_money_rejects_negative_amounts_and_mixed_currencies() -> None:
    with pytest.raises(ValueError):
        Money(amount=-1)
    with pytest.raises(ValueError):
        Money(amount=1).plus(Money(amount=1, currency="USD"))
    assert Money(amount=40).times(3) == Money(amount=120)


def test_tokens_are_unique_and_prefixed() -> None:
    order_id = new_order_id(NOW)
    emergency_id = new_order_id(NOW, prefix="EMERGENCY")

    first = issue_order_token(order_id)
    second = issue_order_token(order_id)

    assert str(order_id).startswith(f"ORD-{int(NOW.timestamp() * 1000)}-")
    assert str(emergency_id).startswith("EMERGENCY-")
    assert first != second
    assert token_namespace(first) == TokenNamespace.ORDER
    assert token_namespace(issue_subscription_token("SUB-1")) == TokenNamespace.SUBSCRIPTION
    assert token_namespace("garbage") is None
