from __future__ import annotations

import concurrent.futures
import json
import sys
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from guestmeals.application.dto.requests import (
    CreateOrderRequest,
    CustomerDetailsRequest,
    EmergencyOrderRequest,
    OrderItemRequest,
    PlaceTimedOrderRequest,
)
from guestmeals.application.use_cases.context import TraceContext
from guestmeals.application.use_cases.create_order import CreateOrder
from guestmeals.application.use_cases.errors import (
    InvalidPayloadError,
    InvalidTimeSlotError,
    OrderWindowClosedError,
)
from guestmeals.application.use_cases.ledger import LedgerReader
from guestmeals.application.use_cases.place_timed_order import (
    EMERGENCY_WARNING,
    PlaceEmergencyOrder,
    PlaceTimedOrder,
)
from guestmeals.domain.common.ids import OrderId, TimeSlotId
from guestmeals.domain.order.entities import Order
from guestmeals.domain.slot.entities import TimeSlot
from guestmeals.infrastructure.memory.repositories import (
    InMemoryDailyBillRepository,
    InMemoryOrderRepository,
    InMemoryTimeSlotRepository,
)

IST = ZoneInfo("Asia/Kolkata")
SERVICE_DATE = date(2024, 6, 1)


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current


class RecordingPublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def publish(self, channel: str, message: str) -> None:
        self.messages.append((channel, message))


class BrokenPublisher:
    def publish(self, channel: str, message: str) -> None:
        raise ConnectionError("broker down")


class FailingOrderRepository(InMemoryOrderRepository):
    def add(self, order: Order) -> None:
        raise RuntimeError("disk full")


class DeactivatedBeforeReserveRepository(InMemoryTimeSlotRepository):
    def try_reserve(self, slot_id: TimeSlotId) -> TimeSlot | None:
        self.update_config(slot_id, {"is_active": False})
        return super().try_reserve(slot_id)


def _lunch(max_orders: int | None = 2) -> TimeSlot:
    return TimeSlot(
        slot_id=TimeSlotId("lunch"),
        name="Lunch",
        start_time=time(12, 0),
        end_time=time(15, 0),
        cutoff_time=time(10, 0),
        max_orders=max_orders,
    )


def _request(slot_id: str = "lunch", total_amount: int = 80, **overrides) -> PlaceTimedOrderRequest:
    fields = {
        "customer_id": "cus_001",
        "time_slot_id": slot_id,
        "items": [OrderItemRequest(id="poha", name="Poha", quantity=2, price=40)],
        "total_amount": total_amount,
        "customer_details": CustomerDetailsRequest(name="Asha", room_number="101"),
    }
    fields.update(overrides)
    return PlaceTimedOrderRequest(**fields)


class Harness:
    def __init__(self, slot: TimeSlot, now: datetime, order_repository=None, publisher=None):
        self.slots = InMemoryTimeSlotRepository([slot])
        self.orders = order_repository or InMemoryOrderRepository()
        self.bills = InMemoryDailyBillRepository()
        self.publisher = publisher or RecordingPublisher()
        self.clock = FixedClock(now)
        self.ledger = LedgerReader(daily_bill_repository=self.bills, order_repository=self.orders)

    def place(self, request_dto: PlaceTimedOrderRequest | None = None):
        use_case = PlaceTimedOrder(
            time_slot_repository=self.slots,
            order_repository=self.orders,
            daily_bill_repository=self.bills,
            publisher=self.publisher,
            clock=self.clock,
        )
        return use_case.execute(request_dto=request_dto or _request(), trace_ctx=TraceContext())

    def counter(self) -> int:
        slot = self.slots.get(TimeSlotId("lunch"))
        assert slot is not None
        return slot.current_orders


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 6, 1, hour, minute, tzinfo=IST)


def test_place_timed_order_books_into_daily_bill() -> None:
    harness = Harness(_lunch(), _at(9, 0))

    response = harness.place()

    assert response.orderId.startswith("ORD-")
    assert response.qrCode.startswith(f"QR-{response.orderId}-")
    assert response.preparationDeadline == "11:30 AM"
    assert response.estimatedDelivery == "12:10 PM"
    assert harness.counter() == 1

    bill = harness.ledger.bill(SERVICE_DATE, TimeSlotId("lunch"))
    assert bill is not None
    assert bill.total_orders == 1
    assert bill.total_revenue == 80
    assert bill.preparation_deadline == datetime(2024, 6, 1, 11, 30, tzinfo=IST)

    stored = harness.orders.get(OrderId(response.orderId))
    assert stored is not None
    assert stored.time_slot_id == TimeSlotId("lunch")
    assert stored.service_date == SERVICE_DATE


def test_lunch_scenario_fills_then_refuses() -> None:
    harness = Harness(_lunch(max_orders=2), _at(9, 0))

    harness.place()
    harness.place()
    assert harness.counter() == 2

    harness.clock.current = _at(9, 30)
    with pytest.raises(OrderWindowClosedError) as exc_info:
        harness.place()

    assert exc_info.value.reason == "fully_booked"
    assert "fully booked" in str(exc_info.value)
    assert harness.counter() == 2
    bill = harness.ledger.bill(SERVICE_DATE, TimeSlotId("lunch"))
    assert bill is not None
    assert bill.total_orders == 2


def test_refused_after_cutoff_even_when_empty() -> None:
    harness = Harness(_lunch(), _at(10, 1))

    with pytest.raises(OrderWindowClosedError) as exc_info:
        harness.place()

    assert exc_info.value.reason == "cutoff_passed"
    assert exc_info.value.details == {"reason": "cutoff_passed", "timeSlotId": "lunch"}
    assert harness.counter() == 0
    assert harness.ledger.bills_for_date(SERVICE_DATE) == []


def test_unknown_slot_is_invalid() -> None:
    harness = Harness(_lunch(), _at(9, 0))

    with pytest.raises(InvalidTimeSlotError):
        harness.place(_request(slot_id="brunch"))


def test_total_mismatch_is_rejected_without_reserving() -> None:
    harness = Harness(_lunch(), _at(9, 0))

    with pytest.raises(InvalidPayloadError):
        harness.place(_request(total_amount=79))

    assert harness.counter() == 0


def test_zero_quantity_is_rejected() -> None:
    harness = Harness(_lunch(), _at(9, 0))
    request_dto = _request(
        items=[OrderItemRequest(id="poha", name="Poha", quantity=0, price=40)],
        total_amount=0,
    )

    with pytest.raises(InvalidPayloadError):
        harness.place(request_dto)


def test_failed_persistence_releases_reservation() -> None:
    harness = Harness(_lunch(), _at(9, 0), order_repository=FailingOrderRepository())

    with pytest.raises(RuntimeError):
        harness.place()

    assert harness.counter() == 0


def test_publisher_failure_does_not_fail_placement() -> None:
    harness = Harness(_lunch(), _at(9, 0), publisher=BrokenPublisher())

    response = harness.place()

    assert harness.orders.get(OrderId(response.orderId)) is not None


def test_placement_publishes_order_placed_event() -> None:
    harness = Harness(_lunch(), _at(9, 0))

    response = harness.place()

    channel, message = harness.publisher.messages[0]
    envelope = json.loads(message)
    assert channel == "events:orders"
    assert envelope["event_type"] == "order.placed"
    assert envelope["payload"]["orderId"] == response.orderId
    assert envelope["payload"]["timeSlotId"] == "lunch"


def test_concurrent_placements_never_exceed_capacity() -> None:
    harness = Harness(_lunch(max_orders=5), _at(9, 0))

    def _attempt(_: int) -> str:
        try:
            harness.place()
            return "placed"
        except OrderWindowClosedError:
            return "refused"

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(_attempt, range(20)))

    assert results.count("placed") == 5
    assert results.count("refused") == 15
    assert harness.counter() == 5
    bill = harness.ledger.bill(SERVICE_DATE, TimeSlotId("lunch"))
    assert bill is not None
    assert bill.total_orders == 5
    assert len({order.order_id for order in bill.orders}) == 5


def test_emergency_order_bypasses_cutoff_and_capacity() -> None:
    harness = Harness(_lunch(max_orders=1), _at(9, 0))
    harness.place()
    harness.clock.current = _at(11, 0)

    use_case = PlaceEmergencyOrder(
        time_slot_repository=harness.slots,
        order_repository=harness.orders,
        daily_bill_repository=harness.bills,
        publisher=harness.publisher,
        clock=harness.clock,
    )
    base = _request().model_dump()
    response = use_case.execute(
        request_dto=EmergencyOrderRequest(**base, admin_id="adm_1"),
        trace_ctx=TraceContext(),
    )

    assert response.orderId.startswith("EMERGENCY-")
    assert response.warning == EMERGENCY_WARNING
    assert harness.counter() == 1
    bill = harness.ledger.bill(SERVICE_DATE, TimeSlotId("lunch"))
    assert bill is not None
    assert bill.total_orders == 2


def test_cart_order_has_no_slot_and_is_confirmed() -> None:
    orders = InMemoryOrderRepository()
    clock = FixedClock(_at(21, 0))
    use_case = CreateOrder(order_repository=orders, publisher=RecordingPublisher(), clock=clock)

    response = use_case.execute(
        request_dto=CreateOrderRequest(
            customer_id="cus_001",
            customer_name="Asha",
            room_number="101",
            items=[OrderItemRequest(id="thali", name="Thali", quantity=1, price=150)],
            total_amount=150,
            order_type="monthly",
        ),
        trace_ctx=TraceContext(),
    )

    assert response.status == "confirmed"
    assert response.orderType == "monthly"
    assert response.timeSlotId is None
    assert response.estimatedDelivery == datetime(2024, 6, 1, 21, 30, tzinfo=IST)
    assert response.qrCode.startswith("QR-")


def test_slot_deactivated_before_reservation_is_refused() -> None:
    harness = Harness(_lunch(), _at(9, 0))
    harness.slots = DeactivatedBeforeReserveRepository([_lunch()])

    with pytest.raises(OrderWindowClosedError) as exc_info:
        harness.place()

    assert exc_info.value.reason == "inactive"
    assert harness.counter() == 0
    assert harness.ledger.bills_for_date(SERVICE_DATE) == []
