from __future__ import annotations

from datetime import date, tzinfo

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import selectinload

from guestmeals.application.ports.repositories import (
    OptimisticConcurrencyError,
    OrderRepository,
    OrderTotalsData,
)
from guestmeals.domain.common.ids import AgentId, CustomerId, MenuItemId, OrderId, TimeSlotId
from guestmeals.domain.common.money import Money
from guestmeals.domain.order.entities import (
    DeliveryDetails,
    Order,
    OrderLine,
    OrderStatus,
    OrderType,
)
from guestmeals.infrastructure.clock import site_timezone
from guestmeals.infrastructure.db.models.order import OrderLineModel, OrderModel
from guestmeals.infrastructure.db.repositories.datetimes import from_storage, to_storage
from guestmeals.infrastructure.db.session import get_engine, open_session


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None, tz: tzinfo | None = None) -> None:
        self._engine = engine or get_engine()
        self._tz = tz or site_timezone()

    def add(self, order: Order) -> None:
        order_model = self._to_model(order)
        with open_session(self._engine) as session:
            session.add(order_model)
            session.commit()

    def get(self, order_id: OrderId) -> Order | None:
        return self._first(OrderModel.id == str(order_id))

    def get_by_qr_code(self, qr_code: str) -> Order | None:
        return self._first(OrderModel.qr_code == qr_code)

    def list_for_customer(self, customer_id: CustomerId) -> list[Order]:
        return self._all(OrderModel.customer_id == str(customer_id))

    def list_by_status(self, statuses: frozenset[OrderStatus]) -> list[Order]:
        return self._all(OrderModel.status.in_(sorted(status.value for status in statuses)))

    def list_for_service(self, service_date: date, time_slot_id: TimeSlotId) -> list[Order]:
        return self._all(
            OrderModel.service_date == service_date,
            OrderModel.time_slot_id == str(time_slot_id),
        )

    def summarize(self) -> OrderTotalsData:
        statement = select(
            func.count(OrderModel.id),
            func.coalesce(func.sum(OrderModel.total_amount), 0),
        )
        with open_session(self._engine) as session:
            row = session.execute(statement).one()
        return OrderTotalsData(orders_total=int(row[0] or 0), revenue=int(row[1] or 0))

    def update_status_with_version(self, order: Order, expected_version: int) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.version == expected_version,
            )
            .values(
                status=order.status.value,
                delivered_by=str(order.delivered_by) if order.delivered_by else None,
                delivered_at=to_storage(order.delivered_at),
                version=OrderModel.version + 1,
            )
        )
        with open_session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
            session.commit()

        updated = self.get(order.order_id)
        if updated is None:
            raise RuntimeError(f"order {order.order_id} not found after status update")
        return updated

    def _first(self, *criteria) -> Order | None:
        statement = select(OrderModel).options(selectinload(OrderModel.lines)).where(*criteria)
        with open_session(self._engine) as session:
            model = session.execute(statement.limit(1)).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def _all(self, *criteria) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(*criteria)
            .order_by(OrderModel.created_at, OrderModel.id)
        )
        with open_session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            customer_id=str(order.customer_id),
            customer_name=order.delivery.name,
            room_number=order.delivery.room_number,
            phone_number=order.delivery.phone_number,
            order_type=order.order_type.value,
            status=order.status.value,
            version=order.version,
            created_at=to_storage(order.created_at),
            estimated_delivery=to_storage(order.estimated_delivery),
            total_amount=order.total.amount,
            currency=order.total.currency,
            qr_code=order.qr_code,
            time_slot_id=str(order.time_slot_id) if order.time_slot_id else None,
            service_date=order.service_date,
            delivered_by=str(order.delivered_by) if order.delivered_by else None,
            delivered_at=to_storage(order.delivered_at),
        )
        order_model.lines = [
            OrderLineModel(
                item_id=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price.amount,
                currency=line.unit_price.currency,
                line_total=line.line_total.amount,
            )
            for line in order.lines
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        lines = [
            OrderLine(
                item_id=MenuItemId(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unit_price=Money(amount=line.unit_price, currency=line.currency),
                line_total=Money(amount=line.line_total, currency=line.currency),
            )
            for line in model.lines
        ]
        return Order(
            order_id=OrderId(model.id),
            customer_id=CustomerId(model.customer_id),
            delivery=DeliveryDetails(
                name=model.customer_name,
                room_number=model.room_number,
                phone_number=model.phone_number,
            ),
            lines=lines,
            total=Money(amount=model.total_amount, currency=model.currency),
            order_type=OrderType(model.order_type),
            status=OrderStatus(model.status),
            created_at=from_storage(model.created_at, self._tz),
            qr_code=model.qr_code,
            estimated_delivery=from_storage(model.estimated_delivery, self._tz),
            time_slot_id=TimeSlotId(model.time_slot_id) if model.time_slot_id else None,
            service_date=model.service_date,
            version=model.version,
            delivered_by=AgentId(model.delivered_by) if model.delivered_by else None,
            delivered_at=from_storage(model.delivered_at, self._tz),
        )
