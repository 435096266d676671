from __future__ import annotations

from datetime import date

from guestmeals.application.ports.repositories import DailyBillRepository, OrderRepository
from guestmeals.domain.billing.entities import DailyBill, DailyBillHeader
from guestmeals.domain.common.ids import TimeSlotId


class LedgerReader:
    """Assembles daily bills from their headers and the orders booked against them."""

    def __init__(
        self,
        daily_bill_repository: DailyBillRepository,
        order_repository: OrderRepository,
    ) -> None:
        self._daily_bill_repository = daily_bill_repository
        self._order_repository = order_repository

    def bill(self, bill_date: date, time_slot_id: TimeSlotId) -> DailyBill | None:
        header = self._daily_bill_repository.get(bill_date, time_slot_id)
        if header is None:
            return None
        return self._assemble(header)

    def bills_for_date(self, bill_date: date) -> list[DailyBill]:
        return [
            self._assemble(header)
            for header in self._daily_bill_repository.list_for_date(bill_date)
        ]

    def _assemble(self, header: DailyBillHeader) -> DailyBill:
        orders = self._order_repository.list_for_service(header.bill_date, header.time_slot_id)
        return DailyBill(header=header, orders=tuple(orders))
