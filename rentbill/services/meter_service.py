from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rentbill.constants import METER_VALIDATION_MESSAGE
from rentbill.models.bill import Bill, MeterReading, UpdateBillWithMeterDataRequest

if TYPE_CHECKING:
    from rentbill.stores.bill_store import BillStore

logger = logging.getLogger(__name__)

READING_FIELDS = ("current", "last")


@dataclass
class ReadingPair:
    current: float = 0.0
    last: float = 0.0


class MeterReadingForm:
    """Editing state for the meter readings of a single bill.

    Readings are keyed by room cost id. The form is re-initialized every time it
    is opened so nothing typed for a previous bill carries over.
    """

    def __init__(self) -> None:
        self.bill: Bill | None = None
        self.readings: dict[str, ReadingPair] = {}
        self.occupancy_count: int = 1
        self.error: str | None = None
        self.open: bool = False

    def open_for(self, bill: Bill) -> None:
        self.bill = bill
        self.readings = {cost.room_cost_id: ReadingPair() for cost in bill.metered_costs_to_input}
        self.occupancy_count = bill.occupancy_count or 1
        self.error = None
        self.open = True
        logger.debug("Meter form opened for bill=%s costs=%d", bill.id, len(self.readings))

    def close(self) -> None:
        self.open = False

    @property
    def has_metered_costs(self) -> bool:
        return bool(self.bill and self.bill.metered_costs_to_input)

    def set_reading(self, room_cost_id: str, field: str, value: float) -> None:
        if field not in READING_FIELDS:
            raise ValueError(f"Unknown reading field {field!r}, expected 'current' or 'last'")
        pair = self.readings.setdefault(room_cost_id, ReadingPair())
        setattr(pair, field, value)

    def set_occupancy_count(self, value: int) -> None:
        self.occupancy_count = value if value and value > 0 else 1

    def compute_consumption(self, room_cost_id: str) -> float:
        pair = self.readings.get(room_cost_id, ReadingPair())
        return pair.current - pair.last

    def consumption_state(self, room_cost_id: str) -> str:
        """'ok' when consumption is positive, 'warning' when a current reading
        was typed but does not exceed the last one, otherwise 'empty'."""
        consumption = self.compute_consumption(room_cost_id)
        if consumption > 0:
            return "ok"
        if self.readings.get(room_cost_id, ReadingPair()).current > 0:
            return "warning"
        return "empty"

    def validate(self) -> bool:
        if self.bill is None:
            return False
        for cost in self.bill.metered_costs_to_input:
            pair = self.readings.get(cost.room_cost_id, ReadingPair())
            if pair.current <= pair.last or pair.current == 0:
                return False
        return True

    def build_payload(self, bill_id: str | None = None) -> UpdateBillWithMeterDataRequest:
        if self.bill is None:
            raise ValueError("Meter form is not open for any bill")
        meter_data = [
            MeterReading(
                room_cost_id=cost.room_cost_id,
                current_reading=self.readings.get(cost.room_cost_id, ReadingPair()).current,
                last_reading=self.readings.get(cost.room_cost_id, ReadingPair()).last,
            )
            for cost in self.bill.metered_costs_to_input
        ]
        return UpdateBillWithMeterDataRequest(
            bill_id=bill_id or self.bill.id,
            occupancy_count=self.occupancy_count,
            meter_data=meter_data,
        )

    async def submit(self, store: BillStore) -> bool:
        """Validate and send the readings. The form stays open on any failure."""
        if not self.validate():
            self.error = METER_VALIDATION_MESSAGE
            logger.info("Meter readings rejected for bill=%s", self.bill.id if self.bill else None)
            return False

        payload = self.build_payload()
        ok = await store.update_meter(payload.bill_id, payload)
        if not ok:
            self.error = store.meter_error
            return False

        self.error = None
        self.close()
        return True
