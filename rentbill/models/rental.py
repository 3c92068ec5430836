from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict

from rentbill.models.base import CamelModel, LocalDate, Money


class Room(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    building_id: str | None = None


class RoomInstance(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    room_number: str = ""
    room: Room | None = None


class Rental(CamelModel):
    """Backend-owned rental, held read-only and refetched rather than edited."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: str | None = None
    monthly_rent: Money = Decimal("0")
    deposit_paid: Money = Decimal("0")
    contract_start_date: LocalDate | None = None
    contract_end_date: LocalDate | None = None
    room_instance: RoomInstance | None = None
    created_at: datetime | None = None
