from __future__ import annotations

from enum import Enum


class BillStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class BillItemType(str, Enum):
    RENT = "rent"
    ELECTRIC = "electric"
    WATER = "water"
    SERVICE = "service"


class DisplayState(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    PAID = "paid"
    CANCELLED = "cancelled"
    REQUIRES_METER_DATA = "requires_meter_data"
