from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from rentbill.constants import LOCAL_TZ
from rentbill.normalize import decimal_to_string, is_wire_decimal


class CamelModel(BaseModel):
    """Base for everything exchanged with the backend, which speaks camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _coerce_money(value):
    if is_wire_decimal(value):
        return decimal_to_string(value)
    if value is None:
        return Decimal("0")
    return value


def to_local_date(value):
    """Read a wire date or ISO datetime as a calendar date in the local timezone.

    The backend stores local midnights as UTC instants ("2025-04-09T17:00:00.000Z"
    is the 10th in Vietnam), so aware datetimes are shifted before truncation.
    """
    if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
        return value
    if isinstance(value, str):
        if len(value) == 10:
            return date.fromisoformat(value)
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(LOCAL_TZ)
        return value.date()
    return value


Money = Annotated[Decimal, BeforeValidator(_coerce_money)]
LocalDate = Annotated[date, BeforeValidator(to_local_date)]
