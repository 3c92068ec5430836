"""Reconcile the backend's response shapes before they reach the models.

Single-entity endpoints answer either ``{"data": entity}`` or the bare entity,
and numeric columns backed by big-decimals may arrive as ``{"s", "e", "d"}``
objects instead of numbers. Both quirks are smoothed over here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from rentbill.models.decimal import WireDecimal

logger = logging.getLogger(__name__)

_WIRE_KEYS = ("s", "e", "d")


def is_wire_decimal(val: Any) -> bool:
    if isinstance(val, WireDecimal):
        return True
    return isinstance(val, Mapping) and all(k in val for k in _WIRE_KEYS)


def decimal_to_string(val: Any) -> str:
    """Convert a wire decimal to its canonical base-10 string.

    ``{"s": 1, "e": 1, "d": [1, 2, 3]}`` -> ``"12.3"``. Anything that is not a
    wire decimal goes through ``str()`` unchanged.
    """
    if not is_wire_decimal(val):
        return str(val)

    if isinstance(val, WireDecimal):
        sign, exponent, digits = val.s, val.e, val.d
    else:
        sign, exponent, digits = val["s"], val["e"], val["d"]

    digit_str = "".join(str(d) for d in digits) or "0"

    if exponent >= 0:
        int_len = exponent + 1
        int_part = digit_str[:int_len].ljust(int_len, "0")
        frac_part = digit_str[int_len:]
        result = f"{int_part}.{frac_part}" if frac_part else int_part
    else:
        result = "0." + "0" * (-exponent - 1) + digit_str

    if sign < 0:
        result = "-" + result
    return result


def parse_decimal_fields(obj: Any) -> Any:
    """Recursively replace wire decimals with their canonical string."""
    if obj is None:
        return obj
    if is_wire_decimal(obj):
        return decimal_to_string(obj)
    if isinstance(obj, list):
        return [parse_decimal_fields(item) for item in obj]
    if isinstance(obj, Mapping):
        return {key: parse_decimal_fields(value) for key, value in obj.items()}
    return obj


def normalize_entity_response(response: Any) -> dict[str, Any]:
    """Return ``{"data": entity}`` whichever shape the backend used.

    A mapping that already has a ``data`` key is taken as wrapped; an entity
    with a field of its own called ``data`` is therefore misread.
    """
    parsed = parse_decimal_fields(response)
    if isinstance(parsed, Mapping) and "data" in parsed:
        return dict(parsed)
    logger.debug("Wrapping bare entity response (type=%s)", type(response).__name__)
    return {"data": parsed}
