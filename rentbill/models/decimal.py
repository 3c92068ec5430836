from __future__ import annotations

from pydantic import BaseModel


class WireDecimal(BaseModel):
    """Big-decimal as serialized by the backend: sign, exponent, digits."""

    s: int
    e: int
    d: list[int]

