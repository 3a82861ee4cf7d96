# backend/money.py
"""
PATH: backend/money.py

Money helper shared by the checkout services.
All amounts are Decimal, 2 places, ROUND_HALF_UP. Blank input counts as 0.00.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

TWOPLACES = Decimal("0.01")


def money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
