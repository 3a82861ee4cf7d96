# cities/services/delivery_fee.py

"""
DELIVERY FEE RESOLVER

Purpose:
- Map a city name to its delivery fee.
- Split one checkout's delivery fee across its order lines.

Rules:
- Unknown (or blank) city -> settings.DEFAULT_DELIVERY_FEE, never an error.
  Checkout must not block because a city has not been configured yet.
- Allocation is an equal split at cent precision. Leftover cents go one each
  to the earliest lines, so sum(shares) == total_fee exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from backend.money import TWOPLACES, money
from cities.models import City

logger = logging.getLogger(__name__)

FALLBACK_DELIVERY_FEE = Decimal("10.00")


def default_delivery_fee() -> Decimal:
    return money(getattr(settings, "DEFAULT_DELIVERY_FEE", FALLBACK_DELIVERY_FEE))


@dataclass(frozen=True)
class FeeQuote:
    fee: Decimal
    is_default: bool


def resolve_fee_detail(city_name: str | None) -> FeeQuote:
    name = (city_name or "").strip()
    if not name:
        return FeeQuote(fee=default_delivery_fee(), is_default=True)

    city = City.objects.filter(name=name).only("delivery_fee").first()
    if city is None:
        logger.info("Default delivery fee applied", extra={"city": name})
        return FeeQuote(fee=default_delivery_fee(), is_default=True)

    return FeeQuote(fee=money(city.delivery_fee), is_default=False)


def resolve_fee(city_name: str | None) -> Decimal:
    return resolve_fee_detail(city_name).fee


def allocate_fee(total_fee, line_count: int) -> list[Decimal]:
    """
    Split total_fee into line_count shares that add up to total_fee exactly.

    allocate_fee(Decimal("20.00"), 2) -> [10.00, 10.00]
    allocate_fee(Decimal("10.00"), 3) -> [3.34, 3.33, 3.33]
    """
    if isinstance(line_count, bool) or not isinstance(line_count, int):
        raise ValueError("line_count must be an integer")
    if line_count <= 0:
        raise ValueError("line_count must be at least 1")

    total = money(total_fee)
    if total < Decimal("0.00"):
        raise ValueError("total_fee cannot be negative")

    cents = int(total * 100)
    base, remainder = divmod(cents, line_count)

    return [
        (Decimal(base + (1 if idx < remainder else 0)) / Decimal(100)).quantize(TWOPLACES)
        for idx in range(line_count)
    ]
