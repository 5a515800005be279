"""Reservation pricing: nights x nightly rate plus the selected add-on services."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

CENT = Decimal("0.01")
SECONDS_PER_DAY = 24 * 60 * 60

DateLike = Union[date, datetime, str, None]


def _as_datetime(value: DateLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _as_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Whole nights between two dates, rounding partial days up.

    Missing, unparsable or reversed dates count as zero nights.
    """
    start = _as_datetime(check_in)
    end = _as_datetime(check_out)
    if start is None or end is None:
        return 0
    if (start.tzinfo is None) != (end.tzinfo is None):
        return 0
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / SECONDS_PER_DAY)


def calculate_total(
    price_per_night: Union[Decimal, int, float, str],
    check_in: DateLike,
    check_out: DateLike,
    service_prices: Iterable[Union[Decimal, int, float, str]] = (),
) -> Decimal:
    """Total charge for a stay, each selected service counted once."""
    nights = calculate_nights(check_in, check_out)
    total = nights * _as_decimal(price_per_night)
    for price in service_prices:
        total += _as_decimal(price)
    return total.quantize(CENT)


@dataclass(frozen=True)
class Quote:
    nights: int
    room_subtotal: Decimal
    services_subtotal: Decimal
    total: Decimal


def quote_booking(room, services, check_in: DateLike, check_out: DateLike) -> Quote:
    """Price breakdown for a room and the distinct services selected with it."""
    unique_services = list({service.id: service for service in services}.values())
    nights = calculate_nights(check_in, check_out)
    room_subtotal = (nights * _as_decimal(room.price_per_night)).quantize(CENT)
    services_subtotal = sum((_as_decimal(service.price) for service in unique_services), Decimal("0")).quantize(CENT)
    return Quote(
        nights=nights,
        room_subtotal=room_subtotal,
        services_subtotal=services_subtotal,
        total=calculate_total(room.price_per_night, check_in, check_out, [s.price for s in unique_services]),
    )
