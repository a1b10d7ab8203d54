"""Time accounting and cost arithmetic for console rentals.

Durations are whole milliseconds. Costs are computed from the unrounded hour
fraction and rounded once, at the money boundary.
"""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from lounge.domain.value_objects import Money, round2

MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000

_ONE_MS = timedelta(milliseconds=1)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start) // _ONE_MS


def active_duration_ms(start: datetime, now: datetime, paused_ms: int) -> int:
    """Wall-clock time minus paused time, clamped at zero."""
    return max(0, elapsed_ms(start, now) - paused_ms)


def duration_hours(active_ms: int) -> Decimal:
    return Decimal(active_ms) / Decimal(MS_PER_HOUR)


def duration_minutes(active_ms: int) -> int:
    minutes = Decimal(active_ms) / Decimal(MS_PER_MINUTE)
    return int(minutes.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cost_for(active_ms: int, rate: Money) -> Money:
    """Cost of ``active_ms`` billed at an hourly ``rate``."""
    return Money(amount=round2(duration_hours(active_ms) * rate.amount))
