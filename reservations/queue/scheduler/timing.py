"""Deadline arithmetic for the operating timezone."""

from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable

from tracking import t

Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[None]]


def next_midnight(now: datetime, tz) -> datetime:
    """Return the first local midnight strictly after ``now`` in ``tz``."""

    t('reservations.queue.scheduler.timing.next_midnight')
    local = now.astimezone(tz) if now.tzinfo else tz.localize(now)
    next_day = local.date() + timedelta(days=1)
    return tz.localize(datetime.combine(next_day, time.min))


async def wait_until(deadline: datetime, *, clock: Clock, sleep: Sleeper = asyncio.sleep) -> float:
    """Sleep once until ``deadline``; the delay is computed on entry only.

    Returns the number of seconds slept (never negative).
    """

    t('reservations.queue.scheduler.timing.wait_until')
    delay = max(0.0, (deadline - clock()).total_seconds())
    await sleep(delay)
    return delay
