"""Spread a day's commits across working hours."""

from __future__ import annotations

from datetime import datetime, time, timedelta

from commit_canvas.dates import parse_iso_date
from commit_canvas.rng import Rng, random_int

WORK_START_HOUR = 9
WORK_END_HOUR = 20


def build_commit_times(
    day: str,
    count: int,
    rng: Rng,
    start_hour: int = WORK_START_HOUR,
    end_hour: int = WORK_END_HOUR,
) -> list[datetime]:
    """Return ``count`` ordered local timestamps inside ``[start_hour, end_hour)`` on ``day``.

    With more than one commit the window is cut into ``count`` equal slots and
    one offset is drawn inside each slot, so commits never bunch together.
    Slots one second wide or narrower take their start without consuming a
    random draw.
    """
    if count <= 0:
        return []

    window_start = datetime.combine(parse_iso_date(day), time(hour=start_hour)).astimezone()
    seconds_range = (end_hour - start_hour) * 60 * 60
    if seconds_range <= 0:
        return [window_start]

    if count == 1:
        return [window_start + timedelta(seconds=random_int(rng, 0, seconds_range - 1))]

    offsets: list[int] = []
    for slot in range(count):
        slot_start = slot * seconds_range // count
        slot_end = (slot + 1) * seconds_range // count
        if slot_end - slot_start <= 1:
            offsets.append(slot_start)
        else:
            offsets.append(random_int(rng, slot_start, slot_end - 1))

    return sorted(window_start + timedelta(seconds=offset) for offset in offsets)
