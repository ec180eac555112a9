from __future__ import annotations

from datetime import datetime


NS_PER_SECOND = 1_000_000_000
MTIME_TOLERANCE_NS = 5 * NS_PER_SECOND


def _local_ns(moment: datetime) -> int:
    return int(moment.timestamp()) * NS_PER_SECOND


# FAT/exFAT volumes reject times outside this window.
def fat_time_bounds() -> tuple[int, int]:
    floor = _local_ns(datetime(1980, 1, 1, 0, 0, 0))
    ceiling = _local_ns(datetime(2107, 12, 31, 23, 59, 58))
    return floor, ceiling


def sanitize_mtime_ns(mtime_ns: int) -> int:
    floor, ceiling = fat_time_bounds()
    if mtime_ns < floor:
        return floor
    if mtime_ns > ceiling:
        return ceiling
    return mtime_ns


def mtimes_match(source_ns: int, destination_ns: int, tolerance_ns: int = MTIME_TOLERANCE_NS) -> bool:
    return abs(source_ns - destination_ns) <= tolerance_ns
