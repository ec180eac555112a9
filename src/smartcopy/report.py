from __future__ import annotations

from smartcopy.models import CopyStats, SyncOptions


MIN_ELAPSED_SECONDS = 0.001


def format_bytes(size: int) -> str:
    if size >= 1e9:
        return f"{size / 1e9:.1f}GB"
    if size >= 1e6:
        return f"{size / 1e6:.0f}MB"
    if size >= 1e3:
        return f"{size / 1e3:.0f}kB"
    return f"{size}B"


def format_speed(bytes_per_second: float) -> str:
    if bytes_per_second >= 1e9:
        return f"{bytes_per_second / 1e9:.1f}GB/s"
    if bytes_per_second >= 1e6:
        return f"{bytes_per_second / 1e6:.0f}MB/s"
    if bytes_per_second >= 1e3:
        return f"{bytes_per_second / 1e3:.0f}kB/s"
    return f"{bytes_per_second:.0f}B/s"


def transfer_speed(byte_count: int, elapsed_seconds: float) -> float:
    return byte_count / max(elapsed_seconds, MIN_ELAPSED_SECONDS)


def format_duration(seconds: float) -> str:
    """Render a duration rounded to the millisecond, e.g. ``12ms``, ``1.5s``, ``2m3.004s``."""
    total_ms = round(seconds * 1000)
    if total_ms <= 0:
        return "0s"
    if total_ms < 1000:
        return f"{total_ms}ms"

    total_seconds, millis = divmod(total_ms, 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    seconds_text = f"{secs}.{millis:03d}".rstrip("0") if millis else str(secs)

    if hours:
        return f"{hours}h{minutes}m{seconds_text}s"
    if minutes:
        return f"{minutes}m{seconds_text}s"
    return f"{seconds_text}s"


def render_summary(stats: CopyStats, options: SyncOptions, elapsed: float | None = None) -> str:
    elapsed_seconds = stats.elapsed() if elapsed is None else elapsed
    line = (
        f"Summary: {stats.files_copied} files copied, {stats.files_skipped} files skipped, "
        f"{format_bytes(stats.bytes_copied)} copied in {format_duration(elapsed_seconds)} "
        f"({format_speed(transfer_speed(stats.bytes_copied, elapsed_seconds))})"
    )

    if options.reports_extra:
        if options.delete_extra:
            line += f", {stats.extra_deleted} extra items deleted"
        else:
            line += f", {stats.extra_found} extra items found"
        if stats.extra_bytes > 0:
            line += f" ({format_bytes(stats.extra_bytes)})"

    return line
