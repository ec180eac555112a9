from __future__ import annotations

import logging
import os
from pathlib import Path
import time

from smartcopy.errors import AccessError, MetadataError, TransferError, describe_os_error
from smartcopy.ignore_engine import IgnoreEngine
from smartcopy.models import CopyStats, Entry, SyncOptions
from smartcopy.report import format_speed, transfer_speed
from smartcopy.timestamps import mtimes_match, sanitize_mtime_ns


log = logging.getLogger("smartcopy.engine")

CHUNK_SIZE = 1024 * 1024
_WRITE_FLAGS = os.O_CREAT | os.O_WRONLY | os.O_TRUNC | getattr(os, "O_BINARY", 0)


def needs_update(source: Entry, destination: Path) -> bool:
    try:
        destination_stat = os.stat(destination)
    except FileNotFoundError:
        return True
    except OSError as exc:
        raise AccessError(
            f"failed to get destination file info for '{destination}': {describe_os_error(exc)}",
            destination,
        ) from exc

    if source.size != destination_stat.st_size:
        return True

    # Permission drift alone never forces a copy.
    return not mtimes_match(source.mtime_ns, destination_stat.st_mtime_ns)


def _set_mtime(path: Path, mtime_ns: int, kind: str) -> None:
    sanitized = sanitize_mtime_ns(mtime_ns)
    try:
        os.utime(path, ns=(sanitized, sanitized))
    except OSError as exc:
        raise MetadataError(f"failed to set {kind} times for '{path}': {describe_os_error(exc)}", path) from exc


def _stream_content(source: Path, destination: Path, mode: int) -> int:
    try:
        source_handle = source.open("rb")
    except OSError as exc:
        raise AccessError(f"failed to open source file '{source}': {describe_os_error(exc)}", source) from exc

    with source_handle:
        try:
            fd = os.open(destination, _WRITE_FLAGS, mode)
        except OSError as exc:
            raise AccessError(
                f"failed to create destination file '{destination}': {describe_os_error(exc)}", destination
            ) from exc

        written = 0
        # The handle must be closed before the mtime is set; some platforms
        # stamp the file again on close.
        try:
            with open(fd, "wb") as destination_handle:
                for chunk in iter(lambda: source_handle.read(CHUNK_SIZE), b""):
                    destination_handle.write(chunk)
                    written += len(chunk)
                destination_handle.flush()
                os.fsync(destination_handle.fileno())
        except OSError as exc:
            raise TransferError(
                f"failed to copy file content from '{source}' to '{destination}': {describe_os_error(exc)}",
                destination,
            ) from exc
    return written


def copy_file(
    source: Path,
    destination: Path,
    entry: Entry,
    stats: CopyStats,
    dry_run: bool = False,
) -> int:
    """Copy one file unless the destination is already up to date.

    Returns the number of bytes written, 0 for a skipped file. In dry-run mode
    nothing is written and the source size is reported instead.
    """
    if not needs_update(entry, destination):
        log.info("%s (skipped - up to date)", source)
        stats.files_skipped += 1
        return 0

    if dry_run:
        log.info("%s (would copy, %d bytes)", source, entry.size)
        stats.files_copied += 1
        stats.bytes_copied += entry.size
        return entry.size

    parent = destination.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AccessError(
            f"failed to create destination directory '{parent}': {describe_os_error(exc)}", parent
        ) from exc

    started = time.monotonic()
    written = _stream_content(source, destination, entry.mode)
    elapsed = time.monotonic() - started

    _set_mtime(destination, entry.mtime_ns, kind="file")

    log.info("%s (%d bytes, %s)", source, written, format_speed(transfer_speed(written, elapsed)))
    stats.files_copied += 1
    stats.bytes_copied += written
    return written


def _sync_directory(
    entry: Entry,
    destination: Path,
    relative: Path,
    stats: CopyStats,
    options: SyncOptions,
    ignore: IgnoreEngine | None,
) -> None:
    if not options.dry_run:
        try:
            os.makedirs(destination, mode=entry.mode, exist_ok=True)
        except OSError as exc:
            raise AccessError(
                f"failed to create directory '{destination}': {describe_os_error(exc)}", destination
            ) from exc

    try:
        with os.scandir(entry.path) as listing:
            names = [item.name for item in listing]
    except OSError as exc:
        raise AccessError(
            f"failed to read directory '{entry.path}': {describe_os_error(exc)}", entry.path
        ) from exc

    for name in names:
        _sync_entry(entry.path / name, destination / name, relative / name, stats, options, ignore)

    # Writing children touches the directory mtime, so it is set last.
    if not options.dry_run:
        _set_mtime(destination, entry.mtime_ns, kind="directory")


def _sync_entry(
    source: Path,
    destination: Path,
    relative: Path,
    stats: CopyStats,
    options: SyncOptions,
    ignore: IgnoreEngine | None,
) -> None:
    entry = Entry.from_path(source)
    if ignore and ignore.is_ignored(relative, is_dir=entry.is_dir):
        log.debug("%s (excluded)", source)
        return

    if entry.is_dir:
        _sync_directory(entry, destination, relative, stats, options, ignore)
    else:
        copy_file(source, destination, entry, stats, dry_run=options.dry_run)


def synchronize(
    source: Path,
    destination: Path,
    stats: CopyStats,
    options: SyncOptions | None = None,
    ignore: IgnoreEngine | None = None,
) -> None:
    _sync_entry(source, destination, Path(), stats, options or SyncOptions(), ignore)
