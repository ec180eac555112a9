from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil

from smartcopy.errors import AccessError, describe_os_error
from smartcopy.ignore_engine import IgnoreEngine
from smartcopy.models import CopyStats, Entry, ExtraReport, SyncOptions


log = logging.getLogger("smartcopy.extras")


def collect_source_paths(source_root: Path, ignore: IgnoreEngine | None = None) -> set[str]:
    def _fail(exc: OSError) -> None:
        raise AccessError(
            f"failed to walk source directory '{source_root}': {describe_os_error(exc)}", source_root
        ) from exc

    paths: set[str] = set()
    for root_str, dirs, files in os.walk(source_root, topdown=True, onerror=_fail, followlinks=True):
        root_rel = Path(root_str).relative_to(source_root)

        kept_dirs: list[str] = []
        for dir_name in dirs:
            rel_path = root_rel / dir_name
            if ignore and ignore.is_ignored(rel_path, is_dir=True):
                continue
            paths.add(rel_path.as_posix())
            kept_dirs.append(dir_name)
        dirs[:] = kept_dirs

        for file_name in files:
            rel_path = root_rel / file_name
            if ignore and ignore.is_ignored(rel_path):
                continue
            paths.add(rel_path.as_posix())
    return paths


def find_extras(
    destination_root: Path,
    source_paths: set[str],
    ignore: IgnoreEngine | None = None,
) -> ExtraReport:
    report = ExtraReport()
    # Unreadable destination subtrees are skipped rather than failing the run.
    for root_str, dirs, files in os.walk(destination_root, topdown=True):
        root = Path(root_str)
        root_rel = root.relative_to(destination_root)

        kept_dirs: list[str] = []
        for dir_name in dirs:
            rel_path = root_rel / dir_name
            if ignore and ignore.is_ignored(rel_path, is_dir=True):
                continue
            if rel_path.as_posix() in source_paths:
                kept_dirs.append(dir_name)
            else:
                report.directories.append(root / dir_name)
        dirs[:] = kept_dirs

        for file_name in files:
            rel_path = root_rel / file_name
            if rel_path.as_posix() in source_paths:
                continue
            if ignore and ignore.is_ignored(rel_path):
                continue
            target = root / file_name
            try:
                size = os.lstat(target).st_size
            except OSError as exc:
                log.debug("Cannot stat %s: %s", target, describe_os_error(exc))
                continue
            report.files.append(target)
            report.byte_count += size
    return report


def _remove_tree(path: Path) -> None:
    if path.is_symlink():
        path.unlink()
        return
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        # Already gone counts as removed.
        return


def delete_extras(report: ExtraReport, stats: CopyStats, dry_run: bool = False) -> None:
    if report:
        log.info("Deleting extra files/directories...")

    for path in report.files:
        if dry_run:
            log.info("  WOULD DELETE: %s", path)
            stats.extra_deleted += 1
            continue
        try:
            path.unlink()
        except OSError as exc:
            log.warning("Failed to delete file '%s': %s", path, describe_os_error(exc))
            report.failed_deletes.append(path)
            continue
        log.info("  DELETED: %s", path)
        stats.extra_deleted += 1

    for path in report.directories:
        if dry_run:
            log.info("  WOULD DELETE: %s", path)
            stats.extra_deleted += 1
            continue
        try:
            _remove_tree(path)
        except OSError as exc:
            log.warning("Failed to delete directory '%s': %s", path, describe_os_error(exc))
            report.failed_deletes.append(path)
            continue
        log.info("  DELETED: %s", path)
        stats.extra_deleted += 1


def reconcile(
    source_root: Path,
    destination_root: Path,
    options: SyncOptions,
    stats: CopyStats,
    ignore: IgnoreEngine | None = None,
) -> ExtraReport:
    if not options.reports_extra:
        return ExtraReport()

    source_entry = Entry.from_path(source_root)
    if not source_entry.is_dir:
        return ExtraReport()

    source_paths = collect_source_paths(source_root, ignore)
    report = find_extras(destination_root, source_paths, ignore)

    stats.extra_found += len(report)
    stats.extra_bytes += report.byte_count

    if report:
        log.info("Extra files/directories found in destination:")
        for path in report.files:
            log.info("  FILE: %s", path)
        for path in report.directories:
            log.info("  DIR:  %s", path)

    if options.delete_extra:
        delete_extras(report, stats, dry_run=options.dry_run)

    return report
