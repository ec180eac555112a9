from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import stat
from typing import Sequence

from smartcopy.errors import AccessError, InvalidArgumentsError, describe_os_error
from smartcopy.extras import reconcile
from smartcopy.ignore_engine import IgnoreEngine
from smartcopy.mirror_engine import synchronize
from smartcopy.models import CopyStats, Entry, SyncOptions


log = logging.getLogger("smartcopy.run")


@dataclass(slots=True, frozen=True)
class CopyTarget:
    source: Path
    target: Path


def _resolved(path: Path) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError) as exc:
        raise AccessError(f"failed to resolve path '{path}': {exc}", path) from exc


def _base_name(source: Path) -> str:
    name = source.name
    if not name or name == "..":
        name = _resolved(source).name
    return name


def _destination_kind(destination: Path) -> tuple[bool, bool]:
    try:
        st = os.stat(destination)
    except FileNotFoundError:
        return False, False
    except OSError as exc:
        raise AccessError(
            f"failed to get destination info for '{destination}': {describe_os_error(exc)}", destination
        ) from exc
    return True, stat.S_ISDIR(st.st_mode)


def _validate_mapping(mapping: CopyTarget, source_is_dir: bool) -> None:
    source_resolved = _resolved(mapping.source)
    target_resolved = _resolved(mapping.target)

    if source_resolved == target_resolved:
        raise InvalidArgumentsError(
            f"source and destination are the same: '{mapping.source}'", mapping.target
        )

    if source_is_dir and target_resolved.is_relative_to(source_resolved):
        raise InvalidArgumentsError(
            f"destination '{mapping.target}' is inside source '{mapping.source}', which would recurse",
            mapping.target,
        )


def plan_targets(sources: Sequence[Path], destination: Path) -> list[CopyTarget]:
    """Map every source onto the path it will be mirrored to.

    One source behaves like ``cp``: an existing destination directory receives
    the source under its base name, anything else is used verbatim. Several
    sources always land inside the destination directory.
    """
    if not sources:
        raise InvalidArgumentsError("at least one source and a destination are required", destination)

    # Every source is checked before anything is written.
    entries = [Entry.from_path(source) for source in sources]

    destination_exists, destination_is_dir = _destination_kind(destination)

    if len(sources) > 1 and destination_exists and not destination_is_dir:
        raise InvalidArgumentsError(
            "when copying multiple sources, destination must be a directory", destination
        )

    if len(sources) == 1 and not destination_is_dir:
        mappings = [CopyTarget(source=sources[0], target=destination)]
    else:
        mappings = [CopyTarget(source=source, target=destination / _base_name(source)) for source in sources]

    claimed: dict[Path, Path] = {}
    for mapping, entry in zip(mappings, entries):
        _validate_mapping(mapping, entry.is_dir)
        target_resolved = _resolved(mapping.target)
        if target_resolved in claimed:
            raise InvalidArgumentsError(
                f"sources '{claimed[target_resolved]}' and '{mapping.source}' would both be copied to "
                f"'{mapping.target}'",
                mapping.target,
            )
        claimed[target_resolved] = mapping.source
    return mappings


def run_copy(
    sources: Sequence[Path],
    destination: Path,
    options: SyncOptions,
    ignore: IgnoreEngine | None = None,
    stats: CopyStats | None = None,
) -> CopyStats:
    if stats is None:
        stats = CopyStats()

    mappings = plan_targets(sources, destination)

    if len(mappings) > 1 and not options.dry_run:
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AccessError(
                f"failed to create destination directory '{destination}': {describe_os_error(exc)}",
                destination,
            ) from exc

    for mapping in mappings:
        log.debug("Copying %s -> %s", mapping.source, mapping.target)
        synchronize(mapping.source, mapping.target, stats, options=options, ignore=ignore)

    if options.reports_extra:
        for mapping in mappings:
            reconcile(mapping.source, mapping.target, options, stats, ignore=ignore)

    return stats
