from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import stat
import time

from smartcopy.errors import AccessError, MissingSourceError, describe_os_error


@dataclass(slots=True, frozen=True)
class Entry:
    path: Path
    is_dir: bool
    size: int
    mtime_ns: int
    mode: int

    @classmethod
    def from_path(cls, path: Path) -> "Entry":
        try:
            st = os.stat(path)
        except FileNotFoundError as exc:
            raise MissingSourceError(f"source '{path}' does not exist", path) from exc
        except OSError as exc:
            raise AccessError(
                f"failed to get source info for '{path}': {describe_os_error(exc)}", path
            ) from exc
        return cls(
            path=path,
            is_dir=stat.S_ISDIR(st.st_mode),
            size=0 if stat.S_ISDIR(st.st_mode) else st.st_size,
            mtime_ns=st.st_mtime_ns,
            mode=stat.S_IMODE(st.st_mode),
        )


@dataclass(slots=True, frozen=True)
class SyncOptions:
    detect_extra: bool = False
    delete_extra: bool = False
    dry_run: bool = False

    @classmethod
    def from_flags(cls, detect: bool = False, delete: bool = False, dry_run: bool = False) -> "SyncOptions":
        return cls(detect_extra=detect or delete, delete_extra=delete, dry_run=dry_run)

    @property
    def reports_extra(self) -> bool:
        return self.detect_extra or self.delete_extra


@dataclass(slots=True)
class CopyStats:
    files_copied: int = 0
    files_skipped: int = 0
    bytes_copied: int = 0
    extra_found: int = 0
    extra_deleted: int = 0
    extra_bytes: int = 0
    started_at: float = field(default_factory=time.monotonic)

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


@dataclass(slots=True)
class ExtraReport:
    files: list[Path] = field(default_factory=list)
    directories: list[Path] = field(default_factory=list)
    failed_deletes: list[Path] = field(default_factory=list)
    byte_count: int = 0

    def __len__(self) -> int:
        return len(self.files) + len(self.directories)
