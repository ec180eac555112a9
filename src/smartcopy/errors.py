from __future__ import annotations

from pathlib import Path


class SmartCopyError(Exception):
    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class MissingSourceError(SmartCopyError):
    pass


class AccessError(SmartCopyError):
    pass


class TransferError(SmartCopyError):
    pass


class MetadataError(SmartCopyError):
    pass


class InvalidArgumentsError(SmartCopyError):
    pass


def describe_os_error(exc: OSError) -> str:
    return exc.strerror or str(exc)
