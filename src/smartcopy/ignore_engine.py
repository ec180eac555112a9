from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pathspec


def read_pattern_file(path: Path) -> list[str]:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        raise ValueError(f"Exclude file does not exist: {path}")
    return [line for line in lines if line.strip() and not line.lstrip().startswith("#")]


class IgnoreEngine:
    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = [pattern for pattern in patterns if pattern.strip()]
        self._spec = pathspec.PathSpec.from_lines("gitignore", self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def is_ignored(self, relative_path: Path, is_dir: bool = False) -> bool:
        if not self.patterns:
            return False
        unix_path = relative_path.as_posix()
        if unix_path in {"", "."}:
            return False
        candidate = f"{unix_path}/" if is_dir and not unix_path.endswith("/") else unix_path
        return self._spec.match_file(candidate)


def build_ignore_engine(patterns: Iterable[str] = (), pattern_files: Iterable[Path] = ()) -> IgnoreEngine:
    collected: list[str] = list(patterns)
    for pattern_file in pattern_files:
        collected.extend(read_pattern_file(pattern_file))
    return IgnoreEngine(collected)
