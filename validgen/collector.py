"""Source file discovery for validator generation."""

from __future__ import annotations

import os
import stat
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, Sequence

from .logging import get_logger
from .models import GENERATED_SUFFIX, SOURCE_SUFFIX, SourceUnit

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "__pycache__",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    "node_modules",
}


class SourceReadError(RuntimeError):
    """Raised when a source file cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to read {path}: {reason}")
        self.path = path


def is_generated(name: str) -> bool:
    return name.endswith(GENERATED_SUFFIX)


def is_source(name: str) -> bool:
    return name.endswith(SOURCE_SUFFIX) and not is_generated(name)


def _matches_any(rel_path: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        cleaned = pattern.strip().strip("/")
        if not cleaned:
            continue
        if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
            return True
        if "/" not in cleaned and any(fnmatchcase(part, cleaned) for part in rel_path.split("/")):
            return True
    return False


class SourceCollector:
    """Yields source units from a single file or a directory tree."""

    def __init__(self, *, recursive: bool = False, exclude_paths: Sequence[str] = ()) -> None:
        self.recursive = recursive
        self.exclude_paths = list(exclude_paths)
        self.logger = get_logger("collector")

    def collect(self, root: str | Path) -> Iterator[SourceUnit]:
        """Lazily yield units under ``root``; stat failures raise before the first unit."""
        root_path = Path(root).expanduser()
        try:
            mode = root_path.stat().st_mode
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Source path not found: {root}") from exc
        except OSError as exc:
            raise SourceReadError(root_path, exc.strerror or str(exc)) from exc
        return self._iter_units(root_path, stat.S_ISDIR(mode))

    def _iter_units(self, root_path: Path, is_dir: bool) -> Iterator[SourceUnit]:
        if not is_dir:
            yield self._load(root_path, root_path.parent)
            return

        for path in self._iter_files(root_path):
            yield self._load(path, root_path)

    def _iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            if not self.recursive:
                dirnames[:] = []
            else:
                kept = []
                for name in sorted(dirnames):
                    rel_path = f"{rel_dir}/{name}" if rel_dir else name
                    if name in _EXCLUDED_DIRS or _matches_any(rel_path, self.exclude_paths):
                        self.logger.debug("Skipping directory %s", rel_path)
                        continue
                    kept.append(name)
                dirnames[:] = kept

            for filename in sorted(filenames):
                if not is_source(filename):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _matches_any(rel_path, self.exclude_paths):
                    self.logger.debug("Skipping excluded file %s", rel_path)
                    continue
                yield current_dir / filename

    def _load(self, path: Path, root: Path) -> SourceUnit:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise SourceReadError(path, str(exc)) from exc

        rel_parent = path.parent.relative_to(root).parts if path.parent != root else ()
        return SourceUnit(
            path=path,
            package=".".join(rel_parent),
            module=path.stem,
            is_package=(path.parent / "__init__.py").exists(),
            source=source,
        )


def _raise_walk_error(error: OSError) -> None:
    raise SourceReadError(Path(error.filename or ""), error.strerror or str(error))


__all__ = ["SourceCollector", "SourceReadError", "is_generated", "is_source"]
