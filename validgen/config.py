"""Configuration loading for validgen (.validgen.yml and CLI overrides)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .logging import get_logger

CONFIG_FILENAME = ".validgen.yml"

_logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when options are missing, incompatible, or cannot be parsed."""


@dataclass
class GeneratorConfig:
    """Effective settings for one generation run."""

    src: Optional[Path]
    recursive: bool = False
    destination: Optional[Path] = None
    module_prefix: Optional[str] = None
    exclude_paths: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def relocated(self) -> bool:
        return self.destination is not None and bool(self.module_prefix)

    def validate(self) -> "GeneratorConfig":
        """Check option combinations, raising ConfigError for unusable ones."""
        if self.src is None or not str(self.src).strip():
            raise ConfigError("a source path is required")
        if self.destination is not None and not self.module_prefix:
            raise ConfigError("--dst requires --mod so generated code can import the source types")
        if self.module_prefix and self.destination is None:
            _logger.warning("Ignoring module prefix %r because no destination was given", self.module_prefix)
            self.module_prefix = None
        if self.module_prefix is not None:
            parts = self.module_prefix.split(".")
            if not all(part.isidentifier() for part in parts):
                raise ConfigError(f"module prefix {self.module_prefix!r} is not a dotted Python module path")
        return self


def load_config(
    src: Path,
    *,
    config_path: Path | None = None,
    recursive: bool | None = None,
    destination: Path | None = None,
    module_prefix: str | None = None,
    exclude_paths: Sequence[str] | None = None,
    dry_run: bool = False,
) -> GeneratorConfig:
    """Merge the optional config file with explicit overrides."""
    config_file = _resolve_config_path(src, config_path)
    data: Dict[str, Any] = {}
    if config_file is not None:
        if config_file.exists():
            data = _read_config(config_file)
            _logger.debug("Loaded settings from %s", config_file)
        elif config_path is not None:
            raise ConfigError(f"config file not found: {config_path}")

    base_dir = config_file.parent if config_file is not None else Path.cwd()

    file_destination = _as_str(data.get("dst"))
    resolved_destination = destination
    if resolved_destination is None and file_destination:
        resolved_destination = base_dir / file_destination

    resolved_recursive = recursive
    if resolved_recursive is None:
        resolved_recursive = _as_bool(data.get("recursive")) or False

    excludes = _as_str_list(data.get("exclude_paths"))
    if exclude_paths:
        excludes.extend(exclude_paths)

    return GeneratorConfig(
        src=src,
        recursive=resolved_recursive,
        destination=resolved_destination,
        module_prefix=module_prefix if module_prefix is not None else _as_str(data.get("mod")),
        exclude_paths=excludes,
        dry_run=dry_run,
    )


def _resolve_config_path(src: Path, config_path: Path | None) -> Path | None:
    if config_path is not None:
        return config_path.expanduser().resolve()
    src = src.expanduser()
    if src.is_dir():
        return (src / CONFIG_FILENAME).resolve()
    if src.is_file():
        return (src.parent / CONFIG_FILENAME).resolve()
    return None


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
