"""Generate required-field validators for annotated Python classes."""

from .config import ConfigError, GeneratorConfig, load_config
from .pipeline import GenerationReport, Generator

__all__ = [
    "ConfigError",
    "GenerationReport",
    "Generator",
    "GeneratorConfig",
    "load_config",
]
