"""Core data models shared across validgen components."""

import ast
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

GENERATED_SUFFIX = "_validator.py"
SOURCE_SUFFIX = ".py"


class ValueCategory(str, Enum):
    """Classification of a field's declared type."""

    TEXTUAL = "textual"
    NUMERIC = "numeric"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SourceUnit:
    """A Python source file queued for generation."""

    path: Path
    package: str
    module: str
    is_package: bool
    source: bytes

    @property
    def package_parts(self) -> Tuple[str, ...]:
        return tuple(self.package.split(".")) if self.package else ()


@dataclass(frozen=True)
class FieldAnnotation:
    """Raw validator annotation attached to one declared field."""

    name: str
    annotation: str
    type_name: Optional[str]
    category: ValueCategory

    @property
    def markers(self) -> List[str]:
        return self.annotation.split(",")


@dataclass
class TypeDefinition:
    """A module-level class and the annotated fields it declares."""

    name: str
    field_count: int
    fields: List[FieldAnnotation] = field(default_factory=list)


@dataclass(frozen=True)
class FieldRule:
    """Emptiness check and error message for one required field."""

    field_name: str
    predicate: ast.expr
    message: str


@dataclass
class GenerationModel:
    """Ordered rules for one class, in field declaration order."""

    type_name: str
    rules: List[FieldRule] = field(default_factory=list)

    @property
    def has_rules(self) -> bool:
        return bool(self.rules)


@dataclass
class GeneratedArtifact:
    """Rendered validator module for one source unit."""

    source: Path
    path: Path
    content: str
    exports: List[str] = field(default_factory=list)
