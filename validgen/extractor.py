"""Locates annotated class definitions in parsed Python source."""

from __future__ import annotations

import ast
from typing import Iterable, List, Optional

from .logging import get_logger
from .models import FieldAnnotation, SourceUnit, TypeDefinition, ValueCategory

METADATA_KEY = "validator"
REQUIRED_MARKER = "required"

_TEXTUAL_TYPES = {"str"}
_NUMERIC_TYPES = {"int", "float"}


class SourceParseError(RuntimeError):
    """Raised when a source unit does not parse into a module tree."""

    def __init__(self, unit: SourceUnit, reason: str) -> None:
        super().__init__(f"failed to parse {unit.path}: {reason}")
        self.path = unit.path


def classify(type_name: Optional[str]) -> ValueCategory:
    """Map a declared type name to its value category."""
    if type_name in _TEXTUAL_TYPES:
        return ValueCategory.TEXTUAL
    if type_name in _NUMERIC_TYPES:
        return ValueCategory.NUMERIC
    return ValueCategory.UNSUPPORTED


class DefinitionExtractor:
    """Parses source units and collects classes whose fields carry validator metadata."""

    def __init__(self, metadata_key: str = METADATA_KEY) -> None:
        self.metadata_key = metadata_key
        self.logger = get_logger("extractor")

    def parse(self, unit: SourceUnit) -> ast.Module:
        try:
            return ast.parse(unit.source, filename=str(unit.path))
        except (SyntaxError, ValueError) as exc:
            raise SourceParseError(unit, str(exc)) from exc

    def extract(self, unit: SourceUnit) -> List[TypeDefinition]:
        """Return module-level class definitions declaring at least one field."""
        tree = self.parse(unit)
        definitions: List[TypeDefinition] = []
        for node in tree.body:
            if not isinstance(node, ast.ClassDef):
                continue
            declared = list(_iter_fields(node))
            if not declared:
                self.logger.debug("%s: class %s declares no fields", unit.path, node.name)
                continue
            definition = TypeDefinition(name=node.name, field_count=len(declared))
            for stmt in declared:
                annotation = self._read_annotation(unit, node.name, stmt)
                if annotation is not None:
                    definition.fields.append(annotation)
            self.logger.debug(
                "%s: class %s has %d of %d fields annotated",
                unit.path,
                definition.name,
                len(definition.fields),
                definition.field_count,
            )
            definitions.append(definition)
        return definitions

    def _read_annotation(
        self, unit: SourceUnit, class_name: str, stmt: ast.AnnAssign
    ) -> Optional[FieldAnnotation]:
        name = stmt.target.id  # type: ignore[union-attr]
        raw = self._metadata_value(stmt.value)
        if raw is None:
            return None
        type_name = stmt.annotation.id if isinstance(stmt.annotation, ast.Name) else None
        category = classify(type_name)
        if category is ValueCategory.UNSUPPORTED and raw.split(",")[0] == REQUIRED_MARKER:
            self.logger.debug(
                "%s: %s.%s has unsupported type %s; no check generated",
                unit.path,
                class_name,
                name,
                type_name or ast.unparse(stmt.annotation),
            )
        return FieldAnnotation(
            name=name,
            annotation=raw,
            type_name=type_name,
            category=category,
        )

    def _metadata_value(self, value: Optional[ast.expr]) -> Optional[str]:
        if not isinstance(value, ast.Call) or not _is_field_call(value.func):
            return None
        for keyword in value.keywords:
            if keyword.arg != "metadata":
                continue
            entry = _lookup(keyword.value, self.metadata_key)
            if isinstance(entry, ast.Constant) and isinstance(entry.value, str):
                return entry.value
        return None


def _iter_fields(node: ast.ClassDef) -> Iterable[ast.AnnAssign]:
    for stmt in node.body:
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            yield stmt


def _is_field_call(func: ast.expr) -> bool:
    if isinstance(func, ast.Name):
        return func.id == "field"
    if isinstance(func, ast.Attribute):
        return func.attr == "field"
    return False


def _lookup(mapping: ast.expr, key: str) -> Optional[ast.expr]:
    if isinstance(mapping, ast.Dict):
        for dict_key, dict_value in zip(mapping.keys, mapping.values):
            if isinstance(dict_key, ast.Constant) and dict_key.value == key:
                return dict_value
        return None
    if isinstance(mapping, ast.Call) and isinstance(mapping.func, ast.Name) and mapping.func.id == "dict":
        for keyword in mapping.keywords:
            if keyword.arg == key:
                return keyword.value
    return None


__all__ = [
    "DefinitionExtractor",
    "METADATA_KEY",
    "REQUIRED_MARKER",
    "SourceParseError",
    "classify",
]
