"""Turns extracted field annotations into emptiness rules."""

from __future__ import annotations

import ast
from typing import Optional

from .extractor import REQUIRED_MARKER
from .models import FieldAnnotation, FieldRule, GenerationModel, TypeDefinition, ValueCategory

SUBJECT = "src"
EMPTY_MESSAGE = "field {name} can't be empty"

_ZERO_VALUES = {
    ValueCategory.TEXTUAL: "",
    ValueCategory.NUMERIC: 0,
}


def emptiness_predicate(field_name: str, category: ValueCategory) -> ast.expr:
    """Build ``src.<field> == <zero>`` for a supported category."""
    if category not in _ZERO_VALUES:
        raise ValueError(f"no emptiness predicate for {category.value} fields")
    return ast.Compare(
        left=ast.Attribute(value=ast.Name(id=SUBJECT, ctx=ast.Load()), attr=field_name, ctx=ast.Load()),
        ops=[ast.Eq()],
        comparators=[ast.Constant(value=_ZERO_VALUES[category])],
    )


def is_required(annotation: FieldAnnotation) -> bool:
    return annotation.markers[0] == REQUIRED_MARKER


class RuleBuilder:
    """Maps required, supported fields onto ordered field rules."""

    def build_rule(self, annotation: FieldAnnotation) -> Optional[FieldRule]:
        if not is_required(annotation) or annotation.category is ValueCategory.UNSUPPORTED:
            return None
        return FieldRule(
            field_name=annotation.name,
            predicate=emptiness_predicate(annotation.name, annotation.category),
            message=EMPTY_MESSAGE.format(name=annotation.name),
        )

    def build(self, definition: TypeDefinition) -> GenerationModel:
        model = GenerationModel(type_name=definition.name)
        for annotation in definition.fields:
            rule = self.build_rule(annotation)
            if rule is not None:
                model.rules.append(rule)
        return model


__all__ = ["EMPTY_MESSAGE", "RuleBuilder", "SUBJECT", "emptiness_predicate", "is_required"]
