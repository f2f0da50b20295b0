"""Renders generation models into validator modules.

The generated module is assembled as ``ast`` nodes and unparsed block by
block, so the layout of the output lives in :class:`ModuleFormatter` while
the checks themselves come straight from the generation models.
"""

from __future__ import annotations

import ast
import keyword
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import GENERATED_SUFFIX, GeneratedArtifact, GenerationModel, SourceUnit
from .rules import SUBJECT

GENERATED_HEADER = "# Code generated by validgen. DO NOT EDIT."
NIL_MESSAGE = "src can't be nil"
ERROR_TYPE = "ValueError"

_FUNCTION_EXTRAS = {"type_params": []} if "type_params" in ast.FunctionDef._fields else {}


def title(name: str) -> str:
    """Exported form of a type name: ``id`` becomes ``ID`` and the first letter is upper-cased."""
    name = name.replace("id", "ID")
    return name[:1].upper() + name[1:]


def value_validator_name(type_name: str) -> str:
    return f"Validate{title(type_name)}"


def reference_validator_name(type_name: str) -> str:
    return f"Validate{title(type_name)}Ref"


def _importable(module: Optional[str]) -> bool:
    if module is None:
        return True
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in module.split("."))


def _name(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Load())


def _docstring(text: str) -> ast.Expr:
    return ast.Expr(value=ast.Constant(value=text))


def _raise(message: str) -> ast.Raise:
    return ast.Raise(
        exc=ast.Call(func=_name(ERROR_TYPE), args=[ast.Constant(value=message)], keywords=[]),
        cause=None,
    )


def _function(name: str, annotation: ast.expr, body: List[ast.stmt]) -> ast.FunctionDef:
    arguments = ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=SUBJECT, annotation=annotation)],
        vararg=None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=[],
    )
    return ast.FunctionDef(
        name=name,
        args=arguments,
        body=body,
        decorator_list=[],
        returns=ast.Constant(value=None),
        **_FUNCTION_EXTRAS,
    )


class ModuleFormatter:
    """Joins top-level blocks with PEP 8 spacing under a fixed header comment."""

    def __init__(self, header: str = GENERATED_HEADER) -> None:
        self.header = header

    def format(self, blocks: Sequence[Sequence[ast.stmt]]) -> str:
        text = f"{self.header}\n"
        previous_is_def: Optional[bool] = None
        for block in blocks:
            is_def = any(isinstance(stmt, (ast.FunctionDef, ast.ClassDef)) for stmt in block)
            if previous_is_def is not None:
                text += "\n\n\n" if is_def or previous_is_def else "\n\n"
            text += self._unparse(block)
            previous_is_def = is_def
        return text + "\n"

    @staticmethod
    def _unparse(block: Sequence[ast.stmt]) -> str:
        if all(isinstance(stmt, (ast.FunctionDef, ast.ClassDef)) for stmt in block) and len(block) > 1:
            return "\n\n\n".join(ModuleFormatter._unparse([stmt]) for stmt in block)
        module = ast.fix_missing_locations(ast.Module(body=list(block), type_ignores=[]))
        return ast.unparse(module).strip("\n")


class ArtifactRenderer:
    """Builds the validator module for one source unit and decides where it goes."""

    def __init__(
        self,
        destination: Path | str | None = None,
        module_prefix: str | None = None,
        formatter: ModuleFormatter | None = None,
    ) -> None:
        self.destination = Path(destination) if destination is not None else None
        self.module_prefix = module_prefix or None
        self.formatter = formatter or ModuleFormatter()
        self.logger = get_logger("renderer")

    @property
    def relocated(self) -> bool:
        return self.destination is not None and self.module_prefix is not None

    def output_path(self, unit: SourceUnit) -> Path:
        """Swap the ``.py`` suffix for the generated suffix in the target directory."""
        filename = f"{unit.module}{GENERATED_SUFFIX}"
        if self.destination is None:
            return unit.path.parent / filename
        return self.destination.joinpath(*unit.package_parts, filename)

    def origin_import(self, unit: SourceUnit) -> Tuple[Optional[str], int]:
        """Module path and relative level used to import the source types."""
        # A package's __init__ is imported through the package itself.
        module = None if unit.module == "__init__" else unit.module
        if self.relocated:
            parts = [self.module_prefix, *unit.package_parts, module]
            return ".".join(part for part in parts if part), 0
        if unit.is_package:
            return module, 1
        return unit.module, 0

    def validator_functions(self, model: GenerationModel) -> List[ast.FunctionDef]:
        """Value and reference validators for one model, in that order."""
        checks: List[ast.stmt] = [
            ast.If(test=rule.predicate, body=[_raise(rule.message)], orelse=[]) for rule in model.rules
        ]
        type_name = model.type_name
        value_fn = _function(
            value_validator_name(type_name),
            _name(type_name),
            [
                _docstring(f"Raise {ERROR_TYPE} when a required field of {type_name} is empty."),
                *checks,
                ast.Return(value=ast.Constant(value=None)),
            ],
        )
        nil_check = ast.If(
            test=ast.Compare(left=_name(SUBJECT), ops=[ast.Is()], comparators=[ast.Constant(value=None)]),
            body=[_raise(NIL_MESSAGE)],
            orelse=[],
        )
        reference_fn = _function(
            reference_validator_name(type_name),
            ast.Subscript(value=_name("Optional"), slice=_name(type_name), ctx=ast.Load()),
            [
                _docstring(f"Like {value_fn.name}, but also rejects a missing {type_name}."),
                nil_check,
                *checks,
                ast.Return(value=ast.Constant(value=None)),
            ],
        )
        return [value_fn, reference_fn]

    def exported_models(
        self, unit: SourceUnit, models: Sequence[GenerationModel]
    ) -> List[GenerationModel]:
        """Models that get validators, one per exported name.

        A later class replaces an earlier one with the same name, as it does at
        import time, and the same holds for names that collide after
        :func:`title`.
        """
        by_type: Dict[str, GenerationModel] = {}
        for model in models:
            by_type.pop(model.type_name, None)
            by_type[model.type_name] = model

        by_export: Dict[str, GenerationModel] = {}
        for model in by_type.values():
            if not model.has_rules:
                continue
            export = value_validator_name(model.type_name)
            previous = by_export.pop(export, None)
            if previous is not None:
                self.logger.warning(
                    "%s: %s and %s both map to %s; keeping %s",
                    unit.path,
                    previous.type_name,
                    model.type_name,
                    export,
                    model.type_name,
                )
            by_export[export] = model
        return list(by_export.values())

    def render(self, unit: SourceUnit, models: Sequence[GenerationModel]) -> Optional[GeneratedArtifact]:
        """Return the artifact for ``unit``, or ``None`` when no model carries rules."""
        eligible = self.exported_models(unit, models)
        if not eligible:
            return None
        module, level = self.origin_import(unit)
        if not _importable(module):
            self.logger.warning("%s: %s is not an importable module path; skipping", unit.path, module)
            return None

        functions: List[ast.FunctionDef] = []
        for model in eligible:
            functions.extend(self.validator_functions(model))
        exports = [fn.name for fn in functions]

        blocks: List[List[ast.stmt]] = [
            [_docstring(f"Required-field validators for types declared in {unit.path.name}.")],
            [ast.ImportFrom(module="__future__", names=[ast.alias(name="annotations")], level=0)],
            [ast.ImportFrom(module="typing", names=[ast.alias(name="Optional")], level=0)],
            [
                ast.ImportFrom(
                    module=module,
                    names=[ast.alias(name=model.type_name) for model in eligible],
                    level=level,
                ),
            ],
            [
                ast.Assign(
                    targets=[ast.Name(id="__all__", ctx=ast.Store())],
                    value=ast.List(elts=[ast.Constant(value=name) for name in exports], ctx=ast.Load()),
                )
            ],
            functions,
        ]
        return GeneratedArtifact(
            source=unit.path,
            path=self.output_path(unit),
            content=self.formatter.format(blocks),
            exports=exports,
        )


__all__ = [
    "ArtifactRenderer",
    "GENERATED_HEADER",
    "ModuleFormatter",
    "NIL_MESSAGE",
    "reference_validator_name",
    "title",
    "value_validator_name",
]
