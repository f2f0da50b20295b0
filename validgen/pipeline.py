"""Pipeline orchestration: collect, extract, build rules, render, write."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .collector import SourceCollector
from .config import GeneratorConfig
from .extractor import DefinitionExtractor
from .logging import get_logger
from .models import GeneratedArtifact, GenerationModel, SourceUnit, TypeDefinition
from .renderer import ArtifactRenderer
from .rules import RuleBuilder


@dataclass
class UnitContext:
    """Per-unit working state; built fresh for every source unit."""

    unit: SourceUnit
    definitions: List[TypeDefinition] = field(default_factory=list)
    models: List[GenerationModel] = field(default_factory=list)
    artifact: Optional[GeneratedArtifact] = None

    @property
    def rule_count(self) -> int:
        return sum(len(model.rules) for model in self.models)


@dataclass
class GenerationReport:
    """Summary of a generation run."""

    artifacts: List[GeneratedArtifact] = field(default_factory=list)
    scanned: int = 0
    skipped: int = 0
    dry_run: bool = False

    @property
    def paths(self) -> List[Path]:
        return [artifact.path for artifact in self.artifacts]


class Generator:
    """Runs the generation pipeline one source unit at a time."""

    def __init__(
        self,
        config: GeneratorConfig,
        collector: SourceCollector | None = None,
        extractor: DefinitionExtractor | None = None,
        rule_builder: RuleBuilder | None = None,
        renderer: ArtifactRenderer | None = None,
    ) -> None:
        self.config = config.validate()
        self.collector = collector or SourceCollector(
            recursive=config.recursive, exclude_paths=config.exclude_paths
        )
        self.extractor = extractor or DefinitionExtractor()
        self.rule_builder = rule_builder or RuleBuilder()
        self.renderer = renderer or ArtifactRenderer(
            destination=config.destination if config.relocated else None,
            module_prefix=config.module_prefix if config.relocated else None,
        )
        self.logger = get_logger("pipeline")

    def run(self) -> GenerationReport:
        """Generate validators for every collected unit, stopping at the first input error.

        Every unit is rendered before anything is written, so a read or parse
        failure anywhere in the tree leaves the output directories untouched.
        """
        report = GenerationReport(dry_run=self.config.dry_run)
        self.logger.info("Scanning %s", self.config.src)
        for unit in self.collector.collect(self.config.src):  # type: ignore[arg-type]
            report.scanned += 1
            context = self.process(unit)
            if context.artifact is None:
                report.skipped += 1
                continue
            report.artifacts.append(context.artifact)

        if not self.config.dry_run:
            for artifact in report.artifacts:
                self.write(artifact)
        self.logger.debug(
            "Scanned %d units, generated %d, skipped %d",
            report.scanned,
            len(report.artifacts),
            report.skipped,
        )
        return report

    def process(self, unit: SourceUnit) -> UnitContext:
        """Run extraction, rule building and rendering for one unit."""
        context = UnitContext(unit=unit)
        context.definitions = self.extractor.extract(unit)
        context.models = [self.rule_builder.build(definition) for definition in context.definitions]
        context.artifact = self.renderer.render(unit, context.models)
        if context.artifact is None:
            self.logger.debug("%s: no required fields found", unit.path)
        else:
            self.logger.debug(
                "%s: %d rules across %d types",
                unit.path,
                context.rule_count,
                len([model for model in context.models if model.has_rules]),
            )
        return context

    def write(self, artifact: GeneratedArtifact) -> None:
        artifact.path.parent.mkdir(parents=True, exist_ok=True)
        artifact.path.write_text(artifact.content, encoding="utf-8")
        self.logger.info("Wrote %s", artifact.path)


__all__ = ["GenerationReport", "Generator", "UnitContext"]
