"""
Filter pipeline runners.

Variant track:
    Each variant is run through the steps strictly in list order. The first
    failing step stops evaluation for that variant (fail fast), so expensive
    downstream lookups (frequency, pathogenicity) are never spent on variants
    already disqualified. Only the results computed so far are recorded.

Gene track:
    Genes accumulate their own results the same way, independently of their
    variants.

Configuration problems (a step whose data source was never supplied, a step
on the wrong track, ...) are collected in a stairval Notepad and raised as a
PipelineConfigurationError before any variant or gene is touched.
"""

from __future__ import annotations

import logging
import typing

from stairval.notepad import Notepad, create_notepad

from .filters import GeneFilter, VariantFilter
from .gene import Gene
from .variant import VariantRecord

logger = logging.getLogger(__name__)


class PipelineConfigurationError(ValueError):
    """Raised when the configured filter steps cannot be run."""

    def __init__(self, issues: typing.Sequence[str]):
        self.issues = list(issues)
        super().__init__("Invalid filter pipeline configuration: " + "; ".join(self.issues))


def check_steps(
    variant_steps: typing.Sequence[object],
    gene_steps: typing.Sequence[object],
    notepad: Notepad,
) -> None:
    """Add an error to `notepad` for every problem with the configured steps."""
    for position, step in enumerate(variant_steps):
        if not isinstance(step, VariantFilter):
            notepad.add_error(f"Variant step {position} ({type(step).__name__}) is not a variant filter")
            continue
        step.check(notepad)
    for position, step in enumerate(gene_steps):
        if not isinstance(step, GeneFilter):
            notepad.add_error(f"Gene step {position} ({type(step).__name__}) is not a gene filter")
            continue
        step.check(notepad)


def raise_for_errors(notepad: Notepad) -> None:
    if notepad.has_errors(include_subsections=True):
        raise PipelineConfigurationError([issue.message for issue in notepad.errors()])


class VariantFilterRunner:
    def __init__(self, steps: typing.Sequence[VariantFilter]):
        notepad = create_notepad("variant-filters")
        check_steps(steps, (), notepad)
        raise_for_errors(notepad)
        self.steps = tuple(steps)

    def run_one(self, variant: VariantRecord) -> bool:
        """Run the steps on one variant, stopping at the first failure. Returns passed_filters()."""
        for step in self.steps:
            result = step.run_filter(variant)
            variant.add_filter_result(result)
            if not result.passed:
                logger.debug(f"Variant {variant} failed {result.filter_type.value}")
                break
        return variant.passed_filters()

    def run(self, variants: typing.Iterable[VariantRecord]) -> list[VariantRecord]:
        """Filter `variants` in order and return the ones which passed."""
        return [variant for variant in variants if self.run_one(variant)]


class GeneFilterRunner:
    def __init__(self, steps: typing.Sequence[GeneFilter]):
        notepad = create_notepad("gene-filters")
        check_steps((), steps, notepad)
        raise_for_errors(notepad)
        self.steps = tuple(steps)

    def run_one(self, gene: Gene) -> bool:
        """Run the steps on one gene, stopping at the first failure. Returns passed_filters()."""
        for step in self.steps:
            result = step.run_filter(gene)
            gene.add_filter_result(result)
            if not result.passed:
                logger.debug(f"Gene {gene.symbol} failed {result.filter_type.value}")
                break
        return gene.passed_filters()

    def run(self, genes: typing.Iterable[Gene]) -> list[Gene]:
        """Filter `genes` in order and return the ones which passed."""
        return [gene for gene in genes if self.run_one(gene)]


def run_variant_filters(
    steps: typing.Sequence[VariantFilter], variants: typing.Iterable[VariantRecord]
) -> list[VariantRecord]:
    return VariantFilterRunner(steps).run(variants)


def run_gene_filters(steps: typing.Sequence[GeneFilter], genes: typing.Iterable[Gene]) -> list[Gene]:
    return GeneFilterRunner(steps).run(genes)
