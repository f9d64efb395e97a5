"""
Gene domain model.

A Gene owns an ordered list of VariantRecords, its phenotype-match
(priority) scores, its own gene-level filter results and the GeneScores
computed for each evaluated mode of inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .filters import FilterResult, FilterStatus, FilterType
from .inheritance import ModeOfInheritance
from .variant import X_CHROMOSOME, Y_CHROMOSOME, VariantRecord


@dataclass(frozen=True)
class GeneScore:
    """
    Score of one gene under one mode of inheritance.

    combined_score is always (variant_score + phenotype_score) / 2.
    """

    gene_symbol: str
    mode: ModeOfInheritance = ModeOfInheritance.ANY
    variant_score: float = 0.0
    phenotype_score: float = 0.0
    contributing_variants: tuple[VariantRecord, ...] = ()

    @property
    def combined_score(self) -> float:
        return (self.variant_score + self.phenotype_score) / 2

    @classmethod
    def empty(cls, gene_symbol: str, mode: ModeOfInheritance = ModeOfInheritance.ANY) -> "GeneScore":
        return cls(gene_symbol=gene_symbol, mode=mode)


class Gene:
    """
    Represents a gene and the variants called in it for one sample.

    Once a gene-level filter result is recorded, every variant added afterwards
    receives the same result - except INHERITANCE_FILTER, which is gene scope only.
    """

    def __init__(self, symbol: str, gene_id: str = "", variants: Iterable[VariantRecord] = ()):
        if symbol is None:
            raise ValueError("Gene symbol cannot be None")
        if not str(symbol).strip():
            raise ValueError("Gene symbol cannot be empty")
        self.symbol = str(symbol).strip()
        self.gene_id = gene_id
        self.priority_scores: dict[str, float] = {}
        self.filter_status = FilterStatus()
        self._variants: list[VariantRecord] = []
        self._gene_scores: list[GeneScore] = []
        for variant in variants:
            self.add_variant(variant)

    # ----------------------
    # Variants
    # ----------------------

    def add_variant(self, variant: VariantRecord) -> None:
        for result in self.filter_status.results:
            if result.filter_type is not FilterType.INHERITANCE_FILTER:
                variant.add_filter_result(result)
        self._variants.append(variant)

    @property
    def variants(self) -> list[VariantRecord]:
        return list(self._variants)

    @property
    def number_of_variants(self) -> int:
        return len(self._variants)

    def has_variants(self) -> bool:
        return bool(self._variants)

    def passed_variants(self) -> list[VariantRecord]:
        return [variant for variant in self._variants if variant.passed_filters()]

    # ----------------------
    # Filter bookkeeping
    # ----------------------

    def add_filter_result(self, result: FilterResult) -> None:
        self.filter_status.add(result)

    def passed_filters(self) -> bool:
        """
        True iff no gene-level step failed, and the gene either has no
        variants or at least one variant passed every step run on it.
        """
        if not self.filter_status.passed_all():
            return False
        if not self._variants:
            return True
        return any(variant.passed_filters() for variant in self._variants)

    def passed_filter(self, filter_type: FilterType) -> bool:
        if self.filter_status.passed(filter_type):
            return True
        return any(variant.passed_filter(filter_type) for variant in self._variants)

    @property
    def failed_filter_types(self) -> set[FilterType]:
        return set(self.filter_status.failed_types)

    # ----------------------
    # Phenotype (priority) scores
    # ----------------------

    def add_priority_score(self, source: str, score: float) -> None:
        if not 0 <= score <= 1:
            raise ValueError(f"Priority score must be in [0, 1], got {score!r}")
        self.priority_scores[str(source).strip().upper()] = float(score)

    def phenotype_score(self) -> float:
        """Maximum priority score over all sources, 0 if none were recorded."""
        return max(self.priority_scores.values(), default=0.0)

    # ----------------------
    # Inheritance
    # ----------------------

    def is_compatible_with(self, mode: ModeOfInheritance) -> bool:
        if mode is ModeOfInheritance.ANY:
            return True
        return any(variant.is_compatible_with(mode) for variant in self.passed_variants())

    def compatible_modes(self) -> set[ModeOfInheritance]:
        return {
            sub_mode.mode
            for variant in self.passed_variants()
            for sub_mode in variant.compatible_sub_modes
            if sub_mode.mode is not ModeOfInheritance.ANY
        }

    def is_x_chromosomal(self) -> bool:
        return bool(self._variants) and self._variants[0].chromosome == X_CHROMOSOME

    def is_y_chromosomal(self) -> bool:
        return bool(self._variants) and self._variants[0].chromosome == Y_CHROMOSOME

    # ----------------------
    # Gene scores
    # ----------------------

    def add_gene_score(self, gene_score: GeneScore) -> None:
        self._gene_scores.append(gene_score)

    @property
    def gene_scores(self) -> list[GeneScore]:
        return list(self._gene_scores)

    def gene_score_for_mode(self, mode: ModeOfInheritance) -> Optional[GeneScore]:
        """The most recently added score for `mode`, None if the mode was never scored."""
        for gene_score in reversed(self._gene_scores):
            if gene_score.mode is mode:
                return gene_score
        return None

    def top_gene_score(self) -> GeneScore:
        """Highest combined score across all modes; an empty ANY score if unscored."""
        if not self._gene_scores:
            return GeneScore.empty(self.symbol)
        return max(self._gene_scores, key=lambda gene_score: gene_score.combined_score)

    def combined_score_for_mode(self, mode: Optional[ModeOfInheritance] = None) -> float:
        """
        Combined score under `mode`, or the best across all modes when mode is None.
        0 when the gene was not scored under that mode.
        """
        if mode is None:
            return self.top_gene_score().combined_score
        gene_score = self.gene_score_for_mode(mode)
        return gene_score.combined_score if gene_score is not None else 0.0

    @property
    def combined_score(self) -> float:
        return self.top_gene_score().combined_score

    @property
    def variant_score(self) -> float:
        return self.top_gene_score().variant_score

    def __repr__(self) -> str:
        return (
            f"Gene(symbol={self.symbol!r}, variants={len(self._variants)}, "
            f"passed_filters={self.passed_filters()}, combined_score={self.combined_score:.4f})"
        )


def ranking_key(mode: Optional[ModeOfInheritance] = None):
    """
    Sort key giving descending combined score for `mode` (best mode when None),
    then ascending gene symbol.
    """

    def key(gene: Gene):
        return (-gene.combined_score_for_mode(mode), gene.symbol)

    return key


def rank_genes(genes: Sequence[Gene], mode: Optional[ModeOfInheritance] = None) -> list[Gene]:
    """Return a new list of genes in rank order. Re-ranking a ranked list is a no-op."""
    return sorted(genes, key=ranking_key(mode))
