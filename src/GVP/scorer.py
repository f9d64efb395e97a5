"""
Gene scoring under modes of inheritance.

For each mode, the minimal set of passed, mode-compatible variants which the
pattern needs is selected:

- dominant / mitochondrial / ANY : the single best variant
- recessive (AR, XR)             : the best homozygous ALT variant, or the best
                                   pair of compound heterozygous variants,
                                   whichever scores higher (the pair wins ties)

variant_score is the mean score of the selected variants and phenotype_score
is the best phenotype-match score of the gene. A gene with nothing to select
gets an all-zero GeneScore, not an error.
"""

from __future__ import annotations

import logging
import typing

from .gene import Gene, GeneScore, rank_genes
from .inheritance import ModeOfInheritance, comp_het_sub_mode, hom_alt_sub_mode
from .variant import VariantRecord

logger = logging.getLogger(__name__)


def top_variants(variants: typing.Sequence[VariantRecord], n: int) -> list[VariantRecord]:
    """
    The n highest scoring variants (ties broken by input order), returned in
    input order. Fewer than n are returned when fewer are available.
    """
    if n <= 0:
        return []
    ranked = sorted(enumerate(variants), key=lambda item: (-item[1].score, item[0]))[:n]
    return [variant for _, variant in sorted(ranked, key=lambda item: item[0])]


def mean_score(variants: typing.Sequence[VariantRecord]) -> float:
    if not variants:
        return 0.0
    return sum(variant.score for variant in variants) / len(variants)


class GeneScorer:
    """
    Scores genes under the requested modes of inheritance, or under ANY when
    none are requested.
    """

    def __init__(self, modes: typing.Iterable[ModeOfInheritance] = ()):
        requested = tuple(dict.fromkeys(modes))
        self.modes = requested if requested else (ModeOfInheritance.ANY,)

    def find_contributing_variants(self, gene: Gene, mode: ModeOfInheritance) -> list[VariantRecord]:
        eligible = [variant for variant in gene.passed_variants() if variant.is_compatible_with(mode)]
        if not eligible:
            return []
        if mode.is_recessive:
            return self._find_recessive_variants(eligible, mode)
        return top_variants(eligible, 1)

    @staticmethod
    def _find_recessive_variants(
        eligible: typing.Sequence[VariantRecord], mode: ModeOfInheritance
    ) -> list[VariantRecord]:
        comp_het = comp_het_sub_mode(mode)
        hom_alt = hom_alt_sub_mode(mode)

        comp_het_candidates = [v for v in eligible if v.is_compatible_with_sub_mode(comp_het)]
        pair = top_variants(comp_het_candidates, 2) if len(comp_het_candidates) >= 2 else []

        hom_alt_candidates = [v for v in eligible if v.is_compatible_with_sub_mode(hom_alt)]
        single = top_variants(hom_alt_candidates, 1)

        if pair and mean_score(pair) >= mean_score(single):
            return pair
        return single

    def score_gene_for_mode(self, gene: Gene, mode: ModeOfInheritance) -> GeneScore:
        contributing = self.find_contributing_variants(gene, mode)
        for variant in contributing:
            variant.set_contributes_to_gene_score_under_mode(mode)
        return GeneScore(
            gene_symbol=gene.symbol,
            mode=mode,
            variant_score=mean_score(contributing),
            phenotype_score=gene.phenotype_score(),
            contributing_variants=tuple(contributing),
        )

    def score_gene(self, gene: Gene) -> list[GeneScore]:
        """Score `gene` under every mode, appending the GeneScores to it in mode order."""
        gene_scores = []
        for mode in self.modes:
            gene_score = self.score_gene_for_mode(gene, mode)
            gene.add_gene_score(gene_score)
            gene_scores.append(gene_score)
            logger.debug(
                f"{gene.symbol} {mode.value}: variant={gene_score.variant_score:.4f} "
                f"phenotype={gene_score.phenotype_score:.4f} combined={gene_score.combined_score:.4f}"
            )
        return gene_scores

    def score_genes(self, genes: typing.MutableSequence[Gene]) -> None:
        """Score every gene, then sort `genes` in place by rank."""
        for gene in genes:
            self.score_gene(gene)
        genes[:] = rank_genes(genes)
