"""
One-sample analysis: filter variants, filter genes, score and rank.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass, field

from stairval.notepad import create_notepad

from .filters import GeneFilter, VariantFilter
from .gene import Gene
from .inheritance import ModeOfInheritance
from .runner import GeneFilterRunner, VariantFilterRunner, raise_for_errors, check_steps
from .scorer import GeneScorer

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResults:
    """
    ranked_genes holds every gene in rank order. passed_genes is the subset
    which passed filtering, in the same order.
    """

    ranked_genes: list[Gene]
    passed_genes: list[Gene]
    modes: tuple[ModeOfInheritance, ...]

    @property
    def number_of_variants(self) -> int:
        return sum(gene.number_of_variants for gene in self.ranked_genes)

    @property
    def number_of_passed_variants(self) -> int:
        return sum(len(gene.passed_variants()) for gene in self.ranked_genes)

    def top(self, n: int) -> list[Gene]:
        return self.passed_genes[: max(n, 0)]


@dataclass
class Analysis:
    variant_steps: list[VariantFilter] = field(default_factory=list)
    gene_steps: list[GeneFilter] = field(default_factory=list)
    modes: tuple[ModeOfInheritance, ...] = ()

    def validate(self) -> None:
        """Raise PipelineConfigurationError if any configured step cannot run."""
        notepad = create_notepad("analysis")
        check_steps(self.variant_steps, self.gene_steps, notepad)
        raise_for_errors(notepad)

    def run(self, genes: typing.Iterable[Gene]) -> AnalysisResults:
        self.validate()
        genes = list(genes)
        variant_runner = VariantFilterRunner(self.variant_steps)
        gene_runner = GeneFilterRunner(self.gene_steps)
        scorer = GeneScorer(self.modes)

        logger.info(f"Filtering {sum(gene.number_of_variants for gene in genes)} variants in {len(genes)} genes")
        for gene in genes:
            passed = variant_runner.run(gene.variants)
            logger.debug(f"{gene.symbol}: {len(passed)}/{gene.number_of_variants} variants passed")

        # gene-level steps see the variant results, e.g. the inheritance step
        # only considers passed variants
        passed_genes = gene_runner.run(genes)
        logger.debug(f"{len(passed_genes)}/{len(genes)} genes passed gene filters")

        scorer.score_genes(genes)
        results = AnalysisResults(
            ranked_genes=genes,
            passed_genes=[gene for gene in genes if gene.passed_filters()],
            modes=scorer.modes,
        )
        logger.info(
            f"Scored {len(genes)} genes under {', '.join(mode.value for mode in scorer.modes)}; "
            f"{len(results.passed_genes)} passed filters"
        )
        return results
