"""
Filter steps and their bookkeeping.

There's nothing special about a FilterResult being a gene or a variant result;
where it is recorded makes the difference. The FilterType is used to report
which step was passed or failed.

Every step can:
- run_filter(entity) -> FilterResult : pass/fail for one variant (or gene)
- check(notepad)                     : report configuration problems before a run

Steps never raise for a missing annotation: they fail closed instead.
Annotation conventions on VariantRecord:
- None      : the annotation was never supplied -> step cannot decide -> FAIL
- {} / ""   : looked up, nothing found -> a legitimate verdict
"""

from __future__ import annotations

import abc
import typing
from dataclasses import dataclass, field
from enum import Enum

from stairval.notepad import Notepad

if typing.TYPE_CHECKING:
    from .gene import Gene
    from .inheritance import ModeOfInheritance
    from .regions import RegionIndex
    from .variant import VariantRecord


class FilterType(Enum):
    QUALITY_FILTER = "quality"
    REGION_FILTER = "region"
    KNOWN_VARIANT_FILTER = "known-variant"
    FREQUENCY_FILTER = "frequency"
    PATHOGENICITY_FILTER = "pathogenicity"
    GENE_SYMBOL_FILTER = "gene-symbol"
    PRIORITY_SCORE_FILTER = "priority-score"
    # gene-scope only, never copied onto variants
    INHERITANCE_FILTER = "inheritance"


@dataclass(frozen=True)
class FilterResult:
    filter_type: FilterType
    passed: bool

    @classmethod
    def pass_for(cls, filter_type: FilterType) -> "FilterResult":
        return cls(filter_type, True)

    @classmethod
    def fail_for(cls, filter_type: FilterType) -> "FilterResult":
        return cls(filter_type, False)

    @classmethod
    def of(cls, filter_type: FilterType, passed: bool) -> "FilterResult":
        return cls(filter_type, bool(passed))


@dataclass
class FilterStatus:
    """
    Pass/fail record for one entity (variant or gene).

    Results only accumulate. A type never evaluated reports "not passed".
    An entity with no failures has passed everything evaluated so far.
    """

    results: list[FilterResult] = field(default_factory=list)
    passed_types: set[FilterType] = field(default_factory=set)
    failed_types: set[FilterType] = field(default_factory=set)

    def add(self, result: FilterResult) -> None:
        self.results.append(result)
        if result.passed:
            self.passed_types.add(result.filter_type)
        else:
            self.failed_types.add(result.filter_type)

    def passed(self, filter_type: FilterType) -> bool:
        return filter_type in self.passed_types and filter_type not in self.failed_types

    def failed(self, filter_type: FilterType) -> bool:
        return filter_type in self.failed_types

    def evaluated(self, filter_type: FilterType) -> bool:
        return filter_type in self.passed_types or filter_type in self.failed_types

    def passed_all(self) -> bool:
        return not self.failed_types

    def has_results(self) -> bool:
        return bool(self.results)


# ------------------
# Step base classes
# ------------------


class VariantFilter(metaclass=abc.ABCMeta):
    filter_type: FilterType

    @abc.abstractmethod
    def run_filter(self, variant: "VariantRecord") -> FilterResult:
        raise NotImplementedError

    def check(self, notepad: Notepad) -> None:
        """Add an error to the notepad for every missing requirement."""

    def _result(self, passed: bool) -> FilterResult:
        return FilterResult.of(self.filter_type, passed)


class GeneFilter(metaclass=abc.ABCMeta):
    filter_type: FilterType

    @abc.abstractmethod
    def run_filter(self, gene: "Gene") -> FilterResult:
        raise NotImplementedError

    def check(self, notepad: Notepad) -> None:
        """Add an error to the notepad for every missing requirement."""

    def _result(self, passed: bool) -> FilterResult:
        return FilterResult.of(self.filter_type, passed)


def _normalise_sources(sources: typing.Iterable[str]) -> frozenset[str]:
    return frozenset(str(source).strip().upper() for source in sources if str(source).strip())


# ----------------------
# Variant filter steps
# ----------------------


class QualityFilter(VariantFilter):
    """Pass variants with a call quality >= min_quality."""

    filter_type = FilterType.QUALITY_FILTER

    def __init__(self, min_quality: float):
        self.min_quality = min_quality

    def check(self, notepad: Notepad) -> None:
        if self.min_quality < 0:
            notepad.add_error(f"QualityFilter: min_quality must be >= 0, got {self.min_quality!r}")

    def run_filter(self, variant: "VariantRecord") -> FilterResult:
        if variant.quality is None:
            return self._result(False)
        return self._result(variant.quality >= self.min_quality)


class RegionFilter(VariantFilter):
    """Pass variants whose start lies inside at least one indexed region (e.g. a TAD)."""

    filter_type = FilterType.REGION_FILTER

    def __init__(self, region_index: "RegionIndex | None"):
        self.region_index = region_index

    def check(self, notepad: Notepad) -> None:
        if self.region_index is None:
            notepad.add_error("RegionFilter: no region index was supplied")

    def run_filter(self, variant: "VariantRecord") -> FilterResult:
        return self._result(self.region_index.has_region_containing_variant(variant))


class KnownVariantFilter(VariantFilter):
    """
    Remove variants already represented in a variation database:
    any known identifier (e.g. an rsID) or any frequency from the given sources.
    """

    filter_type = FilterType.KNOWN_VARIANT_FILTER

    def __init__(self, sources: typing.Iterable[str]):
        self.sources = _normalise_sources(sources)

    def check(self, notepad: Notepad) -> None:
        if not self.sources:
            notepad.add_error("KnownVariantFilter: no frequency sources were defined")

    def run_filter(self, variant: "VariantRecord") -> FilterResult:
        if variant.frequencies is None:
            return self._result(False)
        if variant.known_ids:
            return self._result(False)
        observed = any(source in self.sources for source in variant.frequencies)
        return self._result(not observed)


class FrequencyFilter(VariantFilter):
    """
    Pass variants whose maximum allele frequency (percent) over the given
    sources is <= max_frequency. A variant with frequency data, but none from
    these sources, is unobserved and passes.
    """

    filter_type = FilterType.FREQUENCY_FILTER

    def __init__(self, max_frequency: float, sources: typing.Iterable[str]):
        self.max_frequency = max_frequency
        self.sources = _normalise_sources(sources)

    def check(self, notepad: Notepad) -> None:
        if not self.sources:
            notepad.add_error("FrequencyFilter: no frequency sources were defined")
        if not 0 <= self.max_frequency <= 100:
            notepad.add_error(
                f"FrequencyFilter: max_frequency must be a percentage in [0, 100], got {self.max_frequency!r}"
            )

    def run_filter(self, variant: "VariantRecord") -> FilterResult:
        if variant.frequencies is None:
            return self._result(False)
        observed = [freq for source, freq in variant.frequencies.items() if source in self.sources]
        if not observed:
            return self._result(True)
        return self._result(max(observed) <= self.max_frequency)


# Clinical significance terms which rescue a variant from the score threshold
PATHOGENIC_CLINICAL_SIGNIFICANCE = {"PATHOGENIC", "LIKELY_PATHOGENIC", "PATHOGENIC_OR_LIKELY_PATHOGENIC"}


class PathogenicityFilter(VariantFilter):
    """
    Pass variants with a maximum predicted pathogenicity score >= min_score
    over the given sources. Variants asserted (likely) pathogenic by a
    clinical database pass regardless, unless that rescue is switched off.
    """

    filter_type = FilterType.PATHOGENICITY_FILTER

    def __init__(
        self,
        min_score: float,
        sources: typing.Iterable[str],
        keep_pathogenic_clinical_significance: bool = True,
    ):
        self.min_score = min_score
        self.sources = _normalise_sources(sources)
        self.keep_pathogenic_clinical_significance = keep_pathogenic_clinical_significance

    def check(self, notepad: Notepad) -> None:
        if not self.sources:
            notepad.add_error("PathogenicityFilter: no pathogenicity sources were defined")
        if not 0 <= self.min_score <= 1:
            notepad.add_error(f"PathogenicityFilter: min_score must be in [0, 1], got {self.min_score!r}")

    def run_filter(self, variant: "VariantRecord") -> FilterResult:
        if self.keep_pathogenic_clinical_significance and variant.clinical_significance:
            if variant.clinical_significance.strip().upper() in PATHOGENIC_CLINICAL_SIGNIFICANCE:
                return self._result(True)
        if variant.pathogenicity_scores is None:
            return self._result(False)
        scores = [score for source, score in variant.pathogenicity_scores.items() if source in self.sources]
        if not scores:
            return self._result(False)
        return self._result(max(scores) >= self.min_score)


# -------------------
# Gene filter steps
# -------------------


class GeneSymbolFilter(GeneFilter):
    """Pass only the genes named in `symbols`."""

    filter_type = FilterType.GENE_SYMBOL_FILTER

    def __init__(self, symbols: typing.Iterable[str]):
        self.symbols = frozenset(str(symbol).strip() for symbol in symbols)

    def check(self, notepad: Notepad) -> None:
        if not self.symbols:
            notepad.add_error("GeneSymbolFilter: no gene symbols were defined")

    def run_filter(self, gene: "Gene") -> FilterResult:
        return self._result(gene.symbol in self.symbols)


class PriorityScoreFilter(GeneFilter):
    """Pass genes whose phenotype-match score from `source` is >= min_score."""

    filter_type = FilterType.PRIORITY_SCORE_FILTER

    def __init__(self, source: str, min_score: float):
        self.source = str(source).strip().upper()
        self.min_score = min_score

    def check(self, notepad: Notepad) -> None:
        if not self.source:
            notepad.add_error("PriorityScoreFilter: no priority source was defined")
        if not 0 <= self.min_score <= 1:
            notepad.add_error(f"PriorityScoreFilter: min_score must be in [0, 1], got {self.min_score!r}")

    def run_filter(self, gene: "Gene") -> FilterResult:
        score = gene.priority_scores.get(self.source)
        if score is None:
            return self._result(False)
        return self._result(score >= self.min_score)


class InheritanceModeFilter(GeneFilter):
    """
    Pass genes with at least one passed variant compatible with any of `modes`.

    The result stays on the gene: it is never copied onto variants added later.
    """

    filter_type = FilterType.INHERITANCE_FILTER

    def __init__(self, modes: typing.Iterable["ModeOfInheritance"]):
        self.modes = tuple(modes)

    def check(self, notepad: Notepad) -> None:
        if not self.modes:
            notepad.add_error("InheritanceModeFilter: no modes of inheritance were defined")

    def run_filter(self, gene: "Gene") -> FilterResult:
        return self._result(any(gene.is_compatible_with(mode) for mode in self.modes))
