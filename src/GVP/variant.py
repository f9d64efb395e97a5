"""
Variant domain model.

Defines the VariantRecord class: one called allele for one sample, with its
externally supplied annotations and the bookkeeping accumulated while the
analysis runs.

High-level role in GVP:
- Mapper parses workbook rows -> builds (normalised) VariantRecord objects.
- Filter steps read annotations; the runner records FilterResults.
- GeneScorer reads `score` and `compatible_sub_modes`, and marks contribution.

A VariantRecord does not know its gene: the Gene owns its variants.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional

from .acmg import AcmgEvidence
from .allele import (
    AllelePosition,
    allele_length,
    is_breakend,
    is_deletion,
    is_insertion,
    is_snv,
    is_symbolic,
)
from .filters import FilterResult, FilterStatus, FilterType
from .inheritance import ModeOfInheritance, SubModeOfInheritance


# ----------------------------------
# Contig names -> chromosome numbers
# ----------------------------------

X_CHROMOSOME = 23
Y_CHROMOSOME = 24
MT_CHROMOSOME = 25

_CONTIG_PATTERN = re.compile(r"^\s*(?:chr)?(?P<name>[0-9]{1,2}|X|Y|M|MT)\s*$", re.IGNORECASE)
_NAMED_CONTIGS = {"X": X_CHROMOSOME, "Y": Y_CHROMOSOME, "M": MT_CHROMOSOME, "MT": MT_CHROMOSOME}


def parse_contig(contig: str | int) -> int:
    """
    Convert a contig name into a chromosome number.

    Examples:
        "chr7" -> 7, "X" -> 23, "chrY" -> 24, "MT" -> 25, 12 -> 12
    """
    if isinstance(contig, int) and not isinstance(contig, bool):
        number = contig
    else:
        m = _CONTIG_PATTERN.match(str(contig))
        if not m:
            raise ValueError(f"Unrecognized contig: {contig!r}")
        name = m.group("name").upper()
        number = _NAMED_CONTIGS[name] if name in _NAMED_CONTIGS else int(name)
    if not 1 <= number <= MT_CHROMOSOME:
        raise ValueError(f"Chromosome number out of range: {contig!r}")
    return number


class AlleleShape(Enum):
    SNV = auto()
    MNV = auto()
    INSERTION = auto()
    DELETION = auto()
    SYMBOLIC = auto()
    BREAKEND = auto()


# ----------------------
# Core domain data class
# ----------------------


@dataclass(eq=False)
class VariantRecord:
    """
    Represents a single called allele.

    Attributes:
        chromosome: Chromosome number (1-22, X=23, Y=24, MT=25).
        start: 1-based inclusive start coordinate.
        ref: Reference allele sequence.
        alt: Alternate allele sequence (or symbolic / breakend notation).
        score: Deleteriousness score in [0, 1], supplied externally.
        quality: Call quality, None if not supplied.
        frequencies: Allele frequency (percent) keyed by source, None if not supplied.
        pathogenicity_scores: Predicted pathogenicity in [0, 1] keyed by source, None if not supplied.
        clinical_significance: Clinical database assertion (e.g. "PATHOGENIC"), None if not supplied.
        known_ids: Database identifiers (e.g. rsIDs) of the variant.
        compatible_sub_modes: Inheritance sub-modes the variant is compatible with.
        acmg_evidence: ACMG criteria triggered for the variant by an upstream classifier.
    """

    chromosome: int
    start: int
    ref: str
    alt: str
    score: float = 0.0
    quality: Optional[float] = None
    frequencies: Optional[dict[str, float]] = None
    pathogenicity_scores: Optional[dict[str, float]] = None
    clinical_significance: Optional[str] = None
    known_ids: tuple[str, ...] = ()
    compatible_sub_modes: set[SubModeOfInheritance] = field(default_factory=set)
    acmg_evidence: AcmgEvidence = field(default_factory=AcmgEvidence.empty)
    filter_status: FilterStatus = field(default_factory=FilterStatus, repr=False)
    contributing_modes: set[ModeOfInheritance] = field(default_factory=set, repr=False)

    def __post_init__(self) -> None:
        if self.ref is None or self.alt is None:
            raise ValueError("REF and ALT strings cannot be None")
        if not isinstance(self.start, int) or self.start < 1:
            raise ValueError(f"start must be a positive (1-based) integer, got {self.start!r}")
        self.chromosome = parse_contig(self.chromosome)
        if not 0 <= self.score <= 1:
            raise ValueError(f"score must be in [0, 1], got {self.score!r}")
        if self.frequencies is not None:
            self.frequencies = {str(k).strip().upper(): float(v) for k, v in self.frequencies.items()}
        if self.pathogenicity_scores is not None:
            self.pathogenicity_scores = {
                str(k).strip().upper(): float(v) for k, v in self.pathogenicity_scores.items()
            }
        self.known_ids = tuple(self.known_ids)
        self.compatible_sub_modes = set(self.compatible_sub_modes)

    @classmethod
    def normalised(cls, chromosome: int | str, start: int, ref: str, alt: str, **kwargs) -> "VariantRecord":
        """Build a record from the minimised form of the (start, ref, alt) triple."""
        trimmed = AllelePosition.trim(start, ref, alt)
        return cls(chromosome, trimmed.start, trimmed.ref, trimmed.alt, **kwargs)

    # ----------------------
    # Derived coordinates
    # ----------------------

    @property
    def end(self) -> int:
        return self.start + max(len(self.ref) - 1, 0)

    @property
    def length(self) -> int:
        return allele_length(self.ref, self.alt)

    @property
    def shape(self) -> AlleleShape:
        if is_breakend(self.alt):
            return AlleleShape.BREAKEND
        if is_symbolic(self.ref, self.alt):
            return AlleleShape.SYMBOLIC
        if is_snv(self.ref, self.alt):
            return AlleleShape.SNV
        if is_insertion(self.ref, self.alt):
            return AlleleShape.INSERTION
        if is_deletion(self.ref, self.alt):
            return AlleleShape.DELETION
        return AlleleShape.MNV

    def is_symbolic(self) -> bool:
        return is_symbolic(self.ref, self.alt)

    # ----------------------
    # Filter bookkeeping
    # ----------------------

    def add_filter_result(self, result: FilterResult) -> None:
        self.filter_status.add(result)

    def passed_filter(self, filter_type: FilterType) -> bool:
        """False for any filter type never evaluated on this variant."""
        return self.filter_status.passed(filter_type)

    def passed_filters(self) -> bool:
        return self.filter_status.passed_all()

    @property
    def failed_filter_types(self) -> set[FilterType]:
        return set(self.filter_status.failed_types)

    @property
    def passed_filter_types(self) -> set[FilterType]:
        return set(self.filter_status.passed_types)

    # ----------------------
    # Inheritance
    # ----------------------

    def set_compatible_sub_modes(self, sub_modes: Iterable[SubModeOfInheritance]) -> None:
        self.compatible_sub_modes = set(sub_modes)

    def is_compatible_with(self, mode: ModeOfInheritance) -> bool:
        """Every variant is compatible with ANY."""
        if mode is ModeOfInheritance.ANY:
            return True
        return any(sub_mode.mode is mode for sub_mode in self.compatible_sub_modes)

    def is_compatible_with_sub_mode(self, sub_mode: SubModeOfInheritance) -> bool:
        if sub_mode is SubModeOfInheritance.ANY:
            return True
        return sub_mode in self.compatible_sub_modes

    # ----------------------
    # Gene score contribution
    # ----------------------

    def set_contributes_to_gene_score_under_mode(self, mode: ModeOfInheritance) -> None:
        self.contributing_modes.add(mode)

    def contributes_to_gene_score_under_mode(self, mode: ModeOfInheritance) -> bool:
        return mode in self.contributing_modes

    def contributes_to_gene_score(self) -> bool:
        return bool(self.contributing_modes)

    def __str__(self) -> str:
        return f"{self.chromosome}-{self.start}-{self.ref}-{self.alt}"
