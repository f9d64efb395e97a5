"""
ACMG/AMP clinical evidence.

Criteria from Richards et al. 2015 (https://doi.org/10.1038/gim.2015.30),
each with a fixed default evidence strength and polarity. An AcmgEvidence
maps criteria to their *effective* strength, which may be overridden (e.g.
PVS1 downgraded to Strong, PP3 upgraded to VeryStrong); category counts use
the effective strength, not the strength implied by the criterion code.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass
from enum import Enum


class AcmgEvidenceStrength(Enum):
    STAND_ALONE = "StandAlone"
    VERY_STRONG = "VeryStrong"
    STRONG = "Strong"
    MODERATE = "Moderate"
    SUPPORTING = "Supporting"

    @property
    def display_name(self) -> str:
        return self.value


_STRENGTHS_BY_NAME = {strength.display_name.lower(): strength for strength in AcmgEvidenceStrength}


class AcmgPolarity(Enum):
    PATHOGENIC = "pathogenic"
    BENIGN = "benign"


class AcmgCriterion(Enum):
    PVS1 = "PVS1"
    PS1 = "PS1"
    PS2 = "PS2"
    PS3 = "PS3"
    PS4 = "PS4"
    PM1 = "PM1"
    PM2 = "PM2"
    PM3 = "PM3"
    PM4 = "PM4"
    PM5 = "PM5"
    PM6 = "PM6"
    PP1 = "PP1"
    PP2 = "PP2"
    PP3 = "PP3"
    PP4 = "PP4"
    PP5 = "PP5"
    BA1 = "BA1"
    BS1 = "BS1"
    BS2 = "BS2"
    BS3 = "BS3"
    BS4 = "BS4"
    BP1 = "BP1"
    BP2 = "BP2"
    BP3 = "BP3"
    BP4 = "BP4"
    BP5 = "BP5"
    BP6 = "BP6"
    BP7 = "BP7"

    @property
    def default_strength(self) -> AcmgEvidenceStrength:
        return _CRITERIA[self].default_strength

    @property
    def polarity(self) -> AcmgPolarity:
        return _CRITERIA[self].polarity

    @property
    def description(self) -> str:
        return _CRITERIA[self].description

    def is_pathogenic(self) -> bool:
        return self.polarity is AcmgPolarity.PATHOGENIC

    def is_benign(self) -> bool:
        return self.polarity is AcmgPolarity.BENIGN


@dataclass(frozen=True)
class _CriterionInfo:
    default_strength: AcmgEvidenceStrength
    polarity: AcmgPolarity
    description: str


_P = AcmgPolarity.PATHOGENIC
_B = AcmgPolarity.BENIGN
_S = AcmgEvidenceStrength

_CRITERIA: dict[AcmgCriterion, _CriterionInfo] = {
    AcmgCriterion.PVS1: _CriterionInfo(_S.VERY_STRONG, _P, "Null variant in a gene where loss of function is a known mechanism of disease"),
    AcmgCriterion.PS1: _CriterionInfo(_S.STRONG, _P, "Same amino acid change as an established pathogenic variant"),
    AcmgCriterion.PS2: _CriterionInfo(_S.STRONG, _P, "De novo (maternity and paternity confirmed) in a patient with the disease"),
    AcmgCriterion.PS3: _CriterionInfo(_S.STRONG, _P, "Well-established functional studies show a damaging effect"),
    AcmgCriterion.PS4: _CriterionInfo(_S.STRONG, _P, "Prevalence in affected individuals significantly increased over controls"),
    AcmgCriterion.PM1: _CriterionInfo(_S.MODERATE, _P, "Located in a mutational hot spot or critical functional domain"),
    AcmgCriterion.PM2: _CriterionInfo(_S.MODERATE, _P, "Absent from controls or at extremely low frequency"),
    AcmgCriterion.PM3: _CriterionInfo(_S.MODERATE, _P, "For recessive disorders, detected in trans with a pathogenic variant"),
    AcmgCriterion.PM4: _CriterionInfo(_S.MODERATE, _P, "Protein length change from in-frame indels or stop-loss"),
    AcmgCriterion.PM5: _CriterionInfo(_S.MODERATE, _P, "Novel missense change at a residue where another pathogenic missense change is known"),
    AcmgCriterion.PM6: _CriterionInfo(_S.MODERATE, _P, "Assumed de novo, without confirmation of paternity and maternity"),
    AcmgCriterion.PP1: _CriterionInfo(_S.SUPPORTING, _P, "Cosegregation with disease in multiple affected family members"),
    AcmgCriterion.PP2: _CriterionInfo(_S.SUPPORTING, _P, "Missense variant in a gene with a low rate of benign missense variation"),
    AcmgCriterion.PP3: _CriterionInfo(_S.SUPPORTING, _P, "Multiple lines of computational evidence support a deleterious effect"),
    AcmgCriterion.PP4: _CriterionInfo(_S.SUPPORTING, _P, "Patient phenotype or family history highly specific for the disease"),
    AcmgCriterion.PP5: _CriterionInfo(_S.SUPPORTING, _P, "Reputable source reports the variant as pathogenic"),
    AcmgCriterion.BA1: _CriterionInfo(_S.STAND_ALONE, _B, "Allele frequency above 5% in population databases"),
    AcmgCriterion.BS1: _CriterionInfo(_S.STRONG, _B, "Allele frequency greater than expected for the disorder"),
    AcmgCriterion.BS2: _CriterionInfo(_S.STRONG, _B, "Observed in a healthy adult for a fully penetrant early-onset disorder"),
    AcmgCriterion.BS3: _CriterionInfo(_S.STRONG, _B, "Well-established functional studies show no damaging effect"),
    AcmgCriterion.BS4: _CriterionInfo(_S.STRONG, _B, "Lack of segregation in affected members of a family"),
    AcmgCriterion.BP1: _CriterionInfo(_S.SUPPORTING, _B, "Missense variant in a gene where primarily truncating variants cause disease"),
    AcmgCriterion.BP2: _CriterionInfo(_S.SUPPORTING, _B, "Observed in trans with a pathogenic variant for a fully penetrant dominant disorder, or in cis"),
    AcmgCriterion.BP3: _CriterionInfo(_S.SUPPORTING, _B, "In-frame indel in a repetitive region without known function"),
    AcmgCriterion.BP4: _CriterionInfo(_S.SUPPORTING, _B, "Multiple lines of computational evidence suggest no impact"),
    AcmgCriterion.BP5: _CriterionInfo(_S.SUPPORTING, _B, "Found in a case with an alternate molecular basis for disease"),
    AcmgCriterion.BP6: _CriterionInfo(_S.SUPPORTING, _B, "Reputable source reports the variant as benign"),
    AcmgCriterion.BP7: _CriterionInfo(_S.SUPPORTING, _B, "Synonymous variant with no predicted splicing impact"),
}


class AcmgEvidence:
    """
    Immutable, insertion-ordered mapping of AcmgCriterion -> effective strength.
    Build with AcmgEvidence.builder() or AcmgEvidence.of(mapping).
    """

    def __init__(self, evidence: typing.Mapping[AcmgCriterion, AcmgEvidenceStrength]):
        self._evidence: dict[AcmgCriterion, AcmgEvidenceStrength] = dict(evidence)

    @classmethod
    def builder(cls) -> "AcmgEvidenceBuilder":
        return AcmgEvidenceBuilder()

    @classmethod
    def of(cls, evidence: typing.Mapping[AcmgCriterion, AcmgEvidenceStrength]) -> "AcmgEvidence":
        return cls(evidence)

    @classmethod
    def empty(cls) -> "AcmgEvidence":
        return cls({})

    @classmethod
    def parse(cls, text: str) -> "AcmgEvidence":
        """
        Read evidence written the way str() renders it, with or without the
        brackets and with ',' or ';' separators: "PVS1, PS1_Moderate", "[PM2;PP3_Strong]".
        """
        builder = cls.builder()
        body = text.strip().removeprefix("[").removesuffix("]")
        for token in body.replace(";", ",").split(","):
            token = token.strip()
            if not token:
                continue
            code, _, strength_name = token.partition("_")
            try:
                criterion = AcmgCriterion(code.upper())
            except ValueError:
                raise ValueError(f"Unknown ACMG criterion: {code!r}") from None
            strength = None
            if strength_name:
                strength = _STRENGTHS_BY_NAME.get(strength_name.replace("_", "").lower())
                if strength is None:
                    raise ValueError(f"Unknown ACMG evidence strength: {strength_name!r}")
            builder.add(criterion, strength)
        return builder.build()

    # ---- read contract --------------------------------------------------------

    def criterion_evidence(self, criterion: AcmgCriterion) -> typing.Optional[AcmgEvidenceStrength]:
        """The effective strength of `criterion`, None if it was never added."""
        return self._evidence.get(criterion)

    def has_criterion(self, criterion: AcmgCriterion) -> bool:
        return criterion in self._evidence

    def is_empty(self) -> bool:
        return not self._evidence

    def criteria(self) -> list[AcmgCriterion]:
        return list(self._evidence)

    def items(self) -> list[tuple[AcmgCriterion, AcmgEvidenceStrength]]:
        return list(self._evidence.items())

    def __contains__(self, criterion: object) -> bool:
        return criterion in self._evidence

    def __len__(self) -> int:
        return len(self._evidence)

    def __iter__(self) -> typing.Iterator[AcmgCriterion]:
        return iter(self._evidence)

    # ---- category counts by effective strength ------------------------------

    def _count(self, polarity: AcmgPolarity, strength: AcmgEvidenceStrength) -> int:
        return sum(
            1
            for criterion, effective in self._evidence.items()
            if criterion.polarity is polarity and effective is strength
        )

    @property
    def very_strong_pathogenic_count(self) -> int:
        return self._count(AcmgPolarity.PATHOGENIC, AcmgEvidenceStrength.VERY_STRONG)

    @property
    def strong_pathogenic_count(self) -> int:
        return self._count(AcmgPolarity.PATHOGENIC, AcmgEvidenceStrength.STRONG)

    @property
    def moderate_pathogenic_count(self) -> int:
        return self._count(AcmgPolarity.PATHOGENIC, AcmgEvidenceStrength.MODERATE)

    @property
    def supporting_pathogenic_count(self) -> int:
        return self._count(AcmgPolarity.PATHOGENIC, AcmgEvidenceStrength.SUPPORTING)

    @property
    def standalone_benign_count(self) -> int:
        return self._count(AcmgPolarity.BENIGN, AcmgEvidenceStrength.STAND_ALONE)

    @property
    def strong_benign_count(self) -> int:
        return self._count(AcmgPolarity.BENIGN, AcmgEvidenceStrength.STRONG)

    @property
    def supporting_benign_count(self) -> int:
        return self._count(AcmgPolarity.BENIGN, AcmgEvidenceStrength.SUPPORTING)

    # ---- rendering -------------------------------------------------------------

    def __str__(self) -> str:
        rendered = []
        for criterion, strength in self._evidence.items():
            if strength is criterion.default_strength:
                rendered.append(criterion.value)
            else:
                rendered.append(f"{criterion.value}_{strength.display_name}")
        return "[" + ", ".join(rendered) + "]"

    def __repr__(self) -> str:
        return f"AcmgEvidence{self}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AcmgEvidence):
            return NotImplemented
        # insertion order is part of the value: it fixes the rendering
        return list(self._evidence.items()) == list(other._evidence.items())

    def __hash__(self) -> int:
        return hash(tuple(self._evidence.items()))


class AcmgEvidenceBuilder:
    """
    Accumulates criteria. Re-adding a criterion replaces its strength (last
    write wins) but keeps the position of its first insertion.
    """

    def __init__(self):
        self._evidence: dict[AcmgCriterion, AcmgEvidenceStrength] = {}

    def add(
        self, criterion: AcmgCriterion, strength: typing.Optional[AcmgEvidenceStrength] = None
    ) -> "AcmgEvidenceBuilder":
        self._evidence[criterion] = criterion.default_strength if strength is None else strength
        return self

    def contains(self, criterion: AcmgCriterion) -> bool:
        return criterion in self._evidence

    def build(self) -> AcmgEvidence:
        return AcmgEvidence(self._evidence)
