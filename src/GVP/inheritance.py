"""
Modes of inheritance.

A ModeOfInheritance is what an analysis is asked to score under. A
SubModeOfInheritance is the finer pattern a pedigree-aware annotator marks a
variant as compatible with, e.g. recessive via a homozygous ALT allele vs.
recessive via two heterozygous alleles (compound heterozygous). The sub-mode
decides how many alleles a recessive gene score needs.
"""

from __future__ import annotations

from enum import Enum


class ModeOfInheritance(Enum):
    ANY = "ANY"
    AUTOSOMAL_DOMINANT = "AD"
    AUTOSOMAL_RECESSIVE = "AR"
    X_DOMINANT = "XD"
    X_RECESSIVE = "XR"
    MITOCHONDRIAL = "MT"

    @property
    def is_recessive(self) -> bool:
        return self in (ModeOfInheritance.AUTOSOMAL_RECESSIVE, ModeOfInheritance.X_RECESSIVE)

    @property
    def is_dominant(self) -> bool:
        return self in (ModeOfInheritance.AUTOSOMAL_DOMINANT, ModeOfInheritance.X_DOMINANT)

    @property
    def is_x_linked(self) -> bool:
        return self in (ModeOfInheritance.X_DOMINANT, ModeOfInheritance.X_RECESSIVE)

    @classmethod
    def from_label(cls, label: str) -> "ModeOfInheritance":
        """
        Convert a short code or full name into the corresponding enum,
        e.g. 'AR', 'autosomal recessive', 'AUTOSOMAL_RECESSIVE'.
        """
        key = label.strip().upper().replace(" ", "_").replace("-", "_")
        for mode in cls:
            if key in (mode.name, mode.value):
                return mode
        raise ValueError(f"Unknown mode of inheritance: {label!r}")


# Every concrete mode, for callers asking to score under all of them
DEFAULT_MODES = (
    ModeOfInheritance.AUTOSOMAL_DOMINANT,
    ModeOfInheritance.AUTOSOMAL_RECESSIVE,
    ModeOfInheritance.X_DOMINANT,
    ModeOfInheritance.X_RECESSIVE,
    ModeOfInheritance.MITOCHONDRIAL,
)


class SubModeOfInheritance(Enum):
    ANY = ("any", ModeOfInheritance.ANY)
    AUTOSOMAL_DOMINANT = ("ad", ModeOfInheritance.AUTOSOMAL_DOMINANT)
    AUTOSOMAL_RECESSIVE_HOM_ALT = ("ar_hom", ModeOfInheritance.AUTOSOMAL_RECESSIVE)
    AUTOSOMAL_RECESSIVE_COMP_HET = ("ar_comphet", ModeOfInheritance.AUTOSOMAL_RECESSIVE)
    X_DOMINANT = ("xd", ModeOfInheritance.X_DOMINANT)
    X_RECESSIVE_HOM_ALT = ("xr_hom", ModeOfInheritance.X_RECESSIVE)
    X_RECESSIVE_COMP_HET = ("xr_comphet", ModeOfInheritance.X_RECESSIVE)
    MITOCHONDRIAL = ("mt", ModeOfInheritance.MITOCHONDRIAL)

    def __init__(self, code: str, mode: ModeOfInheritance):
        self.code = code
        self.mode = mode

    @property
    def is_comp_het(self) -> bool:
        return self in (
            SubModeOfInheritance.AUTOSOMAL_RECESSIVE_COMP_HET,
            SubModeOfInheritance.X_RECESSIVE_COMP_HET,
        )

    @property
    def is_hom_alt(self) -> bool:
        return self in (
            SubModeOfInheritance.AUTOSOMAL_RECESSIVE_HOM_ALT,
            SubModeOfInheritance.X_RECESSIVE_HOM_ALT,
        )

    @classmethod
    def from_code(cls, code: str) -> "SubModeOfInheritance":
        key = code.strip().lower()
        for sub_mode in cls:
            if sub_mode.code == key:
                return sub_mode
        raise ValueError(f"Unknown sub-mode of inheritance code: {code!r}")


def comp_het_sub_mode(mode: ModeOfInheritance) -> SubModeOfInheritance | None:
    return {
        ModeOfInheritance.AUTOSOMAL_RECESSIVE: SubModeOfInheritance.AUTOSOMAL_RECESSIVE_COMP_HET,
        ModeOfInheritance.X_RECESSIVE: SubModeOfInheritance.X_RECESSIVE_COMP_HET,
    }.get(mode)


def hom_alt_sub_mode(mode: ModeOfInheritance) -> SubModeOfInheritance | None:
    return {
        ModeOfInheritance.AUTOSOMAL_RECESSIVE: SubModeOfInheritance.AUTOSOMAL_RECESSIVE_HOM_ALT,
        ModeOfInheritance.X_RECESSIVE: SubModeOfInheritance.X_RECESSIVE_HOM_ALT,
    }.get(mode)
