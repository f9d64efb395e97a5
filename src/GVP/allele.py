"""
Allele coordinate minimisation.

Computes the minimal representation of a single-allele variant as described by
Tan et al. 2015 (https://dx.doi.org/10.1093/bioinformatics/btv112):

- right-trim common trailing bases, then left-trim common leading bases,
- keep at least one anchor base on each allele (VCF-style indels),
- never left-align against a reference sequence (there is none here).

Coordinates follow the VCF convention: 1-based, inclusive.

A variant is considered minimised if:
1) it has no common nucleotides on the left or right side
2) each allele does not end with the same nucleotide, or the shortest allele has length 1
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AllelePosition:
    """
    Minimised (or exact) single allele coordinates.

    Attributes:
        start: 1-based start position of the first base of `ref`.
        ref: Reference base(s).
        alt: Alternate base(s), or a symbolic/breakend allele.
    """

    start: int
    ref: str
    alt: str

    def __post_init__(self) -> None:
        _require_alleles(self.ref, self.alt)

    @classmethod
    def of(cls, start: int, ref: str, alt: str) -> "AllelePosition":
        """Return an exact representation of the input coordinates."""
        return cls(start, ref, alt)

    @classmethod
    def trim(cls, start: int, ref: str, alt: str) -> "AllelePosition":
        """
        Return the minimised representation of the input coordinates.

        Different tools place the same repeat-context insertion differently:
            VCF:      X-118887583-TCAAAA-TCAAAACAAAA
            trimmed:  X-118887583-T     -TCAAAA
        Trimming keeps downstream annotation on the same anchor position.
        """
        _require_alleles(ref, alt)

        if _cant_trim(ref, alt):
            return cls(start, ref, alt)

        trim_start = start
        trim_ref = ref
        trim_alt = alt

        if _can_right_trim(trim_ref, trim_alt):
            right_idx = len(trim_ref)
            diff = len(trim_ref) - len(trim_alt)
            # right_idx > 1 so as not to fall off the left end
            while (
                right_idx > 1
                and right_idx - diff > 0
                and trim_ref[right_idx - 1] == trim_alt[right_idx - 1 - diff]
            ):
                right_idx -= 1
            trim_ref = trim_ref[:right_idx]
            trim_alt = trim_alt[: right_idx - diff]

        if _can_left_trim(trim_ref, trim_alt):
            left_idx = 0
            while (
                left_idx < len(trim_ref)
                and left_idx < len(trim_alt)
                and trim_ref[left_idx] == trim_alt[left_idx]
            ):
                left_idx += 1
            # back off one so as not to fall off the right end
            if (left_idx > 0 and left_idx == len(trim_ref)) or left_idx == len(trim_alt):
                left_idx -= 1
            trim_start += left_idx
            trim_ref = trim_ref[left_idx:]
            trim_alt = trim_alt[left_idx:]

        return cls(trim_start, trim_ref, trim_alt)

    @property
    def end(self) -> int:
        """
        1-based closed end position. VCF 4.3 defines END as POS + len(REF) - 1
        for precise variants.
        """
        return self.start + max(len(self.ref) - 1, 0)

    @property
    def length(self) -> int:
        return allele_length(self.ref, self.alt)

    def is_symbolic(self) -> bool:
        return is_symbolic(self.ref, self.alt)

    def is_breakend(self) -> bool:
        return is_breakend(self.alt)


def normalise(start: int, ref: str, alt: str) -> Tuple[int, str, str]:
    """
    Minimise a (start, ref, alt) triple.

    Examples:
        normalise(118887583, "TCAAAA", "TCAAAACAAAA") -> (118887583, "T", "TCAAAA")
        normalise(100, "A", "T") -> (100, "A", "T")
    """
    trimmed = AllelePosition.trim(start, ref, alt)
    return trimmed.start, trimmed.ref, trimmed.alt


# -----------------
# Trimming helpers
# -----------------


def _require_alleles(ref: str, alt: str) -> None:
    if ref is None:
        raise ValueError("REF string cannot be None")
    if alt is None:
        raise ValueError("ALT string cannot be None")


def _cant_trim(ref: str, alt: str) -> bool:
    return len(ref) == 1 or len(alt) == 1


def _can_right_trim(ref: str, alt: str) -> bool:
    return len(ref) > 1 and len(alt) > 1 and ref[-1] == alt[-1]


def _can_left_trim(ref: str, alt: str) -> bool:
    return len(ref) > 1 and len(alt) > 1 and ref[0] == alt[0]


# ---------------------------
# Allele shape classification
# ---------------------------


def is_snv(ref: str, alt: str) -> bool:
    return len(ref) == 1 and len(alt) == 1


def is_deletion(ref: str, alt: str) -> bool:
    return len(ref) > len(alt)


def is_insertion(ref: str, alt: str) -> bool:
    return len(ref) < len(alt)


def is_symbolic(ref: str, alt: str | None = None) -> bool:
    """
    True if either allele is symbolic. With a single argument, test that allele only.

    VCF only defines symbolic ALT alleles, so ALT is checked first.
    """
    if alt is None:
        return _is_symbolic_allele(ref)
    return _is_symbolic_allele(alt) or _is_symbolic_allele(ref)


def _is_symbolic_allele(allele: str) -> bool:
    if not allele:
        return False
    return is_large_symbolic(allele) or is_single_breakend(allele) or is_mated_breakend(allele)


def is_large_symbolic(allele: str) -> bool:
    """e.g. <DEL>, <INS:ME:L1>, <DUP:TANDEM>"""
    if not allele:
        return False
    return (len(allele) > 1 and allele[0] == "<") or allele[-1] == ">"


def is_single_breakend(allele: str) -> bool:
    """e.g. .A or G."""
    if not allele:
        return False
    return (len(allele) > 1 and allele[0] == ".") or allele[-1] == "."


def is_mated_breakend(allele: str) -> bool:
    """e.g. G]17:198982] or [13:123456[T"""
    return len(allele) > 1 and ("[" in allele or "]" in allele)


def is_breakend(allele: str) -> bool:
    return is_single_breakend(allele) or is_mated_breakend(allele)


def allele_length(ref: str, alt: str) -> int:
    """
    Length of the variant.

    - symbolic alleles: len(ref) (VCF LEN for precise variants)
    - substitutions (SNV/MNV): len(ref)
    - indels: len(alt) - len(ref) (VCF SVLEN; negative for deletions)
    """
    if is_symbolic(ref, alt):
        return len(ref)
    if len(alt) == len(ref):
        return len(ref)
    return len(alt) - len(ref)
