"""
Chromosomal region lookup.

Answers "which labelled intervals overlap this point / variant" per chromosome.
Regions (e.g. topologically associating domains or regulatory annotations) are
bucketed by chromosome in their input order and scanned linearly: there are at
most a few thousand per chromosome, so an interval tree is not worth it.
"""

from __future__ import annotations

import typing
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType

from .variant import parse_contig

if typing.TYPE_CHECKING:
    from .variant import VariantRecord


@dataclass(frozen=True)
class Region:
    """
    A labelled genomic interval.

    Attributes:
        chromosome: Chromosome number (1-22, X=23, Y=24, MT=25).
        start: 1-based inclusive start coordinate.
        end: 1-based inclusive end coordinate.
        label: Optional name of the region.
        payload: Opaque annotation carried by the region (read-only).
    """

    chromosome: int
    start: int
    end: int
    label: str = ""
    payload: typing.Mapping[str, typing.Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "chromosome", parse_contig(self.chromosome))
        if self.start < 1 or self.end < self.start:
            raise ValueError(f"Invalid region bounds: start={self.start!r}, end={self.end!r}")
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def contains_position(self, position: int) -> bool:
        return self.start <= position <= self.end


class RegionIndex:
    """
    Read-only per-chromosome index of regions. Safe to share between sample
    evaluations once built.
    """

    def __init__(self, regions: typing.Iterable[Region]):
        buckets: dict[int, list[Region]] = defaultdict(list)
        for region in regions:
            buckets[region.chromosome].append(region)
        self._index: dict[int, tuple[Region, ...]] = {chrom: tuple(bucket) for chrom, bucket in buckets.items()}

    def regions_overlapping_position(self, chromosome: int, position: int) -> list[Region]:
        """All regions on `chromosome` with start <= position <= end, in input order."""
        return [region for region in self._index.get(chromosome, ()) if region.contains_position(position)]

    def regions_containing_variant(self, variant: "VariantRecord") -> list[Region]:
        return self.regions_overlapping_position(variant.chromosome, variant.start)

    def has_region_containing_variant(self, variant: "VariantRecord") -> bool:
        return bool(self.regions_containing_variant(variant))

    def chromosomes(self) -> list[int]:
        return sorted(self._index)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._index.values())
