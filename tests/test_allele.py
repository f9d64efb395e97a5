import pytest

from GVP.allele import (
    AllelePosition,
    allele_length,
    is_breakend,
    is_deletion,
    is_insertion,
    is_large_symbolic,
    is_mated_breakend,
    is_single_breakend,
    is_snv,
    is_symbolic,
    normalise,
)


def test_trims_repeat_context_insertion_to_anchor_base():
    assert normalise(118887583, "TCAAAA", "TCAAAACAAAA") == (118887583, "T", "TCAAAA")


@pytest.mark.parametrize(
    "start, ref, alt, expected",
    [
        # deletion sharing a trailing base
        (100, "AGTC", "AC", (100, "AGT", "A")),
        # MNV sharing both ends collapses to an SNV
        (100, "ACGT", "ACTT", (102, "G", "T")),
        # insertion sharing a leading base keeps one anchor
        (100, "AT", "ATG", (101, "T", "TG")),
        # nothing in common
        (100, "AC", "GT", (100, "AC", "GT")),
    ],
)
def test_trim(start, ref, alt, expected):
    assert normalise(start, ref, alt) == expected


@pytest.mark.parametrize(
    "ref, alt",
    [("A", "T"), ("A", "A"), ("G", "<DEL>"), ("N", "."), ("C", "G]17:198982]")],
)
def test_single_base_alleles_are_returned_unchanged(ref, alt):
    assert normalise(12345, ref, alt) == (12345, ref, alt)


@pytest.mark.parametrize(
    "start, ref, alt",
    [
        (118887583, "TCAAAA", "TCAAAACAAAA"),
        (100, "AGTC", "AC"),
        (100, "ACGT", "ACTT"),
        (100, "AT", "ATG"),
        (5, "GGGGAC", "GGAC"),
        (1, "", ""),
        (1, "", "A"),
    ],
)
def test_normalise_is_idempotent(start, ref, alt):
    once = normalise(start, ref, alt)
    assert normalise(*once) == once


def test_empty_alleles_are_not_rejected():
    assert normalise(7, "", "") == (7, "", "")


@pytest.mark.parametrize("ref, alt", [(None, "A"), ("A", None)])
def test_none_alleles_are_rejected(ref, alt):
    with pytest.raises(ValueError):
        normalise(1, ref, alt)
    with pytest.raises(ValueError):
        AllelePosition.of(1, ref, alt)


def test_exact_position_is_not_trimmed():
    position = AllelePosition.of(100, "AGTC", "AC")
    assert (position.start, position.ref, position.alt) == (100, "AGTC", "AC")
    assert position.end == 103
    assert position.length == -2


def test_deletion_length_follows_svlen():
    assert allele_length("CGTGGATGCGGGGAC", "C") == -14


@pytest.mark.parametrize(
    "ref, alt, expected",
    [
        ("A", "T", 1),
        ("AC", "GT", 2),
        ("A", "ATTT", 3),
        ("A", "<DEL>", 1),
    ],
)
def test_allele_length(ref, alt, expected):
    assert allele_length(ref, alt) == expected


def test_shape_predicates():
    assert is_snv("A", "T")
    assert not is_snv("AC", "T")
    assert is_insertion("A", "AT")
    assert is_deletion("AT", "A")
    assert not is_insertion("A", "T")
    assert not is_deletion("A", "T")


@pytest.mark.parametrize("allele", ["<DEL>", "<INS:ME:L1>", "<DUP:TANDEM>"])
def test_large_symbolic(allele):
    assert is_large_symbolic(allele)
    assert is_symbolic(allele)
    assert not is_breakend(allele)


@pytest.mark.parametrize("allele", [".A", "G."])
def test_single_breakend(allele):
    assert is_single_breakend(allele)
    assert is_breakend(allele)
    assert is_symbolic(allele)


@pytest.mark.parametrize("allele", ["G]17:198982]", "[13:123456[T", "]13:123456]T"])
def test_mated_breakend(allele):
    assert is_mated_breakend(allele)
    assert is_breakend(allele)


@pytest.mark.parametrize("allele", ["A", "ACGT", "<", "[", ""])
def test_plain_alleles_are_not_symbolic(allele):
    assert not is_symbolic(allele)


def test_pair_is_symbolic_when_either_allele_is():
    assert is_symbolic("A", "<DEL>")
    assert is_symbolic("<DEL>", "A")
    assert not is_symbolic("A", "T")


def test_symbolic_position():
    position = AllelePosition.trim(100, "A", "<DEL>")
    assert position.is_symbolic()
    assert not position.is_breakend()
    assert position.length == 1
