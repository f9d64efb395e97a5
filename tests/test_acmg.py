import pytest

from GVP.acmg import AcmgCriterion, AcmgEvidence, AcmgEvidenceStrength, AcmgPolarity


def test_default_strength_renders_bare_code():
    assert str(AcmgEvidence.builder().add(AcmgCriterion.PVS1).build()) == "[PVS1]"


def test_override_renders_strength_name():
    evidence = AcmgEvidence.builder().add(AcmgCriterion.PVS1, AcmgEvidenceStrength.STRONG).build()
    assert str(evidence) == "[PVS1_Strong]"


def test_re_adding_with_default_strength_resets_the_override():
    evidence = (
        AcmgEvidence.builder()
        .add(AcmgCriterion.PVS1, AcmgEvidenceStrength.STRONG)
        .add(AcmgCriterion.PM2)
        .add(AcmgCriterion.PVS1)
        .build()
    )
    assert evidence.criterion_evidence(AcmgCriterion.PVS1) is AcmgEvidenceStrength.VERY_STRONG
    # first insertion fixes the position
    assert str(evidence) == "[PVS1, PM2]"


def test_last_write_wins():
    evidence = (
        AcmgEvidence.builder()
        .add(AcmgCriterion.PP3)
        .add(AcmgCriterion.PP3, AcmgEvidenceStrength.MODERATE)
        .add(AcmgCriterion.PP3, AcmgEvidenceStrength.STRONG)
        .build()
    )
    assert len(evidence) == 1
    assert evidence.criterion_evidence(AcmgCriterion.PP3) is AcmgEvidenceStrength.STRONG


def test_upgraded_criterion_counts_at_its_effective_strength():
    evidence = AcmgEvidence.builder().add(AcmgCriterion.PM1, AcmgEvidenceStrength.VERY_STRONG).build()
    assert evidence.very_strong_pathogenic_count == 1
    assert evidence.moderate_pathogenic_count == 0


def test_category_counts():
    evidence = (
        AcmgEvidence.builder()
        .add(AcmgCriterion.PVS1)
        .add(AcmgCriterion.PS1)
        .add(AcmgCriterion.PS3, AcmgEvidenceStrength.MODERATE)
        .add(AcmgCriterion.PM2, AcmgEvidenceStrength.SUPPORTING)
        .add(AcmgCriterion.PP3)
        .add(AcmgCriterion.BA1)
        .add(AcmgCriterion.BS1)
        .add(AcmgCriterion.BP4)
        .add(AcmgCriterion.BP7, AcmgEvidenceStrength.STRONG)
        .build()
    )
    assert evidence.very_strong_pathogenic_count == 1
    assert evidence.strong_pathogenic_count == 1
    assert evidence.moderate_pathogenic_count == 1
    assert evidence.supporting_pathogenic_count == 2
    assert evidence.standalone_benign_count == 1
    assert evidence.strong_benign_count == 2
    assert evidence.supporting_benign_count == 1
    assert str(evidence) == "[PVS1, PS1, PS3_Moderate, PM2_Supporting, PP3, BA1, BS1, BP4, BP7_Strong]"


def test_absent_criterion_has_no_strength():
    evidence = AcmgEvidence.builder().add(AcmgCriterion.PM2).build()
    assert evidence.criterion_evidence(AcmgCriterion.PVS1) is None
    assert AcmgCriterion.PVS1 not in evidence
    assert not evidence.has_criterion(AcmgCriterion.PVS1)
    assert evidence.has_criterion(AcmgCriterion.PM2)


def test_empty_evidence():
    evidence = AcmgEvidence.empty()
    assert evidence.is_empty()
    assert len(evidence) == 0
    assert str(evidence) == "[]"
    assert evidence.very_strong_pathogenic_count == 0


def test_of_mapping_and_equality():
    built = AcmgEvidence.builder().add(AcmgCriterion.PS2).add(AcmgCriterion.BS4).build()
    mapped = AcmgEvidence.of({AcmgCriterion.PS2: AcmgEvidenceStrength.STRONG, AcmgCriterion.BS4: AcmgEvidenceStrength.STRONG})
    assert built == mapped
    assert hash(built) == hash(mapped)
    assert built != AcmgEvidence.empty()


def test_insertion_order_is_part_of_equality():
    first = AcmgEvidence.of({AcmgCriterion.PVS1: AcmgEvidenceStrength.VERY_STRONG, AcmgCriterion.PM2: AcmgEvidenceStrength.MODERATE})
    second = AcmgEvidence.of({AcmgCriterion.PM2: AcmgEvidenceStrength.MODERATE, AcmgCriterion.PVS1: AcmgEvidenceStrength.VERY_STRONG})

    assert str(first) == "[PVS1, PM2]"
    assert str(second) == "[PM2, PVS1]"
    assert first != second
    assert len({first, second}) == 2
    assert len({first, AcmgEvidence.parse("PVS1;PM2")}) == 1


def test_built_evidence_is_independent_of_the_builder():
    builder = AcmgEvidence.builder().add(AcmgCriterion.PM2)
    evidence = builder.build()
    builder.add(AcmgCriterion.PP3)
    assert evidence.criteria() == [AcmgCriterion.PM2]


@pytest.mark.parametrize(
    "criterion, strength, polarity",
    [
        (AcmgCriterion.PVS1, AcmgEvidenceStrength.VERY_STRONG, AcmgPolarity.PATHOGENIC),
        (AcmgCriterion.PS4, AcmgEvidenceStrength.STRONG, AcmgPolarity.PATHOGENIC),
        (AcmgCriterion.PM6, AcmgEvidenceStrength.MODERATE, AcmgPolarity.PATHOGENIC),
        (AcmgCriterion.PP5, AcmgEvidenceStrength.SUPPORTING, AcmgPolarity.PATHOGENIC),
        (AcmgCriterion.BA1, AcmgEvidenceStrength.STAND_ALONE, AcmgPolarity.BENIGN),
        (AcmgCriterion.BS2, AcmgEvidenceStrength.STRONG, AcmgPolarity.BENIGN),
        (AcmgCriterion.BP6, AcmgEvidenceStrength.SUPPORTING, AcmgPolarity.BENIGN),
    ],
)
def test_criterion_defaults(criterion, strength, polarity):
    assert criterion.default_strength is strength
    assert criterion.polarity is polarity
    assert criterion.description


def test_every_criterion_has_defaults():
    assert len(AcmgCriterion) == 28
    assert sum(criterion.is_pathogenic() for criterion in AcmgCriterion) == 16
    assert sum(criterion.is_benign() for criterion in AcmgCriterion) == 12


@pytest.mark.parametrize(
    "text, expected",
    [
        ("[PVS1, PS1_Moderate]", "[PVS1, PS1_Moderate]"),
        ("PM2;PP3_Strong", "[PM2, PP3_Strong]"),
        ("pvs1_verystrong, ba1", "[PVS1, BA1]"),
        ("", "[]"),
    ],
)
def test_parse(text, expected):
    assert str(AcmgEvidence.parse(text)) == expected


@pytest.mark.parametrize("text", ["PX9", "PVS1_Extreme"])
def test_parse_rejects_unknown_tokens(text):
    with pytest.raises(ValueError):
        AcmgEvidence.parse(text)
