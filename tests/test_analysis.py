import pytest

from GVP.analysis import Analysis
from GVP.filters import FilterType, FrequencyFilter, GeneSymbolFilter, InheritanceModeFilter, QualityFilter
from GVP.inheritance import ModeOfInheritance
from GVP.runner import PipelineConfigurationError

AD = ModeOfInheritance.AUTOSOMAL_DOMINANT
AR = ModeOfInheritance.AUTOSOMAL_RECESSIVE


@pytest.fixture
def genes(make_variant, make_gene):
    """
    A: one good dominant variant and one low-quality one
    B: one dominant variant, strong phenotype match
    C: a single variant which fails the quality step
    """
    return [
        make_gene(
            "A",
            [make_variant(start=1, score=0.9, modes=("ad",), quality=50.0), make_variant(start=2, score=0.3, quality=10.0)],
            hiphive=0.5,
        ),
        make_gene("B", [make_variant(start=3, score=0.6, modes=("ad",), quality=60.0)], hiphive=0.9),
        make_gene("C", [make_variant(start=4, score=0.99, quality=5.0)]),
    ]


def test_run_filters_scores_and_ranks(genes):
    results = Analysis(variant_steps=[QualityFilter(20.0)], modes=(AD,)).run(genes)

    assert [gene.symbol for gene in results.ranked_genes] == ["B", "A", "C"]
    assert [gene.symbol for gene in results.passed_genes] == ["B", "A"]
    assert results.modes == (AD,)
    assert results.number_of_variants == 4
    assert results.number_of_passed_variants == 2

    b, a, c = results.ranked_genes
    assert b.combined_score == pytest.approx((0.6 + 0.9) / 2)
    assert a.combined_score == pytest.approx((0.9 + 0.5) / 2)
    assert c.combined_score == 0.0


def test_top(genes):
    results = Analysis(variant_steps=[QualityFilter(20.0)], modes=(AD,)).run(genes)
    assert [gene.symbol for gene in results.top(1)] == ["B"]
    assert results.top(10) == results.passed_genes
    assert results.top(-1) == []


def test_no_steps_and_no_modes(genes):
    results = Analysis().run(genes)

    assert results.modes == (ModeOfInheritance.ANY,)
    assert len(results.passed_genes) == 3
    # C has the best variant and no phenotype score
    assert [gene.symbol for gene in results.ranked_genes] == ["B", "A", "C"]


def test_gene_steps(genes):
    results = Analysis(gene_steps=[GeneSymbolFilter(["A", "C"])]).run(genes)

    assert [gene.symbol for gene in results.passed_genes] == ["A", "C"]
    b = next(gene for gene in results.ranked_genes if gene.symbol == "B")
    assert b.failed_filter_types == {FilterType.GENE_SYMBOL_FILTER}


def test_inheritance_step_sees_variant_results(genes):
    analysis = Analysis(
        variant_steps=[QualityFilter(20.0)],
        gene_steps=[InheritanceModeFilter([AR])],
        modes=(AR,),
    )

    results = analysis.run(genes)

    assert results.passed_genes == []
    assert all(gene.combined_score_for_mode(AR) <= 0.5 for gene in results.ranked_genes)


@pytest.mark.parametrize(
    "analysis",
    [
        Analysis(variant_steps=[FrequencyFilter(1.0, [])]),
        Analysis(variant_steps=[GeneSymbolFilter(["A"])]),
        Analysis(gene_steps=[QualityFilter(10.0)]),
        Analysis(gene_steps=[InheritanceModeFilter([])]),
    ],
)
def test_configuration_errors_are_raised_before_any_work(genes, analysis):
    with pytest.raises(PipelineConfigurationError) as excinfo:
        analysis.run(genes)

    assert len(excinfo.value.issues) == 1
    for gene in genes:
        assert not gene.filter_status.has_results()
        assert gene.gene_scores == []
        assert all(not variant.filter_status.has_results() for variant in gene.variants)
