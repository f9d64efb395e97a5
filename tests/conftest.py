import typing

import pandas as pd
import pytest

from GVP.gene import Gene
from GVP.inheritance import SubModeOfInheritance
from GVP.variant import VariantRecord


@pytest.fixture
def make_variant() -> typing.Callable[..., VariantRecord]:
    """
    Factory for VariantRecords: sensible defaults, any field overridable.
    `modes` takes sub-mode codes, e.g. ("ad", "ar_comphet").
    """

    def _make(
        start: int = 100,
        ref: str = "A",
        alt: str = "T",
        chromosome: typing.Union[int, str] = 1,
        score: float = 0.5,
        modes: typing.Iterable[str] = (),
        **kwargs,
    ) -> VariantRecord:
        return VariantRecord(
            chromosome,
            start,
            ref,
            alt,
            score=score,
            compatible_sub_modes={SubModeOfInheritance.from_code(code) for code in modes},
            **kwargs,
        )

    return _make


@pytest.fixture
def make_gene() -> typing.Callable[..., Gene]:
    def _make(symbol: str, variants: typing.Iterable[VariantRecord] = (), **priority_scores: float) -> Gene:
        gene = Gene(symbol, variants=variants)
        for source, score in priority_scores.items():
            gene.add_priority_score(source, score)
        return gene

    return _make


@pytest.fixture
def variants_df() -> pd.DataFrame:
    """A variants sheet, already header-normalised, as the loader would produce it."""
    return pd.DataFrame(
        {
            "chromosome": ["10", "chr10", "X", "2"],
            "start_position": [123256215, 123256300, 150000, 5000],
            "reference": ["T", "CA", "G", "TCAAAA"],
            "alternate": ["G", "C", "A", "TCAAAACAAAA"],
            "gene_symbol": ["FGFR2", "FGFR2", "MECP2", "ABC1"],
            "score": [0.95, 0.6, 0.8, 0.3],
            "quality": [99.0, 45.0, 80.0, None],
            "freq_gnomad_e": [None, 0.5, 0.01, 3.0],
            "path_revel": [0.9, None, 0.7, 0.2],
            "clinical_significance": ["Pathogenic", None, None, None],
            "known_id": [None, "rs123", None, None],
            "compatible_modes": ["ad", "ar_comphet", "xd/xr_hom", None],
            "acmg_criteria": ["PVS1;PM2", None, "PM2_Supporting", None],
        }
    )


@pytest.fixture
def regions_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "chromosome": ["10", "X"],
            "start": [123000000, 100000],
            "end": [124000000, 200000],
            "label": ["TAD_FGFR2", None],
        }
    )


@pytest.fixture
def phenotype_scores_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "gene_symbol": ["FGFR2", "FGFR2", "MECP2"],
            "source": ["hiphive", "phenix", "hiphive"],
            "score": [0.7, 0.85, 0.4],
        }
    )


@pytest.fixture
def workbook_path(tmp_path, variants_df, regions_df, phenotype_scores_df) -> str:
    """An .xlsx workbook with raw (un-normalised) headers, written with openpyxl."""
    path = tmp_path / "sample.xlsx"
    raw_variants = variants_df.rename(
        columns={
            "chromosome": "Chrom",
            "start_position": "Start",
            "reference": "Ref",
            "alternate": "Alt",
            "gene_symbol": "Gene",
            "score": "Score",
            "freq_gnomad_e": "freq gnomAD_E",
            "path_revel": "path REVEL",
            "clinical_significance": "Clinical Significance",
        }
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        raw_variants.to_excel(writer, sheet_name="Variants", index=False)
        regions_df.to_excel(writer, sheet_name="tads", index=False)
        phenotype_scores_df.to_excel(writer, sheet_name="Phenotype", index=False)
    return str(path)
