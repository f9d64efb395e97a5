import abc
import math
import typing

from dataclasses import dataclass, field

import pandas as pd
from stairval.notepad import Notepad

from .acmg import AcmgEvidence
from .gene import Gene
from .inheritance import SubModeOfInheritance
from .regions import Region, RegionIndex
from .variant import VariantRecord

# Minimal required columns (after renaming) of each sheet
VARIANT_KEY_COLUMNS = {
    "chromosome",
    "start_position",
    "reference",
    "alternate",
    "gene_symbol",
    "score",
}
REGION_KEY_COLUMNS = {"chromosome", "start", "end"}
PHENOTYPE_SCORE_KEY_COLUMNS = {"gene_symbol", "source", "score"}

# Per-source annotation columns, e.g. "freq_gnomad_e", "path_revel"
FREQUENCY_COLUMN_PREFIX = "freq_"
PATHOGENICITY_COLUMN_PREFIX = "path_"

# Accepted sheet names (casefolded) for each table
KNOWN_SHEET_ALIASES: dict[str, set[str]] = {
    "variants": {"variants", "variant", "genotype"},
    "regions": {"regions", "region", "tads"},
    "phenotype_scores": {"phenotype_scores", "phenotype", "priority", "priority_scores"},
}


@dataclass
class TypedTables:
    """
    Explicit, typed access to workbook sheets.
    Any field can be `None`, meaning that the sheet was not provided.
    """

    variants: pd.DataFrame | None
    regions: pd.DataFrame | None
    phenotype_scores: pd.DataFrame | None


@dataclass
class MappedWorkbook:
    """Domain objects built from one workbook. Genes keep the order of first appearance."""

    genes: list[Gene] = field(default_factory=list)
    regions: list[Region] = field(default_factory=list)
    frequency_sources: list[str] = field(default_factory=list)
    pathogenicity_sources: list[str] = field(default_factory=list)

    @property
    def region_index(self) -> RegionIndex:
        return RegionIndex(self.regions)

    @property
    def variants(self) -> list[VariantRecord]:
        return [variant for gene in self.genes for variant in gene.variants]


class TableMapper(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def apply_mapping(self, tables: dict[str, pd.DataFrame], notepad: Notepad) -> MappedWorkbook:
        raise NotImplementedError


class DefaultMapper(TableMapper):
    def __init__(self, normalise_variants: bool = True):
        """
        - True : REF/ALT are minimised (VCF padding bases trimmed) on the way in
        - False: coordinates are kept exactly as written in the sheet
        """
        self.normalise_variants = normalise_variants

    def apply_mapping(self, tables: dict[str, pd.DataFrame], notepad: Notepad) -> MappedWorkbook:
        """
        Process:
        1) choose/validate input tables
        2) map variant rows, grouped into genes
        3) attach phenotype (priority) scores to the genes
        4) map region rows
        """
        typed_tables = self._choose_named_tables(tables, notepad)
        genes = self._map_variants_table(typed_tables.variants, notepad)
        self._map_phenotype_scores_table(typed_tables.phenotype_scores, genes, notepad)
        regions = self._map_regions_table(typed_tables.regions, notepad)
        variants = typed_tables.variants if typed_tables.variants is not None else pd.DataFrame()
        return MappedWorkbook(
            genes=list(genes.values()),
            regions=regions,
            frequency_sources=list(self._source_columns(variants, FREQUENCY_COLUMN_PREFIX).values()),
            pathogenicity_sources=list(self._source_columns(variants, PATHOGENICITY_COLUMN_PREFIX).values()),
        )

    def _choose_named_tables(self, tables: dict[str, pd.DataFrame], notepad: Notepad) -> TypedTables:
        """
        Prefer explicit sheet names (plus common aliases).
        """

        def by_alias(kind: str) -> pd.DataFrame | None:
            aliases = KNOWN_SHEET_ALIASES[kind]
            for sheet_name, df in tables.items():
                if sheet_name.strip().casefold() in aliases:
                    return df
            return None

        selected = TypedTables(
            variants=by_alias("variants"),
            regions=by_alias("regions"),
            phenotype_scores=by_alias("phenotype_scores"),
        )

        if selected.variants is None:
            notepad.add_error("Missing required sheet: 'variants'.")

        return selected

    # ----------------------
    # Cell helpers
    # ----------------------

    @staticmethod
    def _is_missing(value: typing.Any) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    @staticmethod
    def _to_optional_float(value: typing.Any) -> float | None:
        if DefaultMapper._is_missing(value):
            return None
        return float(value)

    @staticmethod
    def _to_int(value: typing.Any) -> int:
        """Excel hands integers back as floats; refuse anything with a fractional part."""
        number = float(value)
        if math.isnan(number) or not number.is_integer():
            raise ValueError(f"Expected an integer coordinate, got {value!r}")
        return int(number)

    @staticmethod
    def _to_contig(value: typing.Any) -> int | str:
        """
        Contig cells come back as int, float (7.0) or str ("chr7", "X"):
        - whole numbers -> int
        - anything else -> stripped string, left to parse_contig
        """
        if isinstance(value, bool):
            raise ValueError(f"Unrecognized contig: {value!r}")
        if isinstance(value, (int, float)):
            return DefaultMapper._to_int(value)
        return str(value).strip()

    @staticmethod
    def _split_codes(value: typing.Any, separator: str = "/") -> list[str]:
        if DefaultMapper._is_missing(value):
            return []
        return [code.strip().lower() for code in str(value).split(separator) if code.strip()]

    @staticmethod
    def _normalise_clinical_significance(value: typing.Any) -> str | None:
        # "Likely pathogenic" -> "LIKELY_PATHOGENIC"
        if DefaultMapper._is_missing(value):
            return None
        return "_".join(str(value).strip().replace("/", " or ").split()).upper()

    @staticmethod
    def _parse_acmg_evidence(value: typing.Any) -> AcmgEvidence:
        if DefaultMapper._is_missing(value):
            return AcmgEvidence.empty()
        return AcmgEvidence.parse(str(value))

    @staticmethod
    def _source_columns(df: pd.DataFrame, prefix: str) -> dict[str, str]:
        """Map column name → source name for every column starting with `prefix`."""
        return {
            column: column[len(prefix):].upper()
            for column in df.columns
            if str(column).startswith(prefix) and len(column) > len(prefix)
        }

    @staticmethod
    def _read_source_values(row: pd.Series, columns: dict[str, str]) -> dict[str, float] | None:
        """
        None when the sheet has no such columns at all (annotation never supplied);
        otherwise the non-empty cells keyed by source (possibly an empty dict).
        """
        if not columns:
            return None
        values = {}
        for column, source in columns.items():
            value = DefaultMapper._to_optional_float(row.get(column))
            if value is not None:
                values[source] = value
        return values

    # ----------------------
    # Row parsers
    # ----------------------

    def parse_variant_row(
        self,
        row: pd.Series,
        sheet_name: str,
        notepad: Notepad,
        frequency_columns: dict[str, str] | None = None,
        pathogenicity_columns: dict[str, str] | None = None,
    ) -> VariantRecord | None:
        """
        Parse a single variant row into a VariantRecord.
        Returns None (after adding an error) if validation fails for this row.
        """
        sub_modes: set[SubModeOfInheritance] = set()
        for code in self._split_codes(row.get("compatible_modes")):
            try:
                sub_modes.add(SubModeOfInheritance.from_code(code))
            except ValueError:
                notepad.add_error(f"Sheet {sheet_name!r}: Unrecognized inheritance mode code {code!r}")
                return None  # bail on this row

        raw_known_id = row.get("known_id")
        known_ids = (
            ()
            if self._is_missing(raw_known_id)
            else tuple(known_id.strip() for known_id in str(raw_known_id).split(";") if known_id.strip())
        )

        for column in ("reference", "alternate"):
            if self._is_missing(row.get(column)):
                notepad.add_error(f"Sheet {sheet_name!r}: missing {column} allele")
                return None

        try:
            chromosome = self._to_contig(row["chromosome"])
            start = self._to_int(row["start_position"])
            ref = str(row["reference"]).strip()
            alt = str(row["alternate"]).strip()
            kwargs = dict(
                score=float(row["score"]),
                quality=self._to_optional_float(row.get("quality")),
                frequencies=self._read_source_values(row, frequency_columns or {}),
                pathogenicity_scores=self._read_source_values(row, pathogenicity_columns or {}),
                clinical_significance=self._normalise_clinical_significance(row.get("clinical_significance")),
                known_ids=known_ids,
                compatible_sub_modes=sub_modes,
                acmg_evidence=self._parse_acmg_evidence(row.get("acmg_criteria")),
            )
            if self.normalise_variants:
                return VariantRecord.normalised(chromosome, start, ref, alt, **kwargs)
            return VariantRecord(chromosome, start, ref, alt, **kwargs)
        except (ValueError, TypeError) as e:
            notepad.add_error(f"Sheet {sheet_name!r}: {e}")
            return None

    # ----------------------
    # Table-level wrapper mappers
    # ----------------------

    def _map_variants_table(self, df: pd.DataFrame | None, notepad: Notepad) -> dict[str, Gene]:
        """
        Sheet-level wrapper for variant rows:
          - require the key variant columns
          - parse each row, skipping (and reporting) the invalid ones
          - group the variants by gene symbol, in order of first appearance
        """
        genes: dict[str, Gene] = {}
        if df is None:
            return genes

        missing = sorted(VARIANT_KEY_COLUMNS - set(df.columns))
        if missing:
            notepad.add_error(f"Sheet 'variants': missing required columns: {missing}")
            return genes

        frequency_columns = self._source_columns(df, FREQUENCY_COLUMN_PREFIX)
        pathogenicity_columns = self._source_columns(df, PATHOGENICITY_COLUMN_PREFIX)

        for index, row in df.iterrows():
            raw_symbol = row.get("gene_symbol")
            if self._is_missing(raw_symbol):
                notepad.add_error(f"Sheet 'variants', row {index}: missing gene symbol")
                continue
            variant = self.parse_variant_row(
                row, f"variants, row {index}", notepad, frequency_columns, pathogenicity_columns
            )
            if variant is None:
                continue
            symbol = str(raw_symbol).strip()
            if symbol not in genes:
                genes[symbol] = Gene(symbol)
            genes[symbol].add_variant(variant)
        return genes

    def _map_phenotype_scores_table(
        self, df: pd.DataFrame | None, genes: dict[str, Gene], notepad: Notepad
    ) -> None:
        """
        Attach (source, score) rows to the matching genes.
        Scores for genes without variants are reported as warnings and ignored.
        """
        if df is None:
            return
        missing = sorted(PHENOTYPE_SCORE_KEY_COLUMNS - set(df.columns))
        if missing:
            notepad.add_error(f"Sheet 'phenotype_scores': missing required columns: {missing}")
            return

        for index, row in df.iterrows():
            symbol = "" if self._is_missing(row.get("gene_symbol")) else str(row["gene_symbol"]).strip()
            gene = genes.get(symbol)
            if gene is None:
                notepad.add_warning(
                    f"Sheet 'phenotype_scores', row {index}: no variants called in gene {symbol!r}"
                )
                continue
            try:
                gene.add_priority_score(str(row["source"]), float(row["score"]))
            except (ValueError, TypeError) as exception:
                notepad.add_error(f"Sheet 'phenotype_scores', row {index}: {exception}")

    def _map_regions_table(self, df: pd.DataFrame | None, notepad: Notepad) -> list[Region]:
        records: list[Region] = []
        if df is None:
            return records
        # the shared header renames turn "start" into "start_position"
        working = df.rename(columns={"start_position": "start"})
        missing = sorted(REGION_KEY_COLUMNS - set(working.columns))
        if missing:
            notepad.add_error(f"Sheet 'regions': missing required columns: {missing}")
            return records

        payload_columns = [column for column in working.columns if column not in REGION_KEY_COLUMNS | {"label"}]
        for index, row in working.iterrows():
            try:
                label = row.get("label")
                records.append(
                    Region(
                        chromosome=self._to_contig(row["chromosome"]),
                        start=self._to_int(row["start"]),
                        end=self._to_int(row["end"]),
                        label="" if self._is_missing(label) else str(label).strip(),
                        payload={
                            column: row[column] for column in payload_columns if not self._is_missing(row[column])
                        },
                    )
                )
            except (ValueError, TypeError) as exception:
                notepad.add_error(f"Sheet 'regions', row {index}: {exception}")
        return records
