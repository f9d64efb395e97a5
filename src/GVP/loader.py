import pandas as pd

# Columns that need renaming → target field names used by the mapper
RENAME_MAP = {
    # variant columns
    "chrom": "chromosome",
    "chr": "chromosome",
    "start": "start_position",
    "pos": "start_position",
    "position": "start_position",
    "ref": "reference",
    "alt": "alternate",
    "gene": "gene_symbol",
    "symbol": "gene_symbol",
    "qual": "quality",
    "clnsig": "clinical_significance",
    "rsid": "known_id",
    "modes": "compatible_modes",
    "acmg": "acmg_criteria",
    # phenotype score columns
    "priority_source": "source",
    "priority_score": "score",
}


def normalise_headers(df: pd.DataFrame) -> pd.DataFrame:
    """
    - normalize all headers to snake_case lowercase
    - apply renames from RENAME_MAP
    """
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)"
        .str.replace(r"\s+", "_", regex=True)  # spaces → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.lower()
    )
    return df.rename(columns={orig: target for orig, target in RENAME_MAP.items() if orig in df.columns})


def load_sheets_as_tables(workbook_path: str) -> dict[str, pd.DataFrame]:
    """
    Read each worksheet into a DataFrame:
      - first row = header
      - headers normalized by `normalise_headers`
      - fully empty rows dropped
    """
    excel = pd.ExcelFile(workbook_path, engine="openpyxl")
    tables: dict[str, pd.DataFrame] = {}

    for sheet_name in excel.sheet_names:
        df = pd.read_excel(excel, sheet_name=sheet_name, header=0, engine="openpyxl")
        df = normalise_headers(df).dropna(how="all")
        tables[sheet_name] = df

    return tables
