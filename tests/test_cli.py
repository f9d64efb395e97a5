import pandas as pd
import pytest
from click.testing import CliRunner

from GVP.__main__ import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.mark.parametrize(
    "args, expected",
    [
        (["118887583", "TCAAAA", "TCAAAACAAAA"], "118887583\tT\tTCAAAA"),
        (["100", "A", "T"], "100\tA\tT"),
        (["100", "GTT", "GCT"], "101\tT\tC"),
    ],
)
def test_normalise(runner, args, expected):
    result = runner.invoke(main, ["normalise", *args])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == expected


def test_prioritise(runner, workbook_path):
    result = runner.invoke(main, ["prioritise", "-e", workbook_path])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    # ABC1 lies outside every region in the workbook
    assert lines[0] == "Scored 3 genes under ANY: 2 passed filters, 3/4 variants passed"
    assert lines[1].startswith("1\tFGFR2\tANY\tcombined=0.9000")
    assert lines[2] == "\t10-123256215-T-G\tSNV\tscore=0.9500\t[PVS1, PM2]"
    assert "ABC1" not in result.output


def test_prioritise_options_from_environment(runner, workbook_path):
    result = runner.invoke(main, ["prioritise", "-e", workbook_path], env={"GVP_MIN_QUALITY": "90"})

    assert result.exit_code == 0, result.output
    assert "1 passed filters, 1/4 variants passed" in result.output
    assert "MECP2" not in result.output


def test_prioritise_under_all_modes(runner, workbook_path):
    result = runner.invoke(main, ["prioritise", "-e", workbook_path, "--mode", "ALL", "--top", "1"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("Scored 3 genes under AD, AR, XD, XR, MT:")
    assert lines[1].startswith("1\tFGFR2\tAD\t")


def test_prioritise_gene_symbols(runner, workbook_path):
    result = runner.invoke(main, ["prioritise", "-e", workbook_path, "-g", "MECP2"])

    assert result.exit_code == 0, result.output
    assert "1\tMECP2" in result.output
    assert "FGFR2" not in result.output


def test_unknown_mode_is_a_usage_error(runner, workbook_path):
    result = runner.invoke(main, ["prioritise", "-e", workbook_path, "--mode", "digenic"])
    assert result.exit_code == 2
    assert "Unknown mode of inheritance" in result.output


def test_priority_score_without_source_is_a_configuration_error(runner, workbook_path):
    result = runner.invoke(main, ["prioritise", "-e", workbook_path, "--min-priority-score", "0.5"])

    assert result.exit_code == 2
    assert "no priority source was defined" in result.output


def test_workbook_without_variants_sheet(runner, tmp_path, regions_df):
    path = tmp_path / "regions_only.xlsx"
    regions_df.to_excel(path, sheet_name="regions", index=False, engine="openpyxl")

    result = runner.invoke(main, ["prioritise", "-e", str(path)])

    assert result.exit_code == 1
    assert "Errors found in mapping:" in result.output
    assert "- Missing required sheet: 'variants'." in result.output


def test_log_file(runner, workbook_path, tmp_path):
    log_file = tmp_path / "gvp.log"

    result = runner.invoke(main, ["prioritise", "-e", workbook_path, "--log-file", str(log_file)])

    assert result.exit_code == 0, result.output
    assert "Beginning parse of" in log_file.read_text()
