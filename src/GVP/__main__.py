"""
Command-line interface for the GVP toolkit.

`gvp normalise` minimises one allele; `gvp prioritise` reads a pre-annotated
workbook, runs the filter pipeline and prints the ranked genes.
"""

import logging
import sys
import typing

import click
from stairval.notepad import Notepad, create_notepad

from .allele import AllelePosition
from .analysis import Analysis, AnalysisResults
from .filters import (
    FrequencyFilter,
    GeneFilter,
    GeneSymbolFilter,
    InheritanceModeFilter,
    KnownVariantFilter,
    PathogenicityFilter,
    PriorityScoreFilter,
    QualityFilter,
    RegionFilter,
    VariantFilter,
)
from .inheritance import DEFAULT_MODES, ModeOfInheritance
from .loader import load_sheets_as_tables
from .mapper import DefaultMapper, MappedWorkbook
from .runner import PipelineConfigurationError

logger = logging.getLogger(__name__)


@click.group()
def main():
    """GVP: Gene & Variant Prioritiser."""
    pass


@main.command(name="normalise")
@click.argument("start", type=int)
@click.argument("ref")
@click.argument("alt")
def normalise(start: int, ref: str, alt: str):
    """
    Print the minimised START, REF and ALT of one allele (tab separated).
    """
    try:
        position = AllelePosition.trim(start, ref, alt)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    click.echo(f"{position.start}\t{position.ref}\t{position.alt}")


def _parse_modes(ctx, param, values: typing.Sequence[str]) -> tuple[ModeOfInheritance, ...]:
    modes = []
    for value in values:
        # GVP_MODES may hold "AD,AR" as well as "AD AR"
        for label in value.replace(",", " ").split():
            if label.upper() == "ALL":
                modes.extend(DEFAULT_MODES)
                continue
            try:
                modes.append(ModeOfInheritance.from_label(label))
            except ValueError as e:
                raise click.BadParameter(str(e)) from e
    return tuple(dict.fromkeys(modes))


@main.command(name="prioritise")
@click.option(
    "-e",
    "--excel-path",
    "excel_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="path to the pre-annotated Excel workbook",
)
@click.option(
    "-m",
    "--mode",
    "modes",
    multiple=True,
    envvar="GVP_MODES",
    callback=_parse_modes,
    help="mode of inheritance to score under (AD, AR, XD, XR, MT or ALL); repeatable. "
    "Given modes also filter out genes incompatible with all of them. Default: any mode.",
)
@click.option("--max-frequency", type=float, envvar="GVP_MAX_FREQUENCY", help="maximum allele frequency (percent)")
@click.option("--min-pathogenicity", type=float, envvar="GVP_MIN_PATHOGENICITY", help="minimum pathogenicity score")
@click.option("--min-quality", type=float, envvar="GVP_MIN_QUALITY", help="minimum call quality")
@click.option("--min-priority-score", type=float, envvar="GVP_MIN_PRIORITY_SCORE", help="minimum phenotype score")
@click.option(
    "--priority-source",
    envvar="GVP_PRIORITY_SOURCE",
    default="",
    help="phenotype score source checked by --min-priority-score",
)
@click.option("--remove-known-variants", is_flag=True, help="drop variants already seen in any frequency source")
@click.option("-g", "--gene", "gene_symbols", multiple=True, help="only keep these genes; repeatable")
@click.option("--top", "top_n", type=int, default=20, show_default=True, help="number of genes to print")
@click.option("--verbose-logging", is_flag=True, help="Also emit debug logs to stderr")
@click.option(
    "--log-file",
    "log_file_path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def prioritise(
    excel_file: str,
    modes: tuple[ModeOfInheritance, ...],
    max_frequency: typing.Optional[float],
    min_pathogenicity: typing.Optional[float],
    min_quality: typing.Optional[float],
    min_priority_score: typing.Optional[float],
    priority_source: str,
    remove_known_variants: bool,
    gene_symbols: tuple[str, ...],
    top_n: int,
    verbose_logging: bool,
    log_file_path: typing.Optional[str],
):
    """
    Read the workbook, filter its variants and genes, then score and rank the genes.
    """
    _configure_logging(verbose_logging, log_file_path)

    # 1) Read all sheets into DataFrames
    logger.info(f"Beginning parse of '{excel_file}'")
    tables = load_sheets_as_tables(excel_file)
    logger.debug(f"Loaded sheets: {list(tables.keys())}")

    # 2) Apply mapping to get genes and regions, and collect issues
    notepad = create_notepad("gvp")
    workbook = DefaultMapper().apply_mapping(tables, notepad)

    # 3) Report any errors or warnings
    _report_issues(notepad)
    if notepad.has_errors(include_subsections=True):
        sys.exit(1)

    # 4) Build and run the analysis
    analysis = Analysis(
        variant_steps=_build_variant_steps(workbook, max_frequency, min_pathogenicity, min_quality, remove_known_variants),
        gene_steps=_build_gene_steps(modes, min_priority_score, priority_source, gene_symbols),
        modes=modes,
    )
    try:
        results = analysis.run(workbook.genes)
    except PipelineConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    # 5) Print the ranking
    _print_results(results, top_n)


def _configure_logging(verbose_logging: bool, log_file_path: typing.Optional[str]) -> None:
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
            force=True,
        )


def _build_variant_steps(
    workbook: MappedWorkbook,
    max_frequency: typing.Optional[float],
    min_pathogenicity: typing.Optional[float],
    min_quality: typing.Optional[float],
    remove_known_variants: bool,
) -> list[VariantFilter]:
    """
    Cheap checks first, lookups last: quality, regions, known variants,
    frequency, pathogenicity. Sources are the ones the workbook provides.
    """
    frequency_sources = workbook.frequency_sources
    pathogenicity_sources = workbook.pathogenicity_sources

    steps: list[VariantFilter] = []
    if min_quality is not None:
        steps.append(QualityFilter(min_quality))
    if workbook.regions:
        steps.append(RegionFilter(workbook.region_index))
    if remove_known_variants:
        steps.append(KnownVariantFilter(frequency_sources))
    if max_frequency is not None:
        steps.append(FrequencyFilter(max_frequency, frequency_sources))
    if min_pathogenicity is not None:
        steps.append(PathogenicityFilter(min_pathogenicity, pathogenicity_sources))
    return steps


def _build_gene_steps(
    modes: tuple[ModeOfInheritance, ...],
    min_priority_score: typing.Optional[float],
    priority_source: str,
    gene_symbols: tuple[str, ...],
) -> list[GeneFilter]:
    steps: list[GeneFilter] = []
    if gene_symbols:
        steps.append(GeneSymbolFilter(gene_symbols))
    if min_priority_score is not None:
        steps.append(PriorityScoreFilter(priority_source, min_priority_score))
    if modes:
        steps.append(InheritanceModeFilter(modes))
    return steps


def _report_issues(notepad: Notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in mapping:")
        for err in notepad.errors():
            click.echo(f"- {err.message}")
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in mapping:")
        for w in notepad.warnings():
            click.echo(f"- {w.message}")


def _print_results(results: AnalysisResults, top_n: int) -> None:
    click.echo(
        f"Scored {len(results.ranked_genes)} genes under "
        f"{', '.join(mode.value for mode in results.modes)}: "
        f"{len(results.passed_genes)} passed filters, "
        f"{results.number_of_passed_variants}/{results.number_of_variants} variants passed"
    )
    for rank, gene in enumerate(results.top(top_n), start=1):
        best = gene.top_gene_score()
        click.echo(
            f"{rank}\t{gene.symbol}\t{best.mode.value}\t"
            f"combined={best.combined_score:.4f}\t"
            f"variant={best.variant_score:.4f}\tphenotype={best.phenotype_score:.4f}"
        )
        for variant in best.contributing_variants:
            evidence = "" if variant.acmg_evidence.is_empty() else f"\t{variant.acmg_evidence}"
            click.echo(f"\t{variant}\t{variant.shape.name}\tscore={variant.score:.4f}{evidence}")


if __name__ == "__main__":
    main()
