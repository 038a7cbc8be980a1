"""Command-line interface for Alberta COVID-19 case aggregates."""

from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from alberta_covid_cases.case_aggregation.engine import CaseAggregationEngine
from alberta_covid_cases.case_aggregation.reporting import (
    build_case_report,
    build_zone_summary_frame,
    save_zone_summary,
)
from alberta_covid_cases.config import MalformedRowPolicy, load_config
from alberta_covid_cases.errors import DataLoadError
from alberta_covid_cases.shared.logging_utils import setup_logging

app = typer.Typer(help="Alberta COVID-19 case aggregation CLI")

CSV_OPTION = typer.Option(
    None,
    "--csv",
    "-c",
    help="Case export CSV (default: ALBERTA_COVID_CSV or data/covid19dataexport.csv)"
)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (default: ALBERTA_COVID_LOG_LEVEL or INFO)"
    ),
    policy: Optional[MalformedRowPolicy] = typer.Option(
        None,
        "--policy",
        help="Malformed row handling: skip or abort (default: ALBERTA_COVID_MALFORMED_ROWS)"
    ),
):
    """Aggregate queries over the Alberta case export."""
    try:
        config = load_config()
        setup_logging(log_file=config.log_file, level=(log_level or config.log_level).upper())
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(1)
    ctx.obj = {"config": config, "policy": policy}


def _engine(ctx: typer.Context, csv: Optional[Path]) -> CaseAggregationEngine:
    """The singleton when nothing is overridden, otherwise a standalone engine."""
    config = ctx.obj["config"]
    policy = ctx.obj["policy"]
    try:
        if csv is None and policy is None:
            return CaseAggregationEngine.get_instance()
        return CaseAggregationEngine.from_csv(
            csv or config.csv_path,
            policy=policy or config.malformed_row_policy,
        )
    except DataLoadError as e:
        logger.error(f"Could not load case dataset: {e}")
        raise typer.Exit(1)


@app.command()
def summary(ctx: typer.Context, csv: Optional[Path] = CSV_OPTION):
    """Print dataset totals and a per-zone table."""
    engine = _engine(ctx, csv)
    typer.echo(f"Source: {engine.source_path}")
    typer.echo(f"Total cases: {engine.total_cases:,}")
    typer.echo(f"Active cases: {engine.count_total_active_cases():,}")
    if engine.rows_skipped:
        typer.echo(f"Skipped rows: {engine.rows_skipped:,}")
    typer.echo("")
    typer.echo(f"{'Zone':<32}{'Total':>10}{'Active':>10}")
    for row in build_zone_summary_frame(engine).iter_rows(named=True):
        typer.echo(f"{row['zone']:<32}{row['total_cases']:>10,}{row['active_cases']:>10,}")


@app.command()
def active(
    ctx: typer.Context,
    zone: Optional[str] = typer.Option(
        None,
        "--zone",
        "-z",
        help="Count active cases in this zone only (exact match)"
    ),
    csv: Optional[Path] = CSV_OPTION,
):
    """Print the number of active cases, overall or for one zone."""
    engine = _engine(ctx, csv)
    if zone is None:
        typer.echo(engine.count_total_active_cases())
    else:
        typer.echo(engine.count_active_cases_by_zone(zone))


@app.command()
def zones(ctx: typer.Context, csv: Optional[Path] = CSV_OPTION):
    """Print distinct zones, one per line, in first-seen order."""
    engine = _engine(ctx, csv)
    for zone in engine.distinct_zones():
        typer.echo(zone)


@app.command()
def report(
    ctx: typer.Context,
    output_dir: Path = typer.Option(
        ...,
        "--output-dir",
        "-o",
        help="Directory for zone_summary.csv"
    ),
    csv: Optional[Path] = CSV_OPTION,
):
    """Write the zone summary table and print the JSON report."""
    engine = _engine(ctx, csv)
    save_zone_summary(build_zone_summary_frame(engine), output_dir)
    typer.echo(build_case_report(engine).model_dump_json(indent=2))


if __name__ == "__main__":
    app()
