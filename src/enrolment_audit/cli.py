from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer
import yaml

from enrolment_audit.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from enrolment_audit.errors import AuditError
from enrolment_audit.io.read import load_records
from enrolment_audit.io.write import findings_table, write_summary, write_table
from enrolment_audit.logging import configure_logging
from enrolment_audit.paths import build_output_paths
from enrolment_audit.pipeline.detect import detect as run_detection
from enrolment_audit.summary import findings_payload

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    if config_path.exists():
        return load_config(config_path)
    # configs/default.yaml only exists inside a checkout.
    if config_path == DEFAULT_CONFIG_PATH.resolve():
        return AppConfig()
    raise typer.BadParameter(f"Config file not found: {config_path}", param_hint="--config")


@app.command()
def detect(
    csv: list[Path] = typer.Option(
        ...,
        "--csv",
        exists=True,
        readable=True,
        resolve_path=True,
        help="CSV file to audit; repeat for several files, concatenated in the given order.",
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=True),
    reference_date: datetime | None = typer.Option(
        None,
        formats=["%Y-%m-%d"],
        help="Dates after this day count as future dates. Defaults to today.",
    ),
    log_level: str = typer.Option("INFO"),
) -> None:
    """Detect anomalous enrolment records and write findings and dataset statistics."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    try:
        records = load_records(csv, cfg)
        result = run_detection(
            records,
            cfg,
            reference_date=reference_date.date() if reference_date else None,
        )
    except AuditError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    paths = build_output_paths(out)
    write_summary(
        {"findings": [finding.to_dict() for finding in result.findings]},
        paths.summary / "findings.json",
    )
    write_summary(result.stats.to_dict(), paths.summary / "stats.json")
    write_summary(
        findings_payload(
            result.findings,
            result.stats,
            max_findings=cfg.outputs.summary_max_findings,
        ),
        paths.summary / "summary_request.json",
    )
    fmt = cfg.outputs.tables_format
    write_table(findings_table(result.findings), paths.tables / f"findings.{fmt}", fmt=fmt)
    typer.echo(
        f"Detection complete. Records: {result.stats.total_rows}, "
        f"anomalies: {result.stats.anomaly_count}"
    )


@app.command("show-config")
def show_config(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, resolve_path=True),
) -> None:
    """Print the effective configuration as YAML."""
    cfg = _load_app_config(config)
    typer.echo(yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False))


if __name__ == "__main__":
    app()
