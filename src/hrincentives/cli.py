"""Typer CLI entrypoint for period closing and challenge housekeeping."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml

from .container import IncentiveContainer, create_container
from .core import parse_date
from .errors import IncentiveError
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas import ActorContext, ActorRole, BonusConfig
from .schemas.config import load_config
from .store import InMemoryStore
from .store.memory import SnapshotLoadError

app = typer.Typer(help="Evaluation-to-incentive engine CLI.")


def _read_yaml(path: Path, param_name: str) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter(f"{param_name} file must be a YAML object", param_name=param_name)
    return loaded


def _build(snapshot: Path, config: Optional[Path]) -> IncentiveContainer:
    settings = load_config(_read_yaml(config, "config")).to_settings() if config else {}
    bonus_defaults = settings.get("bonus")
    try:
        store = InMemoryStore.from_snapshot(
            _read_yaml(snapshot, "snapshot"),
            default_bonus=BonusConfig(**bonus_defaults) if bonus_defaults else None,
        )
    except SnapshotLoadError as exc:
        for error in exc.errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=2) from exc
    return create_container(settings=settings, store=store)


def _actor(user: str, organization: str) -> ActorContext:
    return ActorContext(user_id=user, role=ActorRole.ADMIN, organization_id=organization)


@app.command("close-month")
def close_month(
    snapshot: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Organization snapshot (YAML or JSON)."),
    organization: str = typer.Option(..., "--org", help="Organization id."),
    period: str = typer.Option(..., help="Period key: YYYY-MM or YYYY-MM-DD..YYYY-MM-DD."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    strict: Optional[bool] = typer.Option(None, "--strict/--lenient", help="Require an evaluation for every task-day."),
    manual_order: Optional[str] = typer.Option(None, help="Comma-separated employee ids for manual tie-break."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    user: str = typer.Option("cli", help="Acting administrator id."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Close a period: scores, bonuses, ranking and award history."""
    configure_logging(log_level)
    container = _build(snapshot, config)
    pipeline = container.closing_pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        report = pipeline.run(
            _actor(user, organization),
            period,
            strict=strict,
            manual_order=_split(manual_order),
            output_path=output,
            audit_logger=audit_logger,
        )
    except IncentiveError as exc:
        typer.echo(f"Closing failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Closed {report['metadata']['period']} for {len(report['ranking'])} employees. "
        f"Results saved to {output}."
    )


@app.command()
def ranking(
    snapshot: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Organization snapshot (YAML or JSON)."),
    organization: str = typer.Option(..., "--org", help="Organization id."),
    period: str = typer.Option(..., help="Period key: YYYY-MM or YYYY-MM-DD..YYYY-MM-DD."),
    manual_order: Optional[str] = typer.Option(None, help="Comma-separated employee ids for manual tie-break."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print the ranking for a period as JSON."""
    configure_logging(log_level)
    container = _build(snapshot, config)
    try:
        entries = container.closing_pipeline().build_ranking(
            _actor("cli", organization),
            period,
            manual_order=_split(manual_order),
        )
    except IncentiveError as exc:
        typer.echo(f"Ranking failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps([entry.to_document() for entry in entries], ensure_ascii=False, indent=2))


@app.command("tick-challenges")
def tick_challenges(
    snapshot: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Organization snapshot (YAML or JSON)."),
    organization: str = typer.Option(..., "--org", help="Organization id."),
    as_of: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD); defaults to today."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print the time-driven challenge status changes as of a date."""
    configure_logging(log_level)
    container = _build(snapshot, None)
    try:
        today = parse_date(as_of) if as_of else None
    except IncentiveError as exc:
        raise typer.BadParameter(str(exc), param_name="as_of") from exc
    changes = container.challenge_service().tick(organization, today=today)
    typer.echo(
        json.dumps(
            [
                {"challengeId": challenge_id, "from": before.value, "to": after.value}
                for challenge_id, before, after in changes
            ],
            ensure_ascii=False,
            indent=2,
        )
    )


def _split(value: Optional[str]) -> list[str] | None:
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def main() -> None:
    app()


if __name__ == "__main__":
    main()
