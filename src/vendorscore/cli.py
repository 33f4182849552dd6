"""CLI entry point using Typer."""

from __future__ import annotations

import asyncio
import datetime as dt
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from vendorscore import __version__
from vendorscore.analysis.scorer import breakdown
from vendorscore.analysis.summary import PortfolioReport
from vendorscore.config import AppConfig, ReportFormat, load_config
from vendorscore.errors import VendorScoreError
from vendorscore.models import (
    Contract,
    ContractClause,
    Evidence,
    Incident,
    IncidentStatus,
    LifecycleStage,
    PlanUpdate,
    RiskAssessment,
    RiskLevel,
    RiskTreatmentPlan,
    Service,
    Vendor,
    VendorStatus,
)
from vendorscore.store import VendorStore

app = typer.Typer(
    name="vendorscore",
    help="Third-party vendor risk register — track vendors, score them, report.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"vendorscore {__version__}")
        raise typer.Exit()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@contextmanager
def _user_errors() -> Iterator[None]:
    try:
        yield
    except (VendorScoreError, ValidationError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


def _store(ctx: typer.Context) -> VendorStore:
    cfg: AppConfig = ctx.obj
    return VendorStore(cfg.store_path)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Config file path")
    ] = None,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", "-d", help="Vendor store directory")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """vendorscore — third-party vendor risk register."""
    cfg = load_config(config)
    if data_dir:
        cfg.data_dir = data_dir
    _setup_logging("DEBUG" if verbose else cfg.log_level)
    ctx.obj = cfg


# --- Scoring and reporting ---


@app.command()
def score(
    ctx: typer.Context,
    file: Annotated[Path | None, typer.Argument(help="Vendor export (JSON)")] = None,
    url: Annotated[str | None, typer.Option("--url", "-u", help="Fetch export from URL")] = None,
    format: Annotated[
        ReportFormat | None,
        typer.Option("--format", "-f", case_sensitive=False, help="Output format"),
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output file path")
    ] = None,
    save: Annotated[bool, typer.Option("--save", help="Import scored vendors into the store")] = False,
) -> None:
    """Score every vendor in an export and print a report."""
    cfg: AppConfig = ctx.obj
    if file is None and url is None:
        console.print("[red]Give an export FILE or --url.[/red]")
        raise typer.Exit(1)

    with _user_errors():
        vendors = asyncio.run(_fetch(url)) if url else _load(file)
        if save:
            count = _store(ctx).import_vendors(vendors)
            console.print(f"[green]Saved {count} vendor(s) to {cfg.store_path}[/green]")
    logger.info("scored %d vendor(s) from %s", len(vendors), url or file)

    if format:
        cfg.format = format
    cfg.output = output or cfg.output
    _output_report(PortfolioReport.build(vendors, source=str(url or file)), cfg)


async def _fetch(url: str) -> list[Vendor]:
    from vendorscore.ingest import fetch_vendors

    return await fetch_vendors(url)


def _load(path: Path) -> list[Vendor]:
    from vendorscore.ingest import load_vendors

    return load_vendors(path)


@app.command()
def report(
    ctx: typer.Context,
    format: Annotated[
        ReportFormat | None,
        typer.Option("--format", "-f", case_sensitive=False, help="Output format"),
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output file path")
    ] = None,
) -> None:
    """Portfolio report of every vendor in the store."""
    cfg: AppConfig = ctx.obj
    store = _store(ctx)
    with _user_errors():
        vendors = store.list_vendors()

    if format:
        cfg.format = format
    cfg.output = output or cfg.output
    _output_report(PortfolioReport.build(vendors, source=str(store.path)), cfg)


def _output_report(result: PortfolioReport, cfg: AppConfig) -> None:
    if cfg.format == ReportFormat.JSON:
        from vendorscore.reporters.json_report import render_json

        text = render_json(result)
    elif cfg.format == ReportFormat.MARKDOWN:
        from vendorscore.reporters.markdown import render_markdown

        text = render_markdown(result)
    else:
        from vendorscore.reporters.terminal import render_terminal

        render_terminal(result, console)
        return

    if cfg.output:
        Path(cfg.output).write_text(text)
        console.print(f"\n[green]Report saved to {cfg.output}[/green]")
    else:
        typer.echo(text)


# --- Vendor store ---


@app.command(name="import")
def import_(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Vendor export (JSON)")],
    replace: Annotated[bool, typer.Option("--replace", help="Drop existing vendors first")] = False,
) -> None:
    """Import vendors from an export into the store."""
    store = _store(ctx)
    with _user_errors():
        count = store.import_vendors(_load(file), replace=replace)
    console.print(f"[green]Imported {count} vendor(s) into {store.path}[/green]")


@app.command(name="list")
def list_(
    ctx: typer.Context,
    risk_level: Annotated[
        list[RiskLevel] | None,
        typer.Option("--risk-level", "-r", case_sensitive=False, help="Filter by tier"),
    ] = None,
    status: Annotated[
        list[VendorStatus] | None,
        typer.Option("--status", case_sensitive=False, help="Filter by vendor status"),
    ] = None,
    stage: Annotated[
        list[LifecycleStage] | None,
        typer.Option("--stage", case_sensitive=False, help="Filter by lifecycle stage"),
    ] = None,
    search: Annotated[str | None, typer.Option("--search", "-q", help="Match id, name or category")] = None,
    sort: Annotated[str | None, typer.Option("--sort", help="score, name or id")] = None,
) -> None:
    """List vendors in the store."""
    from vendorscore.reporters.terminal import render_vendor_list

    cfg: AppConfig = ctx.obj
    with _user_errors():
        vendors = _store(ctx).list_vendors(
            risk_levels=risk_level,
            statuses=status,
            lifecycle_stages=stage,
            query=search,
            sort=sort or cfg.sort,
        )
    render_vendor_list(vendors, console)


@app.command()
def show(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
) -> None:
    """Show the score breakdown of one vendor."""
    from vendorscore.reporters.terminal import render_vendor

    with _user_errors():
        vendor = _store(ctx).get(vendor_id)
    render_vendor(vendor, breakdown(vendor), console)


@app.command(name="add-vendor")
def add_vendor(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", "-n", help="Vendor name")],
    vendor_id: Annotated[str | None, typer.Option("--id", help="Vendor id")] = None,
    category: Annotated[str, typer.Option("--category")] = "",
    risk_level: Annotated[
        RiskLevel | None,
        typer.Option("--risk-level", "-r", case_sensitive=False, help="Inherent risk tier"),
    ] = None,
    email: Annotated[str | None, typer.Option("--email", help="Contact email")] = None,
) -> None:
    """Register a new vendor."""
    fields: dict[str, object] = {
        "name": name,
        "category": category,
        "risk_level": risk_level,
        "contact_email": email,
    }
    if vendor_id:
        fields["id"] = vendor_id
    with _user_errors():
        vendor = _store(ctx).create(Vendor(**fields))
    _saved(vendor)


@app.command()
def delete(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
) -> None:
    """Remove a vendor from the store."""
    with _user_errors():
        _store(ctx).delete(vendor_id)
    console.print(f"[green]Deleted {vendor_id}[/green]")


@app.command(name="add-service")
def add_service(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    name: Annotated[str, typer.Option("--name", "-n", help="Service name")],
    criticality: Annotated[str, typer.Option("--criticality")] = "Operational",
    owner: Annotated[str, typer.Option("--owner", help="Internal owner")] = "",
    sla: Annotated[str, typer.Option("--sla")] = "",
) -> None:
    """Attach a service to a vendor."""
    with _user_errors():
        service = Service(name=name, criticality=criticality, owner=owner, sla=sla)
        vendor = _store(ctx).add_service(vendor_id, service)
    _saved(vendor)


@app.command(name="add-contract")
def add_contract(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    name: Annotated[str, typer.Option("--name", "-n", help="Contract name")],
    type: Annotated[str, typer.Option("--type", "-t", help="MSA, DPA, SLA, NDA, Addendum")] = "MSA",
    present: Annotated[
        list[ContractClause] | None,
        typer.Option("--present", "-p", case_sensitive=False, help="Clause included in the contract"),
    ] = None,
    missing: Annotated[
        list[ContractClause] | None,
        typer.Option("--missing", "-m", case_sensitive=False, help="Clause tracked but absent"),
    ] = None,
) -> None:
    """Attach a contract and its clause checklist to a vendor."""
    clauses = _clause_map(present, missing)
    with _user_errors():
        contract = Contract(name=name, type=type, clauses=clauses or None)
        vendor = _store(ctx).add_contract(vendor_id, contract)
    _saved(vendor)


def _clause_map(
    present: list[ContractClause] | None, missing: list[ContractClause] | None
) -> dict[ContractClause, bool]:
    clauses: dict[ContractClause, bool] = {}
    for clause in present or []:
        clauses[clause] = True
    for clause in missing or []:
        clauses[clause] = False
    return clauses


@app.command(name="set-clauses")
def set_clauses(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    contract_id: Annotated[str, typer.Argument(help="Contract id")],
    present: Annotated[
        list[ContractClause] | None,
        typer.Option("--present", "-p", case_sensitive=False, help="Clause now included"),
    ] = None,
    missing: Annotated[
        list[ContractClause] | None,
        typer.Option("--missing", "-m", case_sensitive=False, help="Clause now absent"),
    ] = None,
) -> None:
    """Update the clause checklist of an existing contract."""
    clauses = _clause_map(present, missing)
    if not clauses:
        console.print("[red]Give at least one --present or --missing clause.[/red]")
        raise typer.Exit(1)
    with _user_errors():
        vendor = _store(ctx).update_contract_clauses(vendor_id, contract_id, clauses)
    _saved(vendor)


@app.command(name="add-incident")
def add_incident(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    summary: Annotated[str, typer.Option("--summary", "-s", help="What happened")],
    severity: Annotated[
        RiskLevel, typer.Option("--severity", case_sensitive=False, help="Incident severity")
    ] = RiskLevel.MEDIUM,
    status: Annotated[str, typer.Option("--status", help="Incident status")] = IncidentStatus.OPEN.value,
    date: Annotated[
        dt.datetime | None, typer.Option("--date", formats=["%Y-%m-%d"], help="Occurrence date")
    ] = None,
) -> None:
    """Log an incident against a vendor."""
    with _user_errors():
        incident = Incident(
            summary=summary,
            severity=severity,
            status=status,
            date=date.date() if date else dt.date.today(),
        )
        vendor = _store(ctx).add_incident(vendor_id, incident)
    console.print(f"Logged incident {incident.id}")
    _saved(vendor)


@app.command(name="resolve-incident")
def resolve_incident(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    incident_id: Annotated[str, typer.Argument(help="Incident id")],
) -> None:
    """Mark an incident resolved."""
    with _user_errors():
        vendor = _store(ctx).set_incident_status(vendor_id, incident_id, IncidentStatus.RESOLVED.value)
    _saved(vendor)


@app.command(name="add-assessment")
def add_assessment(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    overall_score: Annotated[
        float, typer.Option("--score", min=0.0, max=100.0, help="Overall score, higher is riskier")
    ],
    type: Annotated[str, typer.Option("--type", "-t", help="Onboarding, Periodic, Re-assessment")] = "Periodic",
) -> None:
    """Record a completed risk assessment."""
    with _user_errors():
        assessment = RiskAssessment(type=type, overall_score=overall_score, status="Completed")
        vendor = _store(ctx).add_assessment(vendor_id, assessment)
    _saved(vendor)


@app.command(name="add-evidence")
def add_evidence(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    type: Annotated[str, typer.Option("--type", "-t", help="ISO 27001, SOC 2 Type II, ...")],
    name: Annotated[str, typer.Option("--name", "-n", help="Document name")],
    expiry: Annotated[
        dt.datetime | None, typer.Option("--expiry", formats=["%Y-%m-%d"], help="Expiry date")
    ] = None,
    service_id: Annotated[str | None, typer.Option("--service", help="Covered service id")] = None,
) -> None:
    """Attach a certificate or audit report to a vendor."""
    with _user_errors():
        evidence = Evidence(
            type=type,
            name=name,
            expiry_date=expiry.date() if expiry else None,
            service_id=service_id,
        )
        vendor = _store(ctx).add_evidence(vendor_id, evidence)
    console.print(f"Added evidence {evidence.id}")
    _saved(vendor)


@app.command(name="add-plan")
def add_plan(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    description: Annotated[str, typer.Option("--description", "-D", help="Treatment to apply")],
    action: Annotated[str, typer.Option("--action", help="Mitigate, Transfer, Avoid, Accept")] = "Mitigate",
    owner: Annotated[str, typer.Option("--owner")] = "",
    due: Annotated[
        dt.datetime | None, typer.Option("--due", formats=["%Y-%m-%d"], help="Due date")
    ] = None,
    incident_id: Annotated[
        str | None, typer.Option("--incident", help="Incident this plan remediates")
    ] = None,
) -> None:
    """Open a risk treatment plan."""
    with _user_errors():
        plan = RiskTreatmentPlan(
            description=description,
            action=action,
            owner=owner,
            due_date=due.date() if due else None,
            incident_id=incident_id,
        )
        vendor = _store(ctx).add_treatment_plan(vendor_id, plan)
    console.print(f"Opened plan {plan.id}")
    _saved(vendor)


@app.command(name="plan-update")
def plan_update(
    ctx: typer.Context,
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    plan_id: Annotated[str, typer.Argument(help="Treatment plan id")],
    note: Annotated[str, typer.Option("--note", help="Progress note")],
    author: Annotated[str, typer.Option("--author")] = "",
) -> None:
    """Append a progress note to a treatment plan."""
    with _user_errors():
        vendor = _store(ctx).add_plan_update(vendor_id, plan_id, PlanUpdate(note=note, author=author))
    _saved(vendor)


class RecordKind(StrEnum):
    SERVICE = "service"
    EVIDENCE = "evidence"
    CONTRACT = "contract"
    INCIDENT = "incident"
    PLAN = "plan"


@app.command()
def remove(
    ctx: typer.Context,
    kind: Annotated[RecordKind, typer.Argument(case_sensitive=False, help="Record type")],
    vendor_id: Annotated[str, typer.Argument(help="Vendor id")],
    record_id: Annotated[str, typer.Argument(help="Record id")],
) -> None:
    """Remove a service, evidence, contract, incident or plan from a vendor."""
    store = _store(ctx)
    removers = {
        RecordKind.SERVICE: store.remove_service,
        RecordKind.EVIDENCE: store.remove_evidence,
        RecordKind.CONTRACT: store.remove_contract,
        RecordKind.INCIDENT: store.remove_incident,
        RecordKind.PLAN: store.remove_treatment_plan,
    }
    with _user_errors():
        vendor = removers[kind](vendor_id, record_id)
    console.print(f"Removed {kind.value} {record_id}")
    _saved(vendor)


def _saved(vendor: Vendor) -> None:
    console.print(f"[green]Saved {vendor.id}[/green] — risk score [bold]{vendor.risk_score}[/bold]")


@app.command(name="config")
def config_show(ctx: typer.Context) -> None:
    """Show current configuration."""
    cfg: AppConfig = ctx.obj
    console.print_json(json.dumps(cfg.model_dump(), default=str))
