"""Rich terminal reporter."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vendorscore.analysis.scorer import RiskBreakdown
from vendorscore.analysis.summary import PortfolioReport, ScoreBand
from vendorscore.models import RiskLevel, Vendor

BAND_COLORS = {
    ScoreBand.HIGH: "bold red",
    ScoreBand.ELEVATED: "yellow",
    ScoreBand.LOW: "green",
}

TIER_COLORS = {
    RiskLevel.CRITICAL: "bold red",
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "cyan",
}


def render_terminal(report: PortfolioReport, console: Console) -> None:
    """Render a portfolio report to terminal using Rich."""
    console.print()

    s = report.summary
    summary_text = (
        f"[bold red]Critical: {s.by_risk_level[RiskLevel.CRITICAL]}[/]  "
        f"[red]High: {s.by_risk_level[RiskLevel.HIGH]}[/]  "
        f"[yellow]Medium: {s.by_risk_level[RiskLevel.MEDIUM]}[/]  "
        f"[cyan]Low: {s.by_risk_level[RiskLevel.LOW]}[/]  "
        f"| Total: {s.total}  | Avg score: {s.average_score}/100  "
        f"| Open incidents: {s.open_incidents}"
    )
    console.print(Panel(
        summary_text,
        title=f"[bold]Vendor Risk Summary[/]{' — ' + report.source if report.source else ''}",
        subtitle=f"{report.timestamp:%Y-%m-%d %H:%M UTC}",
    ))

    if not report.vendors:
        console.print("\n[dim]No vendors.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Score", width=6, justify="right")
    table.add_column("Tier", width=9)
    table.add_column("ID", width=10)
    table.add_column("Name", ratio=3)
    table.add_column("Inherent", justify="right")
    table.add_column("Assess.", justify="right")
    table.add_column("Incid.", justify="right")
    table.add_column("Contract", justify="right")

    for r in report.sorted_vendors():
        v, b = r.vendor, r.breakdown
        color = BAND_COLORS[r.band]
        table.add_row(
            f"[{color}]{v.risk_score}[/]",
            _tier(v),
            v.id,
            v.name[:60],
            f"{b.inherent:.0f}",
            f"{b.assessment:.1f}",
            f"{b.incident:.0f}",
            f"{b.contract:.1f}",
        )

    console.print(table)


def render_vendor(vendor: Vendor, breakdown: RiskBreakdown, console: Console) -> None:
    """Render one vendor's score breakdown."""
    color = BAND_COLORS[ScoreBand.for_score(vendor.risk_score)]

    table = Table(show_header=True, header_style="bold")
    table.add_column("Component")
    table.add_column("Sub-score", justify="right")
    table.add_column("Weight", justify="right")
    table.add_row("Inherent risk", f"{breakdown.inherent:.1f}", "30%")
    table.add_row(f"Assessments ({len(vendor.risk_assessments)})", f"{breakdown.assessment:.1f}", "30%")
    table.add_row(
        f"Incidents ({len(vendor.open_incidents)} open / {len(vendor.incidents)})",
        f"{breakdown.incident:.1f}",
        "20%",
    )
    table.add_row(f"Contracts ({len(vendor.contracts)})", f"{breakdown.contract:.1f}", "20%")
    table.add_row("[bold]Weighted[/]", f"{breakdown.weighted:.2f}", "")

    console.print(Panel(
        table,
        title=f"[bold]{vendor.name}[/] ({vendor.id}) — {_tier(vendor)}",
        subtitle=f"[{color}]Risk score {vendor.risk_score}/100[/]",
    ))

    for c in vendor.contracts:
        missing = c.missing_clauses()
        if missing:
            console.print(f"  [yellow]{c.name}[/yellow] missing: {', '.join(missing)}")


def render_vendor_list(vendors: list[Vendor], console: Console) -> None:
    """Render vendors in the given order, one row each."""
    if not vendors:
        console.print("[dim]No vendors found matching your filters.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Score", width=6, justify="right")
    table.add_column("ID", width=10)
    table.add_column("Name", ratio=3)
    table.add_column("Tier", width=9)
    table.add_column("Status", ratio=1)
    table.add_column("Stage", ratio=1)

    for v in vendors:
        color = BAND_COLORS[ScoreBand.for_score(v.risk_score)]
        table.add_row(
            f"[{color}]{v.risk_score}[/]",
            v.id,
            v.name[:60],
            _tier(v),
            v.status.value,
            v.lifecycle_stage.value,
        )

    console.print(table)
    console.print(f"[dim]Showing {len(vendors)} vendor(s)[/dim]")


def _tier(vendor: Vendor) -> str:
    if vendor.risk_level is None:
        return "[dim]unrated[/dim]"
    return f"[{TIER_COLORS[vendor.risk_level]}]{vendor.risk_level.value}[/]"
