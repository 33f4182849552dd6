"""Markdown report generator."""

from __future__ import annotations

from vendorscore.analysis.summary import PortfolioReport, ScoreBand
from vendorscore.models import RiskLevel

BAND_MARK = {
    ScoreBand.HIGH: "!!",
    ScoreBand.ELEVATED: "!",
    ScoreBand.LOW: "",
}


def render_markdown(report: PortfolioReport) -> str:
    """Render a portfolio report as Markdown."""
    lines: list[str] = []
    s = report.summary

    lines.append("# Vendor Risk Report")
    lines.append("")
    if report.source:
        lines.append(f"- **Source**: {report.source}")
    lines.append(f"- **Date**: {report.timestamp:%Y-%m-%d %H:%M UTC}")
    lines.append(f"- **Vendors**: {s.total}")
    lines.append(f"- **Average risk score**: {s.average_score}/100")
    lines.append(f"- **Open incidents**: {s.open_incidents}")
    lines.append(f"- **Vendors without contracts**: {s.without_contracts}")
    lines.append("")
    lines.append("## Summary")
    lines.append("")
    lines.append("| Critical | High | Medium | Low | Unrated | Total |")
    lines.append("|----------|------|--------|-----|---------|-------|")
    lines.append(
        f"| {s.by_risk_level[RiskLevel.CRITICAL]} | {s.by_risk_level[RiskLevel.HIGH]} | "
        f"{s.by_risk_level[RiskLevel.MEDIUM]} | {s.by_risk_level[RiskLevel.LOW]} | "
        f"{s.unrated} | {s.total} |"
    )
    lines.append("")

    if not report.vendors:
        lines.append("No vendors.")
        return "\n".join(lines)

    lines.append("## Vendors")
    lines.append("")
    lines.append("| Score | Tier | ID | Name | Inherent | Assessment | Incidents | Contracts |")
    lines.append("|------:|------|----|------|---------:|-----------:|----------:|----------:|")

    for r in report.sorted_vendors():
        v, b = r.vendor, r.breakdown
        mark = BAND_MARK[r.band]
        tier = v.risk_level.value if v.risk_level else "-"
        lines.append(
            f"| {v.risk_score}{mark} | {tier} | {v.id} | {v.name[:40]} | "
            f"{b.inherent:.0f} | {b.assessment:.1f} | {b.incident:.0f} | {b.contract:.1f} |"
        )

    lines.append("")
    return "\n".join(lines)
