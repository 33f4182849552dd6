"""JSON report exporter."""

from __future__ import annotations

import json

from vendorscore.analysis.summary import PortfolioReport


def render_json(report: PortfolioReport) -> str:
    """Render a portfolio report as JSON string."""
    data = report.model_dump(mode="json", by_alias=True)
    data["vendors"] = sorted(data["vendors"], key=lambda r: r["vendor"]["riskScore"], reverse=True)
    return json.dumps(data, indent=2, ensure_ascii=False)
