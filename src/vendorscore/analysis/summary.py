"""Portfolio-level aggregates over scored vendors."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from vendorscore.analysis.scorer import RiskBreakdown, breakdown, round_half_up
from vendorscore.models import RiskLevel, Vendor


class ScoreBand(StrEnum):
    HIGH = "high"
    ELEVATED = "elevated"
    LOW = "low"

    @classmethod
    def for_score(cls, score: int) -> ScoreBand:
        if score >= 70:
            return cls.HIGH
        if score >= 40:
            return cls.ELEVATED
        return cls.LOW


class PortfolioSummary(BaseModel):
    """Counts and averages across a set of vendors."""

    total: int = 0
    by_risk_level: dict[RiskLevel, int] = Field(
        default_factory=lambda: {level: 0 for level in RiskLevel}
    )
    by_band: dict[ScoreBand, int] = Field(
        default_factory=lambda: {band: 0 for band in ScoreBand}
    )
    unrated: int = Field(default=0, description="Vendors with no assigned risk tier")
    average_score: int = 0
    open_incidents: int = 0
    without_contracts: int = 0

    @classmethod
    def from_vendors(cls, vendors: list[Vendor]) -> PortfolioSummary:
        summary = cls(total=len(vendors))
        for v in vendors:
            if v.risk_level is None:
                summary.unrated += 1
            else:
                summary.by_risk_level[v.risk_level] += 1
            summary.by_band[ScoreBand.for_score(v.risk_score)] += 1
            summary.open_incidents += len(v.open_incidents)
            if not v.contracts:
                summary.without_contracts += 1
        if vendors:
            summary.average_score = round_half_up(
                sum(v.risk_score for v in vendors) / len(vendors)
            )
        return summary


class VendorReport(BaseModel):
    vendor: Vendor
    breakdown: RiskBreakdown

    @property
    def band(self) -> ScoreBand:
        return ScoreBand.for_score(self.vendor.risk_score)


class PortfolioReport(BaseModel):
    """Everything a reporter needs to render one run."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: str = ""
    summary: PortfolioSummary = Field(default_factory=PortfolioSummary)
    vendors: list[VendorReport] = Field(default_factory=list)

    @classmethod
    def build(cls, vendors: list[Vendor], source: str = "") -> PortfolioReport:
        return cls(
            source=source,
            summary=PortfolioSummary.from_vendors(vendors),
            vendors=[VendorReport(vendor=v, breakdown=breakdown(v)) for v in vendors],
        )

    def sorted_vendors(self) -> list[VendorReport]:
        """Return vendors sorted by risk score descending."""
        return sorted(self.vendors, key=lambda r: r.vendor.risk_score, reverse=True)
