"""Aggregate vendor risk scoring.

A vendor's score combines four sub-scores, each in [0, 100]:

    inherent    (30%)  baseline from the vendor's assigned risk tier
    assessment  (30%)  mean overall score of every assessment (higher = riskier)
    incident    (20%)  accumulated penalty from incident history, capped at 100
    contract    (20%)  percentage of tracked contract clauses marked missing

The weighted sum is rounded half-up to an integer. Every function here is
pure: inputs are never mutated and nothing is cached between calls.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from pydantic import BaseModel

from vendorscore.models import Contract, Incident, RiskAssessment, RiskLevel, Vendor

logger = logging.getLogger(__name__)

# Unknown tier and "no assessments" both fall back to the Low baseline
DEFAULT_BASELINE = 25.0

INHERENT_BASELINES: dict[str, float] = {
    RiskLevel.CRITICAL: 100.0,
    RiskLevel.HIGH: 75.0,
    RiskLevel.MEDIUM: 50.0,
    RiskLevel.LOW: DEFAULT_BASELINE,
}

UNRESOLVED_PENALTIES: dict[str, float] = {
    RiskLevel.CRITICAL: 40.0,
    RiskLevel.HIGH: 20.0,
    RiskLevel.MEDIUM: 10.0,
}
UNRESOLVED_DEFAULT_PENALTY = 5.0
RESOLVED_PENALTY = 2.0
INCIDENT_CAP = 100.0

NO_CONTRACTS_PENALTY = 50.0

WEIGHT_INHERENT = 0.30
WEIGHT_ASSESSMENT = 0.30
WEIGHT_INCIDENT = 0.20
WEIGHT_CONTRACT = 0.20


class RiskBreakdown(BaseModel):
    """Sub-scores behind a vendor's aggregate risk score."""

    inherent: float
    assessment: float
    incident: float
    contract: float
    weighted: float
    score: int


def inherent_score(risk_level: str | None) -> float:
    if risk_level is None:
        return DEFAULT_BASELINE
    return INHERENT_BASELINES.get(risk_level, DEFAULT_BASELINE)


def assessment_score(assessments: Iterable[RiskAssessment], fallback: float) -> float:
    """Mean overall score of all assessments, or ``fallback`` when there are none.

    Every assessment counts equally regardless of type, status or age.
    """
    scores = [a.overall_score for a in assessments]
    if not scores:
        return fallback
    return sum(scores) / len(scores)


def incident_score(incidents: Iterable[Incident]) -> float:
    total = 0.0
    for inc in incidents:
        if inc.status != "Resolved":
            total += UNRESOLVED_PENALTIES.get(inc.severity, UNRESOLVED_DEFAULT_PENALTY)
        else:
            total += RESOLVED_PENALTY
    return min(total, INCIDENT_CAP)


def contract_score(contracts: Iterable[Contract]) -> float:
    """Percentage of tracked clauses marked missing across all contracts.

    Contracts without a clause mapping are skipped. A vendor with no
    contracts at all gets ``NO_CONTRACTS_PENALTY``; a vendor whose contracts
    track no clauses gets 0.
    """
    contracts = list(contracts)
    if not contracts:
        return NO_CONTRACTS_PENALTY

    total_clauses = 0
    missing_clauses = 0
    for c in contracts:
        if c.clauses is None:
            continue
        total_clauses += len(c.clauses)
        missing_clauses += sum(1 for present in c.clauses.values() if not present)

    if total_clauses == 0:
        return 0.0
    return missing_clauses / total_clauses * 100.0


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def breakdown(vendor: Vendor) -> RiskBreakdown:
    inherent = inherent_score(vendor.risk_level)
    assessment = assessment_score(vendor.risk_assessments, fallback=inherent)
    incident = incident_score(vendor.incidents)
    contract = contract_score(vendor.contracts)

    weighted = (
        inherent * WEIGHT_INHERENT
        + assessment * WEIGHT_ASSESSMENT
        + incident * WEIGHT_INCIDENT
        + contract * WEIGHT_CONTRACT
    )
    score = round_half_up(weighted)

    logger.debug(
        "vendor %s: inherent=%.2f assessment=%.2f incident=%.2f contract=%.2f -> %d",
        vendor.id, inherent, assessment, incident, contract, score,
    )
    return RiskBreakdown(
        inherent=inherent,
        assessment=assessment,
        incident=incident,
        contract=contract,
        weighted=weighted,
        score=score,
    )


def score_vendor(vendor: Vendor) -> int:
    """Aggregate risk score of ``vendor``, an int in [0, 100]."""
    return breakdown(vendor).score


def score_vendors(vendors: Iterable[Vendor]) -> list[Vendor]:
    """Return copies of ``vendors`` with ``risk_score`` recomputed."""
    return [v.model_copy(update={"risk_score": score_vendor(v)}) for v in vendors]
