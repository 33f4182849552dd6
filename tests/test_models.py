"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from vendorscore.models import (
    Contract,
    ContractClause,
    Incident,
    RiskAssessment,
    RiskLevel,
    Vendor,
    VendorStatus,
)


def test_risk_level_rank():
    assert RiskLevel.CRITICAL.rank > RiskLevel.HIGH.rank > RiskLevel.MEDIUM.rank
    assert RiskLevel.LOW.rank == 0


def test_vendor_accepts_camel_case_export():
    v = Vendor.model_validate({
        "id": "V-1024",
        "name": "PayGlobal API",
        "status": "Active",
        "lifecycleStage": "Incident Mgmt",
        "riskLevel": "High",
        "riskScore": 12,
        "riskAssessments": [{"overallScore": 40, "type": "Onboarding", "date": "2024-01-15"}],
        "contracts": [{"name": "DPA", "clauses": {"rightToAudit": False}}],
    })
    assert v.risk_level == RiskLevel.HIGH
    assert v.status == VendorStatus.ACTIVE
    assert v.risk_assessments[0].overall_score == 40.0
    assert v.contracts[0].clauses == {ContractClause.RIGHT_TO_AUDIT: False}


def test_vendor_accepts_snake_case_fields():
    v = Vendor(name="Acme", risk_level=RiskLevel.LOW)
    assert v.risk_level == RiskLevel.LOW
    assert v.id.startswith("V-")


def test_vendor_dumps_camel_case():
    data = Vendor(name="Acme").model_dump(mode="json", by_alias=True)
    assert "riskScore" in data
    assert "riskAssessments" in data
    assert data["riskLevel"] is None


def test_vendor_defaults():
    v = Vendor(name="Acme")
    assert v.risk_score == 0
    assert v.incidents == []
    assert v.contracts == []
    assert v.open_incidents == []


def test_incident_resolved_is_exact_match():
    assert Incident(summary="x", severity=RiskLevel.LOW, status="Resolved").is_resolved
    assert not Incident(summary="x", severity=RiskLevel.LOW, status="resolved").is_resolved
    assert not Incident(summary="x", severity=RiskLevel.LOW).is_resolved


def test_incident_status_is_free_text():
    inc = Incident(summary="x", severity=RiskLevel.HIGH, status="Awaiting vendor")
    assert inc.status == "Awaiting vendor"


def test_open_incidents():
    v = Vendor(name="Acme", incidents=[
        Incident(summary="a", severity=RiskLevel.HIGH, status="Open"),
        Incident(summary="b", severity=RiskLevel.HIGH, status="Resolved"),
    ])
    assert [i.summary for i in v.open_incidents] == ["a"]


def test_contract_missing_clauses():
    c = Contract(name="MSA", clauses={
        ContractClause.CONFIDENTIALITY: True,
        ContractClause.SECURITY_SLA: False,
    })
    assert c.missing_clauses() == [ContractClause.SECURITY_SLA]
    assert Contract(name="NDA").missing_clauses() == []


def test_contract_rejects_unknown_clause():
    with pytest.raises(ValidationError):
        Contract(name="MSA", clauses={"bribery": True})


def test_assessment_score_must_be_numeric_and_in_range():
    with pytest.raises(ValidationError):
        RiskAssessment(overall_score="high")
    with pytest.raises(ValidationError):
        RiskAssessment(overall_score=150)
    with pytest.raises(ValidationError):
        RiskAssessment(overall_score=-1)


def test_vendor_rejects_unknown_tier():
    with pytest.raises(ValidationError):
        Vendor(name="Acme", risk_level="Catastrophic")


@pytest.mark.parametrize("blank", ["", "N/A", "n/a", "  "])
def test_blank_dates_read_as_missing(blank):
    v = Vendor.model_validate({"name": "Acme", "lastAssessmentDate": blank})
    assert v.last_assessment_date is None
    c = Contract.model_validate({"name": "Addendum", "renewalDate": blank, "startDate": blank})
    assert c.renewal_date is None
    assert c.start_date is None


def test_blank_incident_date_is_kept_missing():
    inc = Incident.model_validate({"summary": "x", "severity": "Low", "date": ""})
    assert inc.date is None
    assert Incident(summary="x", severity=RiskLevel.LOW).date is not None


def test_unmodelled_keys_survive_a_dump():
    raw = {
        "name": "CloudScale AWS",
        "companyProfile": {"foundationYear": 2006, "taxId": "US-99-999999"},
        "securityProfile": {"mfa": "Enforced"},
        "incidents": [{
            "summary": "S3 misconfiguration",
            "severity": "High",
            "status": "Resolved",
            "dateDetected": "2024-02-01",
            "rootCauseAnalysis": "Public ACL left on bucket",
            "lessonsLearned": "Add config rule",
        }],
        "riskAssessments": [{
            "overallScore": 40,
            "answers": {"q1": "yes"},
            "scenarios": [{
                "threat": "Ransomware",
                "vulnerability": "Unpatched VPN",
                "likelihood": "Possible",
                "impact": "Major",
                "riskLevel": "High",
            }],
        }],
    }
    v = Vendor.model_validate(raw)
    assert v.incidents[0].root_cause_analysis == "Public ACL left on bucket"
    assert v.incidents[0].date_detected.isoformat() == "2024-02-01"
    assert v.risk_assessments[0].scenarios[0].risk_level == RiskLevel.HIGH

    data = v.model_dump(mode="json", by_alias=True)
    assert data["companyProfile"] == raw["companyProfile"]
    assert data["securityProfile"] == {"mfa": "Enforced"}
    assert data["incidents"][0]["rootCauseAnalysis"] == "Public ACL left on bucket"
    assert data["incidents"][0]["lessonsLearned"] == "Add config rule"
    assert data["riskAssessments"][0]["answers"] == {"q1": "yes"}
    assert data["riskAssessments"][0]["scenarios"][0]["threat"] == "Ransomware"
