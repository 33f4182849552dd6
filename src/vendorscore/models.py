"""Vendor aggregate and its owned records."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:6].upper()}"


def _blank_date(value: object) -> object:
    # Forms write "" or "N/A" for dates not yet known
    if isinstance(value, str) and value.strip().casefold() in {"", "n/a"}:
        return None
    return value


OptionalDate = Annotated[dt.date | None, BeforeValidator(_blank_date)]


class RiskLevel(StrEnum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return {
            RiskLevel.CRITICAL: 3,
            RiskLevel.HIGH: 2,
            RiskLevel.MEDIUM: 1,
            RiskLevel.LOW: 0,
        }[self]


class VendorStatus(StrEnum):
    ACTIVE = "Active"
    PENDING_ASSESSMENT = "Pending Assessment"
    REJECTED = "Rejected"
    ONBOARDING = "Onboarding"
    OFFBOARDING = "Offboarding"
    ARCHIVED = "Archived"


class LifecycleStage(StrEnum):
    """ISO 31000 / ISO 27036 vendor lifecycle."""

    CONTEXT_ESTABLISHMENT = "Establish Context"
    PLANNING = "Planning"
    DUE_DILIGENCE = "Due Diligence"
    TREATMENT_CONTRACTING = "Treatment & Contracting"
    ONBOARDING_INTEGRATION = "Integration"
    MONITORING = "Monitoring"
    INCIDENT_MGMT = "Incident Mgmt"
    OFFBOARDING = "Offboarding"


class ContractClause(StrEnum):
    CONFIDENTIALITY = "confidentiality"
    RIGHT_TO_AUDIT = "rightToAudit"
    DATA_BREACH_NOTIFICATION = "dataBreachNotification"
    SUBPROCESSOR_LIABILITY = "subprocessorLiability"
    DISASTER_RECOVERY = "disasterRecovery"
    SECURITY_SLA = "securitySla"
    TERMINATION_RIGHTS = "terminationRights"


class IncidentStatus(StrEnum):
    OPEN = "Open"
    INVESTIGATING = "Investigating"
    MITIGATED = "Mitigated"
    RESOLVED = "Resolved"
    MONITORING = "Monitoring"
    REVIEW_AND_APPROVAL = "Review and Approval"


class Record(BaseModel):
    """Base for everything read from or written to a vendor export.

    Fields are snake_case in Python and camelCase on the wire. Keys this
    package does not model (company profiles, questionnaire answers, ...)
    are kept as extras and written back under their original names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Service(Record):
    id: str = Field(default_factory=lambda: new_id("S"))
    name: str
    description: str = ""
    criticality: str = Field(default="Operational", description="Strategic, Critical or Operational")
    owner: str = Field(default="", description="Internal owner")
    sla: str = ""


class Evidence(Record):
    id: str = Field(default_factory=lambda: new_id("E"))
    type: str = Field(description="ISO 27001, SOC 2 Type II, PCI DSS, ...")
    name: str
    issue_date: OptionalDate = None
    expiry_date: OptionalDate = None
    status: str = "Pending Review"
    service_id: str | None = None


class Contract(Record):
    id: str = Field(default_factory=lambda: new_id("C"))
    name: str
    type: str = Field(default="MSA", description="MSA, DPA, SLA, NDA or Addendum")
    parent_contract_id: str | None = None
    start_date: OptionalDate = None
    renewal_date: OptionalDate = None
    description: str | None = None
    service_ids: list[str] = Field(default_factory=list)
    clauses: dict[ContractClause, bool] | None = None

    def missing_clauses(self) -> list[ContractClause]:
        """Clauses listed on this contract but marked absent."""
        if not self.clauses:
            return []
        return [name for name, present in self.clauses.items() if not present]


class Incident(Record):
    id: str = Field(default_factory=lambda: new_id("INC"))
    date: OptionalDate = Field(default_factory=dt.date.today)
    summary: str
    description: str | None = None
    severity: RiskLevel
    # Free text; only the literal "Resolved" counts as resolved
    status: str = IncidentStatus.OPEN.value
    detection_method: str | None = None
    service_id: str | None = None

    # Post-mortem
    date_detected: OptionalDate = None
    impact_description: str | None = None
    affected_assets: str | None = None
    root_cause_analysis: str | None = None
    remediation_steps: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.status == IncidentStatus.RESOLVED


class RiskScenario(Record):
    threat: str
    vulnerability: str = ""
    likelihood: str = ""
    impact: str = ""
    risk_level: RiskLevel | None = None


class RiskAssessment(Record):
    id: str = Field(default_factory=lambda: new_id("RA"))
    type: str = Field(default="Periodic", description="Onboarding, Periodic or Re-assessment")
    status: str | None = None
    date: OptionalDate = Field(default_factory=dt.date.today)
    questionnaire_template_name: str | None = None
    service_id: str | None = None
    overall_score: float = Field(ge=0.0, le=100.0, description="Higher means riskier")
    scenarios: list[RiskScenario] = Field(default_factory=list)


class PlanUpdate(Record):
    id: str = Field(default_factory=lambda: new_id("UPD"))
    date: OptionalDate = Field(default_factory=dt.date.today)
    note: str
    author: str = ""


class RiskTreatmentPlan(Record):
    id: str = Field(default_factory=lambda: new_id("TP"))
    risk_id: str = ""
    action: str = Field(default="Mitigate", description="Mitigate, Transfer, Avoid or Accept")
    description: str
    owner: str = ""
    due_date: OptionalDate = None
    status: str = "Pending"
    service_id: str | None = None
    incident_id: str | None = None
    updates: list[PlanUpdate] = Field(default_factory=list)


class Vendor(Record):
    """A tracked third party and everything it owns."""

    id: str = Field(default_factory=lambda: new_id("V"))
    name: str
    category: str = ""
    status: VendorStatus = VendorStatus.PENDING_ASSESSMENT
    lifecycle_stage: LifecycleStage = LifecycleStage.DUE_DILIGENCE
    risk_level: RiskLevel | None = None
    last_assessment_date: OptionalDate = None
    description: str = ""
    contact_email: str | None = None
    domains: list[str] = Field(default_factory=list)

    services: list[Service] = Field(default_factory=list)
    evidences: list[Evidence] = Field(default_factory=list)
    contracts: list[Contract] = Field(default_factory=list)
    incidents: list[Incident] = Field(default_factory=list)
    risk_assessments: list[RiskAssessment] = Field(default_factory=list)
    treatment_plan: list[RiskTreatmentPlan] = Field(default_factory=list)

    # Derived: overwritten by the scorer on every save
    risk_score: int = Field(default=0, ge=0, le=100)

    @property
    def open_incidents(self) -> list[Incident]:
        return [i for i in self.incidents if not i.is_resolved]
