"""JSON-file vendor store.

Every write goes through ``_scored``, which recomputes the vendor's
risk score from its current collections before the file is written. A store
lock serializes load, mutate, score and write so a score is never persisted
against a stale snapshot.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from vendorscore.analysis.scorer import score_vendor
from vendorscore.errors import (
    DuplicateVendorError,
    RecordNotFoundError,
    VendorNotFoundError,
    VendorScoreError,
)
from vendorscore.ingest import parse_vendors
from vendorscore.models import (
    Contract,
    ContractClause,
    Evidence,
    Incident,
    LifecycleStage,
    PlanUpdate,
    RiskAssessment,
    RiskLevel,
    RiskTreatmentPlan,
    Service,
    Vendor,
    VendorStatus,
)

logger = logging.getLogger(__name__)

SORT_KEYS: dict[str, Callable[[Vendor], object]] = {
    "score": lambda v: (-v.risk_score, v.name.casefold()),
    "name": lambda v: v.name.casefold(),
    "id": lambda v: v.id,
}


def _scored(vendor: Vendor) -> Vendor:
    return vendor.model_copy(deep=True, update={"risk_score": score_vendor(vendor)})


class VendorStore:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.RLock()

    # --- Queries ---

    def list_vendors(
        self,
        risk_levels: Iterable[RiskLevel] | None = None,
        statuses: Iterable[VendorStatus] | None = None,
        lifecycle_stages: Iterable[LifecycleStage] | None = None,
        query: str | None = None,
        sort: str = "score",
    ) -> list[Vendor]:
        """Vendors matching every given filter.

        An empty or missing filter matches everything; within one filter any
        listed value matches.
        """
        if sort not in SORT_KEYS:
            raise VendorScoreError(f"unknown sort key {sort!r}, expected one of {sorted(SORT_KEYS)}")
        levels = set(risk_levels or ())
        wanted_statuses = set(statuses or ())
        stages = set(lifecycle_stages or ())
        needle = query.casefold() if query else None

        result = []
        for v in self._load():
            if levels and v.risk_level not in levels:
                continue
            if wanted_statuses and v.status not in wanted_statuses:
                continue
            if stages and v.lifecycle_stage not in stages:
                continue
            if needle and not any(
                needle in field.casefold() for field in (v.id, v.name, v.category)
            ):
                continue
            result.append(v)

        return sorted(result, key=SORT_KEYS[sort])

    def get(self, vendor_id: str) -> Vendor:
        for v in self._load():
            if v.id == vendor_id:
                return v
        raise VendorNotFoundError(vendor_id)

    # --- Vendor lifecycle ---

    def create(self, vendor: Vendor) -> Vendor:
        with self._lock:
            vendors = self._load()
            if any(v.id == vendor.id for v in vendors):
                raise DuplicateVendorError(vendor.id)
            scored = _scored(vendor)
            vendors.append(scored)
            self._write(vendors)
        logger.info("created vendor %s (score %d)", scored.id, scored.risk_score)
        return scored

    def update(self, vendor: Vendor) -> Vendor:
        with self._lock:
            vendors = self._load()
            idx = self._index(vendors, vendor.id)
            scored = _scored(vendor)
            vendors[idx] = scored
            self._write(vendors)
        logger.info("updated vendor %s (score %d)", scored.id, scored.risk_score)
        return scored

    def delete(self, vendor_id: str) -> None:
        with self._lock:
            vendors = self._load()
            idx = self._index(vendors, vendor_id)
            del vendors[idx]
            self._write(vendors)
        logger.info("deleted vendor %s", vendor_id)

    def import_vendors(self, incoming: Iterable[Vendor], replace: bool = False) -> int:
        """Upsert vendors by id; with ``replace`` the store is emptied first."""
        with self._lock:
            vendors = [] if replace else self._load()
            positions = {v.id: i for i, v in enumerate(vendors)}
            count = 0
            for vendor in incoming:
                scored = _scored(vendor)
                if scored.id in positions:
                    vendors[positions[scored.id]] = scored
                else:
                    positions[scored.id] = len(vendors)
                    vendors.append(scored)
                count += 1
            self._write(vendors)
        logger.info("imported %d vendor(s) into %s", count, self.path)
        return count

    # --- Owned collections ---

    def add_service(self, vendor_id: str, service: Service) -> Vendor:
        return self._mutate(vendor_id, lambda v: v.services.append(service))

    def add_contract(self, vendor_id: str, contract: Contract) -> Vendor:
        return self._mutate(vendor_id, lambda v: v.contracts.append(contract))

    def update_contract_clauses(
        self,
        vendor_id: str,
        contract_id: str,
        clauses: dict[ContractClause, bool],
    ) -> Vendor:
        """Merge ``clauses`` into an existing contract's clause mapping."""

        def apply(vendor: Vendor) -> None:
            for c in vendor.contracts:
                if c.id == contract_id:
                    c.clauses = {**(c.clauses or {}), **clauses}
                    return
            raise RecordNotFoundError("Contract", contract_id, vendor_id)

        return self._mutate(vendor_id, apply)

    def add_incident(self, vendor_id: str, incident: Incident) -> Vendor:
        return self._mutate(vendor_id, lambda v: v.incidents.append(incident))

    def set_incident_status(self, vendor_id: str, incident_id: str, status: str) -> Vendor:
        def apply(vendor: Vendor) -> None:
            for inc in vendor.incidents:
                if inc.id == incident_id:
                    inc.status = status
                    return
            raise RecordNotFoundError("Incident", incident_id, vendor_id)

        return self._mutate(vendor_id, apply)

    def add_assessment(self, vendor_id: str, assessment: RiskAssessment) -> Vendor:
        def apply(vendor: Vendor) -> None:
            vendor.risk_assessments.append(assessment)
            if assessment.date is None:
                return
            if vendor.last_assessment_date is None or assessment.date > vendor.last_assessment_date:
                vendor.last_assessment_date = assessment.date

        return self._mutate(vendor_id, apply)

    def add_treatment_plan(self, vendor_id: str, plan: RiskTreatmentPlan) -> Vendor:
        return self._mutate(vendor_id, lambda v: v.treatment_plan.append(plan))

    def add_plan_update(self, vendor_id: str, plan_id: str, update: PlanUpdate) -> Vendor:
        def apply(vendor: Vendor) -> None:
            for plan in vendor.treatment_plan:
                if plan.id == plan_id:
                    plan.updates.append(update)
                    return
            raise RecordNotFoundError("Treatment plan", plan_id, vendor_id)

        return self._mutate(vendor_id, apply)

    def add_evidence(self, vendor_id: str, evidence: Evidence) -> Vendor:
        return self._mutate(vendor_id, lambda v: v.evidences.append(evidence))

    def remove_service(self, vendor_id: str, service_id: str) -> Vendor:
        return self._remove(vendor_id, "services", "Service", service_id)

    def remove_evidence(self, vendor_id: str, evidence_id: str) -> Vendor:
        return self._remove(vendor_id, "evidences", "Evidence", evidence_id)

    def remove_contract(self, vendor_id: str, contract_id: str) -> Vendor:
        return self._remove(vendor_id, "contracts", "Contract", contract_id)

    def remove_incident(self, vendor_id: str, incident_id: str) -> Vendor:
        return self._remove(vendor_id, "incidents", "Incident", incident_id)

    def remove_treatment_plan(self, vendor_id: str, plan_id: str) -> Vendor:
        return self._remove(vendor_id, "treatment_plan", "Treatment plan", plan_id)

    # --- Internals ---

    def _remove(self, vendor_id: str, attr: str, kind: str, record_id: str) -> Vendor:
        def apply(vendor: Vendor) -> None:
            records = getattr(vendor, attr)
            for i, record in enumerate(records):
                if record.id == record_id:
                    del records[i]
                    return
            raise RecordNotFoundError(kind, record_id, vendor_id)

        return self._mutate(vendor_id, apply)

    def _mutate(self, vendor_id: str, change: Callable[[Vendor], None]) -> Vendor:
        with self._lock:
            vendors = self._load()
            idx = self._index(vendors, vendor_id)
            working = vendors[idx].model_copy(deep=True)
            change(working)
            scored = _scored(working)
            vendors[idx] = scored
            self._write(vendors)
        logger.info("saved vendor %s (score %d)", scored.id, scored.risk_score)
        return scored

    @staticmethod
    def _index(vendors: list[Vendor], vendor_id: str) -> int:
        for i, v in enumerate(vendors):
            if v.id == vendor_id:
                return i
        raise VendorNotFoundError(vendor_id)

    def _load(self) -> list[Vendor]:
        if not self.path.exists():
            return []
        return parse_vendors(self.path.read_text())

    def _write(self, vendors: list[Vendor]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {"vendors": [v.model_dump(mode="json", by_alias=True) for v in vendors]}
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False))
        tmp.replace(self.path)
