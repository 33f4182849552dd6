"""Tests for the Typer CLI."""

import json

import pytest
from typer.testing import CliRunner

from vendorscore import __version__
from vendorscore.cli import app
from vendorscore.store import VendorStore

runner = CliRunner()

EXPORT = {
    "vendors": [
        {"id": "V-1001", "name": "CloudScale AWS", "riskLevel": "Low"},
        {"id": "V-1024", "name": "PayGlobal API", "riskLevel": "Critical"},
    ]
}


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


def _invoke(data_dir, *args: str):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args])


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_score_json(tmp_path, data_dir):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(EXPORT))

    result = _invoke(data_dir, "score", str(export), "--format", "json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [(r["vendor"]["id"], r["vendor"]["riskScore"]) for r in data["vendors"]] == [
        ("V-1024", 70),
        ("V-1001", 25),
    ]
    assert not (data_dir / "vendors.json").exists()


def test_score_save_and_report(tmp_path, data_dir):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(EXPORT))
    report_path = tmp_path / "report.md"

    result = _invoke(data_dir, "score", str(export), "--save", "--format", "terminal")
    assert result.exit_code == 0, result.output
    assert len(VendorStore(data_dir / "vendors.json").list_vendors()) == 2

    result = _invoke(data_dir, "report", "--format", "markdown", "--output", str(report_path))
    assert result.exit_code == 0, result.output
    assert "V-1024" in report_path.read_text()


def test_score_requires_input(data_dir):
    result = _invoke(data_dir, "score")
    assert result.exit_code == 1


def test_score_rejects_bad_export(tmp_path, data_dir):
    export = tmp_path / "export.json"
    export.write_text(json.dumps([{"name": "x", "riskAssessments": [{"overallScore": "high"}]}]))
    result = _invoke(data_dir, "score", str(export))
    assert result.exit_code == 1
    assert "vendor #0" in result.output


def test_vendor_workflow(data_dir):
    result = _invoke(data_dir, "add-vendor", "--name", "Acme", "--id", "V-1", "--risk-level", "low")
    assert result.exit_code == 0, result.output
    assert "risk score 25" in result.output

    result = _invoke(data_dir, "add-incident", "V-1", "--summary", "Leak", "--severity", "critical")
    assert result.exit_code == 0, result.output
    assert "risk score 33" in result.output

    store = VendorStore(data_dir / "vendors.json")
    incident_id = store.get("V-1").incidents[0].id
    result = _invoke(data_dir, "resolve-incident", "V-1", incident_id)
    assert result.exit_code == 0, result.output
    assert "risk score 25" in result.output

    result = _invoke(data_dir, "add-assessment", "V-1", "--score", "80")
    assert result.exit_code == 0, result.output
    # 7.5 + 24 + 0.4 + 10 = 41.9
    assert "risk score 42" in result.output

    result = _invoke(
        data_dir, "add-contract", "V-1", "--name", "MSA",
        "--present", "confidentiality", "--missing", "rightToAudit",
    )
    assert result.exit_code == 0, result.output
    # contract 50% missing: 7.5 + 24 + 0.4 + 10 = 41.9
    assert "risk score 42" in result.output

    result = _invoke(data_dir, "add-service", "V-1", "--name", "EC2 Compute")
    assert result.exit_code == 0, result.output

    saved = store.get("V-1")
    assert saved.risk_score == 42
    assert saved.contracts[0].missing_clauses() == ["rightToAudit"]
    assert saved.services[0].name == "EC2 Compute"


def test_add_assessment_out_of_range(data_dir):
    _invoke(data_dir, "add-vendor", "--name", "Acme", "--id", "V-1")
    result = _invoke(data_dir, "add-assessment", "V-1", "--score", "150")
    assert result.exit_code != 0


def test_list_and_show(tmp_path, data_dir):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(EXPORT))
    assert _invoke(data_dir, "import", str(export)).exit_code == 0

    result = _invoke(data_dir, "list", "--risk-level", "critical")
    assert result.exit_code == 0, result.output
    assert "V-1024" in result.output
    assert "V-1001" not in result.output

    result = _invoke(data_dir, "show", "V-1001")
    assert result.exit_code == 0, result.output
    assert "CloudScale AWS" in result.output


def test_show_unknown_vendor(data_dir):
    result = _invoke(data_dir, "show", "V-404")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_delete(data_dir):
    _invoke(data_dir, "add-vendor", "--name", "Acme", "--id", "V-1")
    assert _invoke(data_dir, "delete", "V-1").exit_code == 0
    assert _invoke(data_dir, "delete", "V-1").exit_code == 1


def test_config_show(data_dir):
    result = _invoke(data_dir, "config")
    assert result.exit_code == 0
    assert "terminal" in result.output


def test_unknown_format_rejected(tmp_path, data_dir):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(EXPORT))
    report_path = tmp_path / "report.txt"

    result = _invoke(data_dir, "score", str(export), "--format", "jsno", "--output", str(report_path))
    assert result.exit_code == 2
    assert not report_path.exists()

    result = _invoke(data_dir, "report", "--format", "html")
    assert result.exit_code == 2


def test_format_is_case_insensitive(tmp_path, data_dir):
    export = tmp_path / "export.json"
    export.write_text(json.dumps(EXPORT))
    result = _invoke(data_dir, "score", str(export), "--format", "JSON")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["summary"]["total"] == 2


def test_set_clauses_rescores(data_dir):
    _invoke(data_dir, "add-vendor", "--name", "Acme", "--id", "V-1", "--risk-level", "low")
    _invoke(data_dir, "add-contract", "V-1", "--name", "MSA", "--present", "confidentiality")
    contract_id = VendorStore(data_dir / "vendors.json").get("V-1").contracts[0].id

    result = _invoke(data_dir, "set-clauses", "V-1", contract_id, "--missing", "confidentiality")
    assert result.exit_code == 0, result.output
    # every tracked clause missing: 7.5 + 7.5 + 0 + 20
    assert "risk score 35" in result.output

    assert _invoke(data_dir, "set-clauses", "V-1", contract_id).exit_code == 1
    result = _invoke(data_dir, "set-clauses", "V-1", "C-404", "--present", "confidentiality")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_remove_records(data_dir):
    _invoke(data_dir, "add-vendor", "--name", "Acme", "--id", "V-1", "--risk-level", "low")
    result = _invoke(data_dir, "add-incident", "V-1", "--summary", "Leak", "--severity", "critical")
    assert "risk score 33" in result.output
    incident_id = VendorStore(data_dir / "vendors.json").get("V-1").incidents[0].id

    result = _invoke(data_dir, "remove", "incident", "V-1", incident_id)
    assert result.exit_code == 0, result.output
    assert "risk score 25" in result.output

    _invoke(data_dir, "add-contract", "V-1", "--name", "MSA")
    contract_id = VendorStore(data_dir / "vendors.json").get("V-1").contracts[0].id
    result = _invoke(data_dir, "remove", "contract", "V-1", contract_id)
    assert result.exit_code == 0, result.output
    assert "risk score 25" in result.output

    result = _invoke(data_dir, "remove", "service", "V-1", "S-404")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_plans_and_evidence(data_dir):
    _invoke(data_dir, "add-vendor", "--name", "Acme", "--id", "V-1")
    result = _invoke(
        data_dir, "add-plan", "V-1", "--description", "Enforce MFA", "--due", "2025-06-30",
    )
    assert result.exit_code == 0, result.output
    store = VendorStore(data_dir / "vendors.json")
    plan = store.get("V-1").treatment_plan[0]
    assert plan.due_date.isoformat() == "2025-06-30"

    result = _invoke(data_dir, "plan-update", "V-1", plan.id, "--note", "Admins enrolled")
    assert result.exit_code == 0, result.output

    result = _invoke(
        data_dir, "add-evidence", "V-1", "--type", "ISO 27001", "--name", "Certificate",
        "--expiry", "2026-01-31",
    )
    assert result.exit_code == 0, result.output

    saved = store.get("V-1")
    assert saved.treatment_plan[0].updates[0].note == "Admins enrolled"
    assert saved.evidences[0].expiry_date.isoformat() == "2026-01-31"

    result = _invoke(data_dir, "remove", "plan", "V-1", plan.id)
    assert result.exit_code == 0, result.output
    assert store.get("V-1").treatment_plan == []
