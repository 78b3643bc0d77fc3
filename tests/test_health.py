import datetime
import json

from sitepush.health import RunReport


def test_report_writes_stages_and_deduplicated_errors(tmp_path):
    report = RunReport("deploy", tmp_path / "_health", task="deploy", today=datetime.date(2024, 1, 6))
    report.record_stage("build")
    report.record_error("sync failed")
    report.record_error("sync failed")
    report.record_error("  ")

    path = report.write(last_run="2024-01-06T10:00:00Z")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert path == tmp_path / "_health" / "deploy.json"
    assert payload == {
        "last_run": "2024-01-06T10:00:00Z",
        "task": "deploy",
        "today": "2024-01-06",
        "ok": False,
        "stages": ["build"],
        "errors": ["sync failed"],
    }


def test_clean_run_is_ok(tmp_path):
    report = RunReport("deploy", tmp_path)
    payload = json.loads(report.write().read_text(encoding="utf-8"))
    assert payload["ok"] is True
    assert payload["last_run"].endswith("Z")


def test_errors_are_capped(tmp_path):
    report = RunReport("deploy", tmp_path)
    for index in range(30):
        report.record_error(f"failure {index}")
    payload = json.loads(report.write().read_text(encoding="utf-8"))
    assert len(payload["errors"]) == 20
    assert payload["errors"][0] == "failure 0"
