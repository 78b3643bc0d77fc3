import json
import pathlib

from sitepush import cli


def _config(tmp_path: pathlib.Path, **extra) -> pathlib.Path:
    data = {
        "bucket": "s3://example.test",
        "redirects": {"swap": "/2018/01/02/in-defence-of-swap.html"},
    }
    data.update(extra)
    path = tmp_path / "deploy.json"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def test_plan_lists_tiers_redirects_and_commands(tmp_path, capsys):
    path = _config(tmp_path)
    assert cli.main(["plan", "--config", str(path), "--today", "2024-01-06"]) == 0
    out = capsys.readouterr().out
    assert "Deployment plan for s3://example.test (2024-01-06)" in out
    assert "static: max-age=86400 (24h)" in out
    assert "fresh: max-age=300 (5m)" in out
    assert "not-found: max-age=120 (2m)" in out
    assert "generic: max-age=3600 (1h)" in out
    assert "2023/12/31/* .. 2024/01/06/*" in out
    assert "/swap -> /2018/01/02/in-defence-of-swap.html" in out
    assert "JEKYLL_ENV=production jekyll build" in out
    assert "--delete-removed" in out
    assert "x-amz-website-redirect-location:/2018/01/02/in-defence-of-swap.html s3://example.test/swap" in out


def test_plan_without_bucket_fails(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("SITEPUSH_BUCKET", raising=False)
    path = tmp_path / "deploy.json"
    path.write_text("{}\n", encoding="utf-8")
    assert cli.main(["plan", "--config", str(path)]) == 1
    assert "No bucket configured" in capsys.readouterr().err


def test_dry_run_prints_commands_without_touching_disk(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("SITEPUSH_BUCKET", raising=False)
    path = _config(tmp_path)
    assert cli.main(["deploy", "--dry-run", "--config", str(path), "--today", "2024-01-06"]) == 0
    out = capsys.readouterr().out
    assert "(dry-run) $ JEKYLL_ENV=production jekyll build" in out
    assert "(dry-run) $ s3cmd sync" in out
    assert "(dry-run) $ s3cmd modify" in out
    assert "deploy completed: build, redirect-stubs, sync, set-headers, redirects" in out
    assert not (tmp_path / "_deploy").exists()
    assert not (tmp_path / "_health").exists()


def test_failure_is_reported_and_recorded(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("SITEPUSH_BUCKET", raising=False)
    path = _config(tmp_path, generator=["sitepush-missing-generator-xyz"])
    assert cli.main(["build", "--config", str(path)]) == 1
    assert "[deploy] error:" in capsys.readouterr().err
    payload = json.loads((tmp_path / "_health" / "deploy.json").read_text(encoding="utf-8"))
    assert payload["ok"] is False
    assert payload["stages"] == []


def test_list_tasks(capsys):
    assert cli.main(["--list"]) == 0
    out = capsys.readouterr().out
    for name in ("build", "sync", "set-headers", "redirects", "deploy", "plan"):
        assert name in out


def test_misspelled_config_path_aborts(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("SITEPUSH_BUCKET", "s3://live.example")
    missing = tmp_path / "deplyo.json"
    assert cli.main(["sync", "--dry-run", "--config", str(missing)]) == 1
    err = capsys.readouterr().err
    assert "not found" in err
    assert not (tmp_path / "_health").exists()
