"""Readiness checks."""
import json

import pytest

from notifications_api import readiness
from notifications_api.readiness import is_ready, run_all_checks


def test_config_check_reports_missing_settings(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    ok, msg = readiness.check_config()
    assert not ok
    assert "database_url" in msg.lower()


def test_is_ready_requires_config_packages_and_database():
    ready, summary = is_ready({
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (True, "ok"),
    })
    assert ready
    assert summary == {"config": "ok", "packages": "ok", "database": "ok"}

    ready, summary = is_ready({
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (False, "connection refused"),
    })
    assert not ready
    assert summary["database"] == "connection refused"


async def test_database_check_against_sqlite(monkeypatch, database_url):
    monkeypatch.setenv("DATABASE_URL", database_url)
    checks = await readiness.run_all_checks_async()
    assert checks["config"] == (True, "ok")
    assert checks["database"] == (True, "ok")


@pytest.mark.integration
def test_readiness_all_checks_pass():
    """Config and packages must pass; the database is whatever DATABASE_URL points to."""
    checks = run_all_checks()
    for name in ("config", "packages"):
        ok, msg = checks.get(name, (False, "missing"))
        assert ok, f"readiness {name}: {msg}"
    ready, summary = is_ready(checks)
    if not ready:
        report = "\n".join(f"  {name}: {msg}" for name, msg in summary.items())
        pytest.fail(f"Readiness checks failed:\n{report}")


def test_main_exit_code_and_json(monkeypatch, capsys):
    monkeypatch.setattr(readiness, "run_all_checks", lambda: {
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (False, "refused"),
    })
    assert readiness.main(["--json"]) == 1
    assert json.loads(capsys.readouterr().out) == {
        "ready": False,
        "checks": {"config": "ok", "packages": "ok", "database": "refused"},
    }

    monkeypatch.setattr(readiness, "run_all_checks", lambda: {
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (True, "ok"),
    })
    assert readiness.main([]) == 0
    out = capsys.readouterr().out
    assert "database: OK" in out
    assert "Readiness: READY" in out
