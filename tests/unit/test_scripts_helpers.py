from __future__ import annotations

import importlib.util
from pathlib import Path

import pandas as pd

from influxql_client.client import InfluxDatabase
from influxql_client.exceptions import QueryError
from influxql_client.server import InfluxServer


def _load_script(module_name: str, relative_path: str):
    root = Path(__file__).resolve().parents[2]
    script_path = root / relative_path
    spec = importlib.util.spec_from_file_location(module_name, script_path)
    module = importlib.util.module_from_spec(spec)
    assert spec is not None and spec.loader is not None
    spec.loader.exec_module(module)
    return module


class FakeDatabase:
    def __init__(self, server: InfluxServer, name: str) -> None:
        self.server = server
        self.name = name
        self.calls = []

    def query(self, q, chunked=False, chunk_size=10000, session=None):
        self.calls.append((q, chunked, chunk_size))
        return pd.DataFrame({"time": [1], "value": [2.0]})


def test_smoke_run_query_uses_env_database(monkeypatch, capsys) -> None:
    smoke = _load_script("smoke_query_for_test_run", "scripts/smoke_query.py")
    db = FakeDatabase(InfluxServer("h"), "metrics")
    monkeypatch.setattr(smoke, "database_from_env", lambda: db)

    rc = smoke.run("SELECT * FROM cpu", None, chunked=True, chunk_size=50)

    assert rc == 0
    assert db.calls == [("SELECT * FROM cpu", True, 50)]
    assert "rows: 1" in capsys.readouterr().out


def test_smoke_run_measurement_uses_query_series(monkeypatch, capsys) -> None:
    smoke = _load_script("smoke_query_for_test_series", "scripts/smoke_query.py")
    calls = []
    monkeypatch.setattr(smoke, "database_from_env", lambda: InfluxDatabase(InfluxServer("h"), "metrics"))
    monkeypatch.setattr(smoke, "query_series", lambda server, db, m: calls.append((db, m)))

    rc = smoke.run(None, "cpu", chunked=False, chunk_size=10000)

    assert rc == 0
    assert calls == [("metrics", "cpu")]
    assert "no series returned" in capsys.readouterr().out


def test_smoke_main_reports_failures(monkeypatch, capsys) -> None:
    smoke = _load_script("smoke_query_for_test_main", "scripts/smoke_query.py")

    def _fail(*_args):
        raise QueryError("database not found", status_code=404)

    monkeypatch.setattr(smoke, "run", _fail)
    monkeypatch.setattr("sys.argv", ["smoke_query.py", "--query", "SELECT 1"])

    assert smoke.main() == 1
    assert "database not found" in capsys.readouterr().err
