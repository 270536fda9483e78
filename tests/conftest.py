"""Root conftest — shared fixtures and markers."""

from __future__ import annotations

import os

import pytest

from sqlgate.policy import DEFAULT_POLICY, PolicyConfig


def pytest_configure(config):
    config.addinivalue_line("markers", "postgres: requires running PostgreSQL")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("SQLGATE_TEST_POSTGRES"):
        return

    skip_pg = pytest.mark.skip(reason="Postgres not available (set SQLGATE_TEST_POSTGRES=1)")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_pg)


@pytest.fixture
def policy() -> PolicyConfig:
    return DEFAULT_POLICY


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path, monkeypatch):
    """Keep the verdict log and policy lookup out of the real home directory."""
    monkeypatch.setattr("sqlgate.querylog._LOG_ROOT", tmp_path / "logs")
    monkeypatch.setattr("sqlgate.policy.config._POLICY_FILE", tmp_path / "no-policy.toml")
    monkeypatch.delenv("SQLGATE_POLICY", raising=False)
