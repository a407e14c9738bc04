"""
Shared pytest fixtures for the auditor tests.
"""

import pytest

from tests.fakes import make_resources


@pytest.fixture
def three_subscriptions():
    """Three subscriptions with five VMs each."""
    return {sub: make_resources(sub, 5) for sub in ("sub-1", "sub-2", "sub-3")}


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    """Isolate configuration lookups from the developer machine."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in (
        "SUBSCRIPTION_IDS", "LIMIT", "PROFILE", "EXPORT_CSV", "CSV_PATH", "API_VERSION"
    ):
        monkeypatch.delenv(f"DEFENDER_PLAN_AUDITOR_{var}", raising=False)
    return tmp_path
