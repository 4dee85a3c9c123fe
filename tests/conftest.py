"""
Shared pytest fixtures for Helm test suite.

Provides common fixtures using the HelmTestFactory pattern. Everything is
backed by temp files under tmp_path; nothing reads or writes ~/.helm.

Usage in tests:
    def test_something(helm_factory):
        store = helm_factory.create_voyage("Test intent")
        # ... test with a real voyage store

    def test_with_data(helm_env):
        # helm_env comes with a sample voyage already populated
        cli = helm_env.create_cli_mock()
"""

import pytest

from tests.factories import HelmTestFactory


HELM_ENV_VARS = (
    "HELM_IDENTITY",
    "HELM_STORAGE_ROOT",
    "HELM_BUSY_TIMEOUT_MS",
    "HELM_LOG_LEVEL",
    "HELM_PROJECT_PATH",
    "HELM_ASCII_ONLY",
    "HELM_UNICODE",
)


@pytest.fixture(autouse=True)
def clean_helm_env(monkeypatch):
    """Keep the developer's own HELM_* settings out of every test."""
    for name in HELM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def helm_factory(tmp_path):
    """
    Create an empty HelmTestFactory instance.

    Use this when you need fine-grained control over test data.
    Stores it opened are closed after the test.
    """
    factory = HelmTestFactory(tmp_path)
    yield factory
    factory.close()


@pytest.fixture
def store(helm_factory):
    """A freshly created, empty, open voyage store."""
    return helm_factory.create_voyage("Test voyage")


@pytest.fixture
def helm_env(helm_factory):
    """
    HelmTestFactory with a sample voyage.

    Pre-populated with:
    - 1 voyage ("Fix the flaky login test")
    - 1 sealed log entry with 2 bearing observations
    - 1 pending observation on the slate

    The open store is available as helm_env.sample.
    """
    helm_factory.sample = helm_factory.create_sample_voyage()
    return helm_factory


@pytest.fixture
def mock_cli(helm_factory):
    """Mock CLI instance wired to real (empty) storage."""
    return helm_factory.create_cli_mock()
