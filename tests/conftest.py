"""
Global test configuration.
"""

from contextlib import suppress
import os

import pytest

from recordform.notifications import CollectingNotifier


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "allow_dotenv: permit python-dotenv to load .env files"
    )
    config.addinivalue_line(
        "markers", "allow_env_pollution: keep the current RECORDFORM_* environment"
    )
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: end-to-end tests over httpx")


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Tests should only see environment that they explicitly set.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv
    to permit .env loading for that specific test.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "recordform.config.loaders.load_dotenv",
            lambda *_args, **_kwargs: False,
        )


@pytest.fixture(autouse=True)
def isolate_recordform_env(request, monkeypatch):
    """Ensure a clean RECORDFORM_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the env unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("RECORDFORM_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def neutral_project_root(monkeypatch, tmp_path_factory):
    """Run each test from an empty directory so no real pyproject.toml is read."""
    workdir = tmp_path_factory.mktemp("cwd")
    monkeypatch.chdir(workdir)


@pytest.fixture
def notifier():
    """A notifier that records messages for assertions."""
    return CollectingNotifier()
