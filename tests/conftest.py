"""Shared fixtures: isolate settings from the developer's environment."""

import pytest

from gh_resolve_ref.settings import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    for var in ("GITHUB_TOKEN", "GITHUB_HOST", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    # keep a stray .env in the working directory from leaking in
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
