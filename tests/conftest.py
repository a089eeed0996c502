"""
Root Pytest Fixtures.

Shared fixtures available to all test types. Tests run from the project
root so config/settings/*.yaml is found through the .project_root marker.
"""

from collections.abc import Generator

import pytest

from hello_versioning.core.config import get_app_config, get_settings


@pytest.fixture(autouse=True)
def _clear_config_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Each test sees the YAML on disk, untouched by HELLO_* variables."""
    monkeypatch.delenv("HELLO_BASE_URL", raising=False)
    monkeypatch.delenv("HELLO_TIMEOUT", raising=False)
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()
