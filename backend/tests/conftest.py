# backend/tests/conftest.py
"""
Pytest configuration for the Notion query viewer backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import app.*` works correctly in tests.
- Clears the cached Notion config around each test so that
  monkeypatched environment variables take effect.
"""

import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


_ensure_project_root_in_sys_path()


@pytest.fixture(autouse=True)
def _fresh_notion_config(monkeypatch):
    from app.notion.config import get_notion_config

    for name in (
        "NOTION_API_BASE_URL",
        "NOTION_API_VERSION",
        "NOTION_TIMEOUT_SECONDS",
        "NOTION_ALLOW_LEGACY_TOKEN_PARAM",
    ):
        monkeypatch.delenv(name, raising=False)

    get_notion_config.cache_clear()
    yield
    get_notion_config.cache_clear()
