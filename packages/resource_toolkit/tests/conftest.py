from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _set_required_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RESOURCE_ROOT", str(tmp_path))
    monkeypatch.setenv("RESOURCE_SERIALIZE_GROUP_SIZE", "100")
    monkeypatch.setenv("RESOURCE_COMBINE_SEPARATOR", "\n")
    monkeypatch.setenv("RESOURCE_LOG_LEVEL", "DEBUG")
