import os

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the user's real settings file."""
    path = os.path.join(str(tmp_path), "config.json")
    monkeypatch.setenv("KEYSMITH_CONFIG", path)
    return path
