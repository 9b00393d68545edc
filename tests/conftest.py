"""Shared fixtures."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(scope="session")
def _sample_application() -> dict[str, Any]:
    with open(FIXTURES_DIR / "sample_application.json") as f:
        return json.load(f)


@pytest.fixture
def application(_sample_application: dict[str, Any]) -> dict[str, Any]:
    """A complete, low-risk secured mortgage application (fresh copy per test)."""
    return copy.deepcopy(_sample_application)


@pytest.fixture
def application_path() -> Path:
    return FIXTURES_DIR / "sample_application.json"
