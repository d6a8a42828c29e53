"""Shared fixtures for kraph integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest

SEED = Path(__file__).parent.parent / "data" / "seed.yaml"


@pytest.fixture
def seed_path() -> Path:
    return SEED
