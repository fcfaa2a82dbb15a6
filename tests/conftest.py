"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from velofit import build_fit_file

T0 = datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def started_at() -> datetime:
    """Session start used across tests."""
    return T0


@pytest.fixture
def sample_plan() -> Dict[str, Any]:
    """Workout plan in the camelCase form used by collaborators."""
    return {
        "source": "TrainerRoad",
        "sourceURL": "https://example.com/workouts/sweet-spot",
        "workoutTitle": "Sweet Spot",
        "description": "Three blocks just under threshold.",
        "rawSegments": [
            [10, 50, 75],
            [20, 88, 94, None, 90],
            [5, 0, 0, "freeride"],
        ],
        "textEvents": [{"offsetSec": 60, "text": "Settle in"}],
    }


@pytest.fixture
def sample_samples() -> List[Dict[str, Any]]:
    """One minute of one-second samples."""
    return [
        {
            "t": i,
            "power": 150 + i,
            "heartRate": 120 + i // 2,
            "cadence": 85 + i % 5,
            "targetPower": 188,
        }
        for i in range(60)
    ]


@pytest.fixture
def fit_bytes(
    sample_plan: Dict[str, Any], sample_samples: List[Dict[str, Any]], started_at: datetime
) -> bytes:
    """A complete activity file built from the sample plan and samples."""
    return build_fit_file(
        workout_plan=sample_plan,
        samples=sample_samples,
        ftp=250,
        started_at=started_at,
        ended_at=started_at + timedelta(seconds=65),
    )
