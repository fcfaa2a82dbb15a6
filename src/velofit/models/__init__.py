"""Pydantic data models for velofit.

This module provides the workout plan, sample and decoded activity models
exchanged with the codec's collaborators.
"""

from __future__ import annotations

from .activity import ActivityMeta, DecodedActivity, PauseEvent, Sample, TimerEventType
from .base import VelofitModel
from .workout import FREERIDE, Segment, TextEvent, WorkoutPlan

__all__ = [
    "VelofitModel",
    "WorkoutPlan",
    "Segment",
    "TextEvent",
    "FREERIDE",
    "Sample",
    "PauseEvent",
    "TimerEventType",
    "ActivityMeta",
    "DecodedActivity",
]
