"""Recorded activity models: samples, timer events and decoded results."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, Field, field_validator

from .base import VelofitModel
from .workout import WorkoutPlan


class TimerEventType(str, enum.Enum):
    """Semantics of a timer event.

    START resumes the timer, STOP pauses it, STOP_ALL ends the activity.
    """

    START = "start"
    STOP = "stop"
    STOP_ALL = "stop_all"


class Sample(VelofitModel):
    """One time-series sample.

    Attributes:
        t: Seconds since the start of the activity
        power: Power in watts
        heart_rate: Heart rate in bpm (also accepted as ``heartRate`` or ``hr``)
        cadence: Cadence in rpm
        target_power: Target power in watts at this instant
    """

    t: float = 0.0
    power: Optional[float] = None
    heart_rate: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("heart_rate", "heartRate", "hr")
    )
    cadence: Optional[float] = None
    target_power: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("target_power", "targetPower")
    )

    @field_validator("t", mode="before")
    @classmethod
    def _missing_time_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class PauseEvent(VelofitModel):
    """A timer event at an absolute time.

    Unknown event types are read as STOP.
    """

    type: TimerEventType = TimerEventType.STOP
    at: datetime

    @field_validator("type", mode="before")
    @classmethod
    def _unknown_type_is_stop(cls, value: Any) -> Any:
        if isinstance(value, TimerEventType):
            return value
        try:
            return TimerEventType(value)
        except ValueError:
            return TimerEventType.STOP


class ActivityMeta(VelofitModel):
    """Session metadata recovered from a FIT file.

    Attributes:
        ftp: Functional threshold power in watts
        started_at: Session start (UTC)
        ended_at: Session end (UTC)
        total_work_j: Total mechanical work in joules
        total_elapsed_sec: Wall-clock duration in seconds
        total_timer_sec: Timer duration in seconds
        pause_events: Timer events in stream order
    """

    ftp: Optional[int] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    total_work_j: Optional[int] = None
    total_elapsed_sec: Optional[float] = None
    total_timer_sec: Optional[float] = None
    pause_events: List[PauseEvent] = Field(default_factory=list)


class DecodedActivity(VelofitModel):
    """Result of decoding a FIT activity file.

    Attributes:
        workout_plan: Reconstructed workout plan
        samples: Samples with ``t`` in seconds since the session start
        meta: Session metadata
        lossless: True when the plan came from the embedded payload rather
            than from the workout steps
        truncated: True when decoding stopped early (only returned with
            ``allow_partial=True``)
    """

    workout_plan: WorkoutPlan
    samples: List[Sample] = Field(default_factory=list)
    meta: ActivityMeta = Field(default_factory=ActivityMeta)
    lossless: bool = False
    truncated: bool = False
