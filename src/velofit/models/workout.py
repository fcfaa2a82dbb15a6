"""Workout plan models.

A workout plan is a list of segments expressed in percent of FTP. It travels
inside the FIT file twice: as FIT workout steps (with watt targets) and as a
JSON payload split across developer fields. The JSON form uses the canonical
camelCase keys and the compact array form for segments.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field, model_serializer, model_validator

from .base import VelofitModel

FREERIDE = "freeride"


def _compact(value: Optional[float]) -> Optional[float | int]:
    if value is not None and float(value).is_integer():
        return int(value)
    return value


class Segment(VelofitModel):
    """One workout segment.

    Serialized as ``[minutes, startPct, endPct]``, with an optional fourth
    element ``"freeride"`` and an optional fifth element carrying the cadence
    target: ``[minutes, startPct, endPct, type|null, cadenceRpm]``.

    Example:
        >>> Segment.model_validate([5, 50, 50]).minutes
        5.0
        >>> Segment(minutes=1, start_pct=100, freeride=True).model_dump()
        [1, 100, None, 'freeride']
    """

    minutes: float
    start_pct: float = 0.0
    end_pct: Optional[float] = None
    freeride: bool = False
    cadence_rpm: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _from_array(cls, data: Any) -> Any:
        if not isinstance(data, (list, tuple)):
            return data
        items = list(data) + [None] * (5 - len(data))
        minutes, start_pct, end_pct, kind, cadence = items[:5]
        return {
            "minutes": minutes or 0,
            "start_pct": start_pct or 0,
            "end_pct": end_pct,
            "freeride": kind == FREERIDE,
            "cadence_rpm": cadence,
        }

    @model_serializer
    def _to_array(self) -> List[Any]:
        result: List[Any] = [_compact(self.minutes), _compact(self.start_pct), _compact(self.end_pct)]
        if self.cadence_rpm is not None:
            result.extend([FREERIDE if self.freeride else None, _compact(self.cadence_rpm)])
        elif self.freeride:
            result.append(FREERIDE)
        return result

    @property
    def effective_end_pct(self) -> float:
        """End percent, falling back to the start percent."""
        return self.start_pct if self.end_pct is None else self.end_pct

    @property
    def duration_sec(self) -> int:
        """Duration in whole seconds (at least 1)."""
        return max(1, round(self.minutes * 60))


class TextEvent(VelofitModel):
    """A text annotation aligned to the workout timeline."""

    offset_sec: float = Field(alias="offsetSec")
    duration_sec: float = Field(default=10, alias="durationSec")
    text: str = ""


class WorkoutPlan(VelofitModel):
    """A structured workout plan.

    Attributes:
        source: Where the plan came from (e.g. "TrainerRoad")
        source_url: Original page URL
        workout_title: Human-readable title
        raw_segments: Ordered segments
        description: Free-text description
        text_events: Optional text annotations
    """

    source: str = "Unknown"
    source_url: str = Field(default="", alias="sourceURL")
    workout_title: str = Field(default="Workout", alias="workoutTitle")
    raw_segments: List[Segment] = Field(default_factory=list, alias="rawSegments")
    description: str = ""
    text_events: Optional[List[TextEvent]] = Field(default=None, alias="textEvents")

    def to_json(self) -> str:
        """Compact JSON in the canonical camelCase form.

        ``textEvents`` is omitted when unset; segment arrays keep their nulls.
        """
        exclude = {"text_events"} if self.text_events is None else None
        return self.model_dump_json(by_alias=True, exclude=exclude)
