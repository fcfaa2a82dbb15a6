"""FIT activity file reader.

This module provides parse_fit_file(), the inverse of build_fit_file(). It
walks the record stream once, collects the messages it understands and
rebuilds the workout plan, the samples and the session metadata.

The plan is taken from the embedded JSON payload when one is present and
parses. Otherwise it is rebuilt from the workout steps; that path loses
cadence targets and text events, and derives percentages from watts when the
steps carry no percent fields.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from ..codec.decoder import DataMessage, RecordStream
from ..codec.messages import (
    DESCRIPTION,
    END_PCT,
    EVENT_TIMER,
    EVENT_TYPE_START,
    EVENT_TYPE_STOP,
    EVENT_TYPE_STOP_ALL,
    EVENT_TYPE_STOP_ALL_PROFILE,
    SOURCE,
    SOURCE_URL,
    START_PCT,
    TARGET_POWER,
    TARGET_TYPE_OPEN,
    EventField,
    MesgNum,
    RecordField,
    SessionField,
    WorkoutField,
    WorkoutStepField,
)
from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import TruncatedStreamError
from ..models.activity import ActivityMeta, DecodedActivity, PauseEvent, Sample, TimerEventType
from ..models.workout import Segment, WorkoutPlan
from ..utils.timestamps import from_fit_timestamp
from .payload import chunk_index, join_payload, parse_payload

_TIMER_EVENT_TYPES = {
    EVENT_TYPE_START: TimerEventType.START,
    EVENT_TYPE_STOP: TimerEventType.STOP,
    EVENT_TYPE_STOP_ALL: TimerEventType.STOP_ALL,
    EVENT_TYPE_STOP_ALL_PROFILE: TimerEventType.STOP_ALL,
}

FREERIDE_PLACEHOLDER_PCT = 50


def parse_fit_file(
    data: bytes,
    *,
    allow_partial: bool = False,
    config: CodecConfig = DEFAULT_CONFIG,
) -> DecodedActivity:
    """Decode a FIT activity file.

    Args:
        data: Complete FIT file bytes
        allow_partial: Return what was decoded before an unreadable record
            (with ``truncated=True``) instead of raising
        config: Codec configuration

    Returns:
        The decoded activity

    Raises:
        FramingError: If the header is invalid or a checksum does not match
        TruncatedStreamError: If a record cannot be read and ``allow_partial``
            is False; ``error.partial`` holds what was decoded before it

    Example:
        >>> activity = parse_fit_file(data)
        >>> activity.workout_plan.workout_title
        'Sweet Spot'
    """
    stream = RecordStream(data, config)
    collector = _ActivityCollector()

    try:
        for message in stream:
            collector.add(message)
    except TruncatedStreamError as e:
        partial = collector.build(truncated=True)
        e.partial = partial
        if not allow_partial:
            raise
        logger.warning(f"Returning partial activity: {e}")
        return partial

    activity = collector.build()
    logger.debug(
        f"Decoded FIT file: {len(activity.workout_plan.raw_segments)} steps, "
        f"{len(activity.samples)} samples, lossless={activity.lossless}"
    )
    return activity


class _ActivityCollector:
    """Gathers the messages of one pass and assembles a DecodedActivity."""

    def __init__(self) -> None:
        self.workout: Optional[DataMessage] = None
        self.steps: Dict[int, DataMessage] = {}
        self.records: List[DataMessage] = []
        self.events: List[DataMessage] = []
        self.session: Optional[DataMessage] = None

    def add(self, message: DataMessage) -> None:
        global_id = message.global_id
        if global_id == MesgNum.WORKOUT:
            if self.workout is None:
                self.workout = message
        elif global_id == MesgNum.WORKOUT_STEP:
            index = message.values.get(WorkoutStepField.MESSAGE_INDEX)
            if index is None:
                index = max(self.steps, default=-1) + 1
            self.steps[index] = message
        elif global_id == MesgNum.RECORD:
            if isinstance(message.values.get(RecordField.TIMESTAMP), int):
                self.records.append(message)
        elif global_id == MesgNum.EVENT:
            self.events.append(message)
        elif global_id == MesgNum.SESSION:
            self.session = message

    def _session_value(self, field: SessionField) -> Any:
        return self.session.values.get(field) if self.session is not None else None

    def build(self, truncated: bool = False) -> DecodedActivity:
        ftp = self._session_value(SessionField.THRESHOLD_POWER)

        plan = self._plan_from_payload()
        lossless = plan is not None
        if plan is None:
            plan = self._plan_from_steps(ftp)

        record_times = [m.values[RecordField.TIMESTAMP] for m in self.records]
        start_ts = self._session_value(SessionField.START_TIME)
        if start_ts is None and record_times:
            start_ts = record_times[0]
        end_ts = self._session_value(SessionField.TIMESTAMP)
        if end_ts is None and record_times:
            end_ts = record_times[-1]

        samples = [self._sample(m, start_ts) for m in self.records]

        meta = ActivityMeta(
            ftp=ftp,
            started_at=from_fit_timestamp(start_ts) if start_ts is not None else None,
            ended_at=from_fit_timestamp(end_ts) if end_ts is not None else None,
            total_work_j=self._session_value(SessionField.TOTAL_WORK),
            total_elapsed_sec=_ms_to_sec(self._session_value(SessionField.TOTAL_ELAPSED_TIME)),
            total_timer_sec=_ms_to_sec(self._session_value(SessionField.TOTAL_TIMER_TIME)),
            pause_events=self._pause_events(),
        )
        return DecodedActivity(
            workout_plan=plan,
            samples=samples,
            meta=meta,
            lossless=lossless,
            truncated=truncated,
        )

    def _plan_from_payload(self) -> Optional[WorkoutPlan]:
        if self.workout is None:
            return None
        chunks = {}
        for name, value in self.workout.dev_values_by_name().items():
            index = chunk_index(name)
            if index is not None:
                chunks[index] = value
        if not chunks:
            return None
        return parse_payload(join_payload(chunks))

    def _plan_from_steps(self, ftp: Optional[int]) -> WorkoutPlan:
        workout_values: Dict[int, Any] = {}
        workout_dev: Dict[str, Any] = {}
        if self.workout is not None:
            workout_values = self.workout.values
            workout_dev = self.workout.dev_values_by_name()

        divisor = ftp or 1
        segments = []
        for index in sorted(self.steps):
            step = self.steps[index]
            values = step.values
            dev = step.dev_values_by_name()
            minutes = (values.get(WorkoutStepField.DURATION_VALUE) or 0) / 60000

            if values.get(WorkoutStepField.TARGET_TYPE) == TARGET_TYPE_OPEN:
                segments.append(
                    Segment(
                        minutes=minutes,
                        start_pct=FREERIDE_PLACEHOLDER_PCT,
                        end_pct=FREERIDE_PLACEHOLDER_PCT,
                        freeride=True,
                    )
                )
                continue

            start_pct = _step_pct(
                dev.get(START_PCT.name), values.get(WorkoutStepField.CUSTOM_TARGET_VALUE_LOW), divisor
            )
            high = values.get(WorkoutStepField.CUSTOM_TARGET_VALUE_HIGH)
            if high is None:
                high = values.get(WorkoutStepField.CUSTOM_TARGET_VALUE_LOW)
            end_pct = _step_pct(dev.get(END_PCT.name), high, divisor)
            segments.append(Segment(minutes=minutes, start_pct=start_pct, end_pct=end_pct))

        return WorkoutPlan(
            source=_text(workout_dev.get(SOURCE.name)) or "Unknown",
            source_url=_text(workout_dev.get(SOURCE_URL.name)),
            workout_title=_text(workout_values.get(WorkoutField.WKT_NAME)) or "Workout",
            raw_segments=segments,
            description=_text(workout_dev.get(DESCRIPTION.name)),
        )

    @staticmethod
    def _sample(message: DataMessage, start_ts: Optional[int]) -> Sample:
        values = message.values
        ts = values[RecordField.TIMESTAMP]
        t = float(ts - start_ts) if start_ts is not None else 0.0
        return Sample(
            t=t,
            power=_number(values.get(RecordField.POWER)),
            heart_rate=_number(values.get(RecordField.HEART_RATE)),
            cadence=_number(values.get(RecordField.CADENCE)),
            target_power=_number(message.dev_values_by_name().get(TARGET_POWER.name)),
        )

    def _pause_events(self) -> List[PauseEvent]:
        events = []
        for message in self.events:
            values = message.values
            if values.get(EventField.EVENT) != EVENT_TIMER:
                continue
            event_type = _TIMER_EVENT_TYPES.get(values.get(EventField.EVENT_TYPE))
            ts = values.get(EventField.TIMESTAMP)
            if event_type is None or ts is None:
                continue
            events.append(PauseEvent(type=event_type, at=from_fit_timestamp(ts)))
        return events


def _step_pct(pct_hundredths: Any, watts: Any, ftp: int) -> float:
    if isinstance(pct_hundredths, int):
        return pct_hundredths / 100
    if isinstance(watts, int):
        return watts / ftp * 100
    return 0.0


def _number(value: Any) -> Optional[float]:
    # Arrays, strings and raw bytes from foreign definitions count as missing
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _ms_to_sec(value: Optional[int]) -> Optional[float]:
    return value / 1000 if value is not None else None


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    return ""
