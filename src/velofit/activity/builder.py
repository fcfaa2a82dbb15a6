"""FIT activity file builder.

This module provides build_fit_file(), which turns a recorded session (the
workout plan, samples, pause events and session times) into a complete FIT
activity file.

Record order:
1. All definition records
2. developer_data_id, one field_description per developer field
3. file_id, device_info
4. workout, one workout_step per segment
5. one record per sample
6. timer events
7. session, lap
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from ..codec.encoder import encode_record
from ..codec.messages import (
    DESCRIPTION,
    DEVELOPER_DATA_ID_FIELDS,
    DEVICE_INFO_FIELDS,
    DURATION_TYPE_TIME,
    END_PCT,
    EVENT_FIELDS,
    EVENT_TIMER,
    EVENT_TYPE_START,
    EVENT_TYPE_STOP,
    EVENT_TYPE_STOP_ALL,
    FIELD_DESCRIPTION_FIELDS,
    FILE_ID_FIELDS,
    FILE_TYPE_ACTIVITY,
    FIXED_DEV_FIELDS,
    INTENSITY_INTERVAL,
    LAP_FIELDS,
    PAYLOAD_FIRST_FIELD_NUMBER,
    RECORD_FIELDS,
    SESSION_FIELDS,
    SOURCE,
    SOURCE_URL,
    SPORT_CYCLING,
    START_PCT,
    SUB_SPORT_GENERIC,
    TARGET_POWER,
    TARGET_TYPE_OPEN,
    TARGET_TYPE_POWER,
    WORKOUT_FIELDS,
    WORKOUT_STEP_FIELDS,
    DeveloperDataIdField,
    DeviceInfoField,
    DevFieldSpec,
    EventField,
    FieldDescriptionField,
    FileIdField,
    LapField,
    LocalSlot,
    MesgNum,
    RecordField,
    SessionField,
    WorkoutField,
    WorkoutStepField,
    payload_field,
)
from ..codec.schema import Definition, DevFieldDef, DevFieldKey, define_message
from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import EncodeError
from ..framing.header import frame_file
from ..models.activity import PauseEvent, Sample, TimerEventType
from ..models.workout import Segment, WorkoutPlan
from ..utils.timestamps import ensure_utc, to_fit_timestamp
from .aggregates import Aggregates, compute_aggregates
from .payload import chunk_payload, serialize_plan

_DATETIME = TypeAdapter(datetime)

_EVENT_TYPE_CODES = {
    TimerEventType.START: EVENT_TYPE_START,
    TimerEventType.STOP: EVENT_TYPE_STOP,
    TimerEventType.STOP_ALL: EVENT_TYPE_STOP_ALL,
}

MAX_PAYLOAD_CHUNKS = 256 - PAYLOAD_FIRST_FIELD_NUMBER


def build_fit_file(
    *,
    workout_plan: WorkoutPlan | Mapping[str, Any] | None = None,
    samples: Iterable[Sample | Mapping[str, Any]] = (),
    ftp: Optional[float] = None,
    started_at: datetime | str | None = None,
    ended_at: datetime | str | None = None,
    pause_events: Iterable[PauseEvent | Mapping[str, Any]] = (),
    total_elapsed_sec: Optional[float] = None,
    config: CodecConfig = DEFAULT_CONFIG,
) -> bytes:
    """Encode a recorded session into a FIT activity file.

    Missing optional values are written as invalid; an empty sample list
    yields empty averages and zero work.

    Args:
        workout_plan: Plan that was ridden (model or camelCase mapping)
        samples: Samples with ``t`` in seconds since start
        ftp: Functional threshold power in watts, used for step watt targets.
            The session and lap store it as a whole number of watts, so a
            fractional FTP is read back rounded
        started_at: Session start; defaults to now minus the last sample time
        ended_at: Session end; defaults to start plus the elapsed time
        pause_events: Timer events (``start``/``stop``/``stop_all`` at a time)
        total_elapsed_sec: Wall-clock duration; defaults to end minus start
        config: Codec configuration

    Returns:
        Complete FIT file bytes

    Raises:
        EncodeError: If the plan or samples cannot be validated, or the plan
            payload needs more developer fields than FIT allows

    Example:
        >>> data = build_fit_file(
        ...     workout_plan={"rawSegments": [[5, 50, 50]]},
        ...     samples=[{"t": 0, "power": 120}],
        ...     ftp=250,
        ...     started_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ... )
        >>> data[8:12]
        b'.FIT'
    """
    plan = _coerce_plan(workout_plan)
    sample_list = _coerce_samples(samples)

    last_t = max(0.0, sample_list[-1].t) if sample_list else 0.0
    start = _coerce_datetime(started_at)
    if start is None:
        start = datetime.now(timezone.utc) - timedelta(seconds=last_t)
    elapsed_hint = max(0.0, total_elapsed_sec) if total_elapsed_sec is not None else last_t
    end = _coerce_datetime(ended_at) or start + timedelta(seconds=elapsed_hint)

    start_ts = to_fit_timestamp(start)
    end_ts = to_fit_timestamp(end)
    aggregates = compute_aggregates(sample_list)

    if total_elapsed_sec is not None:
        total_elapsed_ms = max(0, round(total_elapsed_sec * 1000))
    else:
        total_elapsed_ms = max(0, round((end - start).total_seconds() * 1000))
    total_timer_ms = max(0, round(aggregates.duration_sec * 1000))

    chunks = chunk_payload(serialize_plan(plan), config.chunk_size)
    if len(chunks) > MAX_PAYLOAD_CHUNKS:
        raise EncodeError(
            f"Workout plan payload needs {len(chunks)} chunks of {config.chunk_size} bytes; "
            f"at most {MAX_PAYLOAD_CHUNKS} fit in one workout message"
        )
    payload_specs = tuple(payload_field(i, len(chunk)) for i, chunk in enumerate(chunks))
    dev_specs = FIXED_DEV_FIELDS + payload_specs

    writer = _RecordWriter(config)
    definitions = writer.define_all(dev_specs)
    for definition in definitions.values():
        writer.emit(definition.encoded)

    writer.write_developer_header(definitions, dev_specs)
    writer.write_identity(definitions, start_ts)
    writer.write_workout(definitions, plan, ftp, payload_specs, chunks)

    record_def = definitions[MesgNum.RECORD]
    target_key = writer.key(TARGET_POWER)
    for sample in sample_list:
        writer.emit(
            encode_record(
                record_def,
                {
                    RecordField.TIMESTAMP: start_ts + round(sample.t),
                    RecordField.HEART_RATE: sample.heart_rate,
                    RecordField.CADENCE: sample.cadence,
                    RecordField.POWER: sample.power,
                },
                {target_key: sample.target_power},
            )
        )

    event_def = definitions[MesgNum.EVENT]
    for event_type, ts in timer_events(pause_events, start_ts, end_ts):
        writer.emit(
            encode_record(
                event_def,
                {
                    EventField.TIMESTAMP: ts,
                    EventField.EVENT: EVENT_TIMER,
                    EventField.EVENT_TYPE: _EVENT_TYPE_CODES[event_type],
                },
            )
        )

    writer.write_summaries(
        definitions, aggregates, start_ts, end_ts, total_elapsed_ms, total_timer_ms, ftp
    )

    data = frame_file(writer.records(), config)
    logger.debug(
        f"Built FIT file: {len(plan.raw_segments)} steps, {len(sample_list)} samples, "
        f"{len(chunks)} payload chunks, {len(data)} bytes"
    )
    return data


def timer_events(
    pause_events: Iterable[PauseEvent | Mapping[str, Any]], start_ts: int, end_ts: int
) -> List[Tuple[TimerEventType, int]]:
    """Translate pause events into chronologically sorted timer events.

    Events without a usable time are dropped. A start event is synthesized
    at ``start_ts`` unless the earliest event already is one, and a stop_all
    at ``end_ts`` unless the latest event already is one.

    Example:
        >>> timer_events([], 100, 460)
        [(<TimerEventType.START: 'start'>, 100), (<TimerEventType.STOP_ALL: 'stop_all'>, 460)]
    """
    parsed: List[Tuple[int, int, TimerEventType]] = []
    for raw in pause_events or ():
        try:
            event = raw if isinstance(raw, PauseEvent) else PauseEvent.model_validate(raw)
        except ValidationError:
            logger.warning(f"Dropping pause event without a usable time: {raw!r}")
            continue
        parsed.append((to_fit_timestamp(event.at), 0, event.type))

    parsed.sort(key=lambda item: item[0])
    if not parsed or parsed[0][2] is not TimerEventType.START:
        parsed.append((start_ts, -1, TimerEventType.START))

    # Ties keep their input order, so the last event is the one written last
    parsed.sort(key=lambda item: (item[0], item[1]))
    if parsed[-1][2] is not TimerEventType.STOP_ALL:
        parsed.append((end_ts, 1, TimerEventType.STOP_ALL))
        parsed.sort(key=lambda item: (item[0], item[1]))
    return [(event_type, ts) for ts, _, event_type in parsed]


class _RecordWriter:
    """Accumulates record bytes for one build call."""

    def __init__(self, config: CodecConfig) -> None:
        self._config = config
        self._records = bytearray()

    def emit(self, record: bytes) -> None:
        self._records.extend(record)

    def records(self) -> bytes:
        return bytes(self._records)

    def key(self, spec: DevFieldSpec) -> DevFieldKey:
        return DevFieldKey(self._config.dev_data_index, spec.number)

    def _dev_field(self, spec: DevFieldSpec) -> DevFieldDef:
        return DevFieldDef(spec.number, spec.base_type, spec.byte_size, self._config.dev_data_index)

    def define_all(self, dev_specs: Sequence[DevFieldSpec]) -> Dict[int, Definition]:
        workout_dev = [self._dev_field(s) for s in dev_specs if s.native_mesg == MesgNum.WORKOUT]
        layouts = [
            (LocalSlot.DEVELOPER_DATA_ID, MesgNum.DEVELOPER_DATA_ID, DEVELOPER_DATA_ID_FIELDS, []),
            (LocalSlot.FIELD_DESCRIPTION, MesgNum.FIELD_DESCRIPTION, FIELD_DESCRIPTION_FIELDS, []),
            (LocalSlot.FILE_ID, MesgNum.FILE_ID, FILE_ID_FIELDS, []),
            (LocalSlot.DEVICE_INFO, MesgNum.DEVICE_INFO, DEVICE_INFO_FIELDS, []),
            (LocalSlot.WORKOUT, MesgNum.WORKOUT, WORKOUT_FIELDS, workout_dev),
            (
                LocalSlot.WORKOUT_STEP,
                MesgNum.WORKOUT_STEP,
                WORKOUT_STEP_FIELDS,
                [self._dev_field(START_PCT), self._dev_field(END_PCT)],
            ),
            (LocalSlot.RECORD, MesgNum.RECORD, RECORD_FIELDS, [self._dev_field(TARGET_POWER)]),
            (LocalSlot.SESSION, MesgNum.SESSION, SESSION_FIELDS, []),
            (LocalSlot.LAP, MesgNum.LAP, LAP_FIELDS, []),
            (LocalSlot.EVENT, MesgNum.EVENT, EVENT_FIELDS, []),
        ]
        return {
            global_id: define_message(slot, global_id, fields, dev_fields)
            for slot, global_id, fields, dev_fields in layouts
        }

    def write_developer_header(
        self, definitions: Mapping[int, Definition], dev_specs: Sequence[DevFieldSpec]
    ) -> None:
        config = self._config
        self.emit(
            encode_record(
                definitions[MesgNum.DEVELOPER_DATA_ID],
                {
                    DeveloperDataIdField.DEVELOPER_DATA_INDEX: config.dev_data_index,
                    DeveloperDataIdField.APPLICATION_ID: config.application_id.encode("utf-8"),
                    DeveloperDataIdField.APPLICATION_VERSION: config.application_version,
                },
            )
        )

        description_def = definitions[MesgNum.FIELD_DESCRIPTION]
        for spec in dev_specs:
            self.emit(
                encode_record(
                    description_def,
                    {
                        FieldDescriptionField.DEVELOPER_DATA_INDEX: config.dev_data_index,
                        FieldDescriptionField.FIELD_DEFINITION_NUMBER: spec.number,
                        FieldDescriptionField.FIT_BASE_TYPE_ID: spec.base_type.type_id,
                        FieldDescriptionField.FIELD_NAME: spec.name,
                        FieldDescriptionField.UNITS: spec.units,
                        FieldDescriptionField.NATIVE_MESG_NUM: spec.native_mesg,
                    },
                )
            )

    def write_identity(self, definitions: Mapping[int, Definition], start_ts: int) -> None:
        config = self._config
        self.emit(
            encode_record(
                definitions[MesgNum.FILE_ID],
                {
                    FileIdField.TYPE: FILE_TYPE_ACTIVITY,
                    FileIdField.MANUFACTURER: config.manufacturer,
                    FileIdField.PRODUCT: config.product,
                    FileIdField.SERIAL_NUMBER: 0,
                    FileIdField.TIME_CREATED: start_ts,
                    FileIdField.PRODUCT_NAME: config.product_name,
                },
            )
        )
        self.emit(
            encode_record(
                definitions[MesgNum.DEVICE_INFO],
                {
                    DeviceInfoField.DEVICE_INDEX: 0,
                    DeviceInfoField.DEVICE_TYPE: 0,
                    DeviceInfoField.MANUFACTURER: config.manufacturer,
                    DeviceInfoField.SERIAL_NUMBER: 0,
                    DeviceInfoField.PRODUCT: config.product,
                    DeviceInfoField.SOFTWARE_VERSION: 1,
                    DeviceInfoField.PRODUCT_NAME: config.product_name,
                    DeviceInfoField.TIMESTAMP: start_ts,
                },
            )
        )

    def write_workout(
        self,
        definitions: Mapping[int, Definition],
        plan: WorkoutPlan,
        ftp: Optional[float],
        payload_specs: Sequence[DevFieldSpec],
        chunks: Sequence[bytes],
    ) -> None:
        workout_dev: Dict[DevFieldKey, Any] = {
            self.key(SOURCE): plan.source,
            self.key(SOURCE_URL): plan.source_url,
            self.key(DESCRIPTION): plan.description,
        }
        for spec, chunk in zip(payload_specs, chunks):
            workout_dev[self.key(spec)] = chunk

        self.emit(
            encode_record(
                definitions[MesgNum.WORKOUT],
                {
                    WorkoutField.WKT_NAME: plan.workout_title or "Workout",
                    WorkoutField.SPORT: SPORT_CYCLING,
                    WorkoutField.CAPABILITIES: 0,
                    WorkoutField.NUM_VALID_STEPS: len(plan.raw_segments),
                },
                workout_dev,
            )
        )

        step_def = definitions[MesgNum.WORKOUT_STEP]
        for index, segment in enumerate(plan.raw_segments):
            values, dev_values = self._step_values(index, segment, ftp or 0)
            self.emit(encode_record(step_def, values, dev_values))

    def _step_values(
        self, index: int, segment: Segment, ftp: float
    ) -> Tuple[Dict[int, Any], Dict[DevFieldKey, Any]]:
        values: Dict[int, Any] = {
            WorkoutStepField.MESSAGE_INDEX: index,
            WorkoutStepField.WKT_STEP_NAME: f"Step {index + 1}",
            WorkoutStepField.DURATION_TYPE: DURATION_TYPE_TIME,
            WorkoutStepField.DURATION_VALUE: segment.duration_sec * 1000,
            WorkoutStepField.TARGET_TYPE: TARGET_TYPE_OPEN if segment.freeride else TARGET_TYPE_POWER,
            WorkoutStepField.TARGET_VALUE: None,
            WorkoutStepField.INTENSITY: INTENSITY_INTERVAL,
        }
        if segment.freeride:
            return values, {}

        start_pct = segment.start_pct
        end_pct = segment.effective_end_pct
        values[WorkoutStepField.CUSTOM_TARGET_VALUE_LOW] = round(start_pct / 100 * ftp)
        values[WorkoutStepField.CUSTOM_TARGET_VALUE_HIGH] = round(end_pct / 100 * ftp)
        return values, {
            self.key(START_PCT): round(start_pct * 100),
            self.key(END_PCT): round(end_pct * 100),
        }

    def write_summaries(
        self,
        definitions: Mapping[int, Definition],
        aggregates: Aggregates,
        start_ts: int,
        end_ts: int,
        total_elapsed_ms: int,
        total_timer_ms: int,
        ftp: Optional[float],
    ) -> None:
        threshold = round(ftp) if ftp is not None else None
        self.emit(
            encode_record(
                definitions[MesgNum.SESSION],
                {
                    SessionField.TIMESTAMP: end_ts,
                    SessionField.START_TIME: start_ts,
                    SessionField.SPORT: SPORT_CYCLING,
                    SessionField.SUB_SPORT: SUB_SPORT_GENERIC,
                    SessionField.TOTAL_ELAPSED_TIME: total_elapsed_ms,
                    SessionField.TOTAL_TIMER_TIME: total_timer_ms,
                    SessionField.AVG_CADENCE: aggregates.avg_cadence,
                    SessionField.MAX_CADENCE: aggregates.max_cadence,
                    SessionField.AVG_POWER: aggregates.avg_power,
                    SessionField.MAX_POWER: aggregates.max_power,
                    SessionField.TOTAL_WORK: aggregates.total_work_j,
                    SessionField.THRESHOLD_POWER: threshold,
                    SessionField.FIRST_LAP_INDEX: 0,
                    SessionField.NUM_LAPS: 1,
                },
            )
        )
        self.emit(
            encode_record(
                definitions[MesgNum.LAP],
                {
                    LapField.TIMESTAMP: end_ts,
                    LapField.START_TIME: start_ts,
                    LapField.SPORT: SPORT_CYCLING,
                    LapField.SUB_SPORT: SUB_SPORT_GENERIC,
                    LapField.TOTAL_ELAPSED_TIME: total_elapsed_ms,
                    LapField.TOTAL_TIMER_TIME: total_timer_ms,
                    LapField.AVG_HEART_RATE: aggregates.avg_heart_rate,
                    LapField.MAX_HEART_RATE: aggregates.max_heart_rate,
                    LapField.AVG_CADENCE: aggregates.avg_cadence,
                    LapField.MAX_CADENCE: aggregates.max_cadence,
                    LapField.AVG_POWER: aggregates.avg_power,
                    LapField.MAX_POWER: aggregates.max_power,
                    LapField.TOTAL_WORK: aggregates.total_work_j,
                    LapField.THRESHOLD_POWER: threshold,
                },
            )
        )


def _coerce_plan(plan: WorkoutPlan | Mapping[str, Any] | None) -> WorkoutPlan:
    if plan is None:
        return WorkoutPlan()
    if isinstance(plan, WorkoutPlan):
        return plan
    try:
        return WorkoutPlan.model_validate(plan)
    except ValidationError as e:
        raise EncodeError(f"Invalid workout plan: {e}") from e


def _coerce_samples(samples: Iterable[Sample | Mapping[str, Any]]) -> List[Sample]:
    result = []
    for index, raw in enumerate(samples or ()):
        if isinstance(raw, Sample):
            result.append(raw)
            continue
        try:
            result.append(Sample.model_validate(raw))
        except ValidationError as e:
            raise EncodeError(f"Invalid sample at index {index}: {e}") from e
    return result


def _coerce_datetime(value: datetime | str | None) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return ensure_utc(_DATETIME.validate_python(value))
    except ValidationError as e:
        raise EncodeError(f"Invalid datetime: {value!r}") from e
