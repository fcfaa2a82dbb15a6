"""FIT global message catalog.

Only the subset of the FIT profile needed to round-trip a velofit activity
is described here: global message numbers, the field numbers used for each
message, the field layouts the writer emits, and the developer fields it
declares.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple

from .schema import FieldDef
from .types import BaseType


class MesgNum(enum.IntEnum):
    """Global message numbers."""

    FILE_ID = 0
    SESSION = 18
    LAP = 19
    RECORD = 20
    EVENT = 21
    DEVICE_INFO = 23
    WORKOUT = 26
    WORKOUT_STEP = 27
    FIELD_DESCRIPTION = 206
    DEVELOPER_DATA_ID = 207


class LocalSlot(enum.IntEnum):
    """Local message numbers assigned by the writer (one per message kind)."""

    FILE_ID = 0
    DEVICE_INFO = 1
    DEVELOPER_DATA_ID = 2
    FIELD_DESCRIPTION = 3
    WORKOUT = 4
    WORKOUT_STEP = 5
    RECORD = 6
    SESSION = 7
    LAP = 8
    EVENT = 9


TIMESTAMP_FIELD = 253
MESSAGE_INDEX_FIELD = 254


class FileIdField(enum.IntEnum):
    TYPE = 0
    MANUFACTURER = 1
    PRODUCT = 2
    SERIAL_NUMBER = 3
    TIME_CREATED = 4
    PRODUCT_NAME = 8


class DeviceInfoField(enum.IntEnum):
    DEVICE_INDEX = 0
    DEVICE_TYPE = 1
    MANUFACTURER = 2
    SERIAL_NUMBER = 3
    PRODUCT = 4
    SOFTWARE_VERSION = 5
    PRODUCT_NAME = 7
    TIMESTAMP = TIMESTAMP_FIELD


class DeveloperDataIdField(enum.IntEnum):
    DEVELOPER_DATA_INDEX = 0
    APPLICATION_ID = 1
    APPLICATION_VERSION = 2


class FieldDescriptionField(enum.IntEnum):
    DEVELOPER_DATA_INDEX = 0
    FIELD_DEFINITION_NUMBER = 1
    FIT_BASE_TYPE_ID = 2
    FIELD_NAME = 3
    UNITS = 4
    NATIVE_MESG_NUM = 5
    NATIVE_FIELD_NUM = 6


class WorkoutField(enum.IntEnum):
    WKT_NAME = 0
    SPORT = 4
    CAPABILITIES = 5
    NUM_VALID_STEPS = 6


class WorkoutStepField(enum.IntEnum):
    MESSAGE_INDEX = MESSAGE_INDEX_FIELD
    WKT_STEP_NAME = 0
    DURATION_TYPE = 1
    DURATION_VALUE = 2
    TARGET_TYPE = 3
    TARGET_VALUE = 4
    CUSTOM_TARGET_VALUE_LOW = 5
    CUSTOM_TARGET_VALUE_HIGH = 6
    INTENSITY = 7


class RecordField(enum.IntEnum):
    TIMESTAMP = TIMESTAMP_FIELD
    HEART_RATE = 3
    CADENCE = 4
    POWER = 7


class SessionField(enum.IntEnum):
    TIMESTAMP = TIMESTAMP_FIELD
    START_TIME = 2
    SPORT = 5
    SUB_SPORT = 6
    TOTAL_ELAPSED_TIME = 7
    TOTAL_TIMER_TIME = 8
    TOTAL_DISTANCE = 9
    AVG_CADENCE = 11
    MAX_CADENCE = 12
    TOTAL_CALORIES = 13
    FIRST_LAP_INDEX = 17
    NUM_LAPS = 18
    AVG_POWER = 20
    MAX_POWER = 21
    TOTAL_WORK = 41
    THRESHOLD_POWER = 57


class LapField(enum.IntEnum):
    TIMESTAMP = TIMESTAMP_FIELD
    START_TIME = SessionField.START_TIME
    SPORT = SessionField.SPORT
    SUB_SPORT = SessionField.SUB_SPORT
    TOTAL_ELAPSED_TIME = SessionField.TOTAL_ELAPSED_TIME
    TOTAL_TIMER_TIME = SessionField.TOTAL_TIMER_TIME
    AVG_CADENCE = SessionField.AVG_CADENCE
    MAX_CADENCE = SessionField.MAX_CADENCE
    TOTAL_CALORIES = SessionField.TOTAL_CALORIES
    AVG_HEART_RATE = 15
    MAX_HEART_RATE = 16
    AVG_POWER = SessionField.AVG_POWER
    MAX_POWER = SessionField.MAX_POWER
    TOTAL_WORK = SessionField.TOTAL_WORK
    THRESHOLD_POWER = SessionField.THRESHOLD_POWER


class EventField(enum.IntEnum):
    TIMESTAMP = TIMESTAMP_FIELD
    EVENT = 0
    EVENT_TYPE = 1


# Profile enumeration values used by the writer
FILE_TYPE_ACTIVITY = 4
SPORT_CYCLING = 2
SUB_SPORT_GENERIC = 0
DURATION_TYPE_TIME = 0
TARGET_TYPE_OPEN = 2
TARGET_TYPE_POWER = 4
INTENSITY_INTERVAL = 2
EVENT_TIMER = 0
EVENT_TYPE_START = 0
EVENT_TYPE_STOP = 1
EVENT_TYPE_STOP_ALL = 2
# Profile value for stop_all; older writers used EVENT_TYPE_STOP_ALL above
EVENT_TYPE_STOP_ALL_PROFILE = 4


FILE_ID_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(FileIdField.TYPE, BaseType.ENUM, name="type"),
    FieldDef(FileIdField.MANUFACTURER, BaseType.UINT16, name="manufacturer"),
    FieldDef(FileIdField.PRODUCT, BaseType.UINT16, name="product"),
    FieldDef(FileIdField.SERIAL_NUMBER, BaseType.UINT32, name="serial_number"),
    FieldDef(FileIdField.TIME_CREATED, BaseType.UINT32, name="time_created"),
    FieldDef(FileIdField.PRODUCT_NAME, BaseType.STRING, 20, name="product_name"),
)

DEVICE_INFO_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(DeviceInfoField.DEVICE_INDEX, BaseType.UINT8, name="device_index"),
    FieldDef(DeviceInfoField.DEVICE_TYPE, BaseType.UINT32, name="device_type"),
    FieldDef(DeviceInfoField.MANUFACTURER, BaseType.UINT16, name="manufacturer"),
    FieldDef(DeviceInfoField.PRODUCT, BaseType.UINT16, name="product"),
    FieldDef(DeviceInfoField.SOFTWARE_VERSION, BaseType.UINT16, name="software_version"),
    FieldDef(DeviceInfoField.SERIAL_NUMBER, BaseType.UINT32, name="serial_number"),
    FieldDef(DeviceInfoField.PRODUCT_NAME, BaseType.STRING, 20, name="product_name"),
    FieldDef(DeviceInfoField.TIMESTAMP, BaseType.UINT32, name="timestamp"),
)

DEVELOPER_DATA_ID_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(DeveloperDataIdField.DEVELOPER_DATA_INDEX, BaseType.UINT8, name="developer_data_index"),
    FieldDef(DeveloperDataIdField.APPLICATION_ID, BaseType.BYTE, 16, name="application_id"),
    FieldDef(DeveloperDataIdField.APPLICATION_VERSION, BaseType.UINT32, name="application_version"),
)

FIELD_DESCRIPTION_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(FieldDescriptionField.DEVELOPER_DATA_INDEX, BaseType.UINT8, name="developer_data_index"),
    FieldDef(
        FieldDescriptionField.FIELD_DEFINITION_NUMBER, BaseType.UINT8, name="field_definition_number"
    ),
    FieldDef(FieldDescriptionField.FIT_BASE_TYPE_ID, BaseType.UINT8, name="fit_base_type_id"),
    FieldDef(FieldDescriptionField.FIELD_NAME, BaseType.STRING, 16, name="field_name"),
    FieldDef(FieldDescriptionField.UNITS, BaseType.STRING, 16, name="units"),
    FieldDef(FieldDescriptionField.NATIVE_MESG_NUM, BaseType.UINT16, name="native_mesg_num"),
    FieldDef(FieldDescriptionField.NATIVE_FIELD_NUM, BaseType.UINT8, name="native_field_num"),
)

WORKOUT_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(WorkoutField.WKT_NAME, BaseType.STRING, 50, name="wkt_name"),
    FieldDef(WorkoutField.SPORT, BaseType.ENUM, name="sport"),
    FieldDef(WorkoutField.CAPABILITIES, BaseType.UINT32, name="capabilities"),
    FieldDef(WorkoutField.NUM_VALID_STEPS, BaseType.UINT16, name="num_valid_steps"),
)

WORKOUT_STEP_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(WorkoutStepField.MESSAGE_INDEX, BaseType.UINT16, name="message_index"),
    FieldDef(WorkoutStepField.WKT_STEP_NAME, BaseType.STRING, 20, name="wkt_step_name"),
    FieldDef(WorkoutStepField.DURATION_TYPE, BaseType.ENUM, name="duration_type"),
    FieldDef(WorkoutStepField.DURATION_VALUE, BaseType.UINT32, name="duration_value"),
    FieldDef(WorkoutStepField.TARGET_TYPE, BaseType.ENUM, name="target_type"),
    FieldDef(WorkoutStepField.TARGET_VALUE, BaseType.UINT32, name="target_value"),
    FieldDef(
        WorkoutStepField.CUSTOM_TARGET_VALUE_LOW, BaseType.UINT32, name="custom_target_value_low"
    ),
    FieldDef(
        WorkoutStepField.CUSTOM_TARGET_VALUE_HIGH, BaseType.UINT32, name="custom_target_value_high"
    ),
    FieldDef(WorkoutStepField.INTENSITY, BaseType.ENUM, name="intensity"),
)

RECORD_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(RecordField.TIMESTAMP, BaseType.UINT32, name="timestamp"),
    FieldDef(RecordField.HEART_RATE, BaseType.UINT8, name="heart_rate"),
    FieldDef(RecordField.CADENCE, BaseType.UINT8, name="cadence"),
    FieldDef(RecordField.POWER, BaseType.UINT16, name="power"),
)

_SUMMARY_HEAD: Tuple[FieldDef, ...] = (
    FieldDef(SessionField.TIMESTAMP, BaseType.UINT32, name="timestamp"),
    FieldDef(SessionField.START_TIME, BaseType.UINT32, name="start_time"),
    FieldDef(SessionField.SPORT, BaseType.ENUM, name="sport"),
    FieldDef(SessionField.SUB_SPORT, BaseType.ENUM, name="sub_sport"),
    FieldDef(SessionField.TOTAL_ELAPSED_TIME, BaseType.UINT32, name="total_elapsed_time"),
    FieldDef(SessionField.TOTAL_TIMER_TIME, BaseType.UINT32, name="total_timer_time"),
)

_SUMMARY_TAIL: Tuple[FieldDef, ...] = (
    FieldDef(SessionField.AVG_CADENCE, BaseType.UINT8, name="avg_cadence"),
    FieldDef(SessionField.MAX_CADENCE, BaseType.UINT8, name="max_cadence"),
    FieldDef(SessionField.TOTAL_CALORIES, BaseType.UINT16, name="total_calories"),
    FieldDef(SessionField.AVG_POWER, BaseType.UINT16, name="avg_power"),
    FieldDef(SessionField.MAX_POWER, BaseType.UINT16, name="max_power"),
    FieldDef(SessionField.TOTAL_WORK, BaseType.UINT32, name="total_work"),
    FieldDef(SessionField.THRESHOLD_POWER, BaseType.UINT16, name="threshold_power"),
)

SESSION_FIELDS: Tuple[FieldDef, ...] = (
    _SUMMARY_HEAD
    + (FieldDef(SessionField.TOTAL_DISTANCE, BaseType.UINT32, name="total_distance"),)
    + _SUMMARY_TAIL
    + (
        FieldDef(SessionField.FIRST_LAP_INDEX, BaseType.UINT16, name="first_lap_index"),
        FieldDef(SessionField.NUM_LAPS, BaseType.UINT16, name="num_laps"),
    )
)

LAP_FIELDS: Tuple[FieldDef, ...] = (
    _SUMMARY_HEAD
    + (
        FieldDef(LapField.AVG_HEART_RATE, BaseType.UINT8, name="avg_heart_rate"),
        FieldDef(LapField.MAX_HEART_RATE, BaseType.UINT8, name="max_heart_rate"),
    )
    + _SUMMARY_TAIL
)

EVENT_FIELDS: Tuple[FieldDef, ...] = (
    FieldDef(EventField.TIMESTAMP, BaseType.UINT32, name="timestamp"),
    FieldDef(EventField.EVENT, BaseType.ENUM, name="event"),
    FieldDef(EventField.EVENT_TYPE, BaseType.ENUM, name="event_type"),
)


@dataclass(frozen=True)
class DevFieldSpec:
    """A developer field declared by the writer through a field description.

    Attributes:
        number: Field definition number
        name: Field name written into the description (at most 15 bytes)
        base_type: Base type announced to readers
        native_mesg: Global message the field decorates
        size: Encoded size in bytes (defaults to the base type size)
        units: Units string
    """

    number: int
    name: str
    base_type: BaseType
    native_mesg: int
    size: int = 0
    units: str = ""

    @property
    def byte_size(self) -> int:
        return self.size or self.base_type.size


TARGET_POWER = DevFieldSpec(0, "vd_tgt_pow", BaseType.UINT16, MesgNum.RECORD, units="watts")
START_PCT = DevFieldSpec(1, "vd_start_pct", BaseType.UINT16, MesgNum.WORKOUT_STEP, units="0.01pct")
END_PCT = DevFieldSpec(2, "vd_end_pct", BaseType.UINT16, MesgNum.WORKOUT_STEP, units="0.01pct")
SOURCE = DevFieldSpec(3, "vd_source", BaseType.STRING, MesgNum.WORKOUT, size=64)
SOURCE_URL = DevFieldSpec(4, "vd_src_url", BaseType.STRING, MesgNum.WORKOUT, size=200)
DESCRIPTION = DevFieldSpec(5, "vd_desc", BaseType.STRING, MesgNum.WORKOUT, size=200)

FIXED_DEV_FIELDS: Tuple[DevFieldSpec, ...] = (
    TARGET_POWER,
    START_PCT,
    END_PCT,
    SOURCE,
    SOURCE_URL,
    DESCRIPTION,
)

PAYLOAD_FIELD_PREFIX = "vd_canon"
PAYLOAD_FIRST_FIELD_NUMBER = 10


def payload_field(index: int, size: int) -> DevFieldSpec:
    """Developer field carrying payload chunk ``index``."""
    return DevFieldSpec(
        PAYLOAD_FIRST_FIELD_NUMBER + index,
        f"{PAYLOAD_FIELD_PREFIX}{index}",
        BaseType.BYTE,
        MesgNum.WORKOUT,
        size=size,
    )
