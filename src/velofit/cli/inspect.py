"""FIT file inspection CLI command."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Optional

from ..activity.reader import parse_fit_file
from ..codec.decoder import RecordStream
from ..codec.messages import MesgNum
from ..exceptions import TruncatedStreamError
from ..models.activity import DecodedActivity


def _mesg_name(global_id: int) -> str:
    try:
        return MesgNum(global_id).name.lower()
    except ValueError:
        return f"mesg_{global_id}"


def _fmt(value: Optional[float], unit: str = "") -> str:
    if value is None:
        return "-"
    return f"{value:g}{unit}"


def inspect_file(file_path: Path) -> None:
    """Decode a FIT file and print a report.

    Args:
        file_path: Path to a FIT activity file

    Raises:
        FramingError: If the file header or checksums are invalid
    """
    data = file_path.read_bytes()

    stream = RecordStream(data)
    counts: Counter[int] = Counter()
    stop: Optional[TruncatedStreamError] = None
    try:
        for message in stream:
            counts[message.global_id] += 1
    except TruncatedStreamError as e:
        stop = e

    activity = parse_fit_file(data, allow_partial=True)

    # Print header
    print("|" * 7, "velofit: FIT activity codec", "|" * 7)
    print(f"{file_path.name}: {len(data)} bytes")
    print(
        f"Protocol {stream.header.protocol_version >> 4}.{stream.header.protocol_version & 0x0F}, "
        f"profile {stream.header.profile_version}, "
        f"{stream.header.data_size} bytes of records"
    )
    if not stream.complete:
        print("Warning: file is shorter than its header declares")
    if stop is not None:
        print(f"Warning: decoding stopped at offset {stop.offset}")
    print()

    # Message histogram
    print(f"{'-' * 24} Messages {'-' * 24}")
    for global_id in sorted(counts):
        name = _mesg_name(global_id)
        print(f"        {name}{'.' * max(1, 40 - len(name))}{counts[global_id]}")
    print()

    if stream.descriptions:
        print(f"{'-' * 20} Developer fields {'-' * 20}")
        for key, description in sorted(stream.descriptions.items()):
            label = f"{key.dev_index}:{key.number} {description.name}"
            print(f"        {label}{'.' * max(1, 40 - len(label))}{description.base_type.type_name}")
        print()

    print_summary(activity)


def print_summary(activity: DecodedActivity) -> None:
    """Print the workout and session summary of a decoded activity."""
    plan = activity.workout_plan
    meta = activity.meta

    print(f"{'=' * 24} Summary {'=' * 24}")
    print(f"Workout: {plan.workout_title} ({plan.source})")
    print(f"Steps: {len(plan.raw_segments)}, plan {'embedded' if activity.lossless else 'rebuilt from steps'}")
    print(f"Samples: {len(activity.samples)}")
    print(f"Started: {meta.started_at.isoformat() if meta.started_at else '-'}")
    print(f"Ended: {meta.ended_at.isoformat() if meta.ended_at else '-'}")
    print(f"Elapsed: {_fmt(meta.total_elapsed_sec, ' s')}, timer: {_fmt(meta.total_timer_sec, ' s')}")
    print(f"FTP: {_fmt(meta.ftp, ' W')}, work: {_fmt(meta.total_work_j, ' J')}")
    print(f"Timer events: {len(meta.pause_events)}")
    print()
