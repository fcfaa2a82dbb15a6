"""Unit tests for the pydantic models."""

from __future__ import annotations

from datetime import datetime, timezone

from velofit.models import PauseEvent, Sample, Segment, TimerEventType, WorkoutPlan


class TestSegment:
    """Test the segment array form."""

    def test_from_array(self) -> None:
        """Test the three-element form."""
        segment = Segment.model_validate([5, 50, 75])

        assert segment.minutes == 5
        assert segment.start_pct == 50
        assert segment.end_pct == 75
        assert segment.freeride is False

    def test_missing_end_uses_start(self) -> None:
        """Test a steady segment with no end percent."""
        segment = Segment.model_validate([5, 60])
        assert segment.end_pct is None
        assert segment.effective_end_pct == 60

    def test_freeride(self) -> None:
        """Test the free-ride marker."""
        segment = Segment.model_validate([1, 100, 100, "freeride"])
        assert segment.freeride is True
        assert segment.model_dump() == [1, 100, 100, "freeride"]

    def test_cadence(self) -> None:
        """Test the five-element form with a cadence target."""
        segment = Segment.model_validate([10, 60, 60, None, 90])
        assert segment.cadence_rpm == 90
        assert segment.model_dump() == [10, 60, 60, None, 90]

    def test_fractional_minutes(self) -> None:
        """Test non-integral values are kept."""
        segment = Segment.model_validate([1.5, 55.5, 60])
        assert segment.model_dump() == [1.5, 55.5, 60]
        assert segment.duration_sec == 90

    def test_minimum_duration(self) -> None:
        """Test a zero-length segment still lasts a second."""
        assert Segment(minutes=0).duration_sec == 1


class TestWorkoutPlan:
    """Test plan validation."""

    def test_camel_case_keys(self) -> None:
        """Test collaborator keys are accepted."""
        plan = WorkoutPlan.model_validate(
            {"workoutTitle": "X", "sourceURL": "u", "rawSegments": [[1, 2, 3]], "extra": 1}
        )

        assert plan.workout_title == "X"
        assert plan.source_url == "u"
        assert len(plan.raw_segments) == 1

    def test_defaults(self) -> None:
        """Test defaults of an empty plan."""
        plan = WorkoutPlan()

        assert plan.source == "Unknown"
        assert plan.workout_title == "Workout"
        assert plan.raw_segments == []

    def test_text_events(self) -> None:
        """Test text annotations."""
        plan = WorkoutPlan.model_validate({"textEvents": [{"offsetSec": 30, "text": "Go"}]})
        assert plan.text_events is not None
        assert plan.text_events[0].duration_sec == 10


class TestSample:
    """Test sample aliases."""

    def test_aliases(self) -> None:
        """Test heart rate and target power spellings."""
        assert Sample.model_validate({"hr": 140}).heart_rate == 140
        assert Sample.model_validate({"heartRate": 141}).heart_rate == 141
        assert Sample.model_validate({"targetPower": 200}).target_power == 200

    def test_missing_time(self) -> None:
        """Test a null time reads as zero."""
        assert Sample.model_validate({"t": None, "power": 100}).t == 0.0


class TestPauseEvent:
    """Test timer event parsing."""

    def test_parse(self) -> None:
        """Test an ISO timestamp and known type."""
        event = PauseEvent.model_validate({"type": "stop_all", "at": "2024-03-01T18:00:00Z"})

        assert event.type is TimerEventType.STOP_ALL
        assert event.at == datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc)

    def test_unknown_type_is_stop(self) -> None:
        """Test unrecognised types read as a pause."""
        event = PauseEvent.model_validate({"type": "lap", "at": "2024-03-01T18:00:00Z"})
        assert event.type is TimerEventType.STOP
