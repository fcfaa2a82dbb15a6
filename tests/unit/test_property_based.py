"""Property-based tests using hypothesis."""

from __future__ import annotations

from datetime import datetime, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from velofit import build_fit_file, parse_fit_file
from velofit.activity.payload import chunk_payload, join_payload
from velofit.codec.types import BaseType
from velofit.utils.crc import crc16, crc16_bytes

T0 = datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc)


class TestCRCProperties:
    """Property-based tests for CRC."""

    @given(data=st.binary(max_size=512))
    def test_appended_crc_residue(self, data: bytes) -> None:
        """Test data followed by its CRC always checksums to zero."""
        assert crc16(data + crc16_bytes(data)) == 0

    @given(a=st.binary(max_size=128), b=st.binary(max_size=128))
    def test_running_checksum(self, a: bytes, b: bytes) -> None:
        """Test checksums can be continued across buffers."""
        assert crc16(b, crc16(a)) == crc16(a + b)


class TestTypeProperties:
    """Property-based tests for base types."""

    @given(value=st.integers(min_value=0, max_value=0xFFFE), little=st.booleans())
    def test_uint16_valid_range(self, value: int, little: bool) -> None:
        """Test every non-sentinel uint16 survives."""
        raw = BaseType.UINT16.encode(value, little_endian=little)
        assert BaseType.UINT16.decode(raw, little_endian=little) == value

    @given(value=st.integers(min_value=-0x8000, max_value=0x7FFE))
    def test_sint16_valid_range(self, value: int) -> None:
        """Test every non-sentinel sint16 survives."""
        assert BaseType.SINT16.decode(BaseType.SINT16.encode(value)) == value

    @given(
        text=st.text(
            alphabet=st.characters(exclude_categories=("Cs",), exclude_characters="\x00"),
            min_size=1,
            max_size=15,
        )
    )
    def test_string_fits_width(self, text: str) -> None:
        """Test strings shorter than the field width survive."""
        raw = BaseType.STRING.encode(text, 64)
        assert len(raw) == 64
        assert BaseType.STRING.decode(raw) == text


class TestPayloadProperties:
    """Property-based tests for payload chunking."""

    @given(
        payload=st.binary(max_size=1000).map(lambda b: b.replace(b"\x00", b"\x01")),
        chunk_size=st.integers(min_value=1, max_value=255),
    )
    def test_chunk_join(self, payload: bytes, chunk_size: int) -> None:
        """Test joining the chunks restores any NUL-free payload."""
        chunks = chunk_payload(payload, chunk_size)
        assert all(len(c) <= chunk_size for c in chunks)
        assert join_payload(chunks) == payload


class TestActivityProperties:
    """Property-based tests for whole files."""

    @settings(max_examples=25, deadline=None)
    @given(
        rows=st.lists(
            st.tuples(
                st.one_of(st.none(), st.integers(min_value=0, max_value=2000)),
                st.one_of(st.none(), st.integers(min_value=30, max_value=220)),
                st.one_of(st.none(), st.integers(min_value=0, max_value=200)),
            ),
            max_size=40,
        ),
        ftp=st.integers(min_value=50, max_value=500),
    )
    def test_samples_survive(self, rows: list, ftp: int) -> None:
        """Test sample values and FTP survive encoding."""
        samples = [
            {"t": i, "power": p, "heartRate": hr, "cadence": c} for i, (p, hr, c) in enumerate(rows)
        ]
        activity = parse_fit_file(build_fit_file(samples=samples, ftp=ftp, started_at=T0))

        assert activity.meta.ftp == ftp
        assert [(s.t, s.power, s.heart_rate, s.cadence) for s in activity.samples] == [
            (float(i), p, hr, c) for i, (p, hr, c) in enumerate(rows)
        ]

    @settings(max_examples=25, deadline=None)
    @given(
        segments=st.lists(
            st.tuples(
                st.integers(min_value=1, max_value=60),
                st.integers(min_value=0, max_value=200),
                st.integers(min_value=0, max_value=200),
                st.booleans(),
            ),
            max_size=12,
        )
    )
    def test_segments_survive(self, segments: list) -> None:
        """Test segment lists survive encoding."""
        raw = [[m, s, e, "freeride"] if free else [m, s, e] for m, s, e, free in segments]
        activity = parse_fit_file(
            build_fit_file(workout_plan={"rawSegments": raw}, ftp=250, started_at=T0)
        )

        assert activity.lossless is True
        assert [seg.model_dump() for seg in activity.workout_plan.raw_segments] == raw
