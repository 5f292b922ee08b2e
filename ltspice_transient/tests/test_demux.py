"""Tests for the binary layout, strided reads and the bounded-retry demuxer."""

from __future__ import annotations

import io

import numpy as np
import pytest

from ltspice_transient.errors import ShortReadError
from ltspice_transient.ingest.byte_source import ByteSource
from ltspice_transient.ingest.demux import (
    VALUE_DTYPE,
    BinaryDemuxer,
    ReadDecision,
    retry_decision,
)
from ltspice_transient.models.metadata import BinaryLayout, RawMetadata, VariableSpec
from ltspice_transient.validation.synthetic import build_header, encode_records


def _meta(n_vars: int, n_points: int, offset: float = 0.0) -> RawMetadata:
    return RawMetadata(
        plot_name="Transient Analysis",
        flags="real forward",
        declared_variable_count=n_vars,
        point_count=n_points,
        time_offset=offset,
        variables=tuple(VariableSpec(f"V(n{k})", "voltage") for k in range(1, n_vars + 1)),
    )


def _file(n_vars: int, n_points: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    t = np.linspace(0.0, 1e-3, n_points)
    s = rng.normal(size=(n_points, n_vars))
    header = build_header([f"V(n{k})" for k in range(1, n_vars + 1)], n_points)
    data = header.encode("utf-16-le") + encode_records(t, s)
    layout = BinaryLayout(header_length_units=len(header), variable_count=n_vars)
    return data, layout, t, s


class FlakySource(ByteSource):
    """Value-channel reads deliver at most ``per_call`` values, nothing for the first ``fail_first`` calls."""

    def __init__(self, data: bytes, *, fail_first: int = 0, per_call: int | None = None):
        super().__init__(io.BytesIO(data), name="<flaky>")
        self.fail_first = fail_first
        self.per_call = per_call
        self.value_calls = 0

    def read_strided(self, dtype, count, skip):
        if np.dtype(dtype) != VALUE_DTYPE:
            return super().read_strided(dtype, count, skip)
        self.value_calls += 1
        if self.value_calls <= self.fail_first:
            return np.empty((0,), dtype=VALUE_DTYPE)
        if self.per_call is not None:
            count = min(count, self.per_call)
        return super().read_strided(dtype, count, skip)


# -----------------------------------------------------------------------
# BinaryLayout
# -----------------------------------------------------------------------


@pytest.mark.parametrize("n_vars", [1, 2, 3, 7, 40])
def test_column_offsets_are_four_bytes_apart(n_vars: int) -> None:
    lay = BinaryLayout(header_length_units=123, variable_count=n_vars)
    for l in range(1, n_vars):
        assert lay.variable_column_offset(l + 1) - lay.variable_column_offset(l) == 4


def test_layout_strides() -> None:
    lay = BinaryLayout(header_length_units=250, variable_count=3)
    assert lay.binary_start_offset == 500
    assert lay.record_size == 8 + 12
    assert lay.time_record_stride == 12
    assert lay.variable_record_stride == 16
    assert lay.variable_column_offset(1) == 508
    assert lay.variable_column_offset(3) == 516
    # one value plus its skip spans exactly one record
    assert 8 + lay.time_record_stride == lay.record_size
    assert 4 + lay.variable_record_stride == lay.record_size
    assert lay.expected_payload_bytes(10) == 200


def test_layout_rejects_bad_channel_index() -> None:
    lay = BinaryLayout(header_length_units=10, variable_count=2)
    with pytest.raises(ValueError):
        lay.variable_column_offset(0)
    with pytest.raises(ValueError):
        lay.variable_column_offset(3)


# -----------------------------------------------------------------------
# ByteSource.read_strided
# -----------------------------------------------------------------------


def test_read_strided_picks_every_record() -> None:
    raw = np.arange(12, dtype="<f4").tobytes()
    src = ByteSource(io.BytesIO(raw))
    src.seek(4)
    vals = src.read_strided("<f4", 4, 8)
    assert vals.tolist() == [1.0, 4.0, 7.0, 10.0]


def test_read_strided_short_at_eof() -> None:
    raw = np.arange(5, dtype="<f4").tobytes()
    src = ByteSource(io.BytesIO(raw))
    vals = src.read_strided("<f4", 10, 4)
    assert vals.tolist() == [0.0, 2.0, 4.0]


def test_read_strided_last_value_needs_no_trailing_skip() -> None:
    raw = np.arange(3, dtype="<f8").tobytes()
    src = ByteSource(io.BytesIO(raw))
    vals = src.read_strided("<f8", 2, 8)
    assert vals.tolist() == [0.0, 2.0]


# -----------------------------------------------------------------------
# retry_decision
# -----------------------------------------------------------------------


@pytest.mark.parametrize(
    "attempt,count,expected",
    [
        (1, 10, ReadDecision.SUCCEED),
        (5, 10, ReadDecision.SUCCEED),
        (1, 3, ReadDecision.CONTINUE),
        (4, 9, ReadDecision.CONTINUE),
        (5, 9, ReadDecision.FAIL),
        (5, 0, ReadDecision.FAIL),
    ],
)
def test_retry_decision(attempt: int, count: int, expected: ReadDecision) -> None:
    assert retry_decision(attempt, count, 10, 5) is expected


# -----------------------------------------------------------------------
# BinaryDemuxer
# -----------------------------------------------------------------------


def test_decode_matches_written_values() -> None:
    data, lay, t, s = _file(3, 50)
    res = BinaryDemuxer().decode(ByteSource(io.BytesIO(data)), _meta(3, 50), lay)
    assert res.time.shape == (50,)
    assert res.samples.shape == (50, 3)
    assert res.samples.dtype == np.float64
    np.testing.assert_array_equal(res.time, t)
    np.testing.assert_array_equal(res.samples, s.astype(np.float32).astype(np.float64))
    assert res.attempts == (1, 1, 1)


def test_time_is_abs_plus_offset() -> None:
    n = 6
    t = np.array([0.0, -1e-6, 2e-6, -3e-6, 4e-6, -5e-6])
    header = build_header(["V(a)"], n)
    data = header.encode("utf-16-le") + encode_records(t, np.zeros(n))
    lay = BinaryLayout(len(header), 1)
    res = BinaryDemuxer().decode(ByteSource(io.BytesIO(data)), _meta(1, n, offset=1.0), lay)
    np.testing.assert_allclose(res.time, np.abs(t) + 1.0)
    assert np.all(res.time >= 1.0)


def test_fifth_attempt_completes_the_channel() -> None:
    data, lay, t, s = _file(2, 20)
    src = FlakySource(data, fail_first=4)
    col, used = BinaryDemuxer(5).read_variable(src, _meta(2, 20), lay, 1)
    assert used == 5
    np.testing.assert_array_equal(col, s[:, 0].astype(np.float32).astype(np.float64))


def test_partial_reads_accumulate() -> None:
    data, lay, t, s = _file(3, 10)
    src = FlakySource(data, per_call=3)
    col, used = BinaryDemuxer(5).read_variable(src, _meta(3, 10), lay, 2)
    assert used == 4
    np.testing.assert_array_equal(col, s[:, 1].astype(np.float32).astype(np.float64))


def test_channel_never_complete_is_short_read() -> None:
    data, lay, _, _ = _file(2, 20)
    src = FlakySource(data, fail_first=10)
    with pytest.raises(ShortReadError) as ei:
        BinaryDemuxer(5).read_variable(src, _meta(2, 20), lay, 2)
    err = ei.value
    assert err.channel == "variable"
    assert err.index == 2
    assert err.expected == 20
    assert err.got == 0
    assert err.attempts == 5
    assert src.value_calls == 5


def test_truncated_payload_fails_time_channel() -> None:
    data, lay, _, _ = _file(2, 20)
    truncated = data[: lay.binary_start_offset + 5 * lay.record_size]
    with pytest.raises(ShortReadError) as ei:
        BinaryDemuxer().decode(ByteSource(io.BytesIO(truncated)), _meta(2, 20), lay)
    assert ei.value.channel == "time"
    assert ei.value.index is None
    assert ei.value.expected == 20
    assert ei.value.got == 5


def test_zero_points() -> None:
    data, lay, _, _ = _file(2, 0)
    res = BinaryDemuxer().decode(ByteSource(io.BytesIO(data)), _meta(2, 0), lay)
    assert res.time.shape == (0,)
    assert res.samples.shape == (0, 2)


def test_read_strided_caps_request_at_stream_end() -> None:
    raw = np.arange(4, dtype="<f8").tobytes()
    src = ByteSource(io.BytesIO(raw))
    vals = src.read_strided("<f8", 10**13, 0)
    assert vals.tolist() == [0.0, 1.0, 2.0, 3.0]
    assert src.remaining() == 0
