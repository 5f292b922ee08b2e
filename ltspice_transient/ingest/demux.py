from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import logging

import numpy as np

from ltspice_transient.errors import ShortReadError
from ltspice_transient.ingest.byte_source import ByteSource
from ltspice_transient.models.metadata import BinaryLayout, RawMetadata

logger = logging.getLogger(__name__)

TIME_DTYPE = np.dtype("<f8")
VALUE_DTYPE = np.dtype("<f4")


class ReadDecision(Enum):
    CONTINUE = "continue"
    SUCCEED = "succeed"
    FAIL = "fail"


def retry_decision(attempt: int, count_so_far: int, expected: int, max_attempts: int) -> ReadDecision:
    """
    Bounded-retry policy for one channel read, independent of any I/O.

    attempt:
      1-based number of the attempt that just finished.
    count_so_far:
      values accumulated over all attempts so far.
    """
    if count_so_far >= expected:
        return ReadDecision.SUCCEED
    if attempt >= max_attempts:
        return ReadDecision.FAIL
    return ReadDecision.CONTINUE


@dataclass(frozen=True)
class DemuxResult:
    time: np.ndarray
    samples: np.ndarray
    attempts: Tuple[int, ...] = ()


class BinaryDemuxer:
    """
    Stride-addressed decoder of the interleaved payload.

    Only the first ``point_count`` records are read; anything after them (e.g. the
    other steps of a stepped run) is never touched.
    """

    def __init__(self, max_read_attempts: int = 5):
        self.max_read_attempts = int(max_read_attempts)

    def read_time(self, source: ByteSource, meta: RawMetadata, layout: BinaryLayout) -> np.ndarray:
        n = int(meta.point_count)
        source.seek(layout.binary_start_offset)
        raw = source.read_strided(TIME_DTYPE, n, layout.time_record_stride)
        if raw.size != n:
            raise ShortReadError("time", n, int(raw.size))
        return np.abs(raw.astype(np.float64, copy=False)) + float(meta.time_offset)

    def read_variable(
        self,
        source: ByteSource,
        meta: RawMetadata,
        layout: BinaryLayout,
        l: int,
    ) -> Tuple[np.ndarray, int]:
        """
        Read channel ``l`` (1-based). Returns (values float64, attempts used).

        A short read is retried; each retry resumes at the channel's next unread
        record and the counts accumulate.
        """
        n = int(meta.point_count)
        start = layout.variable_column_offset(l)
        skip = layout.variable_record_stride
        out = np.empty((n,), dtype=np.float64)
        got = 0
        attempt = 0
        while True:
            attempt += 1
            source.seek(start + got * layout.record_size)
            chunk = source.read_strided(VALUE_DTYPE, n - got, skip)
            out[got:got + chunk.size] = chunk
            got += int(chunk.size)

            decision = retry_decision(attempt, got, n, self.max_read_attempts)
            if decision is ReadDecision.SUCCEED:
                return out, attempt
            if decision is ReadDecision.FAIL:
                raise ShortReadError("variable", n, got, index=l, attempts=attempt)
            logger.debug("variable %d: short read (%d/%d), attempt %d", l, got, n, attempt)

    def decode(self, source: ByteSource, meta: RawMetadata, layout: BinaryLayout) -> DemuxResult:
        time = self.read_time(source, meta, layout)

        n_vars = int(layout.variable_count)
        samples = np.zeros((int(meta.point_count), n_vars), dtype=np.float64)
        attempts = []
        for l in range(1, n_vars + 1):
            col, used = self.read_variable(source, meta, layout, l)
            samples[:, l - 1] = col
            attempts.append(used)

        return DemuxResult(time=time, samples=samples, attempts=tuple(attempts))
