from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import logging

from ltspice_transient.errors import (
    ParseWarning,
    ShortReadError,
    UnsupportedFormatError,
    UnsupportedSimulationTypeError,
    stepped_simulation,
)
from ltspice_transient.ingest.byte_source import ByteSource
from ltspice_transient.ingest.demux import BinaryDemuxer
from ltspice_transient.ingest.header import scan_header
from ltspice_transient.ingest.metadata_parser import parse_metadata_with_warnings
from ltspice_transient.models.dataset import TransientDataset
from ltspice_transient.models.metadata import BinaryLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransientRawReaderConfig:
    """
    Reader configuration for binary transient raw files.

    chunk_units:
      header code units (2 bytes each) read per scan iteration.
    max_header_units:
      scan ceiling; a header longer than this without the Binary marker is rejected.
    max_read_attempts:
      attempts per variable channel before a short read is fatal.
    probe_bytes:
      bytes read up front to tell binary from ASCII containers.
    """
    chunk_units: int = 100
    max_header_units: int = 10_000
    max_read_attempts: int = 5
    probe_bytes: int = 10

    def __post_init__(self) -> None:
        for name in ("chunk_units", "max_header_units", "max_read_attempts"):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be > 0")
        if int(self.probe_bytes) < 2:
            raise ValueError("probe_bytes must be >= 2")


class TransientRawReader:
    """
    Reader for binary transient raw files.

    Sequence: probe -> header scan -> metadata -> validation -> decode.
    The byte source is released exactly once on every path; no partial dataset
    is ever returned.

    HARD REQUIREMENTS:
      - only binary containers (ASCII variant rejected before any header parsing)
      - only transient analyses
      - stepped runs: first step only (warning)
    """

    def __init__(self, config: Optional[TransientRawReaderConfig] = None):
        self.config = config or TransientRawReaderConfig()

    def read(self, file_path: str | Path) -> TransientDataset:
        with ByteSource.open(file_path) as source:
            logger.debug("opened %s", source.name)
            return self.read_source(source, source_path=Path(source.name))

    def read_source(self, source: ByteSource, *, source_path: Optional[Path] = None) -> TransientDataset:
        """Parse from an already open source. The caller owns (and closes) ``source``."""
        cfg = self.config
        warnings: List[ParseWarning] = []

        self._probe(source)

        source.seek(0)
        hdr = scan_header(source, chunk_units=cfg.chunk_units, max_header_units=cfg.max_header_units)
        logger.debug("header read: %d units", hdr.length_units)

        meta, meta_warnings = parse_metadata_with_warnings(hdr.text)
        warnings.extend(meta_warnings)
        logger.debug(
            "metadata: plot=%r points=%d variables=%d (declared %d)",
            meta.plot_name, meta.point_count, meta.variable_count, meta.declared_variable_count,
        )

        if not meta.is_transient:
            raise UnsupportedSimulationTypeError(meta.plot_name)
        if meta.is_stepped:
            warnings.append(stepped_simulation(meta.flags))

        layout = BinaryLayout(header_length_units=hdr.length_units, variable_count=meta.variable_count)
        logger.debug(
            "layout: start=%d record=%d time_stride=%d var_stride=%d",
            layout.binary_start_offset, layout.record_size,
            layout.time_record_stride, layout.variable_record_stride,
        )

        self._check_payload_size(source, meta.point_count, layout)

        res = BinaryDemuxer(cfg.max_read_attempts).decode(source, meta, layout)

        for w in warnings:
            logger.warning(w.message)

        return TransientDataset(
            source_path=source_path if source_path is not None else Path(source.name),
            time=res.time,
            variables=meta.variable_names,
            samples=res.samples,
            metadata=meta,
            warnings=tuple(warnings),
        )

    def _check_payload_size(self, source: ByteSource, point_count: int, layout: BinaryLayout) -> None:
        """
        Reject a header point count the file cannot hold before any buffer is allocated.

        The time channel needs every record except the value bytes of the last one.
        """
        available = max(0, source.size() - layout.binary_start_offset)
        expected = layout.expected_payload_bytes(point_count)
        if available >= expected:
            return
        n_time = (available + layout.time_record_stride) // layout.record_size
        logger.debug("payload: %d bytes available, %d expected", available, expected)
        if n_time < int(point_count):
            raise ShortReadError("time", int(point_count), int(n_time))

    def _probe(self, source: ByteSource) -> None:
        source.seek(0)
        head = source.read(int(self.config.probe_bytes))
        if len(head) < 2:
            raise UnsupportedFormatError("empty")
        # UTF-16LE headers have a zero high byte for every ASCII character
        if head[1] != 0:
            raise UnsupportedFormatError("ascii")


def load_transient(file_path: str | Path, config: Optional[TransientRawReaderConfig] = None) -> TransientDataset:
    """Load a binary transient raw file. Single-call entry point."""
    return TransientRawReader(config).read(file_path)
