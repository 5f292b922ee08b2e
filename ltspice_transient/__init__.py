"""ltspice_transient -- reader for binary transient-analysis raw files written by LTspice.

This package provides tools for:
- Probing a .raw container and rejecting the ASCII variant
- Locating the UTF-16 header and parsing its metadata and variable table
- Decoding the interleaved payload (float64 time, float32 values) into a time
  vector and a samples matrix
- Reporting recoverable conditions (variable count mismatch, stepped runs) as
  warnings next to a complete dataset

Key principles:
- Transient analyses only; stepped runs decode the first step only
- The file is always closed, whatever the outcome
- No partial results: fatal conditions raise a typed RawFileError

Main subpackages:
- ingest: Byte source, header scanner, metadata parser, demuxer, reader
- models: Data models (RawMetadata, BinaryLayout, TransientDataset)
- validation: Synthetic raw-file generation for reproducible checks

Entry point:
    from ltspice_transient import load_transient
    ds = load_transient("rc.raw")
    ds.time, ds.variables, ds.samples, ds.metadata
"""

from ltspice_transient.logging import logger
from ltspice_transient.errors import (
    HeaderTooLongError,
    MarkerNotFoundError,
    MissingFieldError,
    MissingSectionError,
    OpenFailedError,
    ParseWarning,
    RawFileError,
    RawFileNotFoundError,
    ShortReadError,
    UnsupportedFormatError,
    UnsupportedSimulationTypeError,
    WarningKind,
)
from ltspice_transient.ingest import TransientRawReader, TransientRawReaderConfig, load_transient
from ltspice_transient.models import BinaryLayout, RawMetadata, TransientDataset, VariableSpec

__all__ = [
    "logger",
    "load_transient",
    "TransientRawReader",
    "TransientRawReaderConfig",
    "BinaryLayout",
    "RawMetadata",
    "TransientDataset",
    "VariableSpec",
    "ParseWarning",
    "WarningKind",
    "RawFileError",
    "RawFileNotFoundError",
    "OpenFailedError",
    "UnsupportedFormatError",
    "MarkerNotFoundError",
    "HeaderTooLongError",
    "MissingFieldError",
    "MissingSectionError",
    "UnsupportedSimulationTypeError",
    "ShortReadError",
]
