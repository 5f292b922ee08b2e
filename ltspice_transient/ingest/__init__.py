"""Ingest package - binary transient raw-file reading.

This package handles:
- Opening the file as a scoped byte source
- Locating the UTF-16 header and its end marker
- Parsing header metadata and the variable table
- Demultiplexing the interleaved float64/float32 payload

Key classes:
- TransientRawReader: probe, validate and decode one file into a TransientDataset
- BinaryDemuxer: stride-addressed channel reads with bounded retry

Design principle:
- The byte source never leaves the reader and is always closed
- Fatal conditions raise; recoverable ones become warnings on the dataset
"""
from .byte_source import ByteSource
from .demux import BinaryDemuxer, ReadDecision, retry_decision
from .header import HeaderScan, scan_header
from .metadata_parser import parse_metadata, parse_metadata_with_warnings
from .reader_transient import TransientRawReader, TransientRawReaderConfig, load_transient

__all__ = [
    "ByteSource",
    "BinaryDemuxer",
    "ReadDecision",
    "retry_decision",
    "HeaderScan",
    "scan_header",
    "parse_metadata",
    "parse_metadata_with_warnings",
    "TransientRawReader",
    "TransientRawReaderConfig",
    "load_transient",
]
