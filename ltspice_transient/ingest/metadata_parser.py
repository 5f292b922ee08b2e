"""Header text -> :class:`RawMetadata`.

The header is free text made of "Key: value" lines followed by a ``Variables:``
table and the ``Binary:`` label, e.g.::

    Title: * C:\\sim\\rc.asc
    Date: Thu Jan 02 10:00:00 2025
    Plotname: Transient Analysis
    Flags: real forward
    No. Variables: 3
    No. Points:          101
    Offset:   0.0000000000000000e+000
    Command: Linear Technology Corporation LTspice XVII
    Variables:
            0       time    time
            1       V(out)  voltage
            2       I(R1)   device_current
    Binary:

Each field is one explicit extraction rule with its own default or failure policy.
No I/O happens here.
"""

from __future__ import annotations

from typing import List, Optional, Tuple
import logging
import re

from ltspice_transient.errors import (
    MissingFieldError,
    MissingSectionError,
    ParseWarning,
    variable_count_mismatch,
)
from ltspice_transient.models.metadata import RawMetadata, VariableSpec

logger = logging.getLogger(__name__)

_REST_OF_LINE = r"[ \t]*([^\r\n]*)"

_PAT_PLOTNAME = re.compile(r"Plotname:" + _REST_OF_LINE)
_PAT_FLAGS = re.compile(r"Flags:" + _REST_OF_LINE)
_PAT_TITLE = re.compile(r"Title:" + _REST_OF_LINE)
_PAT_DATE = re.compile(r"Date:" + _REST_OF_LINE)
_PAT_NUM_VARS = re.compile(r"No\.\s*Variables:\s*(\d+)")
_PAT_NUM_POINTS = re.compile(r"No\.\s*Points:\s*(\d+)")
_PAT_OFFSET = re.compile(r"Offset:\s*([\d.\-e+E]+)")
_PAT_VAR_SECTION = re.compile(r"Variables:[ \t\r]*\n(.+?)Binary:", flags=re.DOTALL)
_PAT_VAR_LINE = re.compile(r"^(\d+)\s+(\S+)\s+(\S+)")


def _search_text(pat: re.Pattern, text: str, default: str) -> str:
    m = pat.search(text)
    if not m:
        return default
    return m.group(1).strip()


def _parse_float(v: Optional[str], default: float) -> float:
    if v is None:
        return default
    try:
        return float(v.strip())
    except Exception:
        return default


def _required_int(pat: re.Pattern, text: str, field_name: str) -> int:
    m = pat.search(text)
    if not m:
        raise MissingFieldError(field_name)
    return int(m.group(1))


def parse_variable_section(header_text: str) -> Tuple[VariableSpec, ...]:
    """
    Parse the ``Variables:`` table (bounded by ``Binary:``).

    Lines that do not look like ``<index> <name> <type>`` are ignored; index 0 is
    the time channel and is skipped.
    """
    m = _PAT_VAR_SECTION.search(header_text)
    if not m:
        raise MissingSectionError("Variables")

    out: List[VariableSpec] = []
    for raw_line in m.group(1).splitlines():
        line = raw_line.strip()
        if not line:
            continue
        mm = _PAT_VAR_LINE.match(line)
        if not mm:
            continue
        if int(mm.group(1)) > 0:
            out.append(VariableSpec(name=mm.group(2), type=mm.group(3)))
    return tuple(out)


def parse_metadata_with_warnings(header_text: str) -> Tuple[RawMetadata, List[ParseWarning]]:
    """Parse header text; return (metadata, recoverable warnings)."""
    warnings: List[ParseWarning] = []

    plot_name = _search_text(_PAT_PLOTNAME, header_text, "Unknown")
    flags = _search_text(_PAT_FLAGS, header_text, "")
    title = _search_text(_PAT_TITLE, header_text, "")
    date = _search_text(_PAT_DATE, header_text, "")

    # header count includes the time channel
    declared = _required_int(_PAT_NUM_VARS, header_text, "num_vars") - 1
    n_points = _required_int(_PAT_NUM_POINTS, header_text, "num_points")

    m = _PAT_OFFSET.search(header_text)
    offset = _parse_float(m.group(1) if m else None, 0.0)

    variables = parse_variable_section(header_text)
    if len(variables) != declared:
        warnings.append(variable_count_mismatch(declared, len(variables)))

    meta = RawMetadata(
        plot_name=plot_name,
        flags=flags,
        declared_variable_count=declared,
        point_count=n_points,
        time_offset=offset,
        variables=variables,
        title=title,
        date=date,
        header_text=header_text,
    )
    return meta, warnings


def parse_metadata(header_text: str) -> RawMetadata:
    """Parse header text; recoverable warnings go to the logger only."""
    meta, warnings = parse_metadata_with_warnings(header_text)
    for w in warnings:
        logger.warning(w.message)
    return meta
