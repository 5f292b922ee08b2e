from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from ltspice_transient.errors import HeaderTooLongError, MarkerNotFoundError
from ltspice_transient.ingest.byte_source import ByteSource

logger = logging.getLogger(__name__)

# Header end marker, searched without its leading "B" as the container does.
BINARY_MARKER = "inary"

# The header ends 6 units after the start of the marker: "inary:" + "\n".
# Fixed format constant of the container.
MARKER_TAIL_UNITS = 6

UNIT_BYTES = 2


@dataclass(frozen=True)
class HeaderScan:
    """
    Raw header as located by :func:`scan_header`.

    text:
      header text up to and including the newline after "Binary:".
    length_units:
      len(text), counted in 2-byte code units (the payload starts at 2 * length_units).
    """
    text: str
    length_units: int


def _decode_units(buf: bytes) -> str:
    # one character per 16-bit code unit (no surrogate pairing) so len(text) counts units
    n = len(buf) // UNIT_BYTES
    units = np.frombuffer(buf[: n * UNIT_BYTES], dtype="<u2")
    return "".join(map(chr, units.tolist()))


def scan_header(
    source: ByteSource,
    *,
    chunk_units: int = 100,
    max_header_units: int = 10_000,
) -> HeaderScan:
    """
    Accumulate UTF-16LE code units from the current position until the marker is found.

    The whole buffer is searched after each chunk, so a marker split across two
    chunks is still found.

    Raises
    ------
    HeaderTooLongError
        more than ``max_header_units`` units were read without finding the marker.
    MarkerNotFoundError
        the stream ended before the marker and its label tail.
    """
    text = ""
    while True:
        chunk = source.read(int(chunk_units) * UNIT_BYTES)
        text += _decode_units(chunk)

        idx = text.find(BINARY_MARKER)
        if idx >= 0:
            length = idx + MARKER_TAIL_UNITS + 1
            # the label tail may still be in the next chunk
            if len(text) >= length:
                header = text[:length]
                logger.debug("header located: marker at unit %d, length %d units", idx, len(header))
                return HeaderScan(text=header, length_units=len(header))
        elif len(text) > int(max_header_units):
            raise HeaderTooLongError(BINARY_MARKER, len(text), int(max_header_units))

        if len(chunk) < UNIT_BYTES:
            raise MarkerNotFoundError(BINARY_MARKER, len(text))
