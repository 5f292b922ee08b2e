from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class VariableSpec:
    """One non-time channel as declared in the header ``Variables:`` section."""
    name: str
    type: str


@dataclass(frozen=True)
class RawMetadata:
    """
    Header metadata of one transient raw file.

    Notes
    - declared_variable_count is the header "No. Variables" minus the time channel.
    - variables is the list actually parsed from the header; it is authoritative for
      decoding even when it disagrees with declared_variable_count.
    - variables[k] is column k of the samples matrix.
    """
    plot_name: str
    flags: str
    declared_variable_count: int
    point_count: int
    time_offset: float
    variables: Tuple[VariableSpec, ...]
    title: str = ""
    date: str = ""
    header_text: str = ""

    @property
    def variable_count(self) -> int:
        return len(self.variables)

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return tuple(v.name for v in self.variables)

    @property
    def variable_types(self) -> Tuple[str, ...]:
        return tuple(v.type for v in self.variables)

    @property
    def is_transient(self) -> bool:
        return "transient" in self.plot_name.lower()

    @property
    def is_stepped(self) -> bool:
        return "stepped" in self.flags.lower()


@dataclass(frozen=True)
class BinaryLayout:
    """
    Byte addressing of the interleaved payload.

    Each record is one float64 time value followed by ``variable_count`` float32
    values. Reading one channel therefore means reading one value and skipping the
    rest of the record.

    header_length_units:
      header length in 2-byte code units (including the "Binary:" line).
    variable_count:
      number of value channels (time excluded).
    """
    header_length_units: int
    variable_count: int

    TIME_ITEMSIZE = 8
    VALUE_ITEMSIZE = 4

    @property
    def binary_start_offset(self) -> int:
        return int(self.header_length_units) * 2

    @property
    def record_size(self) -> int:
        return self.TIME_ITEMSIZE + self.VALUE_ITEMSIZE * int(self.variable_count)

    @property
    def time_record_stride(self) -> int:
        return self.VALUE_ITEMSIZE * int(self.variable_count)

    @property
    def variable_record_stride(self) -> int:
        return self.VALUE_ITEMSIZE * (int(self.variable_count) - 1) + self.TIME_ITEMSIZE

    def variable_column_offset(self, l: int) -> int:
        """Byte offset of the first sample of channel ``l`` (1-based)."""
        l = int(l)
        if not 1 <= l <= int(self.variable_count):
            raise ValueError(f"variable index {l} out of range 1..{self.variable_count}")
        return self.binary_start_offset + self.TIME_ITEMSIZE + self.VALUE_ITEMSIZE * (l - 1)

    def expected_payload_bytes(self, point_count: int) -> int:
        return int(point_count) * self.record_size
