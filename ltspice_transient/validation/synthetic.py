"""Write synthetic transient raw files in the exact binary container layout.

Used to build reproducible inputs for tests and validation campaigns without a
simulator. Layout written:

- header: UTF-16LE text, "Key: value" lines, a ``Variables:`` table, then ``Binary:\\n``
- payload: ``n_points`` records of one ``<f8`` time value followed by one ``<f4``
  value per variable

Knobs exist to build deliberately odd files (mismatched variable counts, missing
fields, trailing step data, ASCII containers).
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np


def _record_dtype(n_vars: int) -> np.dtype:
    return np.dtype([("t", "<f8")] + [(f"v{k}", "<f4") for k in range(n_vars)])


def build_header(
    names: Sequence[str],
    n_points: int,
    *,
    types: Optional[Sequence[str]] = None,
    plot_name: str = "Transient Analysis",
    flags: str = "real forward",
    offset: Optional[float] = None,
    title: str = "* synthetic.asc",
    date: str = "Thu Jan  2 10:00:00 2025",
    declared_variables: Optional[int] = None,
    omit_fields: Sequence[str] = (),
    terminator: str = "Binary:",
) -> str:
    """
    Build header text.

    declared_variables:
      value written on "No. Variables" (default len(names) + 1, time included).
    omit_fields:
      header keys to leave out, e.g. ("No. Points",) or ("Plotname",).
    """
    types = list(types) if types is not None else ["voltage"] * len(names)
    if len(types) != len(names):
        raise ValueError("types must have one entry per name")
    n_declared = len(names) + 1 if declared_variables is None else int(declared_variables)

    fields: List[Tuple[str, str]] = [
        ("Title", title),
        ("Date", date),
        ("Plotname", plot_name),
        ("Flags", flags),
        ("No. Variables", str(n_declared)),
        ("No. Points", f"{int(n_points):>13d}"),
    ]
    if offset is not None:
        fields.append(("Offset", f"{float(offset):.16e}"))
    fields.append(("Command", "Linear Technology Corporation LTspice XVII"))

    lines = [f"{k}: {v}" for k, v in fields if k not in set(omit_fields)]
    lines.append("Variables:")
    lines.append("\t0\ttime\ttime")
    for k, (name, typ) in enumerate(zip(names, types), start=1):
        lines.append(f"\t{k}\t{name}\t{typ}")
    lines.append(terminator)
    return "\n".join(lines) + "\n"


def encode_records(time: np.ndarray, samples: np.ndarray) -> bytes:
    t = np.asarray(time, dtype=np.float64)
    s = np.asarray(samples, dtype=np.float64)
    if s.ndim == 1:
        s = s[:, None]
    if s.shape[0] != t.shape[0]:
        raise ValueError(f"samples rows {s.shape[0]} != time length {t.shape[0]}")
    rec = np.zeros((t.shape[0],), dtype=_record_dtype(s.shape[1]))
    rec["t"] = t
    for k in range(s.shape[1]):
        rec[f"v{k}"] = s[:, k]
    return rec.tobytes()


def write_transient_raw(
    path: str | Path,
    time: np.ndarray,
    samples: np.ndarray,
    names: Sequence[str],
    *,
    trailing: Optional[Tuple[np.ndarray, np.ndarray]] = None,
    ascii: bool = False,
    **header_kwargs,
) -> Path:
    """
    Write a transient raw file and return its path.

    trailing:
      extra (time, samples) records appended after the first ``len(time)`` records,
      as the later steps of a stepped run would be.
    ascii:
      write the (unsupported) ASCII container instead: 8-bit header and a
      ``Values:`` table.
    header_kwargs:
      forwarded to :func:`build_header`.
    """
    p = Path(path)
    t = np.asarray(time, dtype=np.float64)
    s = np.asarray(samples, dtype=np.float64)
    if s.ndim == 1:
        s = s[:, None]

    if ascii:
        header = build_header(names, len(t), terminator="Values:", **header_kwargs)
        body = []
        for i in range(len(t)):
            body.append(f"{i}\t{t[i]:.15e}")
            for k in range(s.shape[1]):
                body.append(f"\t{s[i, k]:.15e}")
        p.write_bytes((header + "\n".join(body) + "\n").encode("ascii"))
        return p

    header = build_header(names, len(t), **header_kwargs)
    payload = encode_records(t, s)
    if trailing is not None:
        payload += encode_records(*trailing)
    p.write_bytes(header.encode("utf-16-le") + payload)
    return p
