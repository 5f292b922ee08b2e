from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional
import io

import numpy as np

from ltspice_transient.errors import OpenFailedError, RawFileNotFoundError


class ByteSource:
    """
    Scoped, seekable binary stream over one file.

    Use as a context manager; the underlying file object is closed exactly once
    whichever way the block exits. Reads never raise on short data: callers
    compare the returned length with what they asked for.
    """

    def __init__(self, fileobj: BinaryIO, *, name: str = "<stream>"):
        self._f = fileobj
        self.name = name
        self._closed = False

    @classmethod
    def open(cls, file_path: str | Path) -> "ByteSource":
        path = Path(file_path).expanduser().resolve()
        if not path.exists() or not path.is_file():
            raise RawFileNotFoundError(path)
        try:
            f = open(path, "rb")
        except OSError as e:
            raise OpenFailedError(path, e.strerror or str(e)) from e
        return cls(f, name=str(path))

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._f.close()

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def seek(self, offset: int) -> None:
        self._f.seek(int(offset))

    def tell(self) -> int:
        return int(self._f.tell())

    def size(self) -> int:
        """Total stream length in bytes; the cursor is left where it was."""
        pos = self._f.tell()
        end = self._f.seek(0, io.SEEK_END)
        self._f.seek(pos)
        return int(end)

    def remaining(self) -> int:
        return max(0, self.size() - self.tell())

    def read(self, n: int) -> bytes:
        return self._f.read(int(n))

    def read_strided(self, dtype: str | np.dtype, count: int, skip: int) -> np.ndarray:
        """
        Read up to ``count`` values of ``dtype`` starting at the cursor, skipping
        ``skip`` bytes after each value.

        Returns a contiguous array of the values actually available (fewer than
        ``count`` near end of file). The cursor ends after the last byte read.
        """
        dt = np.dtype(dtype)
        count = int(count)
        skip = int(skip)
        if count <= 0:
            return np.empty((0,), dtype=dt)
        stride = dt.itemsize + skip
        # never request more than the stream still holds
        count = min(count, (self.remaining() + skip) // stride)
        if count <= 0:
            return np.empty((0,), dtype=dt)
        # the trailing skip of the last value is not needed
        buf = self.read(count * stride - skip)
        n = min(count, (len(buf) + skip) // stride)
        if n <= 0:
            return np.empty((0,), dtype=dt)
        view = np.ndarray((n,), dtype=dt, buffer=buf, offset=0, strides=(stride,))
        return view.copy()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"ByteSource({self.name!r}, {state})"
