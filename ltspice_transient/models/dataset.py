from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd

from ltspice_transient.errors import ParseWarning
from ltspice_transient.models.metadata import RawMetadata


@dataclass(frozen=True)
class TransientDataset:
    """
    In-memory representation of one transient raw file after decoding.

    Notes
    - time already has abs() and the header offset applied.
    - samples has shape (n_points, n_variables); column k belongs to variables[k].
    - samples are float64 (stored as float32 in the file).
    - warnings lists every recoverable condition met while parsing.
    """
    source_path: Path
    time: np.ndarray
    variables: Tuple[str, ...]
    samples: np.ndarray
    metadata: RawMetadata
    warnings: Tuple[ParseWarning, ...] = ()

    @property
    def n_points(self) -> int:
        return int(self.time.shape[0])

    @property
    def n_variables(self) -> int:
        return int(self.samples.shape[1])

    def column(self, name: str) -> np.ndarray:
        """Samples of one variable, looked up by name."""
        try:
            k = self.variables.index(name)
        except ValueError:
            raise KeyError(f"Unknown variable '{name}'. Known: {', '.join(self.variables)}") from None
        return self.samples[:, k]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Tabular view for plotting/reporting: a "time" column followed by one
        float64 column per variable, in declaration order.
        """
        df = pd.DataFrame({"time": self.time})
        for k, name in enumerate(self.variables):
            df[name] = self.samples[:, k]
        return df.astype(np.float64)
