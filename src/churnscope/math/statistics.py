"""Descriptive helpers used by the scoring code."""

from typing import List, Sequence, Union

import numpy as np

Number = Union[int, float]


class Statistics:
    """Small numeric utilities over plain sequences."""

    @staticmethod
    def mean(values: Sequence[Number]) -> float:
        """Arithmetic mean, 0.0 for an empty sequence."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(np.asarray(values, dtype=float)))

    @staticmethod
    def normalize_to_max(values: Sequence[Number], scale: float = 100.0) -> List[float]:
        """
        Scale values so the largest becomes ``scale``.

        x_i' = scale * x_i / max(x)

        An empty input returns an empty list; an all-zero input returns zeros.
        """
        if len(values) == 0:
            return []
        arr = np.asarray(values, dtype=float)
        peak = float(arr.max())
        if peak <= 0:
            return [0.0] * len(values)
        return [float(v) for v in arr / peak * scale]
