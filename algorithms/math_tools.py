import math
from typing import Iterable, List, Tuple

import numpy as np


class MathTools:
    """Provides essential mathematical utilities for workout calculations."""

    BRZYCKI_MAX_REPS: int = 30

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @classmethod
    def brzycki_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Brzycki formula.

        A single rep is the max itself and the formula is unreliable past
        30 reps, so both cases return ``weight`` unchanged.
        """
        if reps == 1 or reps > cls.BRZYCKI_MAX_REPS:
            return weight
        return weight * 36 / (37 - reps)

    @staticmethod
    def volume(sets: list[tuple[int, float]]) -> float:
        """Compute training volume as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))

    @staticmethod
    def linear_regression_slope(x: List[float], y: List[float]) -> float:
        """Return the ordinary least squares slope of ``y`` against ``x``."""
        if len(x) < 2 or len(x) != len(y):
            return 0.0
        x_arr = np.array(x, dtype=float)
        if np.all(x_arr == x_arr[0]):
            return 0.0
        slope, _intercept = np.polyfit(x_arr, np.array(y, dtype=float), 1)
        return float(slope)

    @staticmethod
    def linear_fit(x: List[float], y: List[float]) -> Tuple[float, float]:
        """Return ``(slope, intercept)`` of the least squares line."""
        if len(x) < 2 or len(x) != len(y):
            return 0.0, float(y[0]) if y else 0.0
        x_arr = np.array(x, dtype=float)
        y_arr = np.array(y, dtype=float)
        if np.all(x_arr == x_arr[0]):
            return 0.0, float(np.mean(y_arr))
        slope, intercept = np.polyfit(x_arr, y_arr, 1)
        return float(slope), float(intercept)

    @staticmethod
    def correlation(x: List[float], y: List[float]) -> float:
        """Return the Pearson correlation coefficient, 0 when undefined."""
        if len(x) < 2 or len(x) != len(y):
            return 0.0
        x_arr = np.array(x, dtype=float)
        y_arr = np.array(y, dtype=float)
        if np.std(x_arr) == 0 or np.std(y_arr) == 0:
            return 0.0
        return float(np.corrcoef(x_arr, y_arr)[0, 1])

    @staticmethod
    def percent_change(first: float, last: float) -> float:
        """Return the relative change from ``first`` to ``last`` in percent."""
        if first == 0:
            return 0.0
        return (last - first) / first * 100

    @staticmethod
    def round_to_increment(value: float, increment: float) -> float:
        """Round ``value`` to the nearest multiple of ``increment``."""
        if increment <= 0:
            raise ValueError("increment must be positive")
        return MathTools.round_half_up(value / increment) * increment

    @staticmethod
    def round_half_up(value: float, decimals: int = 0) -> float:
        """Round with exact halves going up, unlike the builtin ``round``."""
        factor = 10 ** decimals
        return math.floor(value * factor + 0.5) / factor
