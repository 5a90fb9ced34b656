"""
Regression evaluator — pure percent-change check of a new value against a baseline.

No I/O. Insufficient history and a zero baseline average are skips, not errors.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence


class Direction(str, Enum):
    UPPER = 'upper'
    LOWER = 'lower'


@dataclass(frozen=True)
class Violation:
    baseline_average: float
    percent_change: float
    direction: Direction


def evaluate(threshold, new_value: float, baseline_values: Sequence[float]) -> Optional[Violation]:
    """
    Decide whether `new_value` violates `threshold` given the baseline sample.

    `threshold` needs upper_boundary, lower_boundary and min_sample_size.
    Upper is checked before lower; lower_boundary is a positive magnitude
    compared against the negative percent change.
    """
    if not baseline_values or len(baseline_values) < threshold.min_sample_size:
        return None

    baseline_average = sum(baseline_values) / len(baseline_values)
    if baseline_average == 0:
        return None

    percent_change = (new_value - baseline_average) / baseline_average * 100

    if threshold.upper_boundary is not None and percent_change > threshold.upper_boundary:
        return Violation(baseline_average, percent_change, Direction.UPPER)

    if threshold.lower_boundary is not None and percent_change < -threshold.lower_boundary:
        return Violation(baseline_average, percent_change, Direction.LOWER)

    return None
