"""
Criterion console-output adapter.

Turns `cargo bench` output into metric records. Lines look like:

    fibonacci/10            time:   [1.2345 µs 1.2456 µs 1.2567 µs]

The middle figure is the point estimate, the outer two the confidence
interval. Every value is normalized to nanoseconds.
"""
import re
from dataclasses import dataclass
from typing import List, Optional

_CRITERION_RE = re.compile(
    r'^(\S+)\s+time:\s+\['
    r'([0-9.]+)\s+(ns|µs|us|ms|s)\s+'
    r'([0-9.]+)\s+(ns|µs|us|ms|s)\s+'
    r'([0-9.]+)\s+(ns|µs|us|ms|s)\]',
    re.MULTILINE,
)

_NS_PER_UNIT = {
    'ns': 1.0,
    'µs': 1_000.0,
    'us': 1_000.0,
    'ms': 1_000_000.0,
    's': 1_000_000_000.0,
}


@dataclass
class CriterionResult:
    name: str
    value: float
    lower: Optional[float] = None
    upper: Optional[float] = None

    def to_metric(self, measure: str) -> dict:
        return {
            'benchmark': self.name,
            'measure': measure,
            'value': self.value,
            'lower_value': self.lower,
            'upper_value': self.upper,
        }


def parse_time(value: str, unit: str) -> Optional[float]:
    """Convert a figure + unit to nanoseconds. None if either is unparseable."""
    multiplier = _NS_PER_UNIT.get(unit)
    if multiplier is None:
        return None
    try:
        return float(value) * multiplier
    except ValueError:
        return None


def parse_criterion_output(output: str) -> List[CriterionResult]:
    results = []
    for match in _CRITERION_RE.finditer(output):
        name = match.group(1)
        lower = parse_time(match.group(2), match.group(3))
        mean = parse_time(match.group(4), match.group(5))
        upper = parse_time(match.group(6), match.group(7))
        if lower is None or mean is None or upper is None:
            continue
        results.append(CriterionResult(name=name, value=mean, lower=lower, upper=upper))
    return results
