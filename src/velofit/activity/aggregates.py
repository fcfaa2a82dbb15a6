"""Session aggregates computed from samples."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models.activity import Sample


@dataclass(frozen=True)
class Aggregates:
    """Averages, maxima and work over a sample list.

    Averages and maxima are None when no sample carries the value.
    """

    avg_power: Optional[int] = None
    max_power: Optional[int] = None
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    avg_cadence: Optional[int] = None
    max_cadence: Optional[int] = None
    total_work_j: int = 0
    duration_sec: float = 0.0


def _present(values: Sequence[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None and math.isfinite(v)]


def _avg(values: List[float]) -> Optional[int]:
    return round(sum(values) / len(values)) if values else None


def _max(values: List[float]) -> Optional[int]:
    return round(max(values)) if values else None


def compute_aggregates(samples: Sequence[Sample]) -> Aggregates:
    """Compute session aggregates.

    Work is the discrete sum of ``power[i] * dt[i]`` where ``dt[i]`` is the
    gap to the previous sample, rounded and at least one second; the first
    sample is measured from t = 0.

    Example:
        >>> agg = compute_aggregates([Sample(t=0, power=100), Sample(t=2, power=200)])
        >>> agg.avg_power, agg.total_work_j
        (150, 500)
    """
    power = _present([s.power for s in samples])
    heart_rate = _present([s.heart_rate for s in samples])
    cadence = _present([s.cadence for s in samples])

    total_work = 0.0
    previous_t = 0.0
    for sample in samples:
        if sample.power is not None and math.isfinite(sample.power):
            dt = max(1, round(sample.t - previous_t))
            total_work += sample.power * dt
        previous_t = sample.t

    return Aggregates(
        avg_power=_avg(power),
        max_power=_max(power),
        avg_heart_rate=_avg(heart_rate),
        max_heart_rate=_max(heart_rate),
        avg_cadence=_avg(cadence),
        max_cadence=_max(cadence),
        total_work_j=round(total_work),
        duration_sec=samples[-1].t if samples else 0.0,
    )
