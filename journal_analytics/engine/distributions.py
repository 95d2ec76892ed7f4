"""R-multiple, excursion and hold-time distributions"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from journal_analytics.engine.normalizer import TradeLike, finite_or_none, normalize


@dataclass
class HistogramBucket:
    label: str
    count: int
    low: float
    high: Optional[float]  # None = open-ended

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "count": self.count,
            "low": round(self.low, 4),
            "high": round(self.high, 4) if self.high is not None else None,
        }


# (label, low, high) in minutes; a hold lands in the first band with hold <= high
HOLD_TIME_BANDS = (
    ("<=5m", 0.0, 5.0),
    ("5-15m", 5.0, 15.0),
    ("15-60m", 15.0, 60.0),
    ("1-4h", 60.0, 240.0),
    (">4h", 240.0, None),
)


def histogram_r(trades: Iterable[TradeLike], bins: int = 31, timezone: str = "UTC") -> List[HistogramBucket]:
    """
    Histogram of R multiples, symmetric around zero.

    The range is +/- the largest absolute R. Bins are half-open except the
    last, which includes its upper edge. Empty input gives an empty list.

    Raises:
        ValueError: If bins < 1
    """
    if bins < 1:
        raise ValueError(f"bins must be >= 1, got {bins}")

    values = np.array([t.r for t in normalize(trades, timezone) if t.r is not None], dtype=float)
    if values.size == 0:
        return []

    extent = float(np.max(np.abs(values)))
    if extent == 0:
        extent = 1.0
    counts, edges = np.histogram(values, bins=bins, range=(-extent, extent))

    return [
        HistogramBucket(
            label=f"{edges[i]:.1f} to {edges[i + 1]:.1f}",
            count=int(counts[i]),
            low=float(edges[i]),
            high=float(edges[i + 1]),
        )
        for i in range(bins)
    ]


def hold_time_bands(trades: Iterable[TradeLike], timezone: str = "UTC") -> List[HistogramBucket]:
    """Count trades per hold-time band; trades without a hold time are skipped."""
    counts = [0] * len(HOLD_TIME_BANDS)
    for trade in normalize(trades, timezone):
        if trade.hold_minutes is None:
            continue
        for i, (_, _, high) in enumerate(HOLD_TIME_BANDS):
            if high is None or trade.hold_minutes <= high:
                counts[i] += 1
                break

    return [
        HistogramBucket(label=label, count=counts[i], low=low, high=high)
        for i, (label, low, high) in enumerate(HOLD_TIME_BANDS)
    ]


def _excursion_histogram(values: List[float], bins: int) -> List[HistogramBucket]:
    if bins < 1:
        raise ValueError(f"bins must be >= 1, got {bins}")
    if not values:
        return []

    magnitudes = np.abs(np.array(values, dtype=float))
    top = float(np.max(magnitudes))
    if top == 0:
        top = 1.0
    counts, edges = np.histogram(magnitudes, bins=bins, range=(0.0, top))

    return [
        HistogramBucket(
            label=f"{edges[i]:.2f} to {edges[i + 1]:.2f}",
            count=int(counts[i]),
            low=float(edges[i]),
            high=float(edges[i + 1]),
        )
        for i in range(bins)
    ]


def histogram_mae(trades: Iterable[TradeLike], bins: int = 20, timezone: str = "UTC") -> List[HistogramBucket]:
    """
    Histogram of max adverse excursion magnitudes, from 0 to the largest.

    Trades without a finite mae_r are skipped; none at all gives [].
    """
    values = [finite_or_none(t.trade.mae_r) for t in normalize(trades, timezone)]
    return _excursion_histogram([v for v in values if v is not None], bins)


def histogram_mfe(trades: Iterable[TradeLike], bins: int = 20, timezone: str = "UTC") -> List[HistogramBucket]:
    """Histogram of max favourable excursion magnitudes; see histogram_mae."""
    values = [finite_or_none(t.trade.mfe_r) for t in normalize(trades, timezone)]
    return _excursion_histogram([v for v in values if v is not None], bins)
