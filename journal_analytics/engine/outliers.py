"""Outlier trimming on R multiple"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List

import numpy as np

from journal_analytics.core.constants import DEFAULT_TRIM_FRACTION
from journal_analytics.core.types import NormalizedTrade
from journal_analytics.engine.normalizer import TradeLike, normalize

logger = logging.getLogger("journal_analytics.engine.outliers")


@dataclass
class TrimResult:
    """Trades retained after trimming plus the trim counts"""
    trades: List[NormalizedTrade] = field(default_factory=list)
    trimmed_count: int = 0
    total_count: int = 0

    def to_dict(self) -> dict:
        return {
            "trimmed_count": self.trimmed_count,
            "total_count": self.total_count,
            "retained_count": len(self.trades),
        }


def trim_outliers(
    trades: Iterable[TradeLike],
    fraction: float = DEFAULT_TRIM_FRACTION,
    timezone: str = "UTC",
) -> TrimResult:
    """
    Drop the extreme R-multiple tails.

    Sorts R-defined trades ascending (stable) and drops ceil(n * fraction)
    from each end. Trades without R are never candidates and are always
    kept. At least one R-defined trade is always retained. Retained trades
    keep their input order, so fraction 0 returns the input unchanged.

    Args:
        trades: Raw or normalized trades
        fraction: Fraction trimmed from each tail, 0 <= fraction < 0.5
        timezone: Reference timezone used when normalizing raw trades

    Returns:
        TrimResult with retained trades and counts

    Raises:
        ValueError: If fraction is outside [0, 0.5)
    """
    if not 0 <= fraction < 0.5:
        raise ValueError(f"fraction must be in [0, 0.5), got {fraction}")

    normalized = normalize(trades, timezone)
    total = len(normalized)

    r_positions = [i for i, t in enumerate(normalized) if t.has_r]
    n_r = len(r_positions)
    per_tail = math.ceil(n_r * fraction) if fraction > 0 else 0
    if n_r and 2 * per_tail >= n_r:
        per_tail = (n_r - 1) // 2

    if per_tail == 0:
        return TrimResult(trades=normalized, trimmed_count=0, total_count=total)

    r_values = np.array([normalized[i].r for i in r_positions], dtype=float)
    order = np.argsort(r_values, kind="stable")
    dropped = {r_positions[j] for j in order[:per_tail]}
    dropped |= {r_positions[j] for j in order[n_r - per_tail:]}

    retained = [t for i, t in enumerate(normalized) if i not in dropped]
    logger.debug(f"Trimmed {len(dropped)} of {total} trades (fraction={fraction})")
    return TrimResult(trades=retained, trimmed_count=len(dropped), total_count=total)
