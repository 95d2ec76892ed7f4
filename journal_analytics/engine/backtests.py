"""
Backtest recommendation engine.

Recommends a stop, target and risk:reward from the planned parameters of a
set of backtests. Medians are used instead of means so a few extreme
backtests cannot drag the recommendation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from journal_analytics.core.constants import (
    CONFIDENCE_HIGH_MIN,
    CONFIDENCE_MEDIUM_MIN,
    Confidence,
)
from journal_analytics.core.types import Backtest
from journal_analytics.engine.stats import median

logger = logging.getLogger("journal_analytics.engine.backtests")


@dataclass
class RecommendedMetrics:
    """Median planned parameters with a sample-size confidence tier"""
    sl_pips: float
    tp_pips: float
    rr: float
    sample_size: int
    confidence: Confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sl_pips": round(self.sl_pips, 4),
            "tp_pips": round(self.tp_pips, 4),
            "rr": round(self.rr, 4),
            "sample_size": self.sample_size,
            "confidence": self.confidence.value,
        }


def confidence_for(sample_size: int) -> Confidence:
    """low below 10, medium below 30, high otherwise."""
    if sample_size < CONFIDENCE_MEDIUM_MIN:
        return Confidence.LOW
    if sample_size < CONFIDENCE_HIGH_MIN:
        return Confidence.MEDIUM
    return Confidence.HIGH


def recommend_from_backtests(backtests: Iterable[Backtest]) -> Optional[RecommendedMetrics]:
    """
    Median stop / target / R:R over backtests with all three planned fields.

    Args:
        backtests: Backtest records

    Returns:
        RecommendedMetrics, or None when no backtest has all planned fields
    """
    complete = [
        b for b in backtests
        if b.planned_sl_pips is not None
        and b.planned_tp_pips is not None
        and b.planned_rr is not None
    ]
    if not complete:
        logger.debug("No backtests with complete planned metrics; no recommendation")
        return None

    n = len(complete)
    return RecommendedMetrics(
        sl_pips=median([b.planned_sl_pips for b in complete]),
        tp_pips=median([b.planned_tp_pips for b in complete]),
        rr=median([b.planned_rr for b in complete]),
        sample_size=n,
        confidence=confidence_for(n),
    )
