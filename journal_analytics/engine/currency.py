"""
Currency conversion over a caller-supplied rate table.

Rates are keyed "FROM/TO" and give units of TO per one unit of FROM, e.g.
{"EUR/USD": 1.08}. The inverse pair is used when only it is present. Rates
are never fetched here.
"""

from typing import Mapping

from journal_analytics.core.exceptions import MissingRateError


def _pair(from_ccy: str, to_ccy: str) -> str:
    return f"{from_ccy}/{to_ccy}"


def conversion_rate(from_ccy: str, to_ccy: str, rates: Mapping[str, float]) -> float:
    """
    Rate from one currency to another.

    Raises:
        MissingRateError: If neither the pair nor its inverse has a usable rate
    """
    from_ccy = from_ccy.strip().upper()
    to_ccy = to_ccy.strip().upper()
    if from_ccy == to_ccy:
        return 1.0

    direct = rates.get(_pair(from_ccy, to_ccy))
    if direct is not None and direct > 0:
        return float(direct)

    inverse = rates.get(_pair(to_ccy, from_ccy))
    if inverse is not None and inverse > 0:
        return 1.0 / float(inverse)

    raise MissingRateError(f"No conversion rate for {from_ccy} -> {to_ccy}")


def convert_amount(
    amount: float,
    from_ccy: str,
    to_ccy: str,
    rates: Mapping[str, float],
) -> float:
    """
    Convert an amount between currencies.

    Args:
        amount: Amount in from_ccy
        from_ccy: ISO code of the source currency
        to_ccy: ISO code of the target currency
        rates: "FROM/TO" -> rate table

    Returns:
        Amount in to_ccy

    Raises:
        MissingRateError: If no rate is available for the pair
    """
    return amount * conversion_rate(from_ccy, to_ccy, rates)
