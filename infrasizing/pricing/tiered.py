"""
Piecewise pricing table lookup.

A tier table is an ascending list of (upper_bound, price) pairs where the
bound is inclusive and None marks an open-ended tier. Values above every
explicit bound reuse the last tier's price. Neither function raises for
out-of-range input.
"""
from typing import List, Optional, Tuple
import math


TierTable = List[Tuple[Optional[float], float]]


def resolve_tier(table: TierTable, value: float) -> float:
    """
    Resolve a value to its tier price.

    Args:
        table: Ascending (upper_bound | None, price) pairs
        value: Input quantity (users, hours, environments, ...)

    Returns:
        Price of the first tier whose bound is >= value, else the last tier's price.
        An empty table resolves to 0.
    """
    if not table:
        return 0.0
    for upper_bound, price in table:
        if upper_bound is None or value <= upper_bound:
            return price
    return table[-1][1]


def resolve_pack_count(quantity: float, pack_size: int) -> int:
    """
    Number of fixed-size packs needed to cover a quantity.
    At least one pack is always allocated; quantities <= 0 count as 1.
    """
    if pack_size <= 0:
        raise ValueError("pack_size must be positive")
    return math.ceil(max(1, quantity) / pack_size)


def graduated_pack_cost(quantity: int, bands: TierTable, pack_size: int) -> float:
    """
    Cost of `quantity` units billed band by band, each band in packs.

    Units falling into a band are rounded up to whole packs at that band's
    pack price. Units beyond the last explicit bound use the last band.

    Args:
        quantity: Billable units (0 or less costs nothing)
        bands: Ascending (upper_bound | None, price_per_pack) pairs
        pack_size: Units per pack

    Returns:
        Total cost across bands
    """
    if quantity <= 0 or not bands:
        return 0.0

    total = 0.0
    lower = 0
    remaining = quantity
    for index, (upper_bound, pack_price) in enumerate(bands):
        is_last = index == len(bands) - 1
        if upper_bound is None or is_last:
            in_band = remaining
        else:
            in_band = min(remaining, int(upper_bound) - lower)
        if in_band > 0:
            total += resolve_pack_count(in_band, pack_size) * pack_price
            remaining -= in_band
        if remaining <= 0:
            break
        if upper_bound is not None:
            lower = int(upper_bound)
    return total
