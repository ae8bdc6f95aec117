"""Stock-to-order matching.

A stock vehicle matches an order when model, trim and color are equal
ignoring case. Nothing fuzzy: no trimming, no partial fields. When several
orders fit one vehicle (or one order fits several vehicles) the choice is
left to the operator, who reserves one explicit pair.

These functions are pure; they read the snapshots they are given and never
change them.
"""

from collections import Counter

from fleet.order.order import OrderStatus
from fleet.stock.vehicle import StockStatus


def descriptors_match(order, vehicle) -> bool:
    return order.descriptor.matches(vehicle.descriptor)


def find_candidates(stock, orders) -> dict[str, list]:
    """Map each available vehicle's id to the pending orders it could fill.

    Vehicles without any candidate are left out. Orders keep their input
    order within each list.
    """
    pending = [order for order in orders if order.status == OrderStatus.PENDING.value]

    candidates = {}
    for vehicle in stock:
        if vehicle.status != StockStatus.AVAILABLE.value:
            continue
        matching = [order for order in pending if descriptors_match(order, vehicle)]
        if matching:
            candidates[str(vehicle.id)] = matching
    return candidates


def match_opportunities(stock, orders) -> int:
    """Number of available vehicles with at least one pending order to fill."""
    return len(find_candidates(stock, orders))


def summarize_stock(stock) -> dict[str, int]:
    """Vehicle counts per status, every status present."""
    counts = Counter(vehicle.status for vehicle in stock)
    return {status.value: counts.get(status.value, 0) for status in StockStatus}
