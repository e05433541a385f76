"""
Planting date clustering helpers.
"""
from datetime import date
from typing import Callable, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cluster_by_planting_date(
    items: list[T],
    tolerance_days: int,
    date_of: Callable[[T], date],
) -> list[list[T]]:
    """
    Split items into date clusters with an anchored sweep.

    Items are sorted by date (stable). The first item anchors a cluster;
    later items join while they are within tolerance_days of that anchor.
    The first item outside the window closes the cluster and anchors the
    next one. Membership is measured against the anchor only, not against
    the other members.

    Args:
        items: Items to cluster
        tolerance_days: Maximum distance in days from the anchor (inclusive)
        date_of: Returns the planting date of an item

    Returns:
        List of clusters in ascending date order
    """
    ordered = sorted(items, key=date_of)

    clusters: list[list[T]] = []
    current: list[T] = []
    anchor = None

    for item in ordered:
        planting_date = date_of(item)

        if anchor is not None and abs((planting_date - anchor).days) <= tolerance_days:
            current.append(item)
            continue

        if current:
            clusters.append(current)
        current = [item]
        anchor = planting_date

    if current:
        clusters.append(current)

    logger.debug(f"Split {len(items)} items into {len(clusters)} date clusters "
                 f"(tolerance: {tolerance_days} days)")
    return clusters
