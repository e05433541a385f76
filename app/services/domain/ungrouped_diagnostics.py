"""
Domain service: Diagnostics for plots left out of every group.

Annotates each ungrouped plot with its nearest same-variety group, a
short list of nearby groups with a compatibility verdict, and follow-up
suggestions for the operator.
"""
from dataclasses import replace
import logging

from shapely.geometry import Point

from app.domain.grouping import (
    GroupingParameters,
    NearbyGroupInfo,
    ParcelClusterInfo,
    ProposedGroup,
    UngroupReason,
    UngroupedParcelInfo,
)
from app.utils.spatial_helpers import point_distance

logger = logging.getLogger(__name__)

# Close enough to suggest a manual assignment, too far to merge automatically
NEARBY_GROUP_SUGGESTION_DISTANCE = 5000.0

MAX_NEARBY_GROUPS = 3

ISOLATION_REASONS = (UngroupReason.ISOLATED_LOCATION, UngroupReason.TOO_FEW_PLOTS)


def rank_groups_by_distance(
    point: Point,
    groups: list[ProposedGroup],
) -> list[tuple[float, ProposedGroup]]:
    """
    Order groups by centroid distance from a point.

    Ties are broken by group number.
    """
    ranked = [(point_distance(point, g.centroid), g) for g in groups]
    ranked.sort(key=lambda item: (item[0], item[1].group_number))
    return ranked


def describe_nearby_group(
    parcel: ParcelClusterInfo,
    group: ProposedGroup,
    distance: float,
    tolerance_days: int,
) -> NearbyGroupInfo:
    """
    Describe a nearby group and whether the plot could join it.
    """
    date_diff = abs((parcel.planting_date - group.median_planting_date).days)

    incompatibility = None
    if group.variety_id != parcel.variety_id:
        incompatibility = "Different rice variety"
    elif date_diff > tolerance_days:
        incompatibility = f"Planting date differs by {date_diff} days (tolerance {tolerance_days})"

    return NearbyGroupInfo(
        group_number=group.group_number,
        variety_id=group.variety_id,
        distance=distance,
        planting_date_diff_days=date_diff,
        is_compatible=incompatibility is None,
        incompatibility_reason=incompatibility,
    )


def analyze_ungrouped_parcels(
    ungrouped: list[UngroupedParcelInfo],
    groups: list[ProposedGroup],
    parameters: GroupingParameters,
) -> list[UngroupedParcelInfo]:
    """
    Annotate ungrouped plots with nearest groups and suggestions.

    Inputs are left untouched; annotated copies are returned in the same
    order.

    Args:
        ungrouped: Classified ungrouped plots
        groups: Finalized proposed groups
        parameters: Parameters of the run

    Returns:
        Annotated ungrouped plots
    """
    annotated = [_annotate(info, groups, parameters) for info in ungrouped]

    with_suggestion = sum(1 for info in annotated if info.nearest_group_number is not None)
    logger.debug(f"Annotated {len(annotated)} ungrouped plots, "
                 f"{with_suggestion} with a same-variety group nearby")
    return annotated


def _annotate(
    info: UngroupedParcelInfo,
    groups: list[ProposedGroup],
    parameters: GroupingParameters,
) -> UngroupedParcelInfo:
    parcel = info.parcel
    suggestions = list(info.suggestions)
    distance = None
    nearest_number = None
    nearby = []

    if parcel.has_coordinate and groups:
        ranked = rank_groups_by_distance(parcel.coordinate, groups)

        same_variety = [(d, g) for d, g in ranked if g.variety_id == parcel.variety_id]
        if same_variety:
            distance, nearest = same_variety[0]
            nearest_number = nearest.group_number

            if distance < NEARBY_GROUP_SUGGESTION_DISTANCE:
                suggestions.append(
                    f"Assign to Group {nearest_number} manually ({distance:.0f}m away)"
                )

        nearby = [
            describe_nearby_group(parcel, g, d, parameters.planting_date_tolerance)
            for d, g in ranked
            if d < NEARBY_GROUP_SUGGESTION_DISTANCE
        ][:MAX_NEARBY_GROUPS]

    if info.reason in ISOLATION_REASONS:
        suggestions.append("Create exception group if multiple isolated plots exist nearby")
        suggestions.append("Consider adjusting proximity threshold parameter")

    return replace(
        info,
        distance_to_nearest_group=distance,
        nearest_group_number=nearest_number,
        suggestions=suggestions,
        nearby_groups=nearby,
    )
