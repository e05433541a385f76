"""
Domain service: Group formation for seasonal rice production.

Partitions variety-assigned plots into groups that become the unit of
supervision, production planning and material distribution:
- Hard split by rice variety
- Single-linkage spatial clustering under a distance threshold
- Anchored planting date sweep within each spatial cluster
- Size bounds (plot count and area) with greedy splitting
- Diagnostics for every plot left ungrouped
"""
from typing import Optional
import logging

from shapely.errors import GEOSException
from shapely.geometry import Polygon

from app.domain.grouping import (
    GroupingParameters,
    ParcelClusterInfo,
    ProposedGroup,
    UngroupReason,
    UngroupedParcelInfo,
)
from app.services.domain.ungrouped_diagnostics import analyze_ungrouped_parcels
from app.utils.spatial_helpers import (
    find_proximity_components,
    mean_centroid,
    union_boundary,
)
from app.utils.temporal_helpers import cluster_by_planting_date

logger = logging.getLogger(__name__)


class GroupFormationEngine:
    """
    Domain service that forms plot groups for one season.

    The engine is a pure function of its input plots and parameters:
    it performs no I/O, keeps no state between runs and never mutates
    the plots it is given. Identical input yields identical groups,
    group numbers and ungrouped classifications.
    """

    def __init__(self, parameters: Optional[GroupingParameters] = None):
        """
        Initialize the engine.

        Args:
            parameters: Grouping parameters (defaults come from settings)
        """
        self.parameters = parameters or GroupingParameters.from_settings()

        logger.info(f"Initialized GroupFormationEngine with parameters: "
                    f"proximity={self.parameters.proximity_threshold}m, "
                    f"date_tolerance={self.parameters.planting_date_tolerance}d, "
                    f"area=[{self.parameters.min_group_area}, {self.parameters.max_group_area}]ha, "
                    f"plots=[{self.parameters.min_plots_per_group}, {self.parameters.max_plots_per_group}]")

    def form_groups(
        self,
        parcels: list[ParcelClusterInfo],
    ) -> tuple[list[ProposedGroup], list[UngroupedParcelInfo]]:
        """
        Form groups from eligible plots.

        Args:
            parcels: Plots with a confirmed variety for the season, in a
                stable order

        Returns:
            Tuple of (proposed groups, ungrouped plots). Every input plot
            appears in exactly one of the two.
        """
        logger.info(f"Starting group formation for {len(parcels)} plots")

        proposed_groups: list[ProposedGroup] = []
        ungrouped: list[UngroupedParcelInfo] = []
        group_number = 1

        # Step 1: Separate unusable plots and split by variety
        partitions, rejected = self._partition_by_variety(parcels)
        ungrouped.extend(rejected)
        logger.info(f"Variety partitions: {len(partitions)}, rejected before clustering: {len(rejected)}")

        for variety_id, variety_parcels in partitions.items():
            # Step 2: Spatial clustering
            spatial_clusters = self._cluster_spatially(variety_parcels)
            logger.debug(f"Variety {variety_id}: {len(variety_parcels)} plots -> "
                         f"{len(spatial_clusters)} spatial clusters")

            for spatial_cluster in spatial_clusters:
                # Step 3: Temporal clustering
                date_clusters = cluster_by_planting_date(
                    spatial_cluster,
                    self.parameters.planting_date_tolerance,
                    date_of=lambda p: p.planting_date,
                )

                for date_cluster in date_clusters:
                    # Step 4: Enforce size bounds
                    buckets, rejected = self._resolve_constraints(date_cluster)
                    ungrouped.extend(rejected)

                    # Step 5: Synthesize groups
                    for bucket in buckets:
                        group = self._create_proposed_group(group_number, bucket, variety_id)
                        proposed_groups.append(group)
                        group_number += 1

        # Step 6: Annotate ungrouped plots with nearby groups and suggestions
        ungrouped = analyze_ungrouped_parcels(ungrouped, proposed_groups, self.parameters)

        grouped_count = sum(g.parcel_count for g in proposed_groups)
        logger.info(f"Formed {len(proposed_groups)} groups covering {grouped_count} plots, "
                    f"{len(ungrouped)} plots ungrouped")

        return proposed_groups, ungrouped

    def _partition_by_variety(
        self,
        parcels: list[ParcelClusterInfo],
    ) -> tuple[dict[str, list[ParcelClusterInfo]], list[UngroupedParcelInfo]]:
        """
        Split plots by rice variety.

        Plots without a coordinate, or already assigned to a group, are
        reported instead of partitioned. Partitions keep the input order
        of their first plot.

        Args:
            parcels: Eligible plots

        Returns:
            Tuple of (variety id -> plots, rejected plots)
        """
        partitions: dict[str, list[ParcelClusterInfo]] = {}
        rejected = []

        for parcel in parcels:
            if not parcel.has_coordinate:
                rejected.append(UngroupedParcelInfo(
                    parcel=parcel,
                    reason=UngroupReason.MISSING_COORDINATE,
                    reason_description="Plot boundary/coordinate not assigned",
                    suggestions=["Assign polygon boundary to plot before grouping"],
                ))
                continue

            if parcel.is_grouped:
                rejected.append(UngroupedParcelInfo(
                    parcel=parcel,
                    reason=UngroupReason.ALREADY_GROUPED,
                    reason_description="Plot is already assigned to a group for this season",
                    suggestions=["Remove plot from its current group before regrouping"],
                ))
                continue

            partitions.setdefault(parcel.variety_id, []).append(parcel)

        return partitions, rejected

    def _cluster_spatially(
        self,
        parcels: list[ParcelClusterInfo],
    ) -> list[list[ParcelClusterInfo]]:
        """
        Group same-variety plots into connected components of the
        proximity graph.

        Raises:
            ValueError: If a plot has no coordinate
        """
        for parcel in parcels:
            if not parcel.has_coordinate:
                raise ValueError(f"Plot {parcel.parcel_id} reached spatial clustering without a coordinate")

        components = find_proximity_components(
            [p.xy for p in parcels],
            self.parameters.proximity_threshold,
        )
        return [[parcels[i] for i in component] for component in components]

    def _resolve_constraints(
        self,
        cluster: list[ParcelClusterInfo],
    ) -> tuple[list[list[ParcelClusterInfo]], list[UngroupedParcelInfo]]:
        """
        Apply plot count and area bounds to a date cluster.

        Too few plots or too little area rejects the whole cluster; the
        count check runs first and a cluster failing it is not checked for
        area. Too many plots or too much area splits the cluster.

        Args:
            cluster: Plots sharing variety, proximity and planting window

        Returns:
            Tuple of (accepted buckets, rejected plots)
        """
        params = self.parameters
        plot_count = len(cluster)
        total_area = sum(p.area for p in cluster)

        if plot_count < params.min_plots_per_group:
            description = (f"Only {plot_count} plots in cluster "
                           f"(minimum {params.min_plots_per_group} required)")
            return [], [
                UngroupedParcelInfo(
                    parcel=parcel,
                    reason=UngroupReason.TOO_FEW_PLOTS,
                    reason_description=description,
                    suggestions=[
                        "Assign to nearby group manually",
                        "Reduce minimum plots per group parameter",
                    ],
                )
                for parcel in cluster
            ]

        if total_area < params.min_group_area:
            description = (f"Total area {total_area:.2f} ha below minimum "
                           f"{params.min_group_area} ha")
            return [], [
                UngroupedParcelInfo(
                    parcel=parcel,
                    reason=UngroupReason.INSUFFICIENT_AREA,
                    reason_description=description,
                    suggestions=[
                        "Merge with nearby group manually",
                        "Reduce minimum area parameter",
                    ],
                )
                for parcel in cluster
            ]

        if plot_count > params.max_plots_per_group or total_area > params.max_group_area:
            buckets = self._split_large_cluster(cluster)
            logger.debug(f"Split cluster of {plot_count} plots ({total_area:.2f} ha) "
                         f"into {len(buckets)} groups")
            return buckets, []

        return [cluster], []

    def _split_large_cluster(
        self,
        cluster: list[ParcelClusterInfo],
    ) -> list[list[ParcelClusterInfo]]:
        """
        Split an oversized cluster by greedy area packing.

        Plots are taken largest first; a plot joins the current bucket
        while the bucket stays within max_group_area and holds fewer than
        max_plots_per_group plots, otherwise it opens the next bucket.
        Buckets are not re-validated afterwards.

        Args:
            cluster: Plots to split

        Returns:
            List of buckets in creation order
        """
        max_area = self.parameters.max_group_area
        max_plots = self.parameters.max_plots_per_group

        buckets = []
        current: list[ParcelClusterInfo] = []
        current_area = 0.0

        for parcel in sorted(cluster, key=lambda p: p.area, reverse=True):
            fits_area = current_area + parcel.area <= max_area
            fits_count = len(current) < max_plots

            if current and not (fits_area and fits_count):
                buckets.append(current)
                current = []
                current_area = 0.0

            current.append(parcel)
            current_area += parcel.area

        if current:
            buckets.append(current)

        for bucket in buckets:
            if len(bucket) == 1 and bucket[0].area > max_area:
                logger.warning(f"Plot {bucket[0].parcel_id} alone exceeds max group area "
                               f"({bucket[0].area:.2f} > {max_area} ha); kept as its own group")

        return buckets

    def _create_proposed_group(
        self,
        group_number: int,
        parcels: list[ParcelClusterInfo],
        variety_id: str,
    ) -> ProposedGroup:
        """
        Build a proposed group from an accepted bucket.

        Args:
            group_number: Sequential number within this run
            parcels: Member plots
            variety_id: Shared rice variety

        Returns:
            ProposedGroup instance
        """
        planting_dates = sorted(p.planting_date for p in parcels)

        return ProposedGroup(
            group_number=group_number,
            variety_id=variety_id,
            planting_window_start=planting_dates[0],
            planting_window_end=planting_dates[-1],
            median_planting_date=planting_dates[len(planting_dates) // 2],
            parcels=list(parcels),
            centroid=mean_centroid([p.coordinate for p in parcels]),
            boundary=self._calculate_group_boundary(group_number, parcels),
            total_area=sum(p.area for p in parcels),
        )

    def _calculate_group_boundary(
        self,
        group_number: int,
        parcels: list[ParcelClusterInfo],
    ) -> Optional[Polygon]:
        """
        Union member boundaries into one polygon.

        A failed geometry operation degrades to no boundary so that one
        bad plot does not abort the run.
        """
        boundaries = [p.boundary for p in parcels if p.boundary is not None]

        try:
            return union_boundary(boundaries)
        except (GEOSException, ValueError) as e:
            logger.warning(f"Could not build boundary for group {group_number}: {e}")
            return None
