"""
Value types for the group formation engine.

Coordinates and boundaries are expressed in a planar metric system
(see app.utils.geo_projection); areas are in hectares.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from shapely.geometry import Point, Polygon

from app.config import settings


@dataclass(frozen=True)
class GroupingParameters:
    """Configuration for one group formation run."""

    proximity_threshold: float = 2000.0
    """Maximum distance (m) for two plots to be spatially linked"""

    planting_date_tolerance: int = 2
    """Maximum planting date difference (days) from the date cluster anchor"""

    min_group_area: float = 15.0
    max_group_area: float = 50.0
    """Group area bounds in hectares"""

    min_plots_per_group: int = 5
    max_plots_per_group: int = 15

    def __post_init__(self):
        if self.min_group_area > self.max_group_area:
            raise ValueError(
                f"min_group_area ({self.min_group_area}) exceeds "
                f"max_group_area ({self.max_group_area})"
            )
        if self.min_plots_per_group > self.max_plots_per_group:
            raise ValueError(
                f"min_plots_per_group ({self.min_plots_per_group}) exceeds "
                f"max_plots_per_group ({self.max_plots_per_group})"
            )
        if self.proximity_threshold < 0:
            raise ValueError("proximity_threshold must not be negative")
        if self.planting_date_tolerance < 0:
            raise ValueError("planting_date_tolerance must not be negative")

    @classmethod
    def from_settings(cls, **overrides) -> "GroupingParameters":
        """
        Build parameters from application settings.

        Args:
            **overrides: Field values that replace the configured defaults.
                None values are ignored.

        Returns:
            GroupingParameters instance
        """
        values = {
            "proximity_threshold": settings.grouping_proximity_threshold,
            "planting_date_tolerance": settings.grouping_planting_date_tolerance,
            "min_group_area": settings.grouping_min_group_area,
            "max_group_area": settings.grouping_max_group_area,
            "min_plots_per_group": settings.grouping_min_plots_per_group,
            "max_plots_per_group": settings.grouping_max_plots_per_group,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class ParcelClusterInfo:
    """A plot prepared for clustering."""
    parcel_id: str
    cultivation_id: str
    coordinate: Optional[Point]
    planting_date: date
    variety_id: str
    area: float
    boundary: Optional[Polygon] = None
    farmer_id: Optional[str] = None
    is_grouped: bool = False
    cluster_number: Optional[int] = None

    @property
    def has_coordinate(self) -> bool:
        return self.coordinate is not None and not self.coordinate.is_empty

    @property
    def xy(self) -> tuple[float, float]:
        return (self.coordinate.x, self.coordinate.y)


class UngroupReason(str, Enum):
    """Why a plot could not be placed in a group."""
    ISOLATED_LOCATION = "IsolatedLocation"
    PLANTING_DATE_MISMATCH = "PlantingDateMismatch"
    INSUFFICIENT_AREA = "InsufficientArea"
    GROUP_TOO_LARGE = "GroupTooLarge"
    TOO_FEW_PLOTS = "TooFewPlots"
    MISSING_COORDINATE = "MissingCoordinate"
    ALREADY_GROUPED = "AlreadyGrouped"
    NOT_SPATIALLY_COHERENT = "NotSpatiallyCoherent"
    INVALID_BOUNDARY = "InvalidBoundary"
    PLOT_OVERLAP = "PlotOverlap"


@dataclass
class ProposedGroup:
    """A group proposed by the engine."""
    group_number: int
    variety_id: str
    planting_window_start: date
    planting_window_end: date
    median_planting_date: date
    parcels: list[ParcelClusterInfo]
    centroid: Point
    boundary: Optional[Polygon]
    total_area: float

    @property
    def parcel_count(self) -> int:
        return len(self.parcels)

    @property
    def parcel_ids(self) -> list[str]:
        return [p.parcel_id for p in self.parcels]


@dataclass
class NearbyGroupInfo:
    """A group close to an ungrouped plot, with a compatibility verdict."""
    group_number: int
    variety_id: str
    distance: float
    planting_date_diff_days: int
    is_compatible: bool
    incompatibility_reason: Optional[str] = None


@dataclass
class UngroupedParcelInfo:
    """A plot left out of every group, with the reason and suggestions."""
    parcel: ParcelClusterInfo
    reason: UngroupReason
    reason_description: str
    distance_to_nearest_group: Optional[float] = None
    nearest_group_number: Optional[int] = None
    suggestions: list[str] = field(default_factory=list)
    nearby_groups: list[NearbyGroupInfo] = field(default_factory=list)
