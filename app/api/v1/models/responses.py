"""
API response models using Pydantic.
"""
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from shapely.geometry import mapping

from app.domain.grouping import GroupingParameters, ProposedGroup, UngroupedParcelInfo
from app.services.application.group_formation_service import GroupFormationResult
from app.utils.geo_projection import point_to_latlon, project_geometry


class GroupingParametersResponse(BaseModel):
    """Parameters the preview ran with."""
    proximity_threshold: float
    planting_date_tolerance: int
    min_group_area: float
    max_group_area: float
    min_plots_per_group: int
    max_plots_per_group: int

    @classmethod
    def from_domain(cls, parameters: GroupingParameters) -> "GroupingParametersResponse":
        return cls(
            proximity_threshold=parameters.proximity_threshold,
            planting_date_tolerance=parameters.planting_date_tolerance,
            min_group_area=parameters.min_group_area,
            max_group_area=parameters.max_group_area,
            min_plots_per_group=parameters.min_plots_per_group,
            max_plots_per_group=parameters.max_plots_per_group,
        )


class PreviewSummary(BaseModel):
    """Headline counts of a preview."""
    total_eligible_plots: int
    plots_grouped: int
    ungrouped_plots: int
    groups_to_be_formed: int
    estimated_total_area: float = Field(description="Sum of grouped plot areas in hectares")


class PreviewGroup(BaseModel):
    """Single proposed group."""
    group_number: int
    group_name: Optional[str] = None
    rice_variety_id: str
    rice_variety_name: Optional[str] = None
    planting_window_start: date
    planting_window_end: date
    median_planting_date: date
    plot_count: int
    total_area: float = Field(description="Sum of member plot areas in hectares")
    centroid_lat: float
    centroid_lng: float
    boundary_geojson: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Group boundary as a GeoJSON Polygon in WGS84"
    )
    boundary_wkt: Optional[str] = None
    plot_ids: List[str]


class NearbyGroup(BaseModel):
    """A group close to an ungrouped plot."""
    group_number: int
    rice_variety_id: str
    distance: float = Field(description="Distance in meters to the group centroid")
    planting_date_diff_days: int
    is_compatible: bool
    incompatibility_reason: Optional[str] = None


class UngroupedPlot(BaseModel):
    """Plot that could not be grouped."""
    plot_id: str
    cultivation_id: str
    farmer_id: Optional[str] = None
    rice_variety_id: str
    rice_variety_name: Optional[str] = None
    planting_date: date
    area: float
    ungroup_reason: str
    reason_description: str
    distance_to_nearest_group: Optional[float] = None
    nearest_group_number: Optional[int] = None
    suggestions: List[str]
    nearby_groups: List[NearbyGroup]


class UngroupedStatistics(BaseModel):
    """Ungrouped plot counts."""
    by_reason: Dict[str, int]
    by_variety: Dict[str, int]


class PreviewGroupsResponse(BaseModel):
    """Response model for group preview endpoints."""
    season_id: str
    year: int
    parameters: GroupingParametersResponse
    summary: PreviewSummary
    groups: List[PreviewGroup]
    ungrouped_plots: List[UngroupedPlot]
    statistics: UngroupedStatistics

    @classmethod
    def from_result(
        cls,
        result: GroupFormationResult,
        season_id: str,
        year: int,
    ) -> "PreviewGroupsResponse":
        """
        Render a preview result in WGS84 for API consumers.
        """
        groups = [_render_group(g, result) for g in result.groups]
        ungrouped = [_render_ungrouped(u, result) for u in result.ungrouped]

        return cls(
            season_id=season_id,
            year=year,
            parameters=GroupingParametersResponse.from_domain(result.parameters),
            summary=PreviewSummary(
                total_eligible_plots=result.eligible_count,
                plots_grouped=sum(g.parcel_count for g in result.groups),
                ungrouped_plots=len(result.ungrouped),
                groups_to_be_formed=len(result.groups),
                estimated_total_area=sum(g.total_area for g in result.groups),
            ),
            groups=groups,
            ungrouped_plots=ungrouped,
            statistics=UngroupedStatistics(
                by_reason=dict(Counter(u.reason.value for u in result.ungrouped)),
                by_variety=dict(Counter(u.parcel.variety_id for u in result.ungrouped)),
            ),
        )

    class Config:
        json_schema_extra = {
            "example": {
                "season_id": "winter-spring",
                "year": 2025,
                "parameters": {
                    "proximity_threshold": 2000.0,
                    "planting_date_tolerance": 2,
                    "min_group_area": 15.0,
                    "max_group_area": 50.0,
                    "min_plots_per_group": 5,
                    "max_plots_per_group": 15,
                },
                "summary": {
                    "total_eligible_plots": 7,
                    "plots_grouped": 6,
                    "ungrouped_plots": 1,
                    "groups_to_be_formed": 1,
                    "estimated_total_area": 20.0,
                },
                "groups": [],
                "ungrouped_plots": [],
                "statistics": {"by_reason": {"MissingCoordinate": 1}, "by_variety": {"ST25": 1}},
            }
        }


def _render_group(group: ProposedGroup, result: GroupFormationResult) -> PreviewGroup:
    reverse = result.reverse_transformer
    lat, lng = point_to_latlon(group.centroid, reverse)

    boundary_geojson = None
    boundary_wkt = None
    if group.boundary is not None:
        boundary = project_geometry(group.boundary, reverse)
        boundary_geojson = mapping(boundary)
        boundary_wkt = boundary.wkt

    return PreviewGroup(
        group_number=group.group_number,
        group_name=result.group_names.get(group.group_number),
        rice_variety_id=group.variety_id,
        rice_variety_name=result.variety_names.get(group.variety_id),
        planting_window_start=group.planting_window_start,
        planting_window_end=group.planting_window_end,
        median_planting_date=group.median_planting_date,
        plot_count=group.parcel_count,
        total_area=group.total_area,
        centroid_lat=lat,
        centroid_lng=lng,
        boundary_geojson=boundary_geojson,
        boundary_wkt=boundary_wkt,
        plot_ids=group.parcel_ids,
    )


def _render_ungrouped(info: UngroupedParcelInfo, result: GroupFormationResult) -> UngroupedPlot:
    parcel = info.parcel
    return UngroupedPlot(
        plot_id=parcel.parcel_id,
        cultivation_id=parcel.cultivation_id,
        farmer_id=parcel.farmer_id,
        rice_variety_id=parcel.variety_id,
        rice_variety_name=result.variety_names.get(parcel.variety_id),
        planting_date=parcel.planting_date,
        area=parcel.area,
        ungroup_reason=info.reason.value,
        reason_description=info.reason_description,
        distance_to_nearest_group=info.distance_to_nearest_group,
        nearest_group_number=info.nearest_group_number,
        suggestions=info.suggestions,
        nearby_groups=[
            NearbyGroup(
                group_number=n.group_number,
                rice_variety_id=n.variety_id,
                distance=n.distance,
                planting_date_diff_days=n.planting_date_diff_days,
                is_compatible=n.is_compatible,
                incompatibility_reason=n.incompatibility_reason,
            )
            for n in info.nearby_groups
        ],
    )
