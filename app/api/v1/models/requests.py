"""
API request models using Pydantic.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from app.domain.grouping import GroupingParameters
from app.domain.models import ParcelCultivationRecord
from app.services.application.group_formation_service import NamingContext


class GroupingParametersRequest(BaseModel):
    """Optional overrides of the configured grouping parameters."""
    proximity_threshold: Optional[float] = Field(
        default=None, ge=0,
        description="Maximum distance in meters for two plots to be spatially linked"
    )
    planting_date_tolerance: Optional[int] = Field(
        default=None, ge=0,
        description="Planting date tolerance in days"
    )
    min_group_area: Optional[float] = Field(default=None, ge=0, description="Minimum group area in hectares")
    max_group_area: Optional[float] = Field(default=None, gt=0, description="Maximum group area in hectares")
    min_plots_per_group: Optional[int] = Field(default=None, ge=1)
    max_plots_per_group: Optional[int] = Field(default=None, ge=1)

    def to_domain(self) -> GroupingParameters:
        """
        Merge the overrides into the configured defaults.

        Raises:
            ValueError: If the resulting bounds are inconsistent
        """
        return GroupingParameters.from_settings(**self.model_dump())


class NamingContextRequest(BaseModel):
    """Names used to label the proposed groups."""
    cluster_name: str
    season_name: str
    variety_names: Dict[str, str] = Field(
        default_factory=dict,
        description="Rice variety id -> display name"
    )

    def to_domain(self) -> NamingContext:
        return NamingContext(
            cluster_name=self.cluster_name,
            season_name=self.season_name,
            variety_names=dict(self.variety_names),
        )


class GroupPreviewRequest(BaseModel):
    """Request body for previewing groups from inline records."""
    season_id: str
    year: int = Field(ge=2000, le=2100)
    parcels: List[ParcelCultivationRecord]
    parameters: Optional[GroupingParametersRequest] = None
    naming: Optional[NamingContextRequest] = None
