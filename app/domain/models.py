"""
Domain models for plot cultivation records.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).
"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class ParcelCultivationRecord(BaseModel):
    """A plot together with its cultivation record for one season."""
    plot_id: str
    cultivation_id: str
    farmer_id: Optional[str] = None
    farmer_name: Optional[str] = None
    season_id: str
    year: int
    rice_variety_id: Optional[str] = None
    rice_variety_name: Optional[str] = None
    variety_confirmed: bool = Field(
        default=True,
        description="Whether the farmer's variety selection is confirmed"
    )
    planting_date: Optional[date] = None
    area: float = Field(description="Plot area in hectares")
    lat: Optional[float] = None
    lng: Optional[float] = None
    boundary: Optional[str] = Field(
        default=None,
        description="Polygon as space-separated 'lon,lat' pairs"
    )
    group_id: Optional[str] = Field(
        default=None,
        description="Group the plot already belongs to this season, if any"
    )

