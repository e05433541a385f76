"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Plot factories (projected engine input)
- Sample cultivation records (WGS84)
- Grouping parameters
- Mock records client
- FastAPI test client
"""
import pytest
from datetime import date
from typing import Callable, Optional
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from shapely.geometry import Point, Polygon, box

from app.main import app
from app.domain.grouping import GroupingParameters, ParcelClusterInfo
from app.domain.models import ParcelCultivationRecord
from app.infrastructure.records_api_client import RecordsAPIClient


BASE_DATE = date(2025, 1, 10)


# ============================================================
# Engine Input Fixtures
# ============================================================

@pytest.fixture
def make_parcel() -> Callable[..., ParcelClusterInfo]:
    """Factory for projected plots (coordinates in meters, area in ha)."""

    def _make(
        parcel_id: str,
        x: float = 0.0,
        y: float = 0.0,
        planting_date: date = BASE_DATE,
        variety_id: str = "ST25",
        area: float = 4.0,
        boundary: Optional[Polygon] = None,
        with_coordinate: bool = True,
        is_grouped: bool = False,
    ) -> ParcelClusterInfo:
        return ParcelClusterInfo(
            parcel_id=parcel_id,
            cultivation_id=f"cult-{parcel_id}",
            coordinate=Point(x, y) if with_coordinate else None,
            planting_date=planting_date,
            variety_id=variety_id,
            area=area,
            boundary=boundary,
            farmer_id=f"farmer-{parcel_id}",
            is_grouped=is_grouped,
        )

    return _make


@pytest.fixture
def make_square() -> Callable[[float, float, float], Polygon]:
    """Factory for square boundaries centred on (x, y)."""

    def _make(x: float, y: float, size: float = 50.0) -> Polygon:
        half = size / 2
        return box(x - half, y - half, x + half, y + half)

    return _make


@pytest.fixture
def default_parameters() -> GroupingParameters:
    """Grouping parameters with the documented defaults."""
    return GroupingParameters()


@pytest.fixture
def relaxed_parameters() -> GroupingParameters:
    """Parameters that accept any non-empty cluster without splitting."""
    return GroupingParameters(
        proximity_threshold=100.0,
        planting_date_tolerance=2,
        min_group_area=0.0,
        max_group_area=1000.0,
        min_plots_per_group=1,
        max_plots_per_group=100,
    )


# ============================================================
# Record Fixtures
# ============================================================

@pytest.fixture
def sample_records() -> list[ParcelCultivationRecord]:
    """Six nearby plots of one variety plus one plot without a location."""
    records = []
    for i in range(6):
        records.append(ParcelCultivationRecord(
            plot_id=f"plot-{i + 1}",
            cultivation_id=f"cult-{i + 1}",
            farmer_id=f"farmer-{i + 1}",
            farmer_name=f"Farmer {i + 1}",
            season_id="season-ws",
            year=2025,
            rice_variety_id="ST25",
            rice_variety_name="ST 25",
            planting_date=date(2025, 1, 10 + (i % 2)),
            area=3.5,
            lat=10.0300 + i * 0.0003,  # ~33m spacing
            lng=105.7800,
        ))

    records.append(ParcelCultivationRecord(
        plot_id="plot-7",
        cultivation_id="cult-7",
        season_id="season-ws",
        year=2025,
        rice_variety_id="ST25",
        rice_variety_name="ST 25",
        planting_date=date(2025, 1, 10),
        area=2.0,
    ))
    return records


# ============================================================
# Mock Client Fixtures
# ============================================================

@pytest.fixture
def mock_records_client(sample_records):
    """Create a mock farm-records client."""
    mock_client = AsyncMock(spec=RecordsAPIClient)
    mock_client.get_plot_cultivations.return_value = sample_records
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
