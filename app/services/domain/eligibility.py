"""
Domain service: Selection of plots eligible for group formation.
"""
from typing import Optional
import logging

from pyproj import Transformer
from shapely.errors import GEOSException
from shapely.geometry import Point, Polygon

from app.domain.grouping import ParcelClusterInfo
from app.domain.models import ParcelCultivationRecord
from app.utils.geo_projection import project_geometry, project_point

logger = logging.getLogger(__name__)


def parse_polygon(polygon_str: str) -> list[list[float]]:
    """
    Parse polygon string to list of [lon, lat] coordinates.

    Args:
        polygon_str: Space-separated 'lon,lat' pairs

    Returns:
        List of [longitude, latitude] pairs

    Raises:
        ValueError: If a pair is malformed
    """
    coords = []
    for pair in polygon_str.strip().split():
        lon, lat = pair.split(',')
        coords.append([float(lon), float(lat)])
    return coords


def is_eligible(record: ParcelCultivationRecord, season_id: str, year: int) -> bool:
    """
    A record is eligible when it belongs to the season and year, has a
    confirmed variety and a planting date, and is not grouped yet.
    """
    return (
        record.season_id == season_id
        and record.year == year
        and record.variety_confirmed
        and bool(record.rice_variety_id)
        and record.planting_date is not None
        and not record.group_id
    )


def reference_location(records: list[ParcelCultivationRecord]) -> Optional[tuple[float, float]]:
    """
    First (lat, lon) available among the records, used to pick a UTM zone.
    """
    for record in records:
        if record.lat is not None and record.lng is not None:
            return (record.lat, record.lng)
        if record.boundary:
            try:
                lon, lat = parse_polygon(record.boundary)[0]
            except (ValueError, IndexError):
                continue
            return (lat, lon)
    return None


def build_parcel(
    record: ParcelCultivationRecord,
    transformer: Optional[Transformer],
) -> ParcelClusterInfo:
    """
    Convert a record into engine input, projected to meters.

    The coordinate is the record's lat/lng, else the centroid of its
    boundary, else None.
    """
    boundary = None
    if record.boundary and transformer is not None:
        boundary = _project_boundary(record, transformer)

    coordinate: Optional[Point] = None
    if transformer is not None:
        if record.lat is not None and record.lng is not None:
            coordinate = project_point(record.lat, record.lng, transformer)
        elif boundary is not None and not boundary.centroid.is_empty:
            coordinate = boundary.centroid

    return ParcelClusterInfo(
        parcel_id=record.plot_id,
        cultivation_id=record.cultivation_id,
        coordinate=coordinate,
        planting_date=record.planting_date,
        variety_id=record.rice_variety_id,
        area=record.area,
        boundary=boundary,
        farmer_id=record.farmer_id,
    )


def select_eligible_parcels(
    records: list[ParcelCultivationRecord],
    season_id: str,
    year: int,
    transformer: Optional[Transformer],
) -> list[ParcelClusterInfo]:
    """
    Filter records to eligible plots and convert them for the engine.

    Args:
        records: Cultivation records of a cluster
        season_id: Target season
        year: Target year
        transformer: Forward transformer to meters (None when no record
            carries a location)

    Returns:
        Eligible plots in record order
    """
    eligible = [r for r in records if is_eligible(r, season_id, year)]

    skipped_no_date = sum(
        1 for r in records
        if r.season_id == season_id and r.year == year and r.planting_date is None
    )
    if skipped_no_date:
        logger.debug(f"Skipped {skipped_no_date} records without a planting date")

    logger.info(f"Eligible plots: {len(eligible)}/{len(records)} "
                f"(season={season_id}, year={year})")

    return [build_parcel(r, transformer) for r in eligible]


def _project_boundary(
    record: ParcelCultivationRecord,
    transformer: Transformer,
) -> Optional[Polygon]:
    try:
        coords = parse_polygon(record.boundary)
        if len(coords) < 3:
            raise ValueError(f"{len(coords)} vertices, at least 3 required")
        polygon = project_geometry(Polygon(coords), transformer)
    except (ValueError, GEOSException) as e:
        logger.warning(f"Ignoring malformed boundary of plot {record.plot_id}: {e}")
        return None

    if polygon.is_empty:
        logger.warning(f"Ignoring empty boundary of plot {record.plot_id}")
        return None
    return polygon
