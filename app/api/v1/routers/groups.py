"""
API router for group formation endpoints.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, HTTPException, Path, Query

from app.api.dependencies import GroupFormationServiceDep
from app.api.v1.models.requests import GroupingParametersRequest, GroupPreviewRequest
from app.api.v1.models.responses import PreviewGroupsResponse
from app.infrastructure.records_api_client import RecordsAPIError
from app.services.application.group_formation_service import NamingContext


router = APIRouter(
    tags=["groups"],
)

PREVIEW_RESPONSES = {
    200: {"description": "Groups proposed for the eligible plots"},
    400: {"description": "Inconsistent grouping parameters"},
    429: {"description": "Rate limit exceeded"},
}


@router.post(
    "/groups/preview",
    response_model=PreviewGroupsResponse,
    summary="Preview groups for supplied plots",
    description="""
    Run group formation on plot cultivation records supplied in the request.

    The algorithm:
    1. Keeps plots with a confirmed variety for the season that are not grouped yet
    2. Splits plots by rice variety
    3. Links plots within the proximity threshold (transitively)
    4. Sub-groups each spatial cluster by planting date
    5. Enforces plot count and area bounds, splitting oversized clusters
    6. Explains every plot left ungrouped

    Nothing is persisted.
    """,
    responses=PREVIEW_RESPONSES,
)
async def preview_groups(
    request: GroupPreviewRequest,
    service: GroupFormationServiceDep,
) -> PreviewGroupsResponse:
    """
    Preview groups for inline records.

    Args:
        request: Records, optional parameter overrides and naming context
        service: Group formation service (injected dependency)

    Returns:
        PreviewGroupsResponse

    Raises:
        HTTPException: If the parameters are inconsistent
    """
    try:
        overrides = request.parameters or GroupingParametersRequest()
        parameters = overrides.to_domain()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    naming = request.naming.to_domain() if request.naming else None

    result = service.preview_groups(
        records=request.parcels,
        season_id=request.season_id,
        year=request.year,
        parameters=parameters,
        naming=naming,
    )
    return PreviewGroupsResponse.from_result(result, request.season_id, request.year)


@router.get(
    "/clusters/{cluster_id}/seasons/{season_id}/group-preview",
    response_model=PreviewGroupsResponse,
    summary="Preview groups for a cluster's season",
    description="""
    Fetch the cluster's plot cultivations for the season from the farm-records
    service and run group formation on them. Query parameters override the
    configured grouping defaults.
    """,
    responses={
        **PREVIEW_RESPONSES,
        404: {"description": "Cluster or season not found"},
        502: {"description": "Farm-records service failure"},
    },
)
async def preview_season_groups(
    cluster_id: Annotated[str, Path(description="Cluster identifier")],
    season_id: Annotated[str, Path(description="Season identifier")],
    year: Annotated[int, Query(ge=2000, le=2100, description="Season year")],
    service: GroupFormationServiceDep,
    proximity_threshold: Annotated[Optional[float], Query(ge=0)] = None,
    planting_date_tolerance: Annotated[Optional[int], Query(ge=0)] = None,
    min_group_area: Annotated[Optional[float], Query(ge=0)] = None,
    max_group_area: Annotated[Optional[float], Query(gt=0)] = None,
    min_plots_per_group: Annotated[Optional[int], Query(ge=1)] = None,
    max_plots_per_group: Annotated[Optional[int], Query(ge=1)] = None,
    cluster_name: Annotated[Optional[str], Query(description="Cluster name for group labels")] = None,
    season_name: Annotated[Optional[str], Query(description="Season name for group labels")] = None,
) -> PreviewGroupsResponse:
    """
    Preview groups for a cluster's season.

    Raises:
        HTTPException: If parameters are inconsistent or the records
            service fails
    """
    try:
        parameters = GroupingParametersRequest(
            proximity_threshold=proximity_threshold,
            planting_date_tolerance=planting_date_tolerance,
            min_group_area=min_group_area,
            max_group_area=max_group_area,
            min_plots_per_group=min_plots_per_group,
            max_plots_per_group=max_plots_per_group,
        ).to_domain()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    naming = None
    if cluster_name and season_name:
        naming = NamingContext(cluster_name=cluster_name, season_name=season_name)

    try:
        result = await service.preview_groups_for_season(
            cluster_id=cluster_id,
            season_id=season_id,
            year=year,
            parameters=parameters,
            naming=naming,
        )
    except RecordsAPIError as e:
        if e.status_code == 404:
            raise HTTPException(
                status_code=404,
                detail=f"Cluster '{cluster_id}' or season '{season_id}' not found"
            )
        raise HTTPException(
            status_code=502,
            detail=f"Failed to fetch plot cultivations: {e.message}"
        )

    return PreviewGroupsResponse.from_result(result, season_id, year)
