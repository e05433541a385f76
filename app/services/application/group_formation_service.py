"""
Application service: Orchestration layer for group formation previews.
"""
from dataclasses import dataclass, field
from typing import Callable, Optional
import logging

from pyproj import Transformer

from app.domain.grouping import GroupingParameters, ProposedGroup, UngroupedParcelInfo
from app.domain.models import ParcelCultivationRecord
from app.infrastructure.records_api_client import RecordsAPIClient
from app.services.domain.eligibility import reference_location, select_eligible_parcels
from app.services.domain.group_formation_engine import GroupFormationEngine
from app.services.domain.group_name_generator import GroupNameGenerator
from app.utils.geo_projection import build_transformers

logger = logging.getLogger(__name__)


@dataclass
class NamingContext:
    """Names needed to label groups."""
    cluster_name: str
    season_name: str
    variety_names: dict[str, str] = field(default_factory=dict)


@dataclass
class GroupFormationResult:
    """Outcome of a preview run, still in projected coordinates."""
    eligible_count: int
    parameters: GroupingParameters
    groups: list[ProposedGroup]
    ungrouped: list[UngroupedParcelInfo]
    reverse_transformer: Optional[Transformer] = None
    group_names: dict[int, str] = field(default_factory=dict)
    variety_names: dict[str, str] = field(default_factory=dict)


class GroupFormationService:
    """
    Application service for group formation previews.

    Orchestrates data fetching, eligibility filtering, projection and
    engine execution. No grouping logic lives here.
    """

    def __init__(
        self,
        records_client: RecordsAPIClient,
        engine_factory: Callable[[GroupingParameters], GroupFormationEngine] = GroupFormationEngine,
        name_generator: Optional[GroupNameGenerator] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            records_client: Farm-records client for data fetching
            engine_factory: Builds an engine for a parameter set
            name_generator: Generator for group display names
        """
        self.records_client = records_client
        self.engine_factory = engine_factory
        self.name_generator = name_generator or GroupNameGenerator()

    async def preview_groups_for_season(
        self,
        cluster_id: str,
        season_id: str,
        year: int,
        parameters: GroupingParameters,
        naming: Optional[NamingContext] = None,
    ) -> GroupFormationResult:
        """
        Preview groups for a cluster's season using stored records.

        Raises:
            RecordsAPIError: If data fetching fails
        """
        records = await self.records_client.get_plot_cultivations(cluster_id, season_id, year)
        return self.preview_groups(records, season_id, year, parameters, naming)

    def preview_groups(
        self,
        records: list[ParcelCultivationRecord],
        season_id: str,
        year: int,
        parameters: GroupingParameters,
        naming: Optional[NamingContext] = None,
    ) -> GroupFormationResult:
        """
        Preview groups for the given records.

        This method orchestrates:
        1. Choosing a metric projection for the records
        2. Filtering eligible plots
        3. Running the group formation engine
        4. Naming the resulting groups

        Args:
            records: Plot cultivation records
            season_id: Target season
            year: Target year
            parameters: Grouping parameters
            naming: Optional names for group labels

        Returns:
            GroupFormationResult
        """
        forward, reverse = None, None
        location = reference_location(records)
        if location is not None:
            forward, reverse = build_transformers(*location)

        parcels = select_eligible_parcels(records, season_id, year, forward)

        engine = self.engine_factory(parameters)
        groups, ungrouped = engine.form_groups(parcels)

        variety_names = {
            r.rice_variety_id: r.rice_variety_name
            for r in records
            if r.rice_variety_id and r.rice_variety_name
        }
        if naming is not None:
            variety_names.update(naming.variety_names)

        group_names = {}
        if naming is not None:
            group_names = {
                g.group_number: self.name_generator.generate_group_name(
                    cluster_name=naming.cluster_name,
                    season_name=naming.season_name,
                    year=year,
                    variety_name=variety_names.get(g.variety_id, g.variety_id),
                    group_number=g.group_number,
                )
                for g in groups
            }

        logger.info(f"Preview for season {season_id}/{year}: {len(groups)} groups, "
                    f"{len(ungrouped)} ungrouped of {len(parcels)} eligible plots")

        return GroupFormationResult(
            eligible_count=len(parcels),
            parameters=parameters,
            groups=groups,
            ungrouped=ungrouped,
            reverse_transformer=reverse,
            group_names=group_names,
            variety_names=variety_names,
        )
