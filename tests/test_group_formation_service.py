"""
Unit tests for the group formation application service.
"""
import pytest
from unittest.mock import MagicMock

from app.domain.grouping import GroupingParameters, UngroupReason
from app.infrastructure.records_api_client import RecordsAPIError
from app.services.application.group_formation_service import (
    GroupFormationService,
    NamingContext,
)
from app.services.domain.group_formation_engine import GroupFormationEngine
from app.utils.geo_projection import point_to_latlon


@pytest.fixture
def service(mock_records_client):
    return GroupFormationService(mock_records_client)


# ============================================================
# Stored Record Preview Tests
# ============================================================

class TestPreviewGroupsForSeason:
    """Tests for previews built from the farm-records service."""

    async def test_fetches_records_and_forms_groups(self, service, mock_records_client, default_parameters):
        result = await service.preview_groups_for_season("cluster-1", "season-ws", 2025, default_parameters)

        mock_records_client.get_plot_cultivations.assert_awaited_once_with("cluster-1", "season-ws", 2025)
        assert result.eligible_count == 7
        assert len(result.groups) == 1
        assert result.groups[0].parcel_ids == ["plot-1", "plot-3", "plot-5", "plot-2", "plot-4", "plot-6"]
        assert result.groups[0].total_area == pytest.approx(21.0)
        assert [(u.parcel.parcel_id, u.reason) for u in result.ungrouped] == [
            ("plot-7", UngroupReason.MISSING_COORDINATE)
        ]

    async def test_records_error_propagates(self, service, mock_records_client, default_parameters):
        mock_records_client.get_plot_cultivations.side_effect = RecordsAPIError("down", status_code=502)

        with pytest.raises(RecordsAPIError):
            await service.preview_groups_for_season("cluster-1", "season-ws", 2025, default_parameters)


# ============================================================
# In-Memory Preview Tests
# ============================================================

class TestPreviewGroups:
    """Tests for previews of submitted records."""

    def test_centroid_projects_back_near_plots(self, service, sample_records, default_parameters):
        result = service.preview_groups(sample_records, "season-ws", 2025, default_parameters)

        lat, lon = point_to_latlon(result.groups[0].centroid, result.reverse_transformer)
        assert lat == pytest.approx(10.03075, abs=1e-5)
        assert lon == pytest.approx(105.78, abs=1e-5)

    def test_ineligible_records_excluded(self, service, sample_records, default_parameters):
        sample_records[0].variety_confirmed = False
        sample_records[1].group_id = "group-1"

        result = service.preview_groups(sample_records, "season-ws", 2025, default_parameters)

        assert result.eligible_count == 5
        # Four plots of 3.5 ha remain, below the five plot minimum
        assert result.groups == []

    def test_engine_built_with_request_parameters(self, mock_records_client, sample_records):
        params = GroupingParameters(min_plots_per_group=1, min_group_area=0.0)
        factory = MagicMock(wraps=GroupFormationEngine)
        service = GroupFormationService(mock_records_client, engine_factory=factory)

        result = service.preview_groups(sample_records, "season-ws", 2025, params)

        factory.assert_called_once_with(params)
        assert result.parameters is params

    def test_no_located_records(self, service, sample_records, default_parameters):
        result = service.preview_groups(sample_records[-1:], "season-ws", 2025, default_parameters)

        assert result.reverse_transformer is None
        assert result.groups == []
        assert result.ungrouped[0].reason == UngroupReason.MISSING_COORDINATE

    def test_group_names_require_naming_context(self, service, sample_records, default_parameters):
        result = service.preview_groups(sample_records, "season-ws", 2025, default_parameters)

        assert result.group_names == {}
        assert result.variety_names == {"ST25": "ST 25"}

    def test_group_names_generated(self, service, sample_records, default_parameters):
        naming = NamingContext(cluster_name="Can Tho", season_name="Winter")

        result = service.preview_groups(sample_records, "season-ws", 2025, default_parameters, naming)

        assert result.group_names == {1: "CT-W25-S2-G01"}

    def test_naming_context_variety_names_override(self, service, sample_records, default_parameters):
        naming = NamingContext(
            cluster_name="Can Tho",
            season_name="Mua Dong",
            variety_names={"ST25": "Jasmine"},
        )

        result = service.preview_groups(sample_records, "season-ws", 2025, default_parameters, naming)

        assert result.group_names == {1: "CT-MD25-JAS-G01"}
