"""
API endpoint constants and configuration.

This module contains all farm-records API endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


class RecordsAPIEndpoints:
    """Farm-records API endpoint paths."""

    # Base paths
    FARMING_BASE = "/farming"

    # Cultivation endpoints
    PLOT_CULTIVATIONS = f"{FARMING_BASE}/clusters/{{cluster_id}}/seasons/{{season_id}}/plot-cultivations/"

    @classmethod
    def get_plot_cultivations(cls, cluster_id: str, season_id: str) -> str:
        """
        Get plot cultivations endpoint for a cluster and season.

        Args:
            cluster_id: Cluster ID
            season_id: Season ID

        Returns:
            Formatted endpoint path
        """
        return cls.PLOT_CULTIVATIONS.format(cluster_id=cluster_id, season_id=season_id)


class APIConstants:
    """General API configuration constants."""

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0

    # Pagination
    MAX_PAGES = 100
