"""
Infrastructure layer: Farm-records API client with retry logic.
"""
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ValidationError
import httpx
import logging
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from app.config import settings
from app.domain.models import ParcelCultivationRecord
from app.infrastructure.api_constants import APIConstants, RecordsAPIEndpoints

logger = logging.getLogger(__name__)


class PlotCultivationsResponse(BaseModel):
    """Response from plot-cultivations endpoint."""
    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[ParcelCultivationRecord]


class RecordsAPIError(Exception):
    """Raised when the farm-records service cannot serve a request."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecordsAPIClient:
    """
    Client for the farm-records service.
    Implements retry logic with exponential backoff.
    """

    def __init__(self):
        """Initialize the API client with configuration."""
        self.base_url = settings.records_api_base_url
        self.api_key = settings.records_api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "accept": "application/json",
            },
            timeout=APIConstants.DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "RecordsAPIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.TransportError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        response = await self.client.request(method, endpoint, **kwargs)
        if response.status_code >= 500:
            # Server errors are retried
            response.raise_for_status()
        if response.status_code >= 400:
            raise RecordsAPIError(
                f"API request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise RecordsAPIError(f"API returned invalid JSON: {e}", status_code=502)

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path or absolute URL
            **kwargs: Additional arguments for the request

        Returns:
            Response data as dictionary

        Raises:
            RecordsAPIError: If the request fails after retries
        """
        try:
            return await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise RecordsAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            )
        except httpx.RequestError as e:
            raise RecordsAPIError(f"API request error: {str(e)}", status_code=502)

    async def get_plot_cultivations(
        self,
        cluster_id: str,
        season_id: str,
        year: int,
    ) -> List[ParcelCultivationRecord]:
        """
        Fetch every plot cultivation record of a cluster for a season.

        Follows pagination links until exhausted. Results spanning more
        than APIConstants.MAX_PAGES pages are refused rather than truncated.

        Args:
            cluster_id: Cluster identifier
            season_id: Season identifier
            year: Calendar year of the season

        Returns:
            List of ParcelCultivationRecord instances

        Raises:
            RecordsAPIError: If a request fails, a page is malformed or the
                page cap is reached
        """
        records: List[ParcelCultivationRecord] = []
        url = RecordsAPIEndpoints.get_plot_cultivations(cluster_id, season_id)
        params: Optional[Dict[str, Any]] = {"year": year}

        for _ in range(APIConstants.MAX_PAGES):
            data = await self._make_request("GET", url, params=params)
            try:
                page = PlotCultivationsResponse.model_validate(data)
            except ValidationError as e:
                raise RecordsAPIError(
                    f"Malformed plot-cultivations page: {e.error_count()} validation errors",
                    status_code=502,
                )
            records.extend(page.results)
            if not page.next:
                break
            # The next link already carries the query string
            url, params = page.next, None
        else:
            logger.error(f"Plot cultivations for cluster {cluster_id}, season {season_id} "
                         f"exceed {APIConstants.MAX_PAGES} pages")
            raise RecordsAPIError(
                f"Plot cultivations exceed {APIConstants.MAX_PAGES} pages; refusing partial results",
                status_code=502,
            )

        logger.info(f"Fetched {len(records)} plot cultivations for cluster {cluster_id}, season {season_id}")
        return records


# Singleton instance
_api_client: Optional[RecordsAPIClient] = None


def get_records_client() -> RecordsAPIClient:
    """
    Get or create the singleton API client instance.

    Returns:
        RecordsAPIClient instance
    """
    global _api_client
    if _api_client is None:
        _api_client = RecordsAPIClient()
    return _api_client
