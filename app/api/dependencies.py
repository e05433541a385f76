"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from app.infrastructure.records_api_client import (
    RecordsAPIClient,
    get_records_client,
)
from app.services.domain.group_name_generator import GroupNameGenerator
from app.services.application.group_formation_service import GroupFormationService


def get_group_name_generator() -> GroupNameGenerator:
    """
    Dependency factory for GroupNameGenerator.

    Returns:
        GroupNameGenerator instance
    """
    return GroupNameGenerator()


def get_group_formation_service(
    records_client: Annotated[RecordsAPIClient, Depends(get_records_client)],
    name_generator: Annotated[GroupNameGenerator, Depends(get_group_name_generator)],
) -> GroupFormationService:
    """
    Dependency factory for GroupFormationService.

    Args:
        records_client: Farm-records client (injected)
        name_generator: Group name generator (injected)

    Returns:
        GroupFormationService instance
    """
    return GroupFormationService(records_client=records_client, name_generator=name_generator)


# Type aliases for cleaner route signatures
GroupFormationServiceDep = Annotated[GroupFormationService, Depends(get_group_formation_service)]
