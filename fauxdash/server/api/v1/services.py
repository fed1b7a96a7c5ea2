"""
Service endpoints.

Services are links to self-hosted applications. Unlike bookmarks they may
live outside any category; the public listing is a flat list.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.entities import Service, ServiceCategory
from fauxdash.core.database.repositories import ServiceRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import ClickResponse, ServiceCreate, ServiceRead, ServiceUpdate
from fauxdash.server.security.deps import OptionalUserDep, require_admin
from fauxdash.server.services.catalog_service import invalidate_catalog

from .bookmarks import check_category, get_item_or_404, record_click, update_item

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=List[ServiceRead],
    summary="List Services",
    description="Visible services in display order. Anonymous callers do not see services that require sign-in.",
    response_description="Flat list of services.",
)
async def list_services(user: OptionalUserDep, session: AsyncSession = Depends(get_session)) -> List[ServiceRead]:
    services = await ServiceRepository(session).list_visible(include_auth=user is not None)
    return [ServiceRead.model_validate(s) for s in services]


@router.get(
    "/all",
    response_model=List[ServiceRead],
    dependencies=[Depends(require_admin)],
    summary="List All Services",
    description="Every service, hidden and restricted ones included.",
    response_description="All services.",
)
async def list_all_services(session: AsyncSession = Depends(get_session)) -> List[ServiceRead]:
    return [ServiceRead.model_validate(s) for s in await ServiceRepository(session).list()]


@router.post(
    "",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create Service",
    description="Create a service, optionally inside an existing service category.",
    response_description="The created service.",
    responses={400: {"description": "Service category does not exist"}},
)
async def create_service(payload: ServiceCreate, session: AsyncSession = Depends(get_session)) -> ServiceRead:
    await check_category(session, ServiceCategory, payload.category_id)
    service = await ServiceRepository(session).create(Service.model_validate(payload.model_dump()))
    invalidate_catalog()
    logger.info(f"Created service {service.id}: {service.name}")
    return ServiceRead.model_validate(service)


@router.get(
    "/{service_id}",
    response_model=ServiceRead,
    dependencies=[Depends(require_admin)],
    summary="Get Service",
    description="Retrieve one service by id.",
    response_description="The service.",
    responses={404: {"description": "Service not found"}},
)
async def get_service(service_id: int, session: AsyncSession = Depends(get_session)) -> ServiceRead:
    return ServiceRead.model_validate(await get_item_or_404(ServiceRepository(session), service_id))


@router.patch(
    "/{service_id}",
    response_model=ServiceRead,
    dependencies=[Depends(require_admin)],
    summary="Update Service",
    description="Partially update a service. Send category_id null to make it uncategorized.",
    response_description="The updated service.",
    responses={
        400: {"description": "Service category does not exist"},
        404: {"description": "Service not found"},
    },
)
async def update_service(
    service_id: int,
    payload: ServiceUpdate,
    session: AsyncSession = Depends(get_session),
) -> ServiceRead:
    service = await update_item(ServiceRepository(session), ServiceCategory, service_id, payload)
    return ServiceRead.model_validate(service)


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
    summary="Delete Service",
    description="Delete a service and its click history.",
    responses={
        204: {"description": "Service deleted"},
        404: {"description": "Service not found"},
    },
)
async def delete_service(service_id: int, session: AsyncSession = Depends(get_session)) -> None:
    if not await ServiceRepository(session).delete(service_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Service {service_id} not found")
    invalidate_catalog()


@router.post(
    "/{service_id}/click",
    response_model=ClickResponse,
    summary="Record Service Click",
    description="Count a click on a service. Public.",
    response_description="Acknowledgement.",
    responses={404: {"description": "Service not found"}},
)
async def click_service(service_id: int, session: AsyncSession = Depends(get_session)) -> ClickResponse:
    return await record_click(ServiceRepository(session), service_id)
