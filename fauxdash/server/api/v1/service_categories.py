"""
Service category endpoints.

Same shape as the bookmark categories. Deleting a service category keeps its
services and leaves them uncategorized.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.entities import ServiceCategory
from fauxdash.core.database.repositories import CategoryRepository
from fauxdash.core.models.io import CategoryCreate, CategoryRead, CategoryUpdate, ServiceCategoryWithServices
from fauxdash.server.security.deps import OptionalUserDep, require_admin
from fauxdash.server.services.catalog_service import list_service_categories

from .categories import create_category, delete_category, get_category_or_404, update_category

router = APIRouter()


@router.get(
    "",
    response_model=List[ServiceCategoryWithServices],
    summary="List Service Categories",
    description="Visible service categories in display order, each with its visible services.",
    response_description="Service categories with nested services.",
)
async def list_categories(
    user: OptionalUserDep,
    session: AsyncSession = Depends(get_session),
) -> List[ServiceCategoryWithServices]:
    return await list_service_categories(session, include_auth=user is not None)


@router.get(
    "/all",
    response_model=List[CategoryRead],
    dependencies=[Depends(require_admin)],
    summary="List All Service Categories",
    description="Every service category, hidden ones included.",
    response_description="Service categories in display order.",
)
async def list_all_categories(session: AsyncSession = Depends(get_session)) -> List[CategoryRead]:
    return [CategoryRead.model_validate(c) for c in await CategoryRepository(session, ServiceCategory).list()]


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create Service Category",
    description="Create a service category.",
    response_description="The created service category.",
    responses={400: {"description": "Invalid sort option"}},
)
async def create_service_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_session),
) -> CategoryRead:
    return await create_category(session, ServiceCategory, payload)


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
    summary="Get Service Category",
    description="Retrieve one service category by id.",
    response_description="The service category.",
    responses={404: {"description": "Category not found"}},
)
async def get_service_category(category_id: int, session: AsyncSession = Depends(get_session)) -> CategoryRead:
    return CategoryRead.model_validate(await get_category_or_404(session, ServiceCategory, category_id))


@router.patch(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
    summary="Update Service Category",
    description="Partially update a service category. Only provided fields change.",
    response_description="The updated service category.",
    responses={404: {"description": "Category not found"}},
)
async def update_service_category(
    category_id: int,
    payload: CategoryUpdate,
    session: AsyncSession = Depends(get_session),
) -> CategoryRead:
    return await update_category(session, ServiceCategory, category_id, payload)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
    summary="Delete Service Category",
    description="Delete a service category. Its services are kept without a category.",
    responses={
        204: {"description": "Category deleted"},
        404: {"description": "Category not found"},
    },
)
async def delete_service_category(category_id: int, session: AsyncSession = Depends(get_session)) -> None:
    await delete_category(session, ServiceCategory, category_id)
