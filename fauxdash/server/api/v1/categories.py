"""
Bookmark category endpoints.

The public listing returns visible categories with their visible bookmarks,
filtered for anonymous visitors and cached per audience. Everything else is
admin-only; each write drops the cached listings.
"""

from __future__ import annotations

from typing import List, Type

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from fauxdash.core.database import get_session, utc_now
from fauxdash.core.database.entities import SORT_OPTIONS, Category
from fauxdash.core.database.repositories import CategoryRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import CategoryCreate, CategoryRead, CategoryUpdate, CategoryWithBookmarks
from fauxdash.server.security.deps import OptionalUserDep, require_admin
from fauxdash.server.services.catalog_service import invalidate_catalog, list_bookmark_categories

logger = get_logger(__name__)

router = APIRouter()


def check_sort_by(sort_by: str) -> None:
    if sort_by not in SORT_OPTIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sort_by '{sort_by}'. Expected one of: {', '.join(SORT_OPTIONS)}",
        )


async def create_category(session: AsyncSession, model: Type[SQLModel], payload: CategoryCreate) -> CategoryRead:
    check_sort_by(payload.sort_by)
    category = await CategoryRepository(session, model).create(model.model_validate(payload.model_dump()))
    invalidate_catalog()
    logger.info(f"Created {model.__tablename__} row {category.id}: {category.name}")
    return CategoryRead.model_validate(category)


async def get_category_or_404(session: AsyncSession, model: Type[SQLModel], category_id: int):
    category = await CategoryRepository(session, model).get_by_id(category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Category {category_id} not found")
    return category


async def update_category(
    session: AsyncSession, model: Type[SQLModel], category_id: int, payload: CategoryUpdate
) -> CategoryRead:
    category = await get_category_or_404(session, model, category_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("sort_by") is not None:
        check_sort_by(changes["sort_by"])
    for key, value in changes.items():
        setattr(category, key, value)
    category.updated_at = utc_now()
    category = await CategoryRepository(session, model).update(category)
    invalidate_catalog()
    return CategoryRead.model_validate(category)


async def delete_category(session: AsyncSession, model: Type[SQLModel], category_id: int) -> None:
    if not await CategoryRepository(session, model).delete(category_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Category {category_id} not found")
    invalidate_catalog()
    logger.info(f"Deleted {model.__tablename__} row {category_id}")


@router.get(
    "",
    response_model=List[CategoryWithBookmarks],
    summary="List Bookmark Categories",
    description=(
        "Visible categories in display order, each with its visible bookmarks sorted by the "
        "category's sort option. Anonymous callers do not see entries that require sign-in."
    ),
    response_description="Categories with nested bookmarks.",
)
async def list_categories(
    user: OptionalUserDep,
    session: AsyncSession = Depends(get_session),
) -> List[CategoryWithBookmarks]:
    return await list_bookmark_categories(session, include_auth=user is not None)


@router.get(
    "/all",
    response_model=List[CategoryRead],
    dependencies=[Depends(require_admin)],
    summary="List All Bookmark Categories",
    description="Every bookmark category, hidden ones included.",
    response_description="Categories in display order.",
)
async def list_all_categories(session: AsyncSession = Depends(get_session)) -> List[CategoryRead]:
    return [CategoryRead.model_validate(c) for c in await CategoryRepository(session, Category).list()]


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create Bookmark Category",
    description="Create a bookmark category.",
    response_description="The created category.",
    responses={400: {"description": "Invalid sort option"}},
)
async def create_bookmark_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_session),
) -> CategoryRead:
    return await create_category(session, Category, payload)


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
    summary="Get Bookmark Category",
    description="Retrieve one bookmark category by id.",
    response_description="The category.",
    responses={404: {"description": "Category not found"}},
)
async def get_bookmark_category(category_id: int, session: AsyncSession = Depends(get_session)) -> CategoryRead:
    return CategoryRead.model_validate(await get_category_or_404(session, Category, category_id))


@router.patch(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
    summary="Update Bookmark Category",
    description="Partially update a bookmark category. Only provided fields change.",
    response_description="The updated category.",
    responses={404: {"description": "Category not found"}},
)
async def update_bookmark_category(
    category_id: int,
    payload: CategoryUpdate,
    session: AsyncSession = Depends(get_session),
) -> CategoryRead:
    return await update_category(session, Category, category_id, payload)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
    summary="Delete Bookmark Category",
    description="Delete a bookmark category together with its bookmarks and their click history.",
    responses={
        204: {"description": "Category deleted"},
        404: {"description": "Category not found"},
    },
)
async def delete_bookmark_category(category_id: int, session: AsyncSession = Depends(get_session)) -> None:
    await delete_category(session, Category, category_id)
