"""
Bookmark endpoints.

Admins manage bookmarks; anyone may report a click. A click bumps the
bookmark's counter in SQL and stores a click event for the analytics views.
"""

from __future__ import annotations

from typing import List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from fauxdash.core.database import get_session, utc_now
from fauxdash.core.database.entities import Bookmark, Category
from fauxdash.core.database.repositories import BookmarkRepository, CategoryRepository, LinkRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import BookmarkCreate, BookmarkRead, BookmarkUpdate, ClickResponse
from fauxdash.server.security.deps import require_admin
from fauxdash.server.services.catalog_service import invalidate_catalog

logger = get_logger(__name__)

router = APIRouter()


async def check_category(session: AsyncSession, model: Type[SQLModel], category_id: Optional[int]) -> None:
    """Reject a reference to a category that does not exist."""
    if category_id is None:
        return
    if await CategoryRepository(session, model).get_by_id(category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Category {category_id} does not exist"
        )


async def get_item_or_404(repo: LinkRepository, item_id: int):
    item = await repo.get_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Item {item_id} not found")
    return item


async def update_item(repo: LinkRepository, category_model: Type[SQLModel], item_id: int, payload: BaseModel):
    item = await get_item_or_404(repo, item_id)
    changes = payload.model_dump(exclude_unset=True)
    if "category_id" in changes:
        await check_category(repo.session, category_model, changes["category_id"])
    for key, value in changes.items():
        setattr(item, key, value)
    item.updated_at = utc_now()
    item = await repo.update(item)
    invalidate_catalog()
    return item


async def record_click(repo: LinkRepository, item_id: int) -> ClickResponse:
    if not await repo.record_click(item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Item {item_id} not found")
    return ClickResponse()


@router.get(
    "",
    response_model=List[BookmarkRead],
    dependencies=[Depends(require_admin)],
    summary="List Bookmarks",
    description="Every bookmark, hidden and restricted ones included, in display order.",
    response_description="All bookmarks.",
)
async def list_bookmarks(session: AsyncSession = Depends(get_session)) -> List[BookmarkRead]:
    return [BookmarkRead.model_validate(b) for b in await BookmarkRepository(session).list()]


@router.post(
    "",
    response_model=BookmarkRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create Bookmark",
    description="Create a bookmark inside an existing category.",
    response_description="The created bookmark.",
    responses={400: {"description": "Category does not exist"}},
)
async def create_bookmark(
    payload: BookmarkCreate,
    session: AsyncSession = Depends(get_session),
) -> BookmarkRead:
    await check_category(session, Category, payload.category_id)
    bookmark = await BookmarkRepository(session).create(Bookmark.model_validate(payload.model_dump()))
    invalidate_catalog()
    logger.info(f"Created bookmark {bookmark.id}: {bookmark.name}")
    return BookmarkRead.model_validate(bookmark)


@router.get(
    "/{bookmark_id}",
    response_model=BookmarkRead,
    dependencies=[Depends(require_admin)],
    summary="Get Bookmark",
    description="Retrieve one bookmark by id.",
    response_description="The bookmark.",
    responses={404: {"description": "Bookmark not found"}},
)
async def get_bookmark(bookmark_id: int, session: AsyncSession = Depends(get_session)) -> BookmarkRead:
    return BookmarkRead.model_validate(await get_item_or_404(BookmarkRepository(session), bookmark_id))


@router.patch(
    "/{bookmark_id}",
    response_model=BookmarkRead,
    dependencies=[Depends(require_admin)],
    summary="Update Bookmark",
    description="Partially update a bookmark. Moving it requires the target category to exist.",
    response_description="The updated bookmark.",
    responses={
        400: {"description": "Category does not exist"},
        404: {"description": "Bookmark not found"},
    },
)
async def update_bookmark(
    bookmark_id: int,
    payload: BookmarkUpdate,
    session: AsyncSession = Depends(get_session),
) -> BookmarkRead:
    if "category_id" in payload.model_fields_set and payload.category_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bookmarks must belong to a category")
    bookmark = await update_item(BookmarkRepository(session), Category, bookmark_id, payload)
    return BookmarkRead.model_validate(bookmark)


@router.delete(
    "/{bookmark_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
    summary="Delete Bookmark",
    description="Delete a bookmark and its click history.",
    responses={
        204: {"description": "Bookmark deleted"},
        404: {"description": "Bookmark not found"},
    },
)
async def delete_bookmark(bookmark_id: int, session: AsyncSession = Depends(get_session)) -> None:
    if not await BookmarkRepository(session).delete(bookmark_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bookmark {bookmark_id} not found")
    invalidate_catalog()


@router.post(
    "/{bookmark_id}/click",
    response_model=ClickResponse,
    summary="Record Bookmark Click",
    description="Count a click on a bookmark. Public.",
    response_description="Acknowledgement.",
    responses={404: {"description": "Bookmark not found"}},
)
async def click_bookmark(bookmark_id: int, session: AsyncSession = Depends(get_session)) -> ClickResponse:
    return await record_click(BookmarkRepository(session), bookmark_id)
