"""
Backup Service.

CSV export and import of bookmarks and services, full ZIP backups and
restores. Row-level failures during an import or restore are collected as
messages and never abort the remaining rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Type

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from fauxdash.backup import (
    BACKUP_VERSION,
    SENSITIVE_SETTING_KEYS,
    UNCATEGORIZED,
    BackupArchive,
    CategoryRow,
    ItemRow,
    RestoreResult,
    generate_categories_csv,
    generate_items_csv,
    parse_categories_csv,
    parse_items_csv,
)
from fauxdash.core.database.entities import (
    AnalyticsDaily,
    Bookmark,
    BookmarkClick,
    Category,
    Pageview,
    Service,
    ServiceCategory,
    ServiceClick,
)
from fauxdash.core.database.repositories import (
    AnalyticsRepository,
    BookmarkRepository,
    CategoryRepository,
    LinkRepository,
    ServiceRepository,
    SettingRepository,
)
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import ImportResult

from .catalog_service import invalidate_catalog
from .settings_service import global_settings_cache

logger = get_logger(__name__)


@dataclass(frozen=True)
class ItemKind:
    """Tables behind one kind of link."""

    item_model: Type[SQLModel]
    category_model: Type[SQLModel]
    repository: Type[LinkRepository]


ITEM_KINDS: Dict[str, ItemKind] = {
    "bookmarks": ItemKind(Bookmark, Category, BookmarkRepository),
    "services": ItemKind(Service, ServiceCategory, ServiceRepository),
}

# JSON key in analytics.json -> entity
ANALYTICS_TABLES: Dict[str, Type[SQLModel]] = {
    "pageviews": Pageview,
    "bookmark_clicks": BookmarkClick,
    "service_clicks": ServiceClick,
    "analytics_daily": AnalyticsDaily,
}


def _category_row(category: Any) -> CategoryRow:
    return CategoryRow(
        name=category.name,
        icon=category.icon,
        order=category.order,
        is_collapsed=not category.auto_expanded,
        show_open_all=category.show_open_all,
    )


class CategoryResolver:
    """Case-insensitive category lookup that creates missing categories on demand."""

    def __init__(self, session: AsyncSession, model: Type[SQLModel]) -> None:
        self.repo = CategoryRepository(session, model)
        self.by_name: Dict[str, int] = {}
        self.created = 0

    async def load(self) -> "CategoryResolver":
        self.by_name = {c.name.strip().lower(): c.id for c in await self.repo.list()}
        return self

    async def resolve(self, name: str) -> int:
        key = name.strip().lower()
        if key not in self.by_name:
            category = await self.repo.create(self.repo.model(name=name.strip(), order=len(self.by_name)))
            self.by_name[key] = category.id
            self.created += 1
        return self.by_name[key]

    async def upsert(self, row: CategoryRow, update_existing: bool) -> bool:
        """Create the category, or refresh icon/order/options of an existing one.

        Returns:
            True if a new category was created
        """
        key = row.name.strip().lower()
        existing_id = self.by_name.get(key)
        if existing_id is not None:
            if update_existing:
                category = await self.repo.get_by_id(existing_id)
                category.icon = row.icon
                category.order = row.order
                category.show_open_all = row.show_open_all
                category.auto_expanded = not row.is_collapsed
                await self.repo.update(category)
            return False
        category = await self.repo.create(
            self.repo.model(
                name=row.name.strip(),
                icon=row.icon,
                order=row.order,
                show_open_all=row.show_open_all,
                auto_expanded=not row.is_collapsed,
            )
        )
        self.by_name[key] = category.id
        return True


async def export_items_csv(session: AsyncSession, kind: str) -> str:
    """CSV export of every bookmark or service with its category name."""
    item_kind = ITEM_KINDS[kind]
    categories = {c.id: c.name for c in await CategoryRepository(session, item_kind.category_model).list()}
    items = await item_kind.repository(session).list()
    return generate_items_csv(
        ItemRow(
            name=item.name,
            url=item.url,
            category_name=categories.get(item.category_id, UNCATEGORIZED),
            description=item.description,
            icon=item.icon,
            order=item.order,
            is_visible=item.is_visible,
            requires_auth=item.requires_auth,
        )
        for item in items
    )


async def _insert_items(
    session: AsyncSession, kind: str, rows: List[ItemRow], resolver: CategoryResolver, errors: List[str]
) -> int:
    item_kind = ITEM_KINDS[kind]
    repo = item_kind.repository(session)
    created = 0
    for row in rows:
        try:
            category_id = await resolver.resolve(row.category_name)
            await repo.create(
                item_kind.item_model(
                    category_id=category_id,
                    name=row.name,
                    url=row.url,
                    description=row.description,
                    icon=row.icon,
                    order=row.order,
                    is_visible=row.is_visible,
                    requires_auth=row.requires_auth,
                )
            )
            created += 1
        except Exception as e:
            await session.rollback()
            logger.warning(f"Failed to import {kind[:-1]} '{row.name}': {e}")
            errors.append(f"Failed to import {kind[:-1]} \"{row.name}\": {e}")
    return created


async def import_items_csv(session: AsyncSession, kind: str, content: str) -> ImportResult:
    """Import bookmarks or services from CSV text.

    Args:
        session: Database session
        kind: ``bookmarks`` or ``services``
        content: CSV file contents

    Returns:
        Counters and per-row error messages
    """
    rows = parse_items_csv(content)
    valid = [row for row in rows if row.name and row.url]
    result = ImportResult(skipped=len(rows) - len(valid))

    resolver = await CategoryResolver(session, ITEM_KINDS[kind].category_model).load()
    result.imported = await _insert_items(session, kind, valid, resolver, result.errors)
    result.categories_created = resolver.created

    invalidate_catalog()
    logger.info(f"CSV import ({kind}): imported={result.imported}, skipped={result.skipped}")
    return result


async def build_archive(session: AsyncSession, now: datetime) -> BackupArchive:
    """Collect every exportable table into an archive and stamp ``lastBackupDate``."""
    bookmark_categories = await CategoryRepository(session, Category).list()
    service_categories = await CategoryRepository(session, ServiceCategory).list()
    global_settings = await SettingRepository(session).get_map(None)
    settings_data = {k: v for k, v in global_settings.items() if k not in SENSITIVE_SETTING_KEYS}

    analytics = AnalyticsRepository(session)
    analytics_data = {
        "pageviews": [row.model_dump(mode="json") for row in await analytics.list_pageviews()],
        "bookmark_clicks": [row.model_dump(mode="json") for row in await analytics.list_clicks(BookmarkClick)],
        "service_clicks": [row.model_dump(mode="json") for row in await analytics.list_clicks(ServiceClick)],
        "analytics_daily": [row.model_dump(mode="json") for row in await analytics.list_daily()],
    }

    bookmarks_csv = await export_items_csv(session, "bookmarks")
    services_csv = await export_items_csv(session, "services")
    export_date = now.isoformat()

    archive = BackupArchive(
        bookmarks_csv=bookmarks_csv,
        services_csv=services_csv,
        bookmark_categories_csv=generate_categories_csv(_category_row(c) for c in bookmark_categories),
        service_categories_csv=generate_categories_csv(_category_row(c) for c in service_categories),
        settings=settings_data,
        analytics=analytics_data,
        metadata={
            "version": BACKUP_VERSION,
            "export_date": export_date,
            "counts": {
                "bookmarks": len(await BookmarkRepository(session).list()),
                "services": len(await ServiceRepository(session).list()),
                "bookmark_categories": len(bookmark_categories),
                "service_categories": len(service_categories),
                "settings": len(settings_data),
                **{name: len(rows) for name, rows in analytics_data.items()},
            },
        },
    )

    await SettingRepository(session).upsert("lastBackupDate", export_date, None)
    global_settings_cache.invalidate()
    return archive


async def _restore_analytics(
    session: AsyncSession, data: Dict[str, List[Dict[str, Any]]], result: RestoreResult
) -> None:
    for name, model in ANALYTICS_TABLES.items():
        rows = data.get(name)
        if not isinstance(rows, list):
            continue
        failed = 0
        for raw in rows:
            try:
                values = {k: v for k, v in raw.items() if k != "id"}
                session.add(model.model_validate(values))
                await session.commit()
                result.analytics_restored += 1
            except Exception as e:
                await session.rollback()
                failed += 1
                logger.debug(f"Skipping {name} row: {e}")
        if failed:
            result.errors.append(f"Skipped {failed} invalid {name} row(s)")


async def restore_archive(session: AsyncSession, archive: BackupArchive, clear_existing: bool) -> RestoreResult:
    """Restore categories, items, settings and analytics from an archive.

    Args:
        session: Database session
        archive: Parsed backup
        clear_existing: Delete existing content and analytics first

    Returns:
        Counters and collected error messages
    """
    result = RestoreResult()

    if clear_existing:
        await AnalyticsRepository(session).delete_all()
        await BookmarkRepository(session).delete_all()
        await ServiceRepository(session).delete_all()
        await CategoryRepository(session, Category).delete_all()
        await CategoryRepository(session, ServiceCategory).delete_all()

    resolvers = {
        "bookmarks": await CategoryResolver(session, Category).load(),
        "services": await CategoryResolver(session, ServiceCategory).load(),
    }
    category_sources = {
        "bookmarks": archive.bookmark_categories_csv,
        "services": archive.service_categories_csv,
    }

    for kind, resolver in resolvers.items():
        for row in parse_categories_csv(category_sources[kind]):
            try:
                if await resolver.upsert(row, update_existing=not clear_existing):
                    resolver.created += 1
            except Exception as e:
                await session.rollback()
                result.errors.append(f"Failed to import category \"{row.name}\": {e}")

    bookmark_rows = [row for row in parse_items_csv(archive.bookmarks_csv) if row.name and row.url]
    service_rows = [row for row in parse_items_csv(archive.services_csv) if row.name and row.url]
    result.bookmarks_created = await _insert_items(session, "bookmarks", bookmark_rows, resolvers["bookmarks"], result.errors)
    result.services_created = await _insert_items(session, "services", service_rows, resolvers["services"], result.errors)
    result.bookmark_categories_created = resolvers["bookmarks"].created
    result.service_categories_created = resolvers["services"].created

    settings_repo = SettingRepository(session)
    for key, value in archive.settings.items():
        if key in SENSITIVE_SETTING_KEYS:
            continue
        try:
            await settings_repo.upsert(key, "" if value is None else str(value), None)
            result.settings_restored += 1
        except Exception as e:
            await session.rollback()
            result.errors.append(f"Failed to import setting \"{key}\": {e}")

    await _restore_analytics(session, archive.analytics, result)

    invalidate_catalog()
    global_settings_cache.invalidate()
    logger.info(
        f"Backup restored: bookmarks={result.bookmarks_created}, services={result.services_created}, "
        f"settings={result.settings_restored}, analytics={result.analytics_restored}, errors={len(result.errors)}"
    )
    return result
