"""
Backup archive format.

A backup is a ZIP file with four CSV exports, the global settings and the raw
analytics tables as JSON, and a ``metadata.json`` describing the export.
"""

from __future__ import annotations

import io
import json
import zipfile
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

BACKUP_VERSION = "1.1"

BOOKMARKS_FILE = "bookmarks.csv"
SERVICES_FILE = "services.csv"
BOOKMARK_CATEGORIES_FILE = "bookmark-categories.csv"
SERVICE_CATEGORIES_FILE = "service-categories.csv"
SETTINGS_FILE = "settings.json"
ANALYTICS_FILE = "analytics.json"
METADATA_FILE = "metadata.json"

# Never written to settings.json
SENSITIVE_SETTING_KEYS = frozenset({"geoipMaxmindLicenseKey", "geoipIpinfoToken", "smtpPassword"})


class InvalidBackupError(ValueError):
    """Raised when an uploaded file is not a readable backup archive."""


@dataclass
class BackupArchive:
    """In-memory contents of a backup ZIP."""

    bookmarks_csv: str = ""
    services_csv: str = ""
    bookmark_categories_csv: str = ""
    service_categories_csv: str = ""
    settings: Dict[str, Any] = field(default_factory=dict)
    analytics: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RestoreResult:
    """Counters reported after a restore."""

    bookmarks_created: int = 0
    services_created: int = 0
    bookmark_categories_created: int = 0
    service_categories_created: int = 0
    settings_restored: int = 0
    analytics_restored: int = 0
    errors: List[str] = field(default_factory=list)


def backup_filename(moment: datetime) -> str:
    return f"fauxdash-backup-{moment.strftime('%Y-%m-%d')}.zip"


def build_backup_zip(archive: BackupArchive) -> bytes:
    """Serialize an archive to ZIP bytes (deflate compressed)."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(BOOKMARKS_FILE, archive.bookmarks_csv)
        zf.writestr(SERVICES_FILE, archive.services_csv)
        zf.writestr(BOOKMARK_CATEGORIES_FILE, archive.bookmark_categories_csv)
        zf.writestr(SERVICE_CATEGORIES_FILE, archive.service_categories_csv)
        zf.writestr(SETTINGS_FILE, json.dumps(archive.settings, indent=2))
        zf.writestr(ANALYTICS_FILE, json.dumps(archive.analytics, indent=2, default=str))
        zf.writestr(METADATA_FILE, json.dumps(archive.metadata, indent=2))
    return buffer.getvalue()


def read_backup_zip(data: bytes) -> BackupArchive:
    """Read an uploaded backup.

    Members that are missing are left empty, so partial archives restore
    whatever they contain.

    Args:
        data: Raw upload

    Returns:
        Parsed archive

    Raises:
        InvalidBackupError: If the data is not a ZIP, a member is corrupt or
            not UTF-8, or a JSON member is malformed
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise InvalidBackupError("Invalid backup file: not a ZIP archive") from e

    with zf:
        names = set(zf.namelist())

        def text(name: str) -> str:
            if name not in names:
                return ""
            try:
                return zf.read(name).decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise InvalidBackupError(f"Invalid backup file: {name} is not UTF-8 text") from e
            except (zipfile.BadZipFile, zlib.error) as e:
                raise InvalidBackupError(f"Invalid backup file: {name} is corrupt") from e

        def document(name: str) -> Dict[str, Any]:
            raw = text(name)
            if not raw:
                return {}
            try:
                loaded = json.loads(raw)
            except json.JSONDecodeError as e:
                raise InvalidBackupError(f"Invalid backup file: {name} is not valid JSON") from e
            return loaded if isinstance(loaded, dict) else {}

        return BackupArchive(
            bookmarks_csv=text(BOOKMARKS_FILE),
            services_csv=text(SERVICES_FILE),
            bookmark_categories_csv=text(BOOKMARK_CATEGORIES_FILE),
            service_categories_csv=text(SERVICE_CATEGORIES_FILE),
            settings=document(SETTINGS_FILE),
            analytics=document(ANALYTICS_FILE),
            metadata=document(METADATA_FILE),
        )
