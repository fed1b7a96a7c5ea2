"""
CSV export/import and ZIP backup formats.
"""

from .archive import (
    BACKUP_VERSION,
    SENSITIVE_SETTING_KEYS,
    BackupArchive,
    InvalidBackupError,
    RestoreResult,
    backup_filename,
    build_backup_zip,
    read_backup_zip,
)
from .csv_codec import (
    CATEGORY_HEADERS,
    ITEM_HEADERS,
    UNCATEGORIZED,
    CategoryRow,
    ItemRow,
    escape_csv,
    exportable_icon,
    generate_categories_csv,
    generate_items_csv,
    parse_categories_csv,
    parse_csv_line,
    parse_items_csv,
)

__all__ = [
    "BACKUP_VERSION",
    "CATEGORY_HEADERS",
    "ITEM_HEADERS",
    "SENSITIVE_SETTING_KEYS",
    "UNCATEGORIZED",
    "BackupArchive",
    "CategoryRow",
    "InvalidBackupError",
    "ItemRow",
    "RestoreResult",
    "backup_filename",
    "build_backup_zip",
    "escape_csv",
    "exportable_icon",
    "generate_categories_csv",
    "generate_items_csv",
    "parse_categories_csv",
    "parse_csv_line",
    "parse_items_csv",
    "read_backup_zip",
]
