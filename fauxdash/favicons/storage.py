"""
Favicon file storage.

Every fetched favicon is saved twice: ``<base>_original.png`` is kept untouched
as the source for later colour variants, ``<base>.png`` is the active copy.
Variants append a suffix to the shared base name, which is how orphan pruning
ties files back to the bookmark or service that references them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from fauxdash.core.logging_config import get_logger

logger = get_logger(__name__)

SERVE_PREFIX = "/api/v1/favicons/serve/"
ICON_PREFIX = "favicon:"

SAFE_FILENAME = re.compile(r"^[A-Za-z0-9_.\-]+$")

CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "svg": "image/svg+xml",
    "gif": "image/gif",
    "webp": "image/webp",
}

_VARIANT_SUFFIXES = (
    re.compile(r"_themed_[^.]+\.png$"),
    re.compile(r"_grayscale_(?:black|white)\.png$"),
    re.compile(r"_monotone_(?:black|white)\.png$"),
    re.compile(r"_monotone$"),
    re.compile(r"_inverted\.png$"),
    re.compile(r"_original\.png$"),
    re.compile(r"\.png$"),
)


def favicon_dir(directory: Optional[str] = None) -> Path:
    """Resolve the favicon directory, creating it when missing."""
    if directory is None:
        from fauxdash.server.core.config import settings

        directory = settings.favicons.directory
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def is_safe_filename(filename: str) -> bool:
    return bool(filename) and bool(SAFE_FILENAME.match(filename)) and ".." not in filename


def content_type_for(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return CONTENT_TYPES.get(ext, "image/x-icon")


def serve_path(filename: str) -> str:
    return f"{SERVE_PREFIX}{filename}"


def filename_from_reference(reference: str) -> str:
    """Extract the bare file name from an icon reference.

    Accepts ``favicon:/api/v1/favicons/serve/x.png``, ``/api/v1/favicons/serve/x.png``
    or a plain ``x.png``. Older ``/api/favicons/serve/`` paths are understood too.
    """
    value = reference[len(ICON_PREFIX):] if reference.startswith(ICON_PREFIX) else reference
    for prefix in (SERVE_PREFIX, "/api/favicons/serve/"):
        if value.startswith(prefix):
            return value[len(prefix):]
    return value


def base_name(filename: str) -> str:
    """Strip variant suffixes so every file of one favicon maps to one name."""
    name = filename
    for pattern in _VARIANT_SUFFIXES:
        name = pattern.sub("", name)
    return name


def find_source_file(filename: str, directory: Path) -> Optional[Path]:
    """Best source for a new variant: the original copy, then the base file, then the file itself."""
    stem = base_name(filename)
    for candidate in (f"{stem}_original.png", f"{stem}.png", filename):
        path = directory / candidate
        if path.is_file():
            return path
    return None


def format_bytes(size: int) -> str:
    """Human readable size: bytes, KB or MB with two decimals."""
    if size > 1024 * 1024:
        return f"{size / (1024 * 1024):.2f} MB"
    if size > 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size} bytes"


@dataclass
class PruneResult:
    total_files: int
    removed: int
    bytes_freed: int

    @property
    def space_freed(self) -> str:
        return format_bytes(self.bytes_freed)


def prune_orphan_favicons(icons: Iterable[Optional[str]], directory: Path) -> PruneResult:
    """Delete favicon files that no icon reference points at.

    Args:
        icons: Icon values of every bookmark and service
        directory: Favicon directory

    Returns:
        PruneResult with counts and bytes freed
    """
    referenced = {
        base_name(filename_from_reference(icon))
        for icon in icons
        if icon and icon.startswith(ICON_PREFIX)
    }

    files = sorted(path for path in directory.glob("*.png") if path.is_file())
    removed = 0
    freed = 0
    for path in files:
        if base_name(path.name) in referenced:
            continue
        try:
            size = path.stat().st_size
            path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove orphan favicon {path.name}: {e}")
            continue
        removed += 1
        freed += size

    logger.info(f"Pruned {removed} of {len(files)} favicon files, freed {format_bytes(freed)}")
    return PruneResult(total_files=len(files), removed=removed, bytes_freed=freed)


MODIFIED_MARKERS = ("_themed", "_monotone", "_inverted", "_black", "_white")

STAT_GROUPS = (
    ("Original (Downloaded)", lambda name: not any(marker in name for marker in MODIFIED_MARKERS)),
    ("Theme Colored", lambda name: "_themed" in name),
    ("Monotone", lambda name: any(marker in name for marker in ("_monotone", "_black", "_white"))),
    ("Inverted", lambda name: "_inverted" in name),
)


@dataclass
class StoredFile:
    name: str
    size: int
    modified: datetime


@dataclass
class FaviconStats:
    """Disk usage of the favicon directory, split into originals and variants."""

    files: List[StoredFile] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)

    def _matching(self, predicate) -> List[StoredFile]:
        return [f for f in self.files if predicate(f.name)]

    def to_dict(self, recent: int = 5) -> Dict[str, Any]:
        originals = self._matching(STAT_GROUPS[0][1])
        original_names = {f.name for f in originals}
        modified = [f for f in self.files if f.name not in original_names]
        breakdown = []
        for label, predicate in STAT_GROUPS:
            group = self._matching(predicate)
            if group:
                size = sum(f.size for f in group)
                breakdown.append(
                    {"type": label, "count": len(group), "size": size, "size_formatted": format_bytes(size)}
                )
        newest = sorted(self.files, key=lambda f: f.modified, reverse=True)[:recent]
        return {
            "total_files": len(self.files),
            "total_size": self.total_size,
            "total_size_formatted": format_bytes(self.total_size),
            "original_count": len(originals),
            "original_size": sum(f.size for f in originals),
            "modified_count": len(modified),
            "modified_size": sum(f.size for f in modified),
            "breakdown": breakdown,
            "recent_files": [{"name": f.name, "size": f.size, "modified": f.modified} for f in newest],
        }


def favicon_stats(directory: Path) -> FaviconStats:
    """Collect name, size and modification time of every visible file in ``directory``."""
    if not directory.is_dir():
        return FaviconStats()
    files = []
    for path in directory.iterdir():
        if path.name.startswith(".") or not path.is_file():
            continue
        stat = path.stat()
        files.append(
            StoredFile(
                name=path.name,
                size=stat.st_size,
                modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).replace(tzinfo=None),
            )
        )
    return FaviconStats(files=files)
