"""
CSV codec for bookmark, service and category exports.

The format is a plain comma separated file with a header row. Fields that
contain a comma, a quote or a newline are quoted and inner quotes doubled.
Favicon icons point at files on this server, so they are never exported; only
named icons survive a round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

ITEM_HEADERS = ["Name", "Description", "URL", "Icon", "Category", "Order", "Visible", "RequiresAuth"]
CATEGORY_HEADERS = ["Name", "Icon", "Color", "Order", "Collapsed", "ShowOpenAll"]

UNCATEGORIZED = "Uncategorized"


@dataclass
class ItemRow:
    """One bookmark or service line."""

    name: str
    url: str
    category_name: str = UNCATEGORIZED
    description: Optional[str] = None
    icon: Optional[str] = None
    order: int = 0
    is_visible: bool = True
    requires_auth: bool = False


@dataclass
class CategoryRow:
    """One category line."""

    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    order: int = 0
    is_collapsed: bool = False
    show_open_all: bool = False


def escape_csv(value: Optional[object]) -> str:
    """Render one field, quoting it when needed."""
    if value is None:
        return ""
    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def parse_csv_line(line: str) -> List[str]:
    """Split one line into trimmed fields, honouring quotes and ``""`` escapes."""
    values: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    values.append("".join(current).strip())
    return values


def exportable_icon(icon: Optional[str]) -> str:
    """Icon value safe to export: named icons only, never favicon paths."""
    if not icon:
        return ""
    if icon.startswith("selfhst:"):
        return icon
    if icon.startswith("favicon:") or icon.startswith("/"):
        return ""
    return icon


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _to_int(value: Optional[str]) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return 0


def _cell(values: List[str], index: int) -> str:
    return values[index] if index < len(values) else ""


def _data_lines(content: str) -> List[str]:
    lines = [line.strip() for line in content.replace("\r\n", "\n").split("\n")]
    lines = [line for line in lines if line and not line.startswith("#")]
    # first remaining line is the header
    return lines[1:]


def generate_items_csv(rows: Iterable[ItemRow]) -> str:
    lines = [",".join(ITEM_HEADERS)]
    for row in rows:
        lines.append(
            ",".join(
                [
                    escape_csv(row.name),
                    escape_csv(row.description),
                    escape_csv(row.url),
                    escape_csv(exportable_icon(row.icon)),
                    escape_csv(row.category_name),
                    str(row.order),
                    _flag(row.is_visible),
                    _flag(row.requires_auth),
                ]
            )
        )
    return "\n".join(lines)


def generate_categories_csv(rows: Iterable[CategoryRow]) -> str:
    lines = [",".join(CATEGORY_HEADERS)]
    for row in rows:
        lines.append(
            ",".join(
                [
                    escape_csv(row.name),
                    escape_csv(exportable_icon(row.icon)),
                    escape_csv(row.color),
                    str(row.order),
                    _flag(row.is_collapsed),
                    _flag(row.show_open_all),
                ]
            )
        )
    return "\n".join(lines)


def parse_items_csv(content: str) -> List[ItemRow]:
    """Parse a bookmark or service CSV export.

    Lines with fewer than five fields are skipped. A row without a name or URL
    is still returned; callers decide how to report it.

    Args:
        content: Whole file as text

    Returns:
        Parsed rows in file order
    """
    rows: List[ItemRow] = []
    for line in _data_lines(content):
        values = parse_csv_line(line)
        if len(values) < 5:
            continue
        rows.append(
            ItemRow(
                name=values[0],
                description=values[1] or None,
                url=values[2],
                icon=values[3] or None,
                category_name=values[4] or UNCATEGORIZED,
                order=_to_int(_cell(values, 5)),
                is_visible=_cell(values, 6).lower() != "false",
                requires_auth=_cell(values, 7).lower() == "true",
            )
        )
    return rows


def parse_categories_csv(content: str) -> List[CategoryRow]:
    rows: List[CategoryRow] = []
    for line in _data_lines(content):
        values = parse_csv_line(line)
        if not values[0]:
            continue
        rows.append(
            CategoryRow(
                name=values[0],
                icon=_cell(values, 1) or None,
                color=_cell(values, 2) or None,
                order=_to_int(_cell(values, 3)),
                is_collapsed=_cell(values, 4).lower() == "true",
                show_open_all=_cell(values, 5).lower() == "true",
            )
        )
    return rows
