"""
Favicon pipeline: multi-source fetching, format sniffing, PNG normalisation,
colour variants and orphan cleanup.
"""

from .converter import (
    THEME_COLORS,
    ConversionResult,
    convert_to_grayscale,
    convert_to_monotone,
    convert_to_png,
    invert_colors,
    is_readable_image,
    parse_color,
    tint_favicon,
)
from .fetcher import FaviconResult, build_favicon_sources, domain_of, fetch_and_save_favicon
from .formats import detect_format
from .storage import (
    FaviconStats,
    PruneResult,
    StoredFile,
    base_name,
    content_type_for,
    favicon_dir,
    favicon_stats,
    filename_from_reference,
    find_source_file,
    format_bytes,
    is_safe_filename,
    prune_orphan_favicons,
    serve_path,
)

__all__ = [
    "THEME_COLORS",
    "ConversionResult",
    "FaviconResult",
    "FaviconStats",
    "PruneResult",
    "StoredFile",
    "base_name",
    "build_favicon_sources",
    "content_type_for",
    "convert_to_grayscale",
    "convert_to_monotone",
    "convert_to_png",
    "detect_format",
    "domain_of",
    "favicon_dir",
    "favicon_stats",
    "fetch_and_save_favicon",
    "filename_from_reference",
    "find_source_file",
    "format_bytes",
    "invert_colors",
    "is_readable_image",
    "is_safe_filename",
    "parse_color",
    "prune_orphan_favicons",
    "serve_path",
    "tint_favicon",
]
