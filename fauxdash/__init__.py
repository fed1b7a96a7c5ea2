"""
FauxDash: a self-hosted start page server.

Bookmarks and self-hosted services grouped into categories, appearance
settings, and privacy-preserving click and visit analytics.
"""

__version__ = "0.1.0"
