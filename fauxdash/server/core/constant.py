"""
Server-wide constants.
"""

PROJECT_NAME = "Faux|Dash"
VERSION = "0.1.0"
SCHEMA_VERSION = "v1"

API_V1_STR = "/api/v1"

# Session keys
SESSION_USER_KEY = "user_id"
SESSION_EXPIRES_KEY = "expires_at"

# Remember-me bounds, in days
MIN_REMEMBER_DAYS = 1
MAX_REMEMBER_DAYS = 30
