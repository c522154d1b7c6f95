# app/core/config.py
import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./service_booking.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Reviews
RATING_MIN = 1
RATING_MAX = 5
REVIEW_COMMENT_MAX_LENGTH = 500

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
