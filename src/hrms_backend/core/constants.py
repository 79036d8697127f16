"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CONNECTION_TIMEOUT_SECONDS = 10
DEFAULT_STATEMENT_TIMEOUT_MS = 5000

TOTAL_HOURS_PRECISION = 2

# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062

SESSION_USER_KEY = "user_id"
