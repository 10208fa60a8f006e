"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Policy values (windows, grace, rates) are NOT constants: they live in
``policy.model`` and are threaded through every call.
"""

DEFAULT_REFERENCE_TIMEZONE = "Asia/Manila"
DEFAULT_HISTORY_LIMIT = 31
DEFAULT_IMPORT_CHUNK_SIZE = 500
DEFAULT_PAYROLL_WORKERS = 4
DEFAULT_IMPORT_HISTORY_LIMIT = 20

CURRENCY_QUANT = "0.01"
HOURS_PRECISION = 2
