"""Application constants."""

USER_AGENT = "DeereDealersMap/1.0"
DEFAULT_PROVIDER_BASE_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_COUNTRY = "USA"
DEFAULT_POSTAL_CODE_FIELD = "zip"
DEFAULT_REQUEST_DELAY_MS = 1000
DEFAULT_SAVE_INTERVAL_COUNT = 10
COORDINATES_FIELD = "coordinates"
STAGE = "geocode"
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 1
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "postal_code",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "completed",
    "total",
    "error_code",
    "message",
)
