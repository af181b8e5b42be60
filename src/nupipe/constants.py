"""Constants for nupipe."""

STATE_DIR = ".nupipe"
CONFIG_FILE = "config.toml"

# Subprocess timeouts (seconds)
GIT_TIMEOUT = 120
PACK_TIMEOUT = 600
PUSH_TIMEOUT = 300

DEFAULT_QUIET_PERIOD = 120  # seconds of silence before a triggered build starts
DEFAULT_POLL_INTERVAL = 30

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_VERSION = 2
EXIT_PACKAGING_FAILED = 3
EXIT_PUBLISH_FAILED = 4
EXIT_CONCURRENCY_VIOLATION = 5
EXIT_NO_SOURCE_RUN = 6

FEED_ENDPOINTS_ENV = "VSS_NUGET_EXTERNAL_FEED_ENDPOINTS"
