"""Constants for lstn CLI."""

# Default listen.dev endpoints
DEFAULT_NPM_ENDPOINT = "https://npm.listen.dev"
DEFAULT_PYPI_ENDPOINT = "https://pypi.listen.dev"
DEFAULT_CORE_ENDPOINT = "https://core.listen.dev"
DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org"

# Seconds
DEFAULT_TIMEOUT = 60
MIN_TIMEOUT = 30
NPM_VERSION_TIMEOUT = 20
GIT_TIMEOUT = 10
MONITOR_TIMEOUT = 120

ENV_PREFIX = "LSTN"

# Searched in order, relative to the working directory, then the home directory
CONFIG_FILE_NAMES = (
    ".listendev.yaml",
    ".listendev.yml",
    ".listendev/config.yaml",
    ".listendev/config.yml",
)
HOME_CONFIG_FILE_NAME = ".lstn.yaml"

STICKY_COMMENT_MARKER = "<!--@lstn-sticky-review-comment-->"

GITHUB_API_URL = "https://api.github.com"
CHANGELOG_BASE_URL = "https://github.com/listendev/lstn"

# Runtime monitor
MONITOR_BINARY = "jibril"
MONITOR_CONFIG_PATH = "/etc/jibril/config.yaml"
MONITOR_NETPOLICY_PATH = "/etc/jibril/netpolicy.yaml"
MONITOR_ENV_PATH = "/var/run/jibril/default"
MONITOR_LOCAL_DIR = "jibril"
MONITOR_DIR_MODE = 0o750
MONITOR_FILE_MODE = 0o640

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCEL = 2
EXIT_AUTH = 4
EXIT_JQ_HALT = 5
