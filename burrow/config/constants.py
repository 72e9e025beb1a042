"""Constants for the configuration module."""

# Default config file location
DEFAULT_CONFIG_PATH = "/etc/burrow/config.yaml"

# Environment variable overriding the config path
CONFIG_PATH_ENV_VAR = "BURROW_CONFIG"

# Log component name
COMPONENT_CONFIG = "config"

# Header image query when no topic is available
DEFAULT_UNSPLASH_QUERY = "nature"

# Raw-file keys touched by the edition counter
EDITION_KEY = "edition:"
SCHEDULE_KEY = "schedule:"
