"""Constants for the UniFi Block Clients integration."""

DOMAIN = "unifi_block_clients"

# Configuration Keys
CONF_CONTROLLER_URL = "controller_url"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_SITE_NAME = "site_name"
CONF_CLIENTS = "clients"
CONF_POLLING_FREQUENCY = "polling_frequency"
CONF_VERIFY_SSL = "verify_ssl"
CONF_DEBUG_LOGGING = "debug_logging"

REQUIRED_CONFIG = (CONF_USERNAME, CONF_PASSWORD, CONF_CONTROLLER_URL)

# Defaults
DEFAULT_NAME = "UniFi Block Clients"
DEFAULT_SITE_NAME = "default"
DEFAULT_POLLING_FREQUENCY = 5000  # ms
MIN_POLLING_FREQUENCY = 1000  # ms
DEFAULT_VERIFY_SSL = False
DEFAULT_DEBUG_LOGGING = False

# Controller API
API_LOGIN = "/api/login"
API_KNOWN_CLIENTS = "/api/s/{site}/rest/user"
API_CLIENT = "/api/s/{site}/rest/user/{record_id}"
API_STATION_MANAGER = "/api/s/{site}/cmd/stamgr"
CMD_BLOCK = "block-sta"
CMD_UNBLOCK = "unblock-sta"
REQUEST_TIMEOUT_SECONDS = 10

# Storage
STORAGE_KEY = f"{DOMAIN}.entities"
STORAGE_VERSION = 1

# Dispatcher
SIGNAL_UPDATE = f"{DOMAIN}_update"

# Services
SERVICE_REFRESH_CLIENTS = "refresh_clients"
SERVICE_SET_REACHABILITY = "set_reachability"
ATTR_REACHABLE = "reachable"

# Entity attributes
ATTR_CLIENT_MAC = "client_mac"
ATTR_CONTROLLER_RECORD_ID = "controller_record_id"

MANUFACTURER = "Ubiquiti"
