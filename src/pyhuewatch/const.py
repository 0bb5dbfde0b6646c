"""Constants for pyhuewatch."""

# Connection defaults (the bridge simulator listens on localhost:8080)
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

# Name sent to the bridge while requesting a username
DEFAULT_DEVICE_NAME = "my device"
# Application part of the Hue "devicetype" field: "<app>#<device>"
DEVICE_TYPE_PREFIX = "pyhuewatch"

# Seconds between two polls. Hue recommends no more than ~10 requests per
# second, a fixed one second wait keeps small installs well below that.
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_REQUEST_TIMEOUT = 10

# Raw brightness reported by the bridge is 1-254
BRIGHTNESS_RAW_MAX = 254
BRIGHTNESS_PERCENT_MAX = 100

# Hue error type returned while the link button has not been pressed
ERROR_LINK_BUTTON_NOT_PRESSED = 101

# API Endpoints
PAIR_ENDPOINT = "/api"
LIGHTS_ENDPOINT = "/api/{username}/lights"
LIGHT_ENDPOINT = "/api/{username}/lights/{light_id}"
