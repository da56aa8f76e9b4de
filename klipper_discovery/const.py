DOMAIN = "klipper_discovery"

# Moonraker defaults
DEFAULT_MOONRAKER_HOST = "192.168.1.20"
DEFAULT_MOONRAKER_PORT = 7125
DEFAULT_PRINTER_NAME = "Discovery"
DEFAULT_CONNECTION_TIMEOUT = 5000  # ms
DEFAULT_WS_URL = "ws://localhost:7125"

# Network configuration service (wifi scan/connect)
NETWORK_API_BASE_URL = "http://discovery.local:8000"

# WS behaviour
HEARTBEAT_SEC = 10
MAX_RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY = 1.0  # seconds, multiplied by the attempt number

# JSON-RPC methods
METHOD_STATUS_UPDATE = "notify_status_update"
METHOD_SERVER_INFO = "server.info"

# Errors published on the connection status
ERR_CONNECTION_FAILED = "Connection failed"
ERR_CREATE_FAILED = "Failed to create WebSocket connection"
ERR_RETRIES_EXHAUSTED = "Unable to connect to Klipper"

# Environment variables read by load_config()
ENV_MOONRAKER_HOST = "MOONRAKER_HOST"
ENV_MOONRAKER_PORT = "MOONRAKER_PORT"
ENV_MOONRAKER_WS_URL = "MOONRAKER_WS_URL"
ENV_MOONRAKER_API_URL = "MOONRAKER_API_URL"
ENV_PRINTER_NAME = "PRINTER_NAME"
ENV_CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
