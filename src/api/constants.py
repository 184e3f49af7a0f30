"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"

# Request handling
UNKNOWN_CLIENT = "unknown"
MAX_USER_AGENT_LENGTH = 200

# Credit routes
CREDITS_PATH = "/creditos"
