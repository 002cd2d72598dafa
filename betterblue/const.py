"""Constants for the BetterBlue Hyundai/Kia client.

This module contains the vendor endpoints, client credentials baked into the
official mobile apps, and the tuning values used throughout the library.
"""

VERSION = "1.0.1"

HYUNDAI_BASE_URLS = {
    "US": "https://api.telematics.hyundaiusa.com",
    "CA": "https://mybluelink.ca",
    "EU": "https://prd.eu-ccapi.hyundai.com:8080",
    "AU": "https://au-apigw.ccs.hyundai.com.au:8080",
    "CN": "https://prd.cn-ccapi.hyundai.com",
    "IN": "https://prd.in-ccapi.hyundai.connected-car.io:8080",
}
KIA_BASE_URLS = {
    "US": "https://api.owners.kia.com",
    "CA": "https://kiaconnect.ca",
    "EU": "https://prd.eu-ccapi.kia.com:8080",
    "AU": "https://au-apigw.ccs.kia.com.au:8082",
    "CN": "https://prd.cn-ccapi.kia.com",
    "IN": "https://prd.in-ccapi.kia.connected-car.io:8080",
}
FAKE_BASE_URL = "https://fake.api.testing.com"

USER_AGENT_OKHTTP3 = "okhttp/3.12.0"
USER_AGENT_OKHTTP4 = "okhttp/4.10.0"

# Hyundai BlueLink (US and default regions)
HYUNDAI_US_CLIENT_ID = "m66129Bb-em93-SPAHYN-bZ91-am4540zp19920"
HYUNDAI_US_CLIENT_SECRET = "v558o935-6nne-423i-baa8"
HYUNDAI_DEFAULT_CLIENT_ID = "m0na2res08hlm125puuhqzpv"
HYUNDAI_DEFAULT_CLIENT_SECRET = "PPaX5NpW4Dqono3oNoz9K5mZbK9RG5u2"
HYUNDAI_US_HOST = "api.telematics.hyundaiusa.com"

# Kia Connect (US and default regions)
KIA_APP_VERSION = "7.15.2"
KIA_CLIENT_ID = "MWAMOBILE"
KIA_SECRET_KEY = "98er-w34rf-ibf3-3f6h"
KIA_SESSION_LIFETIME = 3600

# Hyundai Europe (CCAPI)
EU_BASE_DOMAIN = "prd.eu-ccapi.hyundai.com"
EU_PORT = 8080
EU_CCSP_SERVICE_ID = "6d477c38-3ca4-4cf3-9557-2a1929a94654"
EU_CCS_SERVICE_SECRET = "KUy49XxPzLpLuoK0xhBC77W6VXhmtQR9iQhmIFjjoY4IpxsV"
EU_APP_ID = "014d2225-8495-4735-812d-2616334fd15d"
EU_CFB_BASE64 = "RFtoRq/vDXJmRndoZaZQyfOot7OrIqGVFj96iY2WL3yyH5Z/pUvlUhqmCxD2t+D65SQ="
EU_LOGIN_HOST = "https://idpconnect-eu.hyundai.com"
EU_COMMAND_SUCCESS_CODE = "0000"
EU_CHARGE_LIMIT_SUCCESS = "S"

# Token lifecycle
AUTH_TOKEN_SAFETY_MARGIN = 300

# Command polling
DEFAULT_POLL_ATTEMPTS = 15
DEFAULT_POLL_INTERVAL = 2.0
POLL_RESULT_SUCCESS = "success"
POLL_RESULTS_FAILED = ("fail", "non-response")

# Charge limit bounds (percent)
CHARGE_LIMIT_MIN = 50
CHARGE_LIMIT_MAX = 100

# HTTP
HTTP_TIMEOUT = 10.0
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_OK = 200
HTTP_BAD_GATEWAY = 502

# Vendor error codes
ERROR_CODE_INVALID_VEHICLE_SESSION = 1005
ERROR_CODE_INVALID_CREDENTIALS = 401
ERROR_CODE_SERVER = 502
KIA_ERROR_CODES_VEHICLE_SESSION = (1005, 1103)
KIA_ERROR_CODE_SESSION_KEY = 1003

# Environment configuration keys
CONF_REGION = "region"
CONF_BRAND = "brand"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_PIN = "pin"
CONF_ACCOUNT_ID = "account_id"
CONF_DEBUG = "debug"
ENV_PREFIX = "BLUELINK_"

# Redaction placeholders
REDACTED = "[REDACTED]"
LOCATION_REDACTED = "[LOCATION_REDACTED]"
