"""Constants shared across the VeSync Ultimate client."""

from __future__ import annotations

API_BASE_URL = "https://smartapi.vesync.com"
API_TIMEOUT = 5.0

APP_VERSION = "2.8.6"
PHONE_BRAND = "SM N9005"
PHONE_OS = "Android"
MOBILE_ID = "1234567890123456"
USER_TYPE = "1"
BYPASS_USER_AGENT = "okhttp/3.12.1"
BYPASS_CONTENT_TYPE = "application/json; charset=UTF-8"

DEFAULT_TIME_ZONE = "America/New_York"
DEFAULT_REGION = "US"
DEFAULT_LANGUAGE = "en"

DEFAULT_RECONCILE_DELAY = 1.0
DEFAULT_UPDATE_INTERVAL = 30.0
DEFAULT_LOGIN_ATTEMPTS = 3

LOGIN_PATH = "/cloud/v1/user/login"
DEVICE_LIST_PATH = "/cloud/v2/deviceManaged/devices"
BYPASS_V2_PATH = "/cloud/v2/deviceManaged/bypassV2"
LEGACY_PATH_PREFIX = "/131airPurifier/v1/device"

# Vendor result codes.
CODE_SUCCESS = 0
CODE_FEATURE_NOT_SUPPORTED = 11000000
CODE_NOT_SUPPORTED_IN_MODE = 11018000

CREDENTIAL_ERROR_CODES = frozenset({-11201129, -11202129, -11000129})
CROSS_REGION_ERROR_CODES = frozenset({-11260022, -11261022})
TOKEN_ERROR_CODES = frozenset({-11001000})
APP_VERSION_ERROR_CODES = frozenset({-11012022})
FATAL_LOGIN_ERROR_CODES = (
    CREDENTIAL_ERROR_CODES
    | CROSS_REGION_ERROR_CODES
    | TOKEN_ERROR_CODES
    | APP_VERSION_ERROR_CODES
)

# A fan speed of 255 is reported while no manual level is active.
NO_LEVEL_SENTINEL = 255

TARGET_HUMIDITY_MIN = 30
TARGET_HUMIDITY_MAX = 80
BRIGHTNESS_MIN = 0
BRIGHTNESS_MAX = 100
DEFAULT_ROOM_SIZE = 600
