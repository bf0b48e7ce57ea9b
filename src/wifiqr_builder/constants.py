"""Application-wide constants."""

from __future__ import annotations

# QR Code Generation Defaults
DEFAULT_ERROR_CORRECTION = "M"
DEFAULT_QR_SIZE = 640
DEFAULT_QR_BOX_SIZE = 10
DEFAULT_QR_BORDER = 4
DEFAULT_QR_FILL_COLOR = "#111827"
DEFAULT_QR_BACKGROUND_COLOR = "white"
DEFAULT_SVG_SCALE = 10

# Runs shorter than this stay inside the surrounding byte segment
DEFAULT_SEGMENT_MIN_RUN = 20

# Credential limits (UTF-8 bytes)
MAX_SSID_BYTES = 32
MAX_PASSWORD_BYTES = 63

# Wi-Fi payload layout
WIFI_PAYLOAD_PREFIX = "WIFI:"
WIFI_RESERVED_CHARS = ("\\", ";", ",", '"', ":")

# Security Label Normalization
SECURITY_ALIASES = {
    "WPA/WPA2/WPA3": "WPA",
    "WPA/WPA2": "WPA",
    "WPA2": "WPA",
    "WPA3": "WPA",
    "SAE": "WPA",
    "OPEN": "NOPASS",
    "NONE": "NOPASS",
    "NO PASSWORD": "NOPASS",
    "": "NOPASS",
}
