"""Error types raised by the Wi-Fi QR pipeline."""

from __future__ import annotations


class WifiQrError(Exception):
    """Base class for every error raised by the encoder."""


class InvalidCredentials(WifiQrError, ValueError):
    """SSID, password or security type cannot form a Wi-Fi payload."""


class MalformedPayload(WifiQrError, ValueError):
    """Text is not a parseable ``WIFI:`` payload."""


class PayloadTooLarge(WifiQrError, ValueError):
    """No QR version can hold the data at the requested error-correction level."""

    def __init__(self, bit_length: int, ec_level: str) -> None:
        super().__init__(
            f"Data needs {bit_length} bits and does not fit any QR version "
            f"at error correction level {ec_level}"
        )
        self.bit_length = bit_length
        self.ec_level = ec_level


class InternalAssemblyInvariantViolation(WifiQrError, RuntimeError):
    """The assembled matrix is inconsistent. Always a programming error."""
