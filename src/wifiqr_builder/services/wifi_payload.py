"""Wi-Fi payload helpers and credential model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wifiqr_builder.constants import (
    MAX_PASSWORD_BYTES,
    MAX_SSID_BYTES,
    SECURITY_ALIASES,
    WIFI_PAYLOAD_PREFIX,
    WIFI_RESERVED_CHARS,
)
from wifiqr_builder.errors import InvalidCredentials, MalformedPayload


def normalize_security(value: str) -> str:
    """Normalize security labels into canonical forms."""
    key = value.upper().strip()
    return SECURITY_ALIASES.get(key, key)


def is_open_security(value: str) -> bool:
    """Return True when the security represents an open network."""
    return normalize_security(value) == "NOPASS"


class SecurityType(Enum):
    WPA = "WPA"
    WEP = "WEP"
    OPEN = "OPEN"

    @property
    def qr_token(self) -> str:
        """Value written after ``T:``; empty for open networks."""
        return "" if self is SecurityType.OPEN else self.value

    @classmethod
    def parse(cls, value: str | SecurityType) -> SecurityType:
        """Map a user-facing security label to a security type."""
        if isinstance(value, SecurityType):
            return value
        if is_open_security(value):
            return cls.OPEN
        try:
            return cls(normalize_security(value))
        except ValueError as exc:
            raise InvalidCredentials(f"Unsupported security type: {value!r}") from exc


@dataclass(frozen=True)
class Credentials:
    ssid: str
    password: str | None = None
    security: SecurityType = SecurityType.WPA
    hidden: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "security", SecurityType.parse(self.security))
        if self.security is SecurityType.OPEN and self.password == "":
            object.__setattr__(self, "password", None)


def escape(value: str) -> str:
    """Escape payload delimiters for QR-encoded Wi-Fi strings."""
    for char in WIFI_RESERVED_CHARS:
        value = value.replace(char, "\\" + char)
    return value


def unescape(value: str) -> str:
    """Reverse :func:`escape`."""
    chars: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\":
            if index + 1 >= len(value):
                raise MalformedPayload("Dangling escape character at end of value.")
            chars.append(value[index + 1])
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)


def validate_credentials(credentials: Credentials) -> None:
    """Raise InvalidCredentials when the credentials cannot be encoded."""
    ssid_bytes = len(credentials.ssid.encode("utf-8"))
    if ssid_bytes == 0:
        raise InvalidCredentials("SSID is required.")
    if ssid_bytes > MAX_SSID_BYTES:
        raise InvalidCredentials(
            f"SSID is {ssid_bytes} bytes; the limit is {MAX_SSID_BYTES}."
        )

    password = credentials.password
    if credentials.security is SecurityType.OPEN:
        if password:
            raise InvalidCredentials("Open networks do not take a password.")
        return

    if not password:
        raise InvalidCredentials(
            f"Password is required for {credentials.security.value} networks."
        )
    password_bytes = len(password.encode("utf-8"))
    if password_bytes > MAX_PASSWORD_BYTES:
        raise InvalidCredentials(
            f"Password is {password_bytes} bytes; the limit is {MAX_PASSWORD_BYTES}."
        )


def build_wifi_payload(credentials: Credentials) -> str:
    """Build a Wi-Fi QR payload string from credentials."""
    validate_credentials(credentials)
    ssid = escape(credentials.ssid)
    security = credentials.security.qr_token
    hidden = "true" if credentials.hidden else "false"

    if credentials.security is SecurityType.OPEN:
        return f"{WIFI_PAYLOAD_PREFIX}T:{security};S:{ssid};H:{hidden};;"

    password = escape(credentials.password or "")
    return f"{WIFI_PAYLOAD_PREFIX}T:{security};S:{ssid};P:{password};H:{hidden};;"


def _split_fields(body: str) -> list[str]:
    """Split on unescaped semicolons, keeping escapes intact."""
    fields: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\":
            if index + 1 >= len(body):
                raise MalformedPayload("Dangling escape character at end of payload.")
            current.append(body[index : index + 2])
            index += 2
            continue
        if char == ";":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1

    if current:
        raise MalformedPayload("Payload must end with ';;'.")
    if not fields or fields[-1] != "":
        raise MalformedPayload("Payload must end with ';;'.")
    return [field for field in fields if field]


def parse_wifi_payload(payload: str) -> Credentials:
    """Parse a ``WIFI:`` payload back into credentials."""
    if not payload.startswith(WIFI_PAYLOAD_PREFIX):
        raise MalformedPayload(f"Payload must start with {WIFI_PAYLOAD_PREFIX!r}.")

    values: dict[str, str] = {}
    for field in _split_fields(payload[len(WIFI_PAYLOAD_PREFIX) :]):
        key, sep, raw = field.partition(":")
        if not sep or not key or "\\" in key:
            raise MalformedPayload(f"Malformed field: {field!r}")
        key = key.upper()
        if key in values:
            raise MalformedPayload(f"Duplicate field: {key}")
        values[key] = unescape(raw)

    if "S" not in values:
        raise MalformedPayload("Payload has no SSID field.")

    hidden_flag = values.get("H", "false").lower()
    if hidden_flag not in ("true", "false"):
        raise MalformedPayload(f"Hidden flag must be true or false, got {hidden_flag!r}.")

    credentials = Credentials(
        ssid=values["S"],
        password=values.get("P"),
        security=SecurityType.parse(values.get("T", "")),
        hidden=hidden_flag == "true",
    )
    validate_credentials(credentials)
    return credentials
