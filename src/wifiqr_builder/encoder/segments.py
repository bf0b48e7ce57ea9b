"""Mode selection and bit packing of QR data segments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

from wifiqr_builder.constants import DEFAULT_SEGMENT_MIN_RUN
from wifiqr_builder.encoder.tables import (
    ALPHANUMERIC_CHARSET,
    MAX_VERSION,
    MIN_VERSION,
    PAD_CODEWORDS,
    ErrorCorrectionLevel,
    data_capacity_bits,
    version_range_index,
)
from wifiqr_builder.errors import PayloadTooLarge

NUMERIC_CHARSET = "0123456789"

_ALPHANUMERIC_VALUES = {char: index for index, char in enumerate(ALPHANUMERIC_CHARSET)}


class Mode(Enum):
    """Segment mode: 4-bit indicator plus count widths per version range."""

    NUMERIC = (0b0001, (10, 12, 14))
    ALPHANUMERIC = (0b0010, (9, 11, 13))
    BYTE = (0b0100, (8, 16, 16))

    @property
    def indicator(self) -> int:
        return self.value[0]

    def count_bits(self, version: int) -> int:
        return self.value[1][version_range_index(version)]


class BitBuffer:
    def __init__(self) -> None:
        self.bits: List[int] = []

    def __len__(self) -> int:
        return len(self.bits)

    def append_bits(self, value: int, length: int) -> None:
        if length < 0 or value >> length:
            raise ValueError(f"Value {value} does not fit in {length} bits")
        for i in reversed(range(length)):
            self.bits.append((value >> i) & 1)

    def extend(self, bits: Iterable[int]) -> None:
        self.bits.extend(bits)

    def to_bytes(self) -> bytes:
        if len(self.bits) % 8:
            raise ValueError("Bit buffer is not byte aligned")
        out = bytearray()
        for i in range(0, len(self.bits), 8):
            chunk = 0
            for bit in self.bits[i : i + 8]:
                chunk = (chunk << 1) | bit
            out.append(chunk)
        return bytes(out)


@dataclass(frozen=True)
class Segment:
    mode: Mode
    char_count: int
    data: tuple[int, ...]

    def bit_length(self, version: int) -> int | None:
        """Header plus data bits, or None when the count overflows its field."""
        count_bits = self.mode.count_bits(version)
        if self.char_count >> count_bits:
            return None
        return 4 + count_bits + len(self.data)


def make_numeric(text: str) -> Segment:
    """Pack digits three at a time into 10, 7 or 4 bits."""
    if any(char not in NUMERIC_CHARSET for char in text):
        raise ValueError("Numeric segments take only digits")
    bb = BitBuffer()
    for i in range(0, len(text), 3):
        chunk = text[i : i + 3]
        bb.append_bits(int(chunk), len(chunk) * 3 + 1)
    return Segment(Mode.NUMERIC, len(text), tuple(bb.bits))


def make_alphanumeric(text: str) -> Segment:
    """Pack character pairs into 11 bits, a trailing single into 6."""
    if any(char not in _ALPHANUMERIC_VALUES for char in text):
        raise ValueError("Alphanumeric segments take only 0-9, A-Z, space and $%*+-./:")
    bb = BitBuffer()
    for i in range(0, len(text) - 1, 2):
        value = _ALPHANUMERIC_VALUES[text[i]] * 45 + _ALPHANUMERIC_VALUES[text[i + 1]]
        bb.append_bits(value, 11)
    if len(text) % 2:
        bb.append_bits(_ALPHANUMERIC_VALUES[text[-1]], 6)
    return Segment(Mode.ALPHANUMERIC, len(text), tuple(bb.bits))


def make_bytes(data: bytes) -> Segment:
    bb = BitBuffer()
    for byte in data:
        bb.append_bits(byte, 8)
    return Segment(Mode.BYTE, len(data), tuple(bb.bits))


def _charset_pattern(charset: str, min_run: int) -> re.Pattern[str]:
    return re.compile(f"[{re.escape(charset)}]{{{min_run},}}")


def _split_runs(text: str, pattern: re.Pattern[str]) -> List[tuple[bool, str]]:
    """Split ``text`` into ``(matched, chunk)`` pairs in order."""
    chunks: List[tuple[bool, str]] = []
    position = 0
    for match in pattern.finditer(text):
        if match.start() > position:
            chunks.append((False, text[position : match.start()]))
        chunks.append((True, match.group()))
        position = match.end()
    if position < len(text):
        chunks.append((False, text[position:]))
    return chunks


def segment(payload: str, min_run: int = DEFAULT_SEGMENT_MIN_RUN) -> tuple[Segment, ...]:
    """Split ``payload`` into mode segments.

    A payload made only of digits or only of alphanumeric characters is a single
    segment in that mode. Otherwise runs of at least ``min_run`` digits become
    numeric segments, runs of at least ``min_run`` alphanumeric characters in
    the rest become alphanumeric segments, and everything else is UTF-8 bytes.
    """
    if min_run < 1:
        raise ValueError("min_run must be at least 1")
    if not payload:
        return ()
    if all(char in NUMERIC_CHARSET for char in payload):
        return (make_numeric(payload),)
    if all(char in _ALPHANUMERIC_VALUES for char in payload):
        return (make_alphanumeric(payload),)

    numeric_runs = _charset_pattern(NUMERIC_CHARSET, min_run)
    alnum_runs = _charset_pattern(ALPHANUMERIC_CHARSET, min_run)
    segments: List[Segment] = []
    for is_numeric, chunk in _split_runs(payload, numeric_runs):
        if is_numeric:
            segments.append(make_numeric(chunk))
            continue
        for is_alnum, sub_chunk in _split_runs(chunk, alnum_runs):
            if is_alnum:
                segments.append(make_alphanumeric(sub_chunk))
            else:
                segments.append(make_bytes(sub_chunk.encode("utf-8")))
    return tuple(segments)


def total_bit_length(segments: Sequence[Segment], version: int) -> int | None:
    total = 0
    for seg in segments:
        length = seg.bit_length(version)
        if length is None:
            return None
        total += length
    return total


def fit_version(
    segments: Sequence[Segment],
    ec_level: ErrorCorrectionLevel,
    boost_error: bool = False,
) -> tuple[int, ErrorCorrectionLevel]:
    """Return the smallest version that holds ``segments`` and the level to use.

    With ``boost_error`` the level is raised while the data still fits the
    chosen version.
    """
    for version in range(MIN_VERSION, MAX_VERSION + 1):
        used_bits = total_bit_length(segments, version)
        if used_bits is not None and used_bits <= data_capacity_bits(version, ec_level):
            break
    else:
        largest = total_bit_length(segments, MAX_VERSION)
        if largest is None:
            largest = sum(len(seg.data) for seg in segments)
        raise PayloadTooLarge(largest, ec_level.name)

    if boost_error:
        for level in ErrorCorrectionLevel:
            if level.ordinal > ec_level.ordinal and used_bits <= data_capacity_bits(version, level):
                ec_level = level
    return version, ec_level


def encode_data_codewords(
    segments: Sequence[Segment], version: int, ec_level: ErrorCorrectionLevel
) -> bytes:
    """Build the full data codeword sequence for ``version`` and ``ec_level``."""
    capacity = data_capacity_bits(version, ec_level)
    bb = BitBuffer()
    for seg in segments:
        count_bits = seg.mode.count_bits(version)
        bb.append_bits(seg.mode.indicator, 4)
        bb.append_bits(seg.char_count, count_bits)
        bb.extend(seg.data)
    if len(bb) > capacity:
        raise PayloadTooLarge(len(bb), ec_level.name)

    bb.append_bits(0, min(4, capacity - len(bb)))
    bb.append_bits(0, -len(bb) % 8)
    codewords = bytearray(bb.to_bytes())
    for index in range(capacity // 8 - len(codewords)):
        codewords.append(PAD_CODEWORDS[index % 2])
    return bytes(codewords)
