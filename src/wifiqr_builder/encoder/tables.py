"""Static QR Code tables (ISO/IEC 18004, model 2)."""

from __future__ import annotations

from enum import Enum

MIN_VERSION = 1
MAX_VERSION = 40

# Version ranges sharing one set of character count indicator widths
VERSION_RANGES = ((1, 9), (10, 26), (27, 40))

FORMAT_GENERATOR = 0x537
FORMAT_MASK = 0x5412
VERSION_GENERATOR = 0x1F25

PAD_CODEWORDS = (0xEC, 0x11)

ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"


class ErrorCorrectionLevel(Enum):
    """Error correction level with its table ordinal and format indicator."""

    L = (0, 0b01)
    M = (1, 0b00)
    Q = (2, 0b11)
    H = (3, 0b10)

    @property
    def ordinal(self) -> int:
        return self.value[0]

    @property
    def format_bits(self) -> int:
        return self.value[1]

    @classmethod
    def parse(cls, value: str | ErrorCorrectionLevel) -> ErrorCorrectionLevel:
        if isinstance(value, ErrorCorrectionLevel):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown error correction level: {value!r}") from exc


# Indexed [ordinal][version]; index 0 is unused
ECC_CODEWORDS_PER_BLOCK = (
    (-1, 7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28, 28,
     28, 28, 30, 30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    (-1, 10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26, 26,
     26, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28),
    (-1, 13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26, 30,
     28, 30, 30, 30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    (-1, 17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26, 28,
     30, 24, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
)

NUM_ERROR_CORRECTION_BLOCKS = (
    (-1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 4, 4, 4, 4, 4, 6, 6, 6, 6, 7, 8,
     8, 9, 9, 10, 12, 12, 12, 13, 14, 15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25),
    (-1, 1, 1, 1, 2, 2, 4, 4, 4, 5, 5, 5, 8, 9, 9, 10, 10, 11, 13, 14, 16,
     17, 17, 18, 20, 21, 23, 25, 26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49),
    (-1, 1, 1, 2, 2, 4, 4, 6, 6, 8, 8, 8, 10, 12, 16, 12, 17, 16, 18, 21, 20,
     23, 23, 25, 27, 29, 34, 34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68),
    (-1, 1, 1, 2, 4, 4, 4, 5, 6, 8, 8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25,
     25, 34, 30, 32, 35, 37, 40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81),
)

# Alignment pattern centre coordinates per version; index 0 is unused
ALIGNMENT_PATTERN_POSITIONS = (
    (),
    (),
    (6, 18),
    (6, 22),
    (6, 26),
    (6, 30),
    (6, 34),
    (6, 22, 38),
    (6, 24, 42),
    (6, 26, 46),
    (6, 28, 50),
    (6, 30, 54),
    (6, 32, 58),
    (6, 34, 62),
    (6, 26, 46, 66),
    (6, 26, 48, 70),
    (6, 26, 50, 74),
    (6, 30, 54, 78),
    (6, 30, 56, 82),
    (6, 30, 58, 86),
    (6, 34, 62, 90),
    (6, 28, 50, 72, 94),
    (6, 26, 50, 74, 98),
    (6, 30, 54, 78, 102),
    (6, 28, 54, 80, 106),
    (6, 32, 58, 84, 110),
    (6, 30, 58, 86, 114),
    (6, 34, 62, 90, 118),
    (6, 26, 50, 74, 98, 122),
    (6, 30, 54, 78, 102, 126),
    (6, 26, 52, 78, 104, 130),
    (6, 30, 56, 82, 108, 134),
    (6, 34, 60, 86, 112, 138),
    (6, 30, 58, 86, 114, 142),
    (6, 34, 62, 90, 118, 146),
    (6, 30, 54, 78, 102, 126, 150),
    (6, 24, 50, 76, 102, 128, 154),
    (6, 28, 54, 80, 106, 132, 158),
    (6, 32, 58, 84, 110, 136, 162),
    (6, 26, 54, 82, 110, 138, 166),
    (6, 30, 58, 86, 114, 142, 170),
)


def _check_version(version: int) -> None:
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise ValueError(f"Version {version} out of range {MIN_VERSION}-{MAX_VERSION}")


def symbol_size(version: int) -> int:
    """Modules per side, without quiet zone."""
    _check_version(version)
    return version * 4 + 17


def version_range_index(version: int) -> int:
    """Index into VERSION_RANGES, used to pick count indicator widths."""
    _check_version(version)
    for index, (low, high) in enumerate(VERSION_RANGES):
        if low <= version <= high:
            return index
    raise AssertionError("unreachable")


def _raw_data_modules(version: int) -> int:
    """Modules left for codewords after all function patterns are placed."""
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num_align = version // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if version >= 7:
            result -= 36
    return result


TOTAL_CODEWORDS = (0,) + tuple(
    _raw_data_modules(version) // 8 for version in range(MIN_VERSION, MAX_VERSION + 1)
)

REMAINDER_BITS = (0,) + tuple(
    _raw_data_modules(version) % 8 for version in range(MIN_VERSION, MAX_VERSION + 1)
)


def block_layout(version: int, level: ErrorCorrectionLevel) -> tuple[int, int]:
    """Return ``(number of blocks, EC codewords per block)``."""
    _check_version(version)
    return (
        NUM_ERROR_CORRECTION_BLOCKS[level.ordinal][version],
        ECC_CODEWORDS_PER_BLOCK[level.ordinal][version],
    )


def data_codeword_count(version: int, level: ErrorCorrectionLevel) -> int:
    num_blocks, ecc_per_block = block_layout(version, level)
    return TOTAL_CODEWORDS[version] - num_blocks * ecc_per_block


def data_capacity_bits(version: int, level: ErrorCorrectionLevel) -> int:
    return data_codeword_count(version, level) * 8
