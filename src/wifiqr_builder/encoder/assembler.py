"""Module placement, masking and format information for QR symbols."""

from __future__ import annotations

import logging
from functools import lru_cache
from itertools import groupby
from typing import Callable, List, Optional, Sequence, Tuple

from wifiqr_builder.constants import DEFAULT_QR_BORDER
from wifiqr_builder.encoder.matrix import Modules, QrMatrix
from wifiqr_builder.encoder.tables import (
    ALIGNMENT_PATTERN_POSITIONS,
    FORMAT_GENERATOR,
    FORMAT_MASK,
    TOTAL_CODEWORDS,
    VERSION_GENERATOR,
    ErrorCorrectionLevel,
    symbol_size,
)
from wifiqr_builder.errors import InternalAssemblyInvariantViolation

logger = logging.getLogger(__name__)

Grid = List[List[Optional[bool]]]
Coordinate = Tuple[int, int]

# Data mask conditions, called as (x, y) with x the column and y the row
MASK_PATTERNS: Tuple[Callable[[int, int], bool], ...] = (
    lambda x, y: (x + y) % 2 == 0,
    lambda x, y: y % 2 == 0,
    lambda x, y: x % 3 == 0,
    lambda x, y: (x + y) % 3 == 0,
    lambda x, y: (x // 3 + y // 2) % 2 == 0,
    lambda x, y: x * y % 2 + x * y % 3 == 0,
    lambda x, y: (x * y % 2 + x * y % 3) % 2 == 0,
    lambda x, y: ((x + y) % 2 + x * y % 3) % 2 == 0,
)

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

_FINDER_LIKE = ("10111010000", "00001011101")


def format_bits(ec_level: ErrorCorrectionLevel, mask: int) -> int:
    """15-bit BCH protected format information, already XOR-masked."""
    data = (ec_level.format_bits << 3) | mask
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ ((rem >> 9) * FORMAT_GENERATOR)
    return ((data << 10) | rem) ^ FORMAT_MASK


def version_bits(version: int) -> int:
    """18-bit BCH protected version information."""
    rem = version
    for _ in range(12):
        rem = (rem << 1) ^ ((rem >> 11) * VERSION_GENERATOR)
    return (version << 12) | rem


def format_positions(size: int) -> Tuple[Tuple[Coordinate, ...], Tuple[Coordinate, ...]]:
    """(x, y) of format bits 0..14 for the primary and the secondary copy."""
    primary: List[Coordinate] = [(8, i) for i in range(6)]
    primary += [(8, 7), (8, 8), (7, 8)]
    primary += [(14 - i, 8) for i in range(9, 15)]
    secondary: List[Coordinate] = [(size - 1 - i, 8) for i in range(8)]
    secondary += [(8, size - 15 + i) for i in range(8, 15)]
    return tuple(primary), tuple(secondary)


def version_positions(size: int) -> Tuple[Tuple[Coordinate, ...], Tuple[Coordinate, ...]]:
    """(x, y) of version bits 0..17 for the top-right and bottom-left blocks."""
    top_right = tuple((size - 11 + i % 3, i // 3) for i in range(18))
    bottom_left = tuple((i // 3, size - 11 + i % 3) for i in range(18))
    return top_right, bottom_left


def _draw_function_patterns(version: int) -> Tuple[Grid, List[List[bool]]]:
    size = symbol_size(version)
    grid: Grid = [[None] * size for _ in range(size)]
    is_function = [[False] * size for _ in range(size)]

    def put(x: int, y: int, dark: bool) -> None:
        grid[y][x] = dark
        is_function[y][x] = True

    for i in range(size):
        put(6, i, i % 2 == 0)
        put(i, 6, i % 2 == 0)

    # Finder patterns with their separators
    for cx, cy in ((3, 3), (size - 4, 3), (3, size - 4)):
        for dy in range(-4, 5):
            for dx in range(-4, 5):
                x, y = cx + dx, cy + dy
                if 0 <= x < size and 0 <= y < size:
                    put(x, y, max(abs(dx), abs(dy)) not in (2, 4))

    positions = ALIGNMENT_PATTERN_POSITIONS[version]
    last = len(positions) - 1
    for i, cx in enumerate(positions):
        for j, cy in enumerate(positions):
            if (i, j) in ((0, 0), (0, last), (last, 0)):
                continue
            for dy in range(-2, 3):
                for dx in range(-2, 3):
                    put(cx + dx, cy + dy, max(abs(dx), abs(dy)) != 1)

    # Format areas stay light until the mask is known
    primary, secondary = format_positions(size)
    for x, y in primary + secondary:
        put(x, y, False)
    put(8, size - 8, True)

    if version >= 7:
        bits = version_bits(version)
        top_right, bottom_left = version_positions(size)
        for i in range(18):
            dark = (bits >> i) & 1 == 1
            put(*top_right[i], dark)
            put(*bottom_left[i], dark)

    return grid, is_function


@lru_cache(maxsize=None)
def function_module_map(version: int) -> Modules:
    """``True`` where a module belongs to a function pattern or reserved area."""
    _, is_function = _draw_function_patterns(version)
    return tuple(tuple(row) for row in is_function)


def _place_codewords(grid: Grid, is_function: Sequence[Sequence[bool]], codewords: bytes) -> None:
    """Write codeword bits along the zig-zag path; leftover modules stay light."""
    size = len(grid)
    total_bits = len(codewords) * 8
    index = 0
    right = size - 1
    while right >= 1:
        if right == 6:
            right = 5
        upward = (right + 1) & 2 == 0
        for vert in range(size):
            y = size - 1 - vert if upward else vert
            for x in (right, right - 1):
                if is_function[y][x]:
                    continue
                if index < total_bits:
                    grid[y][x] = (codewords[index >> 3] >> (7 - (index & 7))) & 1 == 1
                    index += 1
                else:
                    grid[y][x] = False
        right -= 2

    if index != total_bits:
        raise InternalAssemblyInvariantViolation(
            f"Placed {index} of {total_bits} codeword bits"
        )


def place_data(codewords: bytes, version: int) -> Tuple[Modules, Modules]:
    """Unmasked symbol with every codeword placed, plus the function map."""
    expected = TOTAL_CODEWORDS[version]
    if len(codewords) != expected:
        raise ValueError(f"Version {version} takes {expected} codewords, got {len(codewords)}")
    grid, is_function = _draw_function_patterns(version)
    _place_codewords(grid, is_function, codewords)
    for y, row in enumerate(grid):
        for x, value in enumerate(row):
            if value is None:
                raise InternalAssemblyInvariantViolation(
                    f"Module ({x}, {y}) unset after data placement in version {version}"
                )
    base = tuple(tuple(bool(value) for value in row) for row in grid)
    return base, tuple(tuple(row) for row in is_function)


def build_candidate(
    base: Modules,
    is_function: Modules,
    ec_level: ErrorCorrectionLevel,
    mask: int,
) -> Modules:
    """Apply ``mask`` to the data region of ``base`` and write format bits."""
    condition = MASK_PATTERNS[mask]
    rows = [
        [
            value if is_function[y][x] else value != condition(x, y)
            for x, value in enumerate(row)
        ]
        for y, row in enumerate(base)
    ]
    bits = format_bits(ec_level, mask)
    for positions in format_positions(len(rows)):
        for i, (x, y) in enumerate(positions):
            rows[y][x] = (bits >> i) & 1 == 1
    return tuple(tuple(row) for row in rows)


def mask_candidates(
    codewords: bytes, version: int, ec_level: ErrorCorrectionLevel
) -> Tuple[Modules, ...]:
    """All eight masked symbols, each complete with format information."""
    base, is_function = place_data(codewords, version)
    return tuple(build_candidate(base, is_function, ec_level, mask) for mask in range(8))


def _lines(modules: Modules) -> List[str]:
    rows = ["".join("1" if value else "0" for value in row) for row in modules]
    columns = ["".join(column) for column in zip(*rows)]
    return rows + columns


def _finder_like_count(line: str) -> int:
    count = 0
    for pattern in _FINDER_LIKE:
        index = line.find(pattern)
        while index != -1:
            count += 1
            index = line.find(pattern, index + 1)
    return count


def penalty_score(modules: Modules) -> int:
    """Sum of the four masking penalty rules for a finished symbol."""
    size = len(modules)
    lines = _lines(modules)
    score = 0

    for line in lines:
        for _, run in groupby(line):
            length = sum(1 for _ in run)
            if length >= 5:
                score += PENALTY_N1 + length - 5

    for upper, lower in zip(modules, modules[1:]):
        for x in range(size - 1):
            if upper[x] == upper[x + 1] == lower[x] == lower[x + 1]:
                score += PENALTY_N2

    score += PENALTY_N3 * sum(_finder_like_count(line) for line in lines)

    dark = sum(sum(row) for row in modules)
    total = size * size
    score += PENALTY_N4 * (abs(dark * 20 - total * 10) // total)
    return score


def select_mask(candidates: Sequence[Modules]) -> Tuple[int, int]:
    """Return ``(mask, penalty)``; ties go to the lowest mask index."""
    scores = [penalty_score(candidate) for candidate in candidates]
    best = min(range(len(scores)), key=scores.__getitem__)
    return best, scores[best]


def _read_bits(modules: Modules, positions: Sequence[Coordinate]) -> int:
    value = 0
    for i, (x, y) in enumerate(positions):
        if modules[y][x]:
            value |= 1 << i
    return value


def _verify(modules: Modules, version: int, ec_level: ErrorCorrectionLevel, mask: int) -> None:
    size = len(modules)
    expected = format_bits(ec_level, mask)
    for name, positions in zip(("primary", "secondary"), format_positions(size)):
        found = _read_bits(modules, positions)
        if found != expected:
            raise InternalAssemblyInvariantViolation(
                f"{name} format bits {found:015b} != {expected:015b} "
                f"(version {version}, level {ec_level.name}, mask {mask})"
            )
    if not modules[size - 8][8]:
        raise InternalAssemblyInvariantViolation("Dark module is light")
    if version >= 7:
        expected = version_bits(version)
        for positions in version_positions(size):
            found = _read_bits(modules, positions)
            if found != expected:
                raise InternalAssemblyInvariantViolation(
                    f"Version bits {found:018b} != {expected:018b} (version {version})"
                )


def assemble(
    codewords: bytes,
    version: int,
    ec_level: ErrorCorrectionLevel,
    mask: int | None = None,
    border: int = DEFAULT_QR_BORDER,
) -> QrMatrix:
    """Build the finished symbol for interleaved ``codewords``.

    When ``mask`` is None every pattern is tried and the lowest penalty wins.
    """
    if mask is not None and not 0 <= mask <= 7:
        raise ValueError(f"Mask must be 0-7, got {mask}")

    base, is_function = place_data(codewords, version)
    if mask is None:
        candidates = tuple(
            build_candidate(base, is_function, ec_level, pattern) for pattern in range(8)
        )
        mask, penalty = select_mask(candidates)
        modules = candidates[mask]
        logger.debug("Selected mask %d with penalty %d", mask, penalty)
    else:
        modules = build_candidate(base, is_function, ec_level, mask)

    _verify(modules, version, ec_level, mask)
    return QrMatrix(
        version=version,
        ec_level=ec_level,
        mask=mask,
        modules=modules,
        border=border,
    )
