"""Reference QR reader used by the test suite.

Reads an undamaged, axis-aligned module grid: format information, unmasking,
zig-zag traversal, block de-interleaving and segment parsing. Block sizes come
from the ``qrcode`` package so the reader does not share tables with the
encoder under test. No error correction is attempted.
"""

from __future__ import annotations

from typing import List, Sequence

from qrcode.base import rs_blocks

ALPHANUMERIC = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"

# Two-bit format indicator -> qrcode error correction constant (same values)
LEVEL_NAMES = {0b01: "L", 0b00: "M", 0b11: "Q", 0b10: "H"}


class ReadError(Exception):
    pass


def _bch_format(data: int) -> int:
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ (0x537 if rem & 0x200 else 0)
    return ((data << 10) | rem) ^ 0x5412


def _mask(mask: int, row: int, col: int) -> bool:
    if mask == 0:
        return (row + col) % 2 == 0
    if mask == 1:
        return row % 2 == 0
    if mask == 2:
        return col % 3 == 0
    if mask == 3:
        return (row + col) % 3 == 0
    if mask == 4:
        return (row // 2 + col // 3) % 2 == 0
    if mask == 5:
        return (row * col) % 2 + (row * col) % 3 == 0
    if mask == 6:
        return ((row * col) % 2 + (row * col) % 3) % 2 == 0
    return ((row + col) % 2 + (row * col) % 3) % 2 == 0


def _alignment_centres(version: int) -> List[int]:
    if version == 1:
        return []
    count = version // 7 + 2
    last = version * 4 + 10
    if version == 32:
        step = 26
    else:
        step = (last - 6 + count - 2) // (count - 1)
        step += step % 2
    centres = [last - i * step for i in range(count - 1)]
    return [6] + sorted(centres)


def read_format(grid: Sequence[Sequence[bool]]) -> tuple[int, int]:
    """Return ``(format indicator, mask)`` from the top-left format copy."""
    cells = [(0, 8), (1, 8), (2, 8), (3, 8), (4, 8), (5, 8), (7, 8), (8, 8), (8, 7)]
    cells += [(8, 5), (8, 4), (8, 3), (8, 2), (8, 1), (8, 0)]
    raw = 0
    for i, (row, col) in enumerate(cells):
        if grid[row][col]:
            raw |= 1 << i
    for data in range(32):
        if _bch_format(data) == raw:
            return data >> 3, data & 7
    raise ReadError(f"Unreadable format bits {raw:015b}")


def function_modules(version: int) -> List[List[bool]]:
    size = version * 4 + 17
    marked = [[False] * size for _ in range(size)]

    def block(top: int, left: int, height: int, width: int) -> None:
        for row in range(top, top + height):
            for col in range(left, left + width):
                marked[row][col] = True

    block(0, 0, 9, 9)
    block(0, size - 8, 9, 8)
    block(size - 8, 0, 8, 9)
    block(6, 0, 1, size)
    block(0, 6, size, 1)
    centres = _alignment_centres(version)
    if centres:
        corners = {(6, 6), (6, centres[-1]), (centres[-1], 6)}
        for cy in centres:
            for cx in centres:
                if (cy, cx) not in corners:
                    block(cy - 2, cx - 2, 5, 5)
    if version >= 7:
        block(0, size - 11, 6, 3)
        block(size - 11, 0, 3, 6)
    return marked


def _read_codewords(grid: Sequence[Sequence[bool]], version: int, mask: int) -> List[int]:
    size = len(grid)
    marked = function_modules(version)
    bits: List[int] = []
    col = size - 1
    going_up = True
    while col > 0:
        if col == 6:
            col -= 1
        rows = range(size - 1, -1, -1) if going_up else range(size)
        for row in rows:
            for c in (col, col - 1):
                if marked[row][c]:
                    continue
                bit = grid[row][c] != _mask(mask, row, c)
                bits.append(1 if bit else 0)
        going_up = not going_up
        col -= 2
    codewords = []
    for i in range(0, len(bits) - len(bits) % 8, 8):
        value = 0
        for bit in bits[i : i + 8]:
            value = (value << 1) | bit
        codewords.append(value)
    return codewords


def _deinterleave(codewords: List[int], version: int, level: int) -> List[int]:
    blocks = rs_blocks(version, level)
    data_lengths = [block.data_count for block in blocks]
    data: List[List[int]] = [[] for _ in blocks]
    index = 0
    for i in range(max(data_lengths)):
        for b, length in enumerate(data_lengths):
            if i < length:
                data[b].append(codewords[index])
                index += 1
    return [value for block in data for value in block]


class _Bits:
    def __init__(self, codewords: List[int]) -> None:
        self.bits = [(byte >> (7 - i)) & 1 for byte in codewords for i in range(8)]
        self.pos = 0

    def remaining(self) -> int:
        return len(self.bits) - self.pos

    def take(self, count: int) -> int:
        if count > self.remaining():
            raise ReadError("Ran out of data bits")
        value = 0
        for bit in self.bits[self.pos : self.pos + count]:
            value = (value << 1) | bit
        self.pos += count
        return value


def _count_width(mode: int, version: int) -> int:
    column = 0 if version <= 9 else 1 if version <= 26 else 2
    return {1: (10, 12, 14), 2: (9, 11, 13), 4: (8, 16, 16)}[mode][column]


def decode_grid(grid: Sequence[Sequence[bool]]) -> tuple[bytes, dict]:
    """Decode a symbol without quiet zone into payload bytes plus metadata."""
    size = len(grid)
    if (size - 17) % 4 or not 21 <= size <= 177:
        raise ReadError(f"Bad symbol size {size}")
    version = (size - 17) // 4
    indicator, mask = read_format(grid)
    codewords = _read_codewords(grid, version, mask)
    data = _deinterleave(codewords, version, indicator)

    stream = _Bits(data)
    out = bytearray()
    modes = []
    while stream.remaining() >= 4:
        mode = stream.take(4)
        if mode == 0:
            break
        modes.append(mode)
        count = stream.take(_count_width(mode, version))
        if mode == 1:
            digits = []
            while count >= 3:
                digits.append(f"{stream.take(10):03d}")
                count -= 3
            if count == 2:
                digits.append(f"{stream.take(7):02d}")
            elif count == 1:
                digits.append(f"{stream.take(4):01d}")
            out += "".join(digits).encode("ascii")
        elif mode == 2:
            chars = []
            while count >= 2:
                value = stream.take(11)
                chars.append(ALPHANUMERIC[value // 45] + ALPHANUMERIC[value % 45])
                count -= 2
            if count:
                chars.append(ALPHANUMERIC[stream.take(6)])
            out += "".join(chars).encode("ascii")
        elif mode == 4:
            out += bytes(stream.take(8) for _ in range(count))
        else:
            raise ReadError(f"Unsupported mode {mode:04b}")

    meta = {"version": version, "level": LEVEL_NAMES[indicator], "mask": mask, "modes": modes}
    return bytes(out), meta


def strip_quiet_zone(rows: Sequence[Sequence[bool]]) -> List[List[bool]]:
    """Crop a bordered grid to the symbol using the top-left finder corner."""
    size = len(rows)
    for offset in range(size):
        if rows[offset][offset]:
            symbol = size - 2 * offset
            return [list(row[offset : offset + symbol]) for row in rows[offset : offset + symbol]]
    raise ReadError("Blank grid")


def read_text(rows: Sequence[Sequence[bool]]) -> str:
    """Decode a bordered grid and return the payload as UTF-8 text."""
    payload, _ = decode_grid(strip_quiet_zone(rows))
    return payload.decode("utf-8")
