"""Reed-Solomon error correction over GF(2^8) for QR codewords."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence

from wifiqr_builder.encoder.tables import ErrorCorrectionLevel, block_layout, data_codeword_count

# x^8 + x^4 + x^3 + x^2 + 1
GF_POLYNOMIAL = 0x11D


def _build_tables() -> tuple[tuple[int, ...], tuple[int, ...]]:
    exp = [0] * 512
    log = [0] * 256
    value = 1
    for power in range(255):
        exp[power] = value
        log[value] = power
        value <<= 1
        if value & 0x100:
            value ^= GF_POLYNOMIAL
    # Doubled so products of two logs never need a modulo
    for power in range(255, 512):
        exp[power] = exp[power - 255]
    return tuple(exp), tuple(log)


GF_EXP, GF_LOG = _build_tables()


def gf_multiply(x: int, y: int) -> int:
    if x == 0 or y == 0:
        return 0
    return GF_EXP[GF_LOG[x] + GF_LOG[y]]


@lru_cache(maxsize=None)
def generator_polynomial(degree: int) -> tuple[int, ...]:
    """Coefficients of prod(x - a^i) for i < degree, highest power first."""
    if not 1 <= degree <= 255:
        raise ValueError("Degree out of range")
    coefficients = [1]
    for i in range(degree):
        root = GF_EXP[i]
        product = [0] * (len(coefficients) + 1)
        for j, coef in enumerate(coefficients):
            product[j] ^= coef
            product[j + 1] ^= gf_multiply(coef, root)
        coefficients = product
    return tuple(coefficients)


def compute_ec_codewords(block: Sequence[int], degree: int) -> bytes:
    """Remainder of ``block`` * x^degree divided by the generator polynomial."""
    generator = generator_polynomial(degree)
    remainder = [0] * degree
    for byte in block:
        factor = byte ^ remainder[0]
        remainder = remainder[1:] + [0]
        if factor:
            log_factor = GF_LOG[factor]
            for i in range(degree):
                coef = generator[i + 1]
                if coef:
                    remainder[i] ^= GF_EXP[GF_LOG[coef] + log_factor]
    return bytes(remainder)


def split_blocks(
    data_codewords: Sequence[int], version: int, ec_level: ErrorCorrectionLevel
) -> List[bytes]:
    """Split data codewords into short blocks first, then long blocks."""
    num_blocks, _ = block_layout(version, ec_level)
    short_len, num_long = divmod(len(data_codewords), num_blocks)
    blocks: List[bytes] = []
    offset = 0
    for index in range(num_blocks):
        length = short_len + (1 if index >= num_blocks - num_long else 0)
        blocks.append(bytes(data_codewords[offset : offset + length]))
        offset += length
    return blocks


def encode(data_codewords: Sequence[int], version: int, ec_level: ErrorCorrectionLevel) -> bytes:
    """Return data and EC codewords for ``version``, interleaved for placement."""
    expected = data_codeword_count(version, ec_level)
    if len(data_codewords) != expected:
        raise ValueError(
            f"Version {version}-{ec_level.name} takes {expected} data codewords, "
            f"got {len(data_codewords)}"
        )

    _, ecc_per_block = block_layout(version, ec_level)
    data_blocks = split_blocks(data_codewords, version, ec_level)
    ecc_blocks = [compute_ec_codewords(block, ecc_per_block) for block in data_blocks]

    result = bytearray()
    for i in range(max(len(block) for block in data_blocks)):
        for block in data_blocks:
            if i < len(block):
                result.append(block[i])
    for i in range(ecc_per_block):
        for block in ecc_blocks:
            result.append(block[i])
    return bytes(result)
