"""Data segmentation and bit packing tests."""

import pytest

from wifiqr_builder.encoder.segments import (
    Mode,
    Segment,
    encode_data_codewords,
    fit_version,
    make_alphanumeric,
    make_bytes,
    make_numeric,
    segment,
)
from wifiqr_builder.encoder.tables import ErrorCorrectionLevel, data_codeword_count
from wifiqr_builder.errors import PayloadTooLarge

WIFI_PAYLOAD = "WIFI:T:WPA;S:HomeNet;P:s3cr3t!;H:false;;"


def _bits(text: str) -> tuple[int, ...]:
    return tuple(int(char) for char in text.replace(" ", ""))


def test_numeric_packing() -> None:
    """Ensure digits pack as 10/7/4-bit groups."""
    seg = make_numeric("01234567")
    assert seg.mode is Mode.NUMERIC
    assert seg.char_count == 8
    assert seg.data == _bits("0000001100 0101011001 1000011")


def test_alphanumeric_packing() -> None:
    """Ensure pairs pack into 11 bits and a trailing character into 6."""
    seg = make_alphanumeric("AC-42")
    assert seg.char_count == 5
    assert seg.data == _bits("00111001110 11100111001 000010")


def test_byte_packing_counts_utf8_bytes() -> None:
    """Ensure byte segments count encoded bytes, not characters."""
    seg = make_bytes("é".encode("utf-8"))
    assert seg.char_count == 2
    assert seg.data == _bits("11000011 10101001")


def test_invalid_characters_rejected() -> None:
    """Ensure mode constructors refuse characters outside their charset."""
    with pytest.raises(ValueError):
        make_numeric("12a")
    with pytest.raises(ValueError):
        make_alphanumeric("abc")


def test_wifi_payload_is_single_byte_segment() -> None:
    """Ensure a formatted Wi-Fi string encodes as one byte segment."""
    segments = segment(WIFI_PAYLOAD)
    assert [seg.mode for seg in segments] == [Mode.BYTE]
    assert segments[0].char_count == 40


def test_pure_numeric_and_alphanumeric_payloads() -> None:
    """Ensure uniform payloads use the densest single mode."""
    assert [seg.mode for seg in segment("0123456789")] == [Mode.NUMERIC]
    assert [seg.mode for seg in segment("HELLO WORLD")] == [Mode.ALPHANUMERIC]
    assert [seg.mode for seg in segment("hello")] == [Mode.BYTE]
    assert segment("") == ()


def test_long_runs_get_their_own_segments() -> None:
    """Ensure runs at or above the threshold split out of byte mode."""
    digits = "1" * 20
    letters = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    segments = segment(f"id={digits};name={letters}!")
    assert [seg.mode for seg in segments] == [
        Mode.BYTE,
        Mode.NUMERIC,
        Mode.BYTE,
        Mode.ALPHANUMERIC,
        Mode.BYTE,
    ]
    assert [seg.char_count for seg in segments] == [3, 20, 6, 26, 1]


def test_short_runs_stay_in_byte_mode() -> None:
    """Ensure runs below the threshold are not split out."""
    assert [seg.mode for seg in segment("order#1234567890123456789#ok")] == [Mode.BYTE]
    assert [seg.mode for seg in segment("order#1234567890123456789#ok", min_run=5)] == [
        Mode.BYTE,
        Mode.NUMERIC,
        Mode.BYTE,
    ]


def test_min_run_must_be_positive() -> None:
    """Ensure a zero threshold is refused."""
    with pytest.raises(ValueError):
        segment("abc", min_run=0)


def test_count_indicator_width_by_version() -> None:
    """Ensure count indicators widen at versions 10 and 27."""
    assert [Mode.NUMERIC.count_bits(v) for v in (1, 9, 10, 26, 27, 40)] == [10, 10, 12, 12, 14, 14]
    assert [Mode.ALPHANUMERIC.count_bits(v) for v in (9, 10, 27)] == [9, 11, 13]
    assert [Mode.BYTE.count_bits(v) for v in (9, 10, 27)] == [8, 16, 16]


def test_segment_bit_length_overflow() -> None:
    """Ensure a byte count above 255 cannot be encoded below version 10."""
    seg = make_bytes(b"x" * 256)
    assert seg.bit_length(9) is None
    assert seg.bit_length(10) == 4 + 16 + 256 * 8


def test_fit_version_for_wifi_scenario() -> None:
    """Ensure the 40-byte Wi-Fi payload lands in version 3 at level M."""
    version, level = fit_version(segment(WIFI_PAYLOAD), ErrorCorrectionLevel.M)
    assert (version, level) == (3, ErrorCorrectionLevel.M)


def test_fit_version_boost_error() -> None:
    """Ensure boosting raises the level only while the version still fits."""
    segments = segment(WIFI_PAYLOAD)
    assert fit_version(segments, ErrorCorrectionLevel.L) == (3, ErrorCorrectionLevel.L)
    assert fit_version(segments, ErrorCorrectionLevel.L, boost_error=True) == (
        3,
        ErrorCorrectionLevel.M,
    )


def test_fit_version_byte_capacity_boundary() -> None:
    """Ensure 2953 bytes fit version 40-L and 2954 bytes do not."""
    assert fit_version((make_bytes(b"a" * 2953),), ErrorCorrectionLevel.L) == (
        40,
        ErrorCorrectionLevel.L,
    )
    with pytest.raises(PayloadTooLarge) as excinfo:
        fit_version((make_bytes(b"a" * 2954),), ErrorCorrectionLevel.L)
    assert excinfo.value.ec_level == "L"


def test_hello_world_data_codewords() -> None:
    """Ensure the classic HELLO WORLD 1-M example yields the known codewords."""
    segments = segment("HELLO WORLD")
    version, level = fit_version(segments, ErrorCorrectionLevel.M)
    assert version == 1
    codewords = encode_data_codewords(segments, version, level)
    assert list(codewords) == [
        32, 91, 11, 120, 209, 114, 220, 77, 67, 64, 236, 17, 236, 17, 236, 17,
    ]


def test_padding_fills_capacity() -> None:
    """Ensure terminator and pad bytes fill the data capacity exactly."""
    codewords = encode_data_codewords((make_bytes(b"A"),), 1, ErrorCorrectionLevel.H)
    assert len(codewords) == data_codeword_count(1, ErrorCorrectionLevel.H) == 9
    assert list(codewords) == [0x40, 0x14, 0x10, 0xEC, 0x11, 0xEC, 0x11, 0xEC, 0x11]


def test_encode_rejects_overflowing_version() -> None:
    """Ensure encoding into a too-small version raises PayloadTooLarge."""
    segments = (Segment(Mode.BYTE, 20, (0,) * 160),)
    with pytest.raises(PayloadTooLarge):
        encode_data_codewords(segments, 1, ErrorCorrectionLevel.H)
