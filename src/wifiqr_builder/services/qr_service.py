"""QR encoding pipeline and image generation helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image, ImageDraw

from wifiqr_builder.constants import (
    DEFAULT_ERROR_CORRECTION,
    DEFAULT_QR_BACKGROUND_COLOR,
    DEFAULT_QR_BORDER,
    DEFAULT_QR_BOX_SIZE,
    DEFAULT_QR_FILL_COLOR,
    DEFAULT_QR_SIZE,
    DEFAULT_SEGMENT_MIN_RUN,
)
from wifiqr_builder.encoder import reed_solomon
from wifiqr_builder.encoder.assembler import assemble
from wifiqr_builder.encoder.matrix import QrMatrix
from wifiqr_builder.encoder.segments import encode_data_codewords, fit_version, segment
from wifiqr_builder.encoder.tables import ErrorCorrectionLevel
from wifiqr_builder.services.wifi_payload import Credentials, build_wifi_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WifiQrCode:
    credentials: Credentials
    payload: str
    matrix: QrMatrix


def encode_payload(
    payload: str,
    ec_level: str | ErrorCorrectionLevel = DEFAULT_ERROR_CORRECTION,
    border: int = DEFAULT_QR_BORDER,
    mask: int | None = None,
    boost_error: bool = False,
    min_run: int = DEFAULT_SEGMENT_MIN_RUN,
) -> QrMatrix:
    """Encode ``payload`` into a finished QR matrix.

    Raises PayloadTooLarge when no version holds the data at ``ec_level``.
    """
    level = ErrorCorrectionLevel.parse(ec_level)
    segments = segment(payload, min_run=min_run)
    version, level = fit_version(segments, level, boost_error=boost_error)
    logger.debug(
        "Segmented %d characters into %s; version %d level %s",
        len(payload),
        [seg.mode.name for seg in segments],
        version,
        level.name,
    )

    data_codewords = encode_data_codewords(segments, version, level)
    codewords = reed_solomon.encode(data_codewords, version, level)
    matrix = assemble(codewords, version, level, mask=mask, border=border)
    logger.debug("Assembled %dx%d symbol with mask %d", matrix.symbol_size, matrix.symbol_size, matrix.mask)
    return matrix


def encode_credentials(
    credentials: Credentials,
    ec_level: str | ErrorCorrectionLevel = DEFAULT_ERROR_CORRECTION,
    border: int = DEFAULT_QR_BORDER,
    mask: int | None = None,
    boost_error: bool = False,
) -> WifiQrCode:
    """Format ``credentials`` and encode the resulting payload."""
    payload = build_wifi_payload(credentials)
    matrix = encode_payload(
        payload,
        ec_level=ec_level,
        border=border,
        mask=mask,
        boost_error=boost_error,
    )
    return WifiQrCode(credentials=credentials, payload=payload, matrix=matrix)


def generate_qr_image(
    source: str | QrMatrix,
    size: int | None = DEFAULT_QR_SIZE,
    box_size: int = DEFAULT_QR_BOX_SIZE,
    fill_color: str = DEFAULT_QR_FILL_COLOR,
    back_color: str = DEFAULT_QR_BACKGROUND_COLOR,
    ec_level: str | ErrorCorrectionLevel = DEFAULT_ERROR_CORRECTION,
) -> Image.Image:
    """Render a payload or an encoded matrix as an RGB image."""
    if box_size <= 0:
        raise ValueError("Box size must be positive.")
    if size is not None and size <= 0:
        raise ValueError("Image size must be positive.")

    matrix = source if isinstance(source, QrMatrix) else encode_payload(source, ec_level=ec_level)
    side = matrix.size * box_size
    image = Image.new("RGB", (side, side), back_color)
    draw = ImageDraw.Draw(image)
    for y, row in enumerate(matrix.rows()):
        for x, dark in enumerate(row):
            if dark:
                left = x * box_size
                top = y * box_size
                draw.rectangle(
                    (left, top, left + box_size - 1, top + box_size - 1),
                    fill=fill_color,
                )

    if size and image.size != (size, size):
        image = image.resize((size, size), Image.Resampling.NEAREST)

    return image


def save_qr_image(image: Image.Image, file_path: str) -> None:
    """Persist a QR image to disk."""
    image.save(file_path)
