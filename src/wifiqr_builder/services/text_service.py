"""Terminal-friendly text rendering of QR matrices."""

from __future__ import annotations

from typing import Iterable

from wifiqr_builder.encoder.matrix import QrMatrix

# Indexed by (top dark, bottom dark)
_HALF_BLOCKS = {
    (False, False): " ",
    (True, False): "▀",
    (False, True): "▄",
    (True, True): "█",
}


def iter_lines(matrix: QrMatrix, invert: bool = False) -> Iterable[str]:
    """Yield one text line per two module rows."""
    rows = matrix.rows()
    blank = (False,) * matrix.size
    for y in range(0, len(rows), 2):
        top = rows[y]
        bottom = rows[y + 1] if y + 1 < len(rows) else blank
        yield "".join(
            _HALF_BLOCKS[(upper != invert, lower != invert)]
            for upper, lower in zip(top, bottom)
        )


def render_text(matrix: QrMatrix, invert: bool = False) -> str:
    """Render ``matrix`` with half-block characters, two rows per line.

    Terminals with light text on a dark background need ``invert=True``.
    """
    return "\n".join(iter_lines(matrix, invert=invert))
