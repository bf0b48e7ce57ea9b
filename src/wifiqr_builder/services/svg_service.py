"""SVG rendering for encoded QR matrices."""

from __future__ import annotations

from pathlib import Path

from wifiqr_builder.constants import (
    DEFAULT_QR_BACKGROUND_COLOR,
    DEFAULT_QR_FILL_COLOR,
    DEFAULT_SVG_SCALE,
)
from wifiqr_builder.encoder.matrix import QrMatrix


def _attr_escape(value: str) -> str:
    """Escape a value for use inside a double-quoted XML attribute."""
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _row_path(y: int, row: tuple[bool, ...]) -> str:
    """Path commands drawing each horizontal run of dark modules as one rect."""
    commands = []
    x = 0
    while x < len(row):
        if not row[x]:
            x += 1
            continue
        start = x
        while x < len(row) and row[x]:
            x += 1
        commands.append(f"M{start} {y}h{x - start}v1h-{x - start}z")
    return "".join(commands)


def render_svg(
    matrix: QrMatrix,
    scale: int = DEFAULT_SVG_SCALE,
    fill_color: str = DEFAULT_QR_FILL_COLOR,
    back_color: str = DEFAULT_QR_BACKGROUND_COLOR,
) -> str:
    """Return standalone SVG markup for ``matrix``, quiet zone included."""
    if scale <= 0:
        raise ValueError("SVG scale must be positive.")

    size = matrix.size
    pixels = size * scale
    path = "".join(_row_path(y, row) for y, row in enumerate(matrix.rows()))
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{pixels}" height="{pixels}" '
        f'viewBox="0 0 {size} {size}" shape-rendering="crispEdges">'
        f'<rect width="{size}" height="{size}" fill="{_attr_escape(back_color)}"/>'
        f'<path fill="{_attr_escape(fill_color)}" d="{path}"/>'
        "</svg>"
    )


def save_svg(markup: str, file_path: str | Path) -> None:
    """Persist SVG markup to disk."""
    Path(file_path).write_text(markup, encoding="utf-8")
