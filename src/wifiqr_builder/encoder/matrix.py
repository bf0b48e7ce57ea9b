"""Immutable QR module matrix handed to renderers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from wifiqr_builder.constants import DEFAULT_QR_BORDER
from wifiqr_builder.encoder.tables import ErrorCorrectionLevel

Modules = Tuple[Tuple[bool, ...], ...]


@dataclass(frozen=True)
class QrMatrix:
    """A finished QR symbol.

    ``modules`` holds the symbol only (``True`` is dark). The quiet zone is
    added by :meth:`rows` and :meth:`is_dark`, whose coordinates include
    ``border`` light modules on every side.
    """

    version: int
    ec_level: ErrorCorrectionLevel
    mask: int
    modules: Modules
    border: int = DEFAULT_QR_BORDER

    def __post_init__(self) -> None:
        if self.border < 0:
            raise ValueError("Border must be zero or positive")
        if len(self.modules) != self.version * 4 + 17:
            raise ValueError("Module grid does not match the version size")

    @property
    def symbol_size(self) -> int:
        return len(self.modules)

    @property
    def size(self) -> int:
        return self.symbol_size + 2 * self.border

    def is_dark(self, x: int, y: int) -> bool:
        """Module state at column ``x``, row ``y`` including the quiet zone."""
        if not (0 <= x < self.size and 0 <= y < self.size):
            raise IndexError(f"({x}, {y}) outside a {self.size}x{self.size} matrix")
        sx = x - self.border
        sy = y - self.border
        if 0 <= sx < self.symbol_size and 0 <= sy < self.symbol_size:
            return self.modules[sy][sx]
        return False

    def rows(self) -> Modules:
        """The full grid, quiet zone included."""
        if self.border == 0:
            return self.modules
        blank = (False,) * self.size
        side = (False,) * self.border
        body = tuple(side + row + side for row in self.modules)
        return (blank,) * self.border + body + (blank,) * self.border

    def with_border(self, border: int) -> QrMatrix:
        return replace(self, border=border)
