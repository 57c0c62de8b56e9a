from __future__ import annotations

from enum import Enum


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    def opp(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @classmethod
    def parse(cls, value: str) -> "Color":
        """Parse ``"w"``/``"b"`` or ``"white"``/``"black"`` (case-insensitive).

        Raises:
            ValueError: If ``value`` names no color.
        """
        v = value.strip().lower()
        if v in ("w", "white"):
            return cls.WHITE
        if v in ("b", "black"):
            return cls.BLACK
        raise ValueError(f"invalid color: {value!r}")
