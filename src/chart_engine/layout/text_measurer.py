"""
Pixel-width measurement of label text.

Widths come from real glyph metrics: the font file is resolved through
matplotlib's font manager and shaped with Pillow. When no usable font exists
(or fonts are disabled), a fixed per-character width is used instead.

A layout pass must never mix the two modes, so the planner measures through
a ``MeasurementSession`` that resolves the mode once.
"""

from typing import Dict, Optional, Tuple

from matplotlib import font_manager
from PIL import ImageFont

from src.chart_engine.core import settings
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_CHAR_WIDTH = 6.0

MODE_FONT = "font"
MODE_FALLBACK = "fallback"

# CSS generic families that have no direct matplotlib equivalent
_FAMILY_ALIASES = {
    "system-ui": "sans-serif",
    "-apple-system": "sans-serif",
    "ui-sans-serif": "sans-serif",
    "ui-monospace": "monospace",
    "ui-serif": "serif",
}


def _resolve_family(font_family: str) -> str:
    """First family of a CSS font stack, mapped to a matplotlib family."""
    first = (font_family or "sans-serif").split(",")[0].strip().strip("'\"")
    return _FAMILY_ALIASES.get(first.lower(), first or "sans-serif")


class MeasurementSession:
    """
    Measures text for one layout pass with a single, fixed mode.

    Attributes:
        mode: "font" when glyph metrics are used, "fallback" otherwise
        font_size_px: Font size of every measurement
        font_family: Requested font family
    """

    def __init__(
        self,
        font: Optional[ImageFont.FreeTypeFont],
        font_size_px: float,
        font_family: str,
        fallback_char_width: float = FALLBACK_CHAR_WIDTH,
    ):
        self._font = font
        self.font_size_px = font_size_px
        self.font_family = font_family
        self.fallback_char_width = fallback_char_width
        self.mode = MODE_FONT if font is not None else MODE_FALLBACK

    def measure(self, text: str) -> float:
        """Width of ``text`` in pixels."""
        text = "" if text is None else str(text)
        if self._font is None:
            return len(text) * self.fallback_char_width
        return float(self._font.getlength(text))

    def __repr__(self) -> str:
        return (
            f"MeasurementSession(mode={self.mode!r}, "
            f"font_size_px={self.font_size_px}, font_family={self.font_family!r})"
        )


class TextMeasurer:
    """
    Measures label widths with cached fonts.

    Example:
        >>> measurer = TextMeasurer(use_fonts=False)
        >>> measurer.measure_width("Revenue")
        42.0
        >>> measurer.session().mode
        'fallback'
    """

    def __init__(
        self,
        use_fonts: Optional[bool] = None,
        fallback_char_width: float = FALLBACK_CHAR_WIDTH,
    ):
        """
        Args:
            use_fonts: Use real glyph metrics (defaults to CHART_ENGINE_USE_FONTS)
            fallback_char_width: Width per character when no font is usable
        """
        self.use_fonts = settings.USE_FONTS if use_fonts is None else use_fonts
        self.fallback_char_width = fallback_char_width
        self._fonts: Dict[Tuple[str, int], Optional[ImageFont.FreeTypeFont]] = {}

    def _load_font(self, font_family: str, font_size_px: float) -> Optional[ImageFont.FreeTypeFont]:
        """Resolve and cache a font; None when it cannot be loaded."""
        if not self.use_fonts:
            return None

        size = max(1, int(round(font_size_px)))
        key = (font_family, size)
        if key in self._fonts:
            return self._fonts[key]

        font = None
        try:
            path = font_manager.findfont(
                _resolve_family(font_family), fallback_to_default=True
            )
            font = ImageFont.truetype(path, size=size)
            logger.debug(f"[TextMeasurer] Loaded font {path} at {size}px")
        except (OSError, ValueError) as e:
            logger.warning(
                f"[TextMeasurer] Could not load font '{font_family}' ({e}); "
                "using fallback character widths"
            )

        self._fonts[key] = font
        return font

    def session(
        self,
        font_size_px: float = settings.LABEL_FONT_SIZE,
        font_family: str = settings.FONT_FAMILY,
    ) -> MeasurementSession:
        """
        Open a measurement session with the mode fixed for its lifetime.

        Args:
            font_size_px: Font size in pixels
            font_family: CSS-style font family

        Returns:
            MeasurementSession
        """
        font = self._load_font(font_family, font_size_px)
        return MeasurementSession(font, font_size_px, font_family, self.fallback_char_width)

    def measure_width(
        self,
        text: str,
        font_size_px: float = settings.LABEL_FONT_SIZE,
        font_family: str = settings.FONT_FAMILY,
    ) -> float:
        """
        Width of ``text`` in pixels.

        Args:
            text: Text to measure
            font_size_px: Font size in pixels
            font_family: CSS-style font family

        Returns:
            Width in pixels
        """
        return self.session(font_size_px, font_family).measure(text)


__all__ = [
    "TextMeasurer",
    "MeasurementSession",
    "FALLBACK_CHAR_WIDTH",
    "MODE_FONT",
    "MODE_FALLBACK",
]
