"""
Template library: canonical ink vectors synthesized from printed glyphs.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, Optional, Protocol, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from PIL.ImageFont import FreeTypeFont

from config import (
    FONT_CANDIDATES,
    FONT_ENV_VAR,
    MARGIN,
    TARGET_SIZE,
    TEMPLATE_CANVAS_SIZE,
    TEMPLATE_FONT_SIZE,
)
from ink_normalizer import has_ink, normalize_to_vector
from kana_data import KanaSymbol

logger = logging.getLogger(__name__)


class TemplateLibraryError(RuntimeError):
    """Raised when the offscreen glyph rendering cannot produce a library."""


@dataclass(frozen=True)
class GlyphTemplate:
    """A glyph, its script, and the normalized vector of its printed form."""

    glyph: str
    script: str
    vector: np.ndarray


class GlyphRenderer(Protocol):
    """Draws one glyph centered on a square RGBA raster."""

    def render(self, glyph: str, canvas_size: int) -> np.ndarray:
        ...


def find_font(candidates: Optional[Iterable[str]] = None) -> Optional[str]:
    """
    Locate a font that can draw kana.

    The KANASCRIBE_FONT environment variable wins over the candidate list.

    Args:
        candidates: Paths to try in order (defaults to config.FONT_CANDIDATES)

    Returns:
        Path of the first existing font file, or None
    """
    override = os.environ.get(FONT_ENV_VAR)
    if override:
        if os.path.isfile(override):
            return override
        logger.warning("%s points to missing file %s", FONT_ENV_VAR, override)

    for path in (FONT_CANDIDATES if candidates is None else candidates):
        if os.path.isfile(path):
            return path
    return None


@lru_cache(maxsize=8)
def _cached_font(font_path: str, size: int) -> FreeTypeFont:
    """Load a font once per (path, size)."""
    return ImageFont.truetype(font_path, size)


class FontGlyphRenderer:
    """Renders glyphs with a system TrueType/OpenType font through Pillow."""

    def __init__(self, font_path: Optional[str] = None, font_size: int = TEMPLATE_FONT_SIZE):
        """
        Args:
            font_path: Font file to use; searched with find_font() when omitted
            font_size: Point size the glyph is drawn at

        Raises:
            TemplateLibraryError: If no usable font can be loaded
        """
        self.font_path = font_path or find_font()
        if self.font_path is None:
            raise TemplateLibraryError(
                f"No Japanese font found; set {FONT_ENV_VAR} to a font file that covers kana")

        self.font_size = font_size
        try:
            self.font = _cached_font(self.font_path, font_size)
        except OSError as e:
            raise TemplateLibraryError(f"Could not load font {self.font_path}: {e}") from e

        logger.info("Rendering glyph templates with %s at %dpx", self.font_path, font_size)

    def render(self, glyph: str, canvas_size: int = TEMPLATE_CANVAS_SIZE) -> np.ndarray:
        """
        Draw a glyph in black, centered on a white opaque canvas.

        Returns:
            (canvas_size, canvas_size, 4) uint8 RGBA array
        """
        image = Image.new("RGBA", (canvas_size, canvas_size), (255, 255, 255, 255))
        draw = ImageDraw.Draw(image)
        center = canvas_size / 2
        draw.text((center, center), glyph, fill=(0, 0, 0, 255), font=self.font, anchor="mm")
        return np.array(image)


def build_template(symbol: KanaSymbol,
                   renderer: GlyphRenderer,
                   canvas_size: int = TEMPLATE_CANVAS_SIZE,
                   target_size: int = TARGET_SIZE,
                   margin: int = MARGIN) -> GlyphTemplate:
    """
    Render one glyph and normalize it like live ink.

    Raises:
        TemplateLibraryError: If the renderer fails or returns no raster
    """
    try:
        raster = renderer.render(symbol.kana, canvas_size)
    except TemplateLibraryError:
        raise
    except Exception as e:
        raise TemplateLibraryError(f"Rendering {symbol.kana!r} failed: {e}") from e

    if raster is None:
        raise TemplateLibraryError(f"Renderer returned no raster for {symbol.kana!r}")

    if not has_ink(raster):
        # The font probably lacks this glyph; the zero template can never win
        logger.warning("Template for %r has no ink", symbol.kana)

    vector = normalize_to_vector(raster, target_size, margin)
    return GlyphTemplate(glyph=symbol.kana, script=symbol.script, vector=vector)


def build_template_library(symbols: Sequence[KanaSymbol],
                           renderer: Optional[GlyphRenderer] = None,
                           canvas_size: int = TEMPLATE_CANVAS_SIZE,
                           target_size: int = TARGET_SIZE,
                           margin: int = MARGIN) -> Dict[str, GlyphTemplate]:
    """
    Build one template per known glyph.

    The library is all or nothing: any rendering failure aborts the build.

    Args:
        symbols: Glyph pool, in order
        renderer: Glyph renderer; a FontGlyphRenderer when omitted
        canvas_size: Side of the offscreen canvas each glyph is drawn on
        target_size: Side of the normalized grid
        margin: Normalization padding

    Returns:
        Mapping of glyph -> GlyphTemplate

    Raises:
        TemplateLibraryError: If the renderer is unavailable or any glyph fails
    """
    if renderer is None:
        renderer = FontGlyphRenderer()

    library: Dict[str, GlyphTemplate] = {}
    for symbol in symbols:
        if symbol.kana in library:
            logger.warning("Duplicate glyph %r in pool; keeping the first entry", symbol.kana)
            continue
        library[symbol.kana] = build_template(symbol, renderer, canvas_size, target_size, margin)

    logger.info("Built %d glyph templates", len(library))
    return library
