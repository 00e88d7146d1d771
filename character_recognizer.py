"""
Character recognition module: matches normalized ink against glyph templates.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine

from glyph_templates import GlyphRenderer, GlyphTemplate, TemplateLibraryError, build_template_library
from ink_normalizer import normalize_to_vector
from kana_data import KANA_SYMBOLS, KanaSymbol, symbols_for_mode

logger = logging.getLogger(__name__)

INIT_ERROR_MESSAGE = "Failed to initialize local recognizer."


class VectorLengthError(ValueError):
    """Raised when two ink vectors of different lengths are compared."""


class RecognizerNotReadyError(RuntimeError):
    """Raised when classification is attempted before the library is built."""


@dataclass(frozen=True)
class ClassificationResult:
    """Best matching glyph and its cosine similarity score."""

    glyph: str
    score: float


def _as_row(vector) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64).reshape(1, -1)


def cosine_similarity(a, b) -> float:
    """
    Cosine of the angle between two ink vectors.

    A zero vector on either side scores 0 rather than NaN.

    Raises:
        VectorLengthError: If the vectors differ in length
    """
    row_a, row_b = _as_row(a), _as_row(b)
    if row_a.shape[1] != row_b.shape[1]:
        raise VectorLengthError(f"Cannot compare vectors of length {row_a.shape[1]} and {row_b.shape[1]}")
    return float(_pairwise_cosine(row_a, row_b)[0, 0])


def score_candidates(vector,
                     candidates: Iterable[str],
                     library: Dict[str, GlyphTemplate]) -> List[ClassificationResult]:
    """
    Score every candidate that has a template, in candidate order.

    Candidates missing from the library are skipped.
    """
    present = []
    for glyph in candidates:
        if glyph in library:
            present.append(glyph)
        else:
            logger.debug("No template for candidate %r; skipping", glyph)

    if not present:
        return []

    query = _as_row(vector)
    templates = np.vstack([_as_row(library[glyph].vector) for glyph in present])
    if templates.shape[1] != query.shape[1]:
        raise VectorLengthError(
            f"Query has length {query.shape[1]} but templates have length {templates.shape[1]}")

    scores = _pairwise_cosine(query, templates)[0]
    return [ClassificationResult(glyph, float(score)) for glyph, score in zip(present, scores)]


def classify(vector,
             candidates: Iterable[str],
             library: Dict[str, GlyphTemplate]) -> Optional[ClassificationResult]:
    """
    Pick the candidate whose template is most similar to the vector.

    A later candidate only replaces the current best on a strictly greater
    score, so ties go to the first candidate seen.

    Args:
        vector: Normalized ink vector
        candidates: Glyph identifiers to consider, in priority order
        library: Template library

    Returns:
        Best ClassificationResult, or None if no candidate has a template
    """
    best: Optional[ClassificationResult] = None
    for result in score_candidates(vector, candidates, library):
        if best is None or result.score > best.score:
            best = result
    return best


class CharacterRecognizer:
    """Recognizes kana drawings against a template library built at startup."""

    def __init__(self,
                 symbols: Sequence[KanaSymbol] = KANA_SYMBOLS,
                 renderer: Optional[GlyphRenderer] = None):
        """
        Initialize the character recognizer.

        Args:
            symbols: Glyph pool to build templates for
            renderer: Glyph renderer; a font renderer is created when omitted
        """
        self.symbols = tuple(symbols)
        self.renderer = renderer
        self.templates: Dict[str, GlyphTemplate] = {}
        self.ready = False
        self.error = ""

    def initialize(self) -> bool:
        """
        Build the template library.

        On failure the recognizer stays unready and no templates are kept.

        Returns:
            True if the recognizer is ready to classify
        """
        try:
            self.templates = build_template_library(self.symbols, self.renderer)
        except TemplateLibraryError as e:
            logger.error("Recognizer initialization failed: %s", e)
            self.templates = {}
            self.ready = False
            self.error = INIT_ERROR_MESSAGE
            return False

        self.ready = True
        self.error = ""
        return True

    def candidates_for(self, mode: str) -> List[str]:
        """Glyphs eligible in the given mode, in pool order."""
        return [symbol.kana for symbol in symbols_for_mode(self.symbols, mode)]

    def classify_vector(self, vector, mode: str) -> Optional[ClassificationResult]:
        """Classify an already-normalized vector."""
        if not self.ready:
            raise RecognizerNotReadyError(self.error or "Recognizer has not been initialized")
        return classify(vector, self.candidates_for(mode), self.templates)

    def recognize(self, raster: np.ndarray, mode: str) -> Optional[ClassificationResult]:
        """
        Recognize a kana from a raw drawing.

        Args:
            raster: RGBA raster from the capture surface
            mode: Script mode restricting the candidates

        Returns:
            Best match, or None if no candidate has a template
        """
        if not self.ready:
            raise RecognizerNotReadyError(self.error or "Recognizer has not been initialized")

        vector = normalize_to_vector(raster)
        result = self.classify_vector(vector, mode)
        if result is not None:
            logger.debug("Recognized %r (score %.3f)", result.glyph, result.score)
        return result
