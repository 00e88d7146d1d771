"""Shared pytest fixtures for the kanascribe test suite.

Fixtures:
    shape_renderer: Glyph renderer drawing synthetic stand-in shapes
    shape_recognizer: CharacterRecognizer initialized over the test symbols
    stats_path: Path to a not-yet-existing stats JSON file

Markers:
    slow: Mark test as slow-running (skip with -m "not slow")
"""

import sys
from pathlib import Path

import pytest

# Project modules live at the repository root
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from character_recognizer import CharacterRecognizer  # noqa: E402
from shapes import TEST_SYMBOLS, ShapeGlyphRenderer  # noqa: E402


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def shape_renderer():
    return ShapeGlyphRenderer()


@pytest.fixture
def shape_recognizer(shape_renderer):
    recognizer = CharacterRecognizer(symbols=TEST_SYMBOLS, renderer=shape_renderer)
    assert recognizer.initialize()
    return recognizer


@pytest.fixture
def stats_path(tmp_path):
    return tmp_path / "progress" / "kana_stats.json"
