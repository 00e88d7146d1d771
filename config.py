"""
Configuration for the kana drawing drill.
Tweak recognition, capture and storage behaviour here.
"""

import os
from pathlib import Path

# ===============================
# INK NORMALIZATION
# ===============================

# Output grid is TARGET_SIZE x TARGET_SIZE (vector length TARGET_SIZE ** 2)
TARGET_SIZE = 32

# Padding kept free around the registered drawing
MARGIN = 4

# A pixel is ink when alpha > ALPHA_THRESHOLD and mean RGB < BRIGHTNESS_THRESHOLD
ALPHA_THRESHOLD = 15
BRIGHTNESS_THRESHOLD = 245

# ===============================
# TEMPLATE LIBRARY
# ===============================

# Offscreen canvas the printed glyph is rendered onto
TEMPLATE_CANVAS_SIZE = 96
TEMPLATE_FONT_SIZE = 62

# Set KANASCRIBE_FONT to force a specific font file
FONT_ENV_VAR = "KANASCRIBE_FONT"

# Searched in order; the first existing file wins
FONT_CANDIDATES = [
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/noto-cjk/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/google-noto-cjk/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/truetype/noto/NotoSansJP-Regular.ttf",
    "/usr/share/fonts/opentype/source-han-sans/SourceHanSans-Regular.ttc",
    "/usr/share/fonts/opentype/ipafont-gothic/ipag.ttf",
    "/usr/share/fonts/truetype/fonts-japanese-gothic.ttf",
    "/usr/share/fonts/truetype/takao-gothic/TakaoGothic.ttf",
    "/System/Library/Fonts/ヒラギノ角ゴシック W3.ttc",
    "/System/Library/Fonts/Hiragino Sans GB.ttc",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:/Windows/Fonts/YuGothM.ttc",
    "C:/Windows/Fonts/meiryo.ttc",
    "C:/Windows/Fonts/msgothic.ttc",
]

# ===============================
# STROKE CAPTURE
# ===============================

# Drawing canvas (width, height) in pixels
CANVAS_SIZE = (480, 480)

# RGBA colours
BACKGROUND_COLOR = (255, 255, 255, 255)
INK_COLOR = (17, 17, 17, 255)

# Stroke thickness = max(MIN_STROKE_THICKNESS, round(width * STROKE_THICKNESS_RATIO))
MIN_STROKE_THICKNESS = 8
STROKE_THICKNESS_RATIO = 0.05

# ===============================
# PROGRESS STORAGE
# ===============================

STATS_PATH = Path(
    os.environ.get("KANASCRIBE_STATS_PATH", Path.home() / ".kanascribe" / "kana_stats.json")
)

# How many weak symbols the progress preview lists
WEAK_SYMBOL_PREVIEW = 5

# ===============================
# LOGGING
# ===============================

LOG_LEVEL = os.environ.get("KANASCRIBE_LOG_LEVEL", "INFO")
