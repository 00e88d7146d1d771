#!/usr/bin/env python3
"""
kanascribe: draw the kana for a romanized prompt and get it checked on-device
"""

import argparse
import logging
import sys

import cv2
import numpy as np

import config
from character_recognizer import CharacterRecognizer
from drawing_manager import DrawingManager
from glyph_templates import FontGlyphRenderer, TemplateLibraryError
from kana_data import MODES
from kana_session import ANSWER_SUBMITTED, KanaDrawingSession
from stats_store import JsonStatsStore

WINDOW_NAME = "kanascribe"
PANEL_HEIGHT = 150

logger = logging.getLogger(__name__)


class KanaDrillApp:
    def __init__(self, session: KanaDrawingSession, drawing_manager: DrawingManager, stats: JsonStatsStore):
        """Initialize the drill window around an already-built session."""
        self.session = session
        self.drawing_manager = drawing_manager
        self.stats = stats

        self.is_running = True
        self.feedback = ""

        # UI elements
        self.font = cv2.FONT_HERSHEY_SIMPLEX

    def on_mouse(self, event, x, y, flags, param):
        """Translate window mouse events into canvas strokes."""
        y -= PANEL_HEIGHT
        if event == cv2.EVENT_LBUTTONDOWN:
            if y >= 0:
                self.drawing_manager.begin_stroke((x, y))
        elif event == cv2.EVENT_MOUSEMOVE:
            if self.drawing_manager.is_drawing:
                self.drawing_manager.add_stroke_point((x, y))
        elif event == cv2.EVENT_LBUTTONUP:
            if self.drawing_manager.is_drawing:
                self.drawing_manager.end_current_stroke()

    def submit_or_advance(self):
        """Enter submits the drawing, or moves on once it has been graded."""
        if self.session.state.phase == ANSWER_SUBMITTED:
            self.session.next_question()
            self.feedback = ""
            return

        outcome = self.session.submit()
        self.feedback = outcome.feedback
        print(outcome.feedback)
        if outcome.graded:
            print(f"Weakest so far: {self.stats.weakest_preview()}")

    def cycle_mode(self):
        index = MODES.index(self.session.mode)
        mode = MODES[(index + 1) % len(MODES)]
        self.session.change_mode(mode)
        self.feedback = ""
        print(f"Mode: {mode}")

    def draw_ui(self) -> np.ndarray:
        """Compose the info panel above the drawing canvas."""
        canvas = self.drawing_manager.to_bgr()
        width = canvas.shape[1]
        panel = np.full((PANEL_HEIGHT, width, 3), 30, dtype=np.uint8)

        state = self.session.state
        prompt = state.prompt
        cv2.putText(panel, f"Draw: {prompt.romaji}", (10, 40), self.font, 1.1, (255, 255, 255), 2)
        cv2.putText(panel, f"({prompt.script}, mode {state.mode})", (10, 70), self.font, 0.5, (200, 200, 200), 1)

        totals = f"Asked {state.asked}  Correct {state.correct}  Missed {state.incorrect}  Retry {len(state.retry_queue)}"
        cv2.putText(panel, totals, (10, 95), self.font, 0.5, (200, 200, 200), 1)

        outcome = state.last_outcome
        if outcome is not None:
            # Hershey fonts cannot draw kana, so the window shows romaji only
            colour = (0, 255, 0) if outcome.is_correct else (0, 0, 255)
            text = "Correct!" if outcome.is_correct else f"Not quite: expected {outcome.prompt.romaji}"
            cv2.putText(panel, text, (10, 120), self.font, 0.6, colour, 2)
        elif self.feedback:
            cv2.putText(panel, self.feedback, (10, 120), self.font, 0.5, (0, 200, 255), 1)

        cv2.putText(panel, "Enter: submit/next  c: clear  m: mode  q: quit",
                    (10, PANEL_HEIGHT - 10), self.font, 0.45, (160, 160, 160), 1)
        return np.vstack([panel, canvas])

    def run(self):
        """Main application loop."""
        print("kanascribe started")
        print("Draw the kana for the romaji shown, then press Enter")

        cv2.namedWindow(WINDOW_NAME)
        cv2.setMouseCallback(WINDOW_NAME, self.on_mouse)

        while self.is_running:
            cv2.imshow(WINDOW_NAME, self.draw_ui())

            key = cv2.waitKey(20) & 0xFF
            if key in (ord('q'), 27):
                self.is_running = False
            elif key in (13, 10, ord(' ')):
                self.submit_or_advance()
            elif key == ord('c'):
                self.session.clear()
                self.feedback = ""
            elif key == ord('m'):
                self.cycle_mode()

        cv2.destroyAllWindows()
        state = self.session.state
        print(f"Session: {state.correct}/{state.asked} correct")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="On-device kana handwriting drill")
    parser.add_argument("--mode", choices=MODES, default=MODES[0], help="script to practise")
    parser.add_argument("--seed", type=int, default=None, help="seed for prompt sampling")
    parser.add_argument("--font", default=None, help="font file used to render templates")
    parser.add_argument("--stats", default=str(config.STATS_PATH), help="progress JSON file")
    parser.add_argument("--canvas-size", type=int, default=config.CANVAS_SIZE[0],
                        help="side of the square drawing canvas in pixels")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("PIL").setLevel(logging.WARNING)

    try:
        renderer = FontGlyphRenderer(args.font)
    except TemplateLibraryError as e:
        logger.error("%s", e)
        print("Drawing exercise disabled: no font available to build kana templates.")
        return 1

    recognizer = CharacterRecognizer(renderer=renderer)
    if not recognizer.initialize():
        print(f"Drawing exercise disabled: {recognizer.error}")
        return 1

    stats = JsonStatsStore(args.stats)
    drawing_manager = DrawingManager(canvas_size=(args.canvas_size, args.canvas_size))
    session = KanaDrawingSession(
        drawing_manager, recognizer, stats=stats, mode=args.mode,
        rng=np.random.default_rng(args.seed))

    KanaDrillApp(session, drawing_manager, stats).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
