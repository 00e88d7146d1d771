"""
Session control for the kana drawing drill.

The drill state lives in an immutable SessionState. Each transition function
takes the current state and returns a new one, so a session can be replayed
or tested step by step. KanaDrawingSession wires those transitions to a
capture surface, the recognizer and a statistics store.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from character_recognizer import CharacterRecognizer, ClassificationResult
from drawing_manager import InkSurface
from ink_normalizer import has_ink
from kana_data import HIRAGANA, KANA_SYMBOLS, KanaSymbol, find_symbol, symbols_for_mode, validate_mode
from stats_store import StatsReporter

logger = logging.getLogger(__name__)

AWAITING_DRAWING = "awaiting-drawing"
ANSWER_SUBMITTED = "answer-submitted"

EMPTY = "empty"
CORRECT = "correct"
INCORRECT = "incorrect"

EMPTY_DRAWING_MESSAGE = "Draw a kana character first, then submit."


@dataclass(frozen=True)
class GradeOutcome:
    """What happened when a drawing was submitted."""

    status: str
    prompt: KanaSymbol
    predicted: Optional[str] = None
    score: Optional[float] = None
    feedback: str = ""

    @property
    def graded(self) -> bool:
        return self.status in (CORRECT, INCORRECT)

    @property
    def is_correct(self) -> bool:
        return self.status == CORRECT


@dataclass(frozen=True)
class SessionState:
    mode: str
    prompt: KanaSymbol
    phase: str = AWAITING_DRAWING
    retry_queue: Tuple[KanaSymbol, ...] = ()
    miss_counts: Dict[str, int] = field(default_factory=dict)
    asked: int = 0
    correct: int = 0
    incorrect: int = 0
    last_outcome: Optional[GradeOutcome] = None

    @property
    def accuracy(self) -> float:
        return self.correct / self.asked if self.asked else 0.0


def pick_prompt(symbols: Sequence[KanaSymbol],
                mode: str,
                retry_queue: Tuple[KanaSymbol, ...],
                rng: np.random.Generator) -> Tuple[KanaSymbol, Tuple[KanaSymbol, ...]]:
    """
    Choose the next prompt.

    Missed prompts come back first, oldest miss first. With an empty queue a
    symbol is drawn uniformly from the mode's pool.

    Returns:
        (prompt, remaining retry queue)
    """
    if retry_queue:
        return retry_queue[0], retry_queue[1:]

    pool = symbols_for_mode(symbols, mode)
    if not pool:
        raise ValueError(f"No symbols available for mode {mode!r}")
    return pool[int(rng.integers(len(pool)))], retry_queue


def start_session(symbols: Sequence[KanaSymbol],
                  mode: str,
                  rng: np.random.Generator) -> SessionState:
    """Fresh state with a freshly sampled prompt."""
    validate_mode(mode)
    prompt, queue = pick_prompt(symbols, mode, (), rng)
    return SessionState(mode=mode, prompt=prompt, retry_queue=queue)


def _describe(glyph: Optional[str], symbols: Sequence[KanaSymbol]) -> str:
    if not glyph:
        return "nothing recognizable"
    symbol = find_symbol(symbols, glyph)
    return f"{glyph} ({symbol.romaji})" if symbol is not None else glyph


def grade_prediction(state: SessionState,
                     result: Optional[ClassificationResult],
                     symbols: Sequence[KanaSymbol] = KANA_SYMBOLS) -> Tuple[SessionState, GradeOutcome]:
    """
    Grade a classifier result against the active prompt.

    A miss (including no result at all) queues the prompt for retry and
    bumps its miss counter.
    """
    prompt = state.prompt
    predicted = result.glyph if result is not None else None
    score = result.score if result is not None else None

    if predicted == prompt.kana:
        outcome = GradeOutcome(CORRECT, prompt, predicted, score,
                               f"Correct: {prompt.romaji} -> {prompt.kana}")
        new_state = replace(state,
                            phase=ANSWER_SUBMITTED,
                            asked=state.asked + 1,
                            correct=state.correct + 1,
                            last_outcome=outcome)
        return new_state, outcome

    outcome = GradeOutcome(INCORRECT, prompt, predicted, score,
                           f"Not quite. You drew {_describe(predicted, symbols)}, expected {prompt.kana}.")
    miss_counts = dict(state.miss_counts)
    miss_counts[prompt.kana] = miss_counts.get(prompt.kana, 0) + 1
    new_state = replace(state,
                        phase=ANSWER_SUBMITTED,
                        retry_queue=state.retry_queue + (prompt,),
                        miss_counts=miss_counts,
                        asked=state.asked + 1,
                        incorrect=state.incorrect + 1,
                        last_outcome=outcome)
    return new_state, outcome


def submit_drawing(state: SessionState,
                   raster: np.ndarray,
                   recognizer: CharacterRecognizer,
                   symbols: Sequence[KanaSymbol] = KANA_SYMBOLS) -> Tuple[SessionState, GradeOutcome]:
    """
    Grade a drawing for the active prompt.

    An empty drawing is turned away without touching any counter or calling
    the classifier. Submitting twice for the same prompt returns the first
    outcome unchanged.

    Raises:
        RecognizerNotReadyError: If the recognizer has no template library
    """
    if state.phase == ANSWER_SUBMITTED and state.last_outcome is not None:
        return state, state.last_outcome

    if not has_ink(raster):
        return state, GradeOutcome(EMPTY, state.prompt, feedback=EMPTY_DRAWING_MESSAGE)

    result = recognizer.recognize(raster, state.mode)
    return grade_prediction(state, result, symbols)


def next_prompt(state: SessionState,
                symbols: Sequence[KanaSymbol],
                rng: np.random.Generator) -> SessionState:
    """Move on to the next prompt, draining the retry queue first."""
    prompt, queue = pick_prompt(symbols, state.mode, state.retry_queue, rng)
    return replace(state, prompt=prompt, retry_queue=queue,
                   phase=AWAITING_DRAWING, last_outcome=None)


def change_mode(state: SessionState,
                mode: str,
                symbols: Sequence[KanaSymbol],
                rng: np.random.Generator) -> SessionState:
    """Switch script mode; pending retries from the old mode are dropped."""
    validate_mode(mode)
    prompt, queue = pick_prompt(symbols, mode, (), rng)
    return replace(state, mode=mode, prompt=prompt, retry_queue=queue,
                   phase=AWAITING_DRAWING, last_outcome=None)


class KanaDrawingSession:
    """Drives one drawing drill: surface -> recognizer -> grading -> stats."""

    def __init__(self,
                 surface: InkSurface,
                 recognizer: CharacterRecognizer,
                 stats: Optional[StatsReporter] = None,
                 mode: str = HIRAGANA,
                 rng: Optional[np.random.Generator] = None,
                 symbols: Optional[Sequence[KanaSymbol]] = None):
        """
        Args:
            surface: Capture surface providing read_raster() and reset()
            recognizer: Initialized recognizer
            stats: Receives (glyph, was_correct) for each graded answer
            mode: Starting script mode
            rng: Random source for prompt sampling; seed it for repeatable runs
            symbols: Glyph pool; defaults to the recognizer's pool
        """
        self.surface = surface
        self.recognizer = recognizer
        self.stats = stats
        self.rng = rng if rng is not None else np.random.default_rng()
        self.symbols = tuple(symbols) if symbols is not None else recognizer.symbols
        self.state = start_session(self.symbols, mode, self.rng)

    @property
    def prompt(self) -> KanaSymbol:
        return self.state.prompt

    @property
    def mode(self) -> str:
        return self.state.mode

    def submit(self) -> GradeOutcome:
        """Grade whatever is on the surface and report graded answers."""
        already_graded = self.state.phase == ANSWER_SUBMITTED
        self.state, outcome = submit_drawing(
            self.state, self.surface.read_raster(), self.recognizer, self.symbols)

        if outcome.graded and not already_graded:
            logger.info("Prompt %s (%s): %s, predicted %r",
                        outcome.prompt.kana, outcome.prompt.romaji, outcome.status, outcome.predicted)
            if self.stats is not None:
                self.stats.record(outcome.prompt.kana, outcome.is_correct)
        return outcome

    def next_question(self) -> KanaSymbol:
        self.state = next_prompt(self.state, self.symbols, self.rng)
        self.surface.reset()
        return self.state.prompt

    def change_mode(self, mode: str) -> KanaSymbol:
        self.state = change_mode(self.state, mode, self.symbols, self.rng)
        self.surface.reset()
        return self.state.prompt

    def clear(self):
        self.surface.reset()
