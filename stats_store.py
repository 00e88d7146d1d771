"""
Lifetime progress for the drawing drill, kept in a small JSON file.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Union

from config import STATS_PATH, WEAK_SYMBOL_PREVIEW

logger = logging.getLogger(__name__)


class StatsReporter(Protocol):
    """Receives one (glyph, was_correct) report per graded answer."""

    def record(self, glyph: str, was_correct: bool) -> None:
        ...


@dataclass
class KanaLifetimeStats:
    correct: int = 0
    incorrect: int = 0
    weak_symbols: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "KanaLifetimeStats":
        weak = data.get("weakSymbols", data.get("weak_symbols", {})) or {}
        return cls(
            correct=int(data.get("correct", 0)),
            incorrect=int(data.get("incorrect", 0)),
            weak_symbols={str(k): int(v) for k, v in weak.items()},
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "correct": data["correct"],
            "incorrect": data["incorrect"],
            "weakSymbols": data["weak_symbols"],
        }


class JsonStatsStore:
    """Loads and saves KanaLifetimeStats; unreadable files fall back to defaults."""

    def __init__(self, path: Union[str, Path] = STATS_PATH):
        self.path = Path(path)
        self.stats = self.load()

    def load(self) -> KanaLifetimeStats:
        """
        Read stats from disk.

        Returns:
            Stored stats, or fresh defaults if the file is missing or corrupt
        """
        if not self.path.exists():
            return KanaLifetimeStats()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return KanaLifetimeStats.from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable stats file %s: %s", self.path, e)
            return KanaLifetimeStats()

    def save(self, stats: Optional[KanaLifetimeStats] = None):
        """Write stats (the in-memory copy by default) to disk."""
        if stats is not None:
            self.stats = stats
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.stats.to_dict(), f, ensure_ascii=False, indent=2)

    def record(self, glyph: str, was_correct: bool):
        """Count one graded answer and persist immediately."""
        if was_correct:
            self.stats.correct += 1
        else:
            self.stats.incorrect += 1
            self.stats.weak_symbols[glyph] = self.stats.weak_symbols.get(glyph, 0) + 1
        self.save()

    def clear(self):
        """Forget all progress and remove the file."""
        self.stats = KanaLifetimeStats()
        if self.path.exists():
            self.path.unlink()

    def weakest(self, limit: int = WEAK_SYMBOL_PREVIEW) -> List[Tuple[str, int]]:
        """Most-missed glyphs first; ties keep first-recorded order."""
        ranked = sorted(self.stats.weak_symbols.items(), key=lambda item: item[1], reverse=True)
        return ranked[:limit]

    def weakest_preview(self, limit: int = WEAK_SYMBOL_PREVIEW) -> str:
        top = [f"{glyph} ({misses})" for glyph, misses in self.weakest(limit)]
        return ", ".join(top) if top else "No weak symbols yet"
