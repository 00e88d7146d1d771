"""
Drawing management module for capturing pointer strokes into an RGBA raster.
"""

import time
from typing import Dict, List, Optional, Protocol, Tuple

import cv2
import numpy as np

from config import (
    BACKGROUND_COLOR,
    CANVAS_SIZE,
    INK_COLOR,
    MIN_STROKE_THICKNESS,
    STROKE_THICKNESS_RATIO,
)


class InkSurface(Protocol):
    """Anything that can hand over its current raster and wipe itself."""

    def read_raster(self) -> np.ndarray:
        ...

    def reset(self) -> None:
        ...


def stroke_thickness_for(canvas_width: int) -> int:
    """Pen width scales with the canvas so strokes look alike at any resolution."""
    return max(MIN_STROKE_THICKNESS, int(round(canvas_width * STROKE_THICKNESS_RATIO)))


class Stroke:
    """Represents a single drawing stroke."""

    def __init__(self, color: Tuple[int, int, int, int] = INK_COLOR, thickness: int = MIN_STROKE_THICKNESS):
        """
        Initialize a stroke.

        Args:
            color: RGBA colour of the stroke
            thickness: Thickness of the stroke line
        """
        self.points: List[Tuple[int, int]] = []
        self.color = color
        self.thickness = thickness
        self.timestamp = time.time()
        self.is_complete = False

    def add_point(self, point: Tuple[int, int]):
        """Add a point to the stroke."""
        self.points.append(point)

    def complete(self):
        """Mark the stroke as complete."""
        self.is_complete = True

    def get_bounding_box(self) -> Optional[Tuple[int, int, int, int]]:
        """
        Get the bounding box of the stroke centre line.

        Returns:
            (x, y, width, height) or None if no points
        """
        if not self.points:
            return None

        x_coords = [p[0] for p in self.points]
        y_coords = [p[1] for p in self.points]

        min_x, max_x = min(x_coords), max(x_coords)
        min_y, max_y = min(y_coords), max(y_coords)

        return (min_x, min_y, max_x - min_x, max_y - min_y)


class DrawingManager:
    """Collects pointer strokes and rasterizes them onto a white RGBA canvas."""

    def __init__(self,
                 canvas_size: Tuple[int, int] = CANVAS_SIZE,
                 stroke_color: Tuple[int, int, int, int] = INK_COLOR,
                 background_color: Tuple[int, int, int, int] = BACKGROUND_COLOR):
        """
        Initialize the drawing manager.

        Args:
            canvas_size: Size of the drawing canvas (width, height)
            stroke_color: RGBA colour for strokes
            background_color: RGBA colour the canvas is cleared to
        """
        self.stroke_color = stroke_color
        self.background_color = background_color

        self.strokes: List[Stroke] = []
        self.current_stroke: Optional[Stroke] = None
        self.canvas_size = canvas_size
        self.stroke_thickness = stroke_thickness_for(canvas_size[0])
        self.canvas = self._blank_canvas()
        self._has_ink = False

    def _blank_canvas(self) -> np.ndarray:
        width, height = self.canvas_size
        canvas = np.empty((height, width, 4), dtype=np.uint8)
        canvas[:, :] = self.background_color
        return canvas

    def _clamp(self, point: Tuple[float, float]) -> Tuple[int, int]:
        width, height = self.canvas_size
        x = int(round(min(max(point[0], 0), width - 1)))
        y = int(round(min(max(point[1], 0), height - 1)))
        return (x, y)

    def begin_stroke(self, point: Tuple[float, float]):
        """
        Start a new stroke at the given point (pointer down).

        A single tap leaves a dot, like a round pen cap touching the canvas.
        """
        if self.current_stroke is not None:
            self.end_current_stroke()

        start = self._clamp(point)
        self.current_stroke = Stroke(self.stroke_color, self.stroke_thickness)
        self.current_stroke.add_point(start)
        cv2.line(self.canvas, start, start, self.stroke_color, self.stroke_thickness, cv2.LINE_AA)
        self._has_ink = True

    def add_stroke_point(self, point: Tuple[float, float]):
        """
        Extend the current stroke to a point (pointer move).

        Args:
            point: (x, y) canvas coordinates
        """
        if self.current_stroke is None:
            return

        end = self._clamp(point)
        start = self.current_stroke.points[-1]
        self.current_stroke.add_point(end)
        cv2.line(self.canvas, start, end, self.stroke_color, self.stroke_thickness, cv2.LINE_AA)

    def end_current_stroke(self):
        """End the current stroke and add it to the strokes list (pointer up)."""
        if self.current_stroke is not None:
            self.current_stroke.complete()
            self.strokes.append(self.current_stroke)
        self.current_stroke = None

    @property
    def is_drawing(self) -> bool:
        return self.current_stroke is not None

    def has_ink(self) -> bool:
        """Check whether anything has been drawn since the last reset."""
        return self._has_ink

    def read_raster(self) -> np.ndarray:
        """Return a copy of the current RGBA raster, shape (height, width, 4)."""
        return self.canvas.copy()

    def reset(self, canvas_size: Optional[Tuple[int, int]] = None):
        """
        Clear the canvas to the background colour.

        Args:
            canvas_size: New (width, height) to switch resolution, e.g. after
                the window was resized. Pen width follows the new width.
        """
        if canvas_size is not None and tuple(canvas_size) != tuple(self.canvas_size):
            width, height = canvas_size
            self.canvas_size = (max(1, int(width)), max(1, int(height)))
            self.stroke_thickness = stroke_thickness_for(self.canvas_size[0])

        self.strokes.clear()
        self.current_stroke = None
        self.canvas = self._blank_canvas()
        self._has_ink = False

    def clear_drawing(self):
        """Clear all strokes, keeping the current resolution."""
        self.reset()

    def to_bgr(self) -> np.ndarray:
        """The canvas as an opaque BGR image for OpenCV display."""
        return cv2.cvtColor(self.canvas, cv2.COLOR_RGBA2BGR)

    def get_stroke_count(self) -> int:
        """Get the number of completed strokes."""
        return len(self.strokes)

    def get_total_points(self) -> int:
        """Get the total number of points in all strokes."""
        total = sum(len(stroke.points) for stroke in self.strokes)
        if self.current_stroke:
            total += len(self.current_stroke.points)
        return total

    def get_drawing_stats(self) -> Dict[str, int]:
        """Get statistics about the current drawing."""
        return {
            'stroke_count': self.get_stroke_count(),
            'total_points': self.get_total_points(),
            'has_current_stroke': self.current_stroke is not None,
            'canvas_width': self.canvas_size[0],
            'canvas_height': self.canvas_size[1],
            'stroke_thickness': self.stroke_thickness,
        }
