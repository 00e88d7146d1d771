"""
Ink normalization: registers a raw drawing onto a fixed-size intensity grid.

Live ink and rendered glyph templates both pass through normalize_to_vector,
so the resulting vectors can be compared directly no matter what resolution
the source raster had or where on it the ink was drawn.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from config import ALPHA_THRESHOLD, BRIGHTNESS_THRESHOLD, MARGIN, TARGET_SIZE

logger = logging.getLogger(__name__)


class InvalidRasterError(ValueError):
    """Raised when a raster buffer is missing or has an unusable shape."""


def to_rgba(raster: np.ndarray) -> np.ndarray:
    """
    Coerce a raster into an (H, W, 4) uint8 RGBA array.

    Grayscale and RGB inputs are treated as fully opaque.

    Args:
        raster: (H, W), (H, W, 3) or (H, W, 4) array

    Returns:
        RGBA array (a copy only when a conversion was needed)
    """
    if raster is None:
        raise InvalidRasterError("No raster buffer available")

    raster = np.asarray(raster)
    if raster.ndim not in (2, 3) or raster.shape[0] == 0 or raster.shape[1] == 0:
        raise InvalidRasterError(f"Unusable raster shape {raster.shape}")

    if raster.dtype != np.uint8:
        raster = np.clip(raster, 0, 255).astype(np.uint8)

    if raster.ndim == 2:
        rgb = np.repeat(raster[:, :, np.newaxis], 3, axis=2)
        alpha = np.full(raster.shape + (1,), 255, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=2)

    channels = raster.shape[2]
    if channels == 4:
        return raster
    if channels == 3:
        alpha = np.full(raster.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([raster, alpha], axis=2)

    raise InvalidRasterError(f"Expected 3 or 4 colour channels, got {channels}")


def ink_mask(raster: np.ndarray) -> np.ndarray:
    """Boolean (H, W) mask of pixels that count as ink."""
    rgba = to_rgba(raster)
    brightness = rgba[:, :, :3].astype(np.float32).mean(axis=2)
    alpha = rgba[:, :, 3]
    return (alpha > ALPHA_THRESHOLD) & (brightness < BRIGHTNESS_THRESHOLD)


def has_ink(raster: np.ndarray) -> bool:
    """Check whether any pixel in the raster counts as ink."""
    return bool(ink_mask(raster).any())


def ink_bounding_box(raster: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """
    Get the inclusive bounding box of all ink pixels.

    Returns:
        (min_x, min_y, max_x, max_y) or None if the raster has no ink
    """
    mask = ink_mask(raster)
    ys, xs = np.nonzero(mask)
    if xs.size == 0:
        return None
    return int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())


def compute_placement(crop_width: int,
                      crop_height: int,
                      target_size: int = TARGET_SIZE,
                      margin: int = MARGIN) -> Tuple[int, int, int, int]:
    """
    Work out where a crop lands in the output frame.

    The crop is scaled by one factor on both axes so it fits inside
    target_size - margin, then centered.

    Args:
        crop_width: Width of the ink bounding box
        crop_height: Height of the ink bounding box
        target_size: Side of the square output frame
        margin: Total padding kept free around the drawing

    Returns:
        (draw_width, draw_height, offset_x, offset_y)
    """
    if crop_width <= 0 or crop_height <= 0:
        raise ValueError(f"Crop must be non-empty, got {crop_width}x{crop_height}")

    available = target_size - margin
    scale = min(available / crop_width, available / crop_height)

    # Python's round() is banker's rounding; a canvas blit rounds half up
    draw_width = max(1, int(np.floor(crop_width * scale + 0.5)))
    draw_height = max(1, int(np.floor(crop_height * scale + 0.5)))

    offset_x = (target_size - draw_width) // 2
    offset_y = (target_size - draw_height) // 2
    return draw_width, draw_height, offset_x, offset_y


def _composite_on_white(rgba: np.ndarray) -> np.ndarray:
    """Flatten RGBA over a white background, giving float RGB."""
    rgb = rgba[:, :, :3].astype(np.float32)
    alpha = rgba[:, :, 3:4].astype(np.float32) / 255.0
    return rgb * alpha + 255.0 * (1.0 - alpha)


def render_registered(raster: np.ndarray,
                      target_size: int = TARGET_SIZE,
                      margin: int = MARGIN) -> Optional[np.ndarray]:
    """
    Crop, scale and center the ink onto a white target_size frame.

    Args:
        raster: Source raster of any size
        target_size: Side of the output frame
        margin: Padding kept free around the drawing

    Returns:
        (target_size, target_size, 3) float32 RGB frame, or None when the
        raster has no ink
    """
    rgba = to_rgba(raster)
    bbox = ink_bounding_box(rgba)
    if bbox is None:
        return None

    min_x, min_y, max_x, max_y = bbox
    crop_width = max_x - min_x + 1
    crop_height = max_y - min_y + 1
    draw_width, draw_height, offset_x, offset_y = compute_placement(
        crop_width, crop_height, target_size, margin)

    cropped = _composite_on_white(rgba[min_y:max_y + 1, min_x:max_x + 1])

    # Area averaging when shrinking, bilinear when enlarging
    if draw_width < crop_width or draw_height < crop_height:
        interpolation = cv2.INTER_AREA
    else:
        interpolation = cv2.INTER_LINEAR
    resized = cv2.resize(cropped, (draw_width, draw_height), interpolation=interpolation)
    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]

    frame = np.full((target_size, target_size, 3), 255.0, dtype=np.float32)
    frame[offset_y:offset_y + draw_height, offset_x:offset_x + draw_width] = resized
    return frame


def normalize_to_vector(raster: np.ndarray,
                        target_size: int = TARGET_SIZE,
                        margin: int = MARGIN) -> np.ndarray:
    """
    Convert a raster into a fixed-length ink intensity vector.

    Each output cell holds 1 - mean(R, G, B) / 255 of the registered frame,
    flattened row-major. A raster without ink yields an all-zero vector.

    Args:
        raster: RGBA (or RGB / grayscale) raster of any size
        target_size: Side of the square output grid
        margin: Padding kept free around the drawing

    Returns:
        Read-only float32 vector of length target_size ** 2
    """
    frame = render_registered(raster, target_size, margin)
    if frame is None:
        logger.debug("No ink found; returning zero vector")
        vector = np.zeros(target_size * target_size, dtype=np.float32)
    else:
        brightness = frame.mean(axis=2)
        vector = np.clip(1.0 - brightness / 255.0, 0.0, 1.0).astype(np.float32).ravel()

    vector.setflags(write=False)
    return vector
