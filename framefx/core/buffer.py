"""RGBA8 pixel buffer helpers.

A frame is a numpy array of shape (height, width, 4) and dtype uint8.
Pixel (x, y) lives at ``frame[y, x]``.
"""

import numpy as np


LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def new_buffer(width: int, height: int) -> np.ndarray:
    """Create a transparent black RGBA buffer.

    Args:
        width: Buffer width in pixels.
        height: Buffer height in pixels.

    Returns:
        Zero-filled (height, width, 4) uint8 array.
    """
    return np.zeros((height, width, 4), dtype=np.uint8)


def ensure_rgba(frame: np.ndarray) -> np.ndarray:
    """Convert a gray, RGB or RGBA array to a contiguous RGBA8 buffer.

    Args:
        frame: Array of shape (H, W), (H, W, 3) or (H, W, 4).

    Returns:
        RGBA8 buffer. Missing alpha is filled with 255.

    Raises:
        ValueError: If the array has an unsupported shape.
    """
    if frame.ndim == 2:
        frame = np.repeat(frame[:, :, np.newaxis], 3, axis=2)

    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported frame shape: {frame.shape}")

    if frame.shape[2] == 3:
        alpha = np.full(frame.shape[:2] + (1,), 255, dtype=np.uint8)
        frame = np.concatenate([frame.astype(np.uint8), alpha], axis=2)

    return np.ascontiguousarray(frame, dtype=np.uint8)


def to_uint8(values: np.ndarray | float) -> np.ndarray:
    """Saturating float to uint8 conversion.

    NaN maps to 0, values are clamped to [0, 255] and truncated toward zero.
    This is the only float to byte rule used by the effects.
    """
    values = np.nan_to_num(np.asarray(values), nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(values, 0, 255).astype(np.uint8)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round non-negative values half away from zero."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def luma(frame: np.ndarray) -> np.ndarray:
    """Truncated 8-bit luma of an RGB(A) frame.

    Args:
        frame: RGB or RGBA uint8 array.

    Returns:
        (H, W) uint8 array of ``0.299R + 0.587G + 0.114B``.
    """
    weights = np.array(LUMA_WEIGHTS, dtype=np.float32)
    rgb = frame[:, :, :3].astype(np.float32)
    gray = rgb[:, :, 0] * weights[0] + rgb[:, :, 1] * weights[1] + rgb[:, :, 2] * weights[2]
    return to_uint8(gray)


def gray_rgba(gray: np.ndarray, alpha: np.ndarray | int = 255) -> np.ndarray:
    """Build an RGBA buffer with R=G=B=gray.

    Args:
        gray: (H, W) uint8 intensities.
        alpha: Alpha plane or constant.

    Returns:
        RGBA8 buffer.
    """
    height, width = gray.shape
    out = np.empty((height, width, 4), dtype=np.uint8)
    out[:, :, 0] = gray
    out[:, :, 1] = gray
    out[:, :, 2] = gray
    out[:, :, 3] = alpha
    return out
