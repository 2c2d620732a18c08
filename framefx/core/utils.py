"""Image utility functions."""

import cv2
import numpy as np


def limit_dimension(frame: np.ndarray, max_dim: int) -> np.ndarray:
    """Scale a frame down so neither side exceeds max_dim.

    Args:
        frame: Input frame.
        max_dim: Maximum width/height. 0 or less disables scaling.

    Returns:
        The original frame, or a resized copy.
    """
    if max_dim <= 0:
        return frame

    height, width = frame.shape[:2]
    if max(height, width) <= max_dim:
        return frame

    scale = max_dim / max(height, width)
    new_width = max(1, int(width * scale))
    new_height = max(1, int(height * scale))
    return cv2.resize(frame, (new_width, new_height), interpolation=cv2.INTER_AREA)
