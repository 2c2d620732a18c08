"""Sobel edge detection effect."""

from dataclasses import dataclass
from typing import ClassVar

import cv2
import numpy as np

from ..core.buffer import gray_rgba, new_buffer, round_half_up, to_uint8


SOBEL_HORIZONTAL = (-1.0, 0.0, 1.0, -2.0, 0.0, 2.0, -1.0, 0.0, 1.0)
SOBEL_VERTICAL = (-1.0, -2.0, -1.0, 0.0, 0.0, 0.0, 1.0, 2.0, 1.0)


def sobel_magnitude(intensity: np.ndarray) -> np.ndarray:
    """Gradient magnitude of an intensity plane.

    Kernels are applied as a correlation: element ``ky * 3 + kx`` weights
    the sample at ``(x + kx - 1, y + ky - 1)``. Only the interior is valid.

    Args:
        intensity: (H, W) float32 plane, H and W at least 3.

    Returns:
        (H - 2, W - 2) float32 magnitudes of the interior pixels.
    """
    kx = np.array(SOBEL_HORIZONTAL, dtype=np.float32).reshape(3, 3)
    ky = np.array(SOBEL_VERTICAL, dtype=np.float32).reshape(3, 3)

    gx = cv2.filter2D(intensity, cv2.CV_32F, kx, borderType=cv2.BORDER_CONSTANT)
    gy = cv2.filter2D(intensity, cv2.CV_32F, ky, borderType=cv2.BORDER_CONSTANT)

    return np.sqrt(gx * gx + gy * gy)[1:-1, 1:-1]


@dataclass(frozen=True)
class EdgeDetect:
    """Sobel edge magnitude as opaque gray.

    The one-pixel border is not computed and stays transparent black.
    """

    kind: ClassVar[str] = "edge"

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Apply edge detection to frame.

        Args:
            frame: Input frame (RGBA).

        Returns:
            New opaque gray frame holding the gradient magnitude.
        """
        height, width = frame.shape[:2]
        out = new_buffer(width, height)
        if height < 3 or width < 3:
            return out

        intensity = frame[:, :, :3].astype(np.float32).sum(axis=2) / 3.0
        magnitude = to_uint8(round_half_up(sobel_magnitude(intensity)))
        out[1:-1, 1:-1] = gray_rgba(magnitude)
        return out
