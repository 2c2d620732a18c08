"""Floyd-Steinberg error diffusion dithering."""

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from ..core.buffer import luma


THRESHOLD = 128

# (dx, dy, weight) for the four forward neighbours.
DIFFUSION_WEIGHTS = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)


def _gray_levels() -> list:
    """Luma of every gray pixel (R=G=B=v), with float32 truncation."""
    levels = np.arange(256, dtype=np.uint8)
    gray = np.stack([levels, levels, levels], axis=1)[np.newaxis]
    return luma(gray)[0].tolist()


_GRAY_LEVELS = _gray_levels()


def diffuse(frame: np.ndarray) -> np.ndarray:
    """Dither a frame to black and white in place.

    Pixels are visited in raster order. A diffused correction rewrites the
    neighbour's R, G and B with ``clamp(R + error * weight)``, so later
    pixels read the already corrected values.

    Args:
        frame: RGBA8 buffer; modified in place.

    Returns:
        The same buffer. Alpha is preserved.
    """
    height, width = frame.shape[:2]

    initial = luma(frame).tolist()
    level = frame[:, :, 0].tolist()
    touched = [[False] * width for _ in range(height)]
    out = [[0] * width for _ in range(height)]

    for y in range(height):
        for x in range(width):
            gray = _GRAY_LEVELS[level[y][x]] if touched[y][x] else initial[y][x]
            value = 255 if gray > THRESHOLD else 0
            error = gray - value
            out[y][x] = value

            for dx, dy, weight in DIFFUSION_WEIGHTS:
                nx = x + dx
                ny = y + dy
                if 0 <= nx < width and ny < height:
                    corrected = level[ny][nx] + error * weight
                    level[ny][nx] = int(min(max(corrected, 0.0), 255.0))
                    touched[ny][nx] = True

    binary = np.array(out, dtype=np.uint8).reshape(height, width)
    frame[:, :, 0] = binary
    frame[:, :, 1] = binary
    frame[:, :, 2] = binary
    return frame


@dataclass(frozen=True)
class ErrorDiffusionDither:
    """1-bit luma dither with Floyd-Steinberg error diffusion."""

    kind: ClassVar[str] = "dither"

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Dither the frame in place, in raster order."""
        return diffuse(frame)
