"""Per-pixel color effects."""

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from ..core.buffer import luma, to_uint8


@dataclass(frozen=True)
class Invert:
    """Invert R, G and B; alpha is kept.

    With ``legacy_channels`` the green and blue outputs are both derived
    from the blue channel, reproducing older renders.
    """

    legacy_channels: bool = False
    kind: ClassVar[str] = "invert"

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Invert the frame in place."""
        if self.legacy_channels:
            blue = 255 - frame[:, :, 2]
            frame[:, :, 0] = 255 - frame[:, :, 0]
            frame[:, :, 1] = blue
            frame[:, :, 2] = blue
        else:
            frame[:, :, :3] = 255 - frame[:, :, :3]
        return frame


@dataclass(frozen=True)
class Grayscale:
    """Replace R, G and B with the truncated luma."""

    kind: ClassVar[str] = "grayscale"

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Convert the frame to gray in place."""
        gray = luma(frame)
        frame[:, :, 0] = gray
        frame[:, :, 1] = gray
        frame[:, :, 2] = gray
        return frame


@dataclass(frozen=True)
class ColorFilter:
    """Scale each color channel by a fixed factor.

    Results saturate at 255.
    """

    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    kind: ClassVar[str] = "filter"

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Scale the color channels of the frame in place."""
        factors = np.array([self.r, self.g, self.b], dtype=np.float32)
        frame[:, :, :3] = to_uint8(frame[:, :, :3].astype(np.float32) * factors)
        return frame
