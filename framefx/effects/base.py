"""Base effect protocol."""

from typing import Protocol

import numpy as np


class Effect(Protocol):
    """Protocol for frame effects.

    Effects are immutable and keep no per-frame state, so one instance can
    be applied to any number of frames.
    """

    kind: str

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Apply effect to a frame.

        Args:
            frame: Input frame (RGBA8). May be modified in place.

        Returns:
            Processed frame (RGBA8) with the same width and height.
        """
        ...
