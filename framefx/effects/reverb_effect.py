"""Horizontal "reverb" echo effect."""

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from ..core.buffer import to_uint8


@dataclass(frozen=True)
class ImageReverb:
    """Treat each row as an audio signal and add a decaying echo.

    The delay in pixels is ``int(length_ms / 1000 * sample_rate)``. Moving
    left to right, the sample ``delay`` pixels ahead is mixed with the
    current source pixel by ``decay``, then damped toward its already
    processed left neighbour. All four channels are processed.
    """

    sample_rate: float = 44100.0
    length_ms: float = 0.42
    decay: float = 0.69
    damping: float = 0.5
    kind: ClassVar[str] = "reverb"

    def __post_init__(self):
        if not 0.0 <= self.decay <= 1.0:
            raise ValueError(f"decay must be in [0, 1], got {self.decay}")
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"damping must be in [0, 1], got {self.damping}")
        if self.sample_rate < 0 or self.length_ms < 0:
            raise ValueError("sample_rate and length_ms must be non-negative")

    @property
    def delay(self) -> int:
        """Echo delay in pixels."""
        return int((self.length_ms / 1000.0) * self.sample_rate)

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Add the decaying echo to every row; returns a new frame."""
        width = frame.shape[1]
        delay = self.delay
        if delay >= width:
            return frame

        source = frame.astype(np.float64)
        processed = source.copy()

        for x in range(width - delay):
            k = x + delay
            echo = np.trunc(processed[:, k] * self.decay + source[:, x] * (1.0 - self.decay))
            if x > 0:
                echo = np.trunc(
                    echo * (1.0 - self.damping) + processed[:, k - 1] * self.damping
                )
            processed[:, k] = echo

        return to_uint8(processed)
