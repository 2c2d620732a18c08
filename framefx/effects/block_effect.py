"""Block DCT / DST visualisation effect."""

from dataclasses import dataclass, field
from typing import ClassVar

import numpy as np

from ..core.transforms import TRANSFORM_KINDS, BlockTransformEngine


@dataclass(frozen=True)
class BlockTransform:
    """Replace each N x N block with its clamped frequency coefficients.

    One-way: the output is a gray visualisation of the coefficients, not
    something that can be decoded back into the frame.
    """

    transform: str = "dct"
    block_size: int = 8
    kind: ClassVar[str] = "block"
    _engine: BlockTransformEngine = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.transform not in TRANSFORM_KINDS:
            raise ValueError(f"Unknown transform kind: {self.transform}")
        object.__setattr__(
            self, "_engine", BlockTransformEngine(self.block_size, self.transform)
        )

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Apply the block transform visualisation to a frame."""
        return self._engine.apply(frame)
