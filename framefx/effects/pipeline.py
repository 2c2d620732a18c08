"""Effect composition pipeline."""

from typing import Iterable

import numpy as np

from .base import Effect
from .generate_effect import ProceduralGenerate


class EffectPipeline:
    """Chain multiple effects and apply them in sequence."""

    def __init__(self, effects: Iterable[Effect]):
        """Initialize pipeline with ordered effects.

        Args:
            effects: Effects to apply in order.
        """
        self.effects = tuple(effects)

    def __len__(self) -> int:
        return len(self.effects)

    def __repr__(self) -> str:
        return f"EffectPipeline({[effect.kind for effect in self.effects]})"

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Apply all effects to a frame in sequence.

        Args:
            frame: Input frame. Ownership passes to the pipeline.

        Returns:
            The processed frame after all effects.
        """
        output = frame
        for effect in self.effects:
            output = effect.apply(output)
        return output

    def with_ratio(self, ratio: float) -> "EffectPipeline":
        """Pipeline with ``ratio`` substituted into every ProceduralGenerate.

        Other effects are shared unchanged.
        """
        return EffectPipeline(
            effect.with_ratio(ratio) if isinstance(effect, ProceduralGenerate) else effect
            for effect in self.effects
        )
