"""Effects module for frame effects."""

from .base import Effect
from .block_effect import BlockTransform
from .color_effect import ColorFilter, Grayscale, Invert
from .dither_effect import ErrorDiffusionDither
from .edge_effect import EdgeDetect
from .generate_effect import ProceduralGenerate, expression, pointwise
from .pipeline import EffectPipeline
from .reverb_effect import ImageReverb

__all__ = [
    "Effect",
    "BlockTransform",
    "ColorFilter",
    "EdgeDetect",
    "EffectPipeline",
    "ErrorDiffusionDither",
    "Grayscale",
    "ImageReverb",
    "Invert",
    "ProceduralGenerate",
    "expression",
    "pointwise",
]
