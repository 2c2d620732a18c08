"""Configuration dataclasses for framefx."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .core.frames import FX_SUFFIX


EFFECT_NAMES = (
    "invert",
    "invert-legacy",
    "grayscale",
    "filter",
    "edge",
    "dct",
    "dst",
    "dither",
    "generate",
    "reverb",
)
DEFAULT_BLOCK_SIZE = 8


@dataclass(frozen=True)
class EffectSpec:
    """Parsed ``name[:arg,arg,...]`` effect specification."""

    name: str
    params: Tuple[float, ...] = ()


def parse_effect_spec(text: str) -> EffectSpec:
    """Parse an effect specification such as ``filter:1,0.5,0.5`` or ``dct:16``.

    Raises:
        ValueError: If the name is unknown or the arguments are invalid.
    """
    name, _, args = text.strip().partition(":")
    name = name.lower()
    if name not in EFFECT_NAMES:
        raise ValueError(
            f"Unknown effect '{name}' (choose from {', '.join(EFFECT_NAMES)})"
        )

    try:
        params = tuple(float(arg) for arg in args.split(",")) if args else ()
    except ValueError:
        raise ValueError(f"Invalid arguments for effect '{name}': {args}") from None

    if name == "filter" and len(params) != 3:
        raise ValueError("filter takes three scale factors, e.g. filter:1,0.5,0.5")
    if name in ("dct", "dst"):
        if len(params) > 1:
            raise ValueError(f"{name} takes a single block size, e.g. {name}:8")
        if params and (params[0] < 1 or not params[0].is_integer()):
            raise ValueError(f"{name} block size must be a positive integer")
    elif name != "filter" and params:
        raise ValueError(f"Effect '{name}' takes no arguments")

    return EffectSpec(name=name, params=params)


@dataclass
class RatioConfig:
    """Configuration for the per-frame interpolation ratio."""

    init: float = 0.5
    adjust: float = 0.45


@dataclass
class OutputConfig:
    """Configuration for frame extraction and output video."""

    fps: float = 30.0
    image_format: str = "png"


@dataclass
class GenerateConfig:
    """Configuration for procedural generation."""

    preset: str = "default"
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    # Per-channel R, G, B expressions overriding the preset; None keeps it.
    magnitude_exprs: Tuple[Optional[str], ...] = (None, None, None)
    phase_exprs: Tuple[Optional[str], ...] = (None, None, None)
    # (amplitude, frequency, phase) coordinate distortion, off when None.
    distortion: Optional[Tuple[float, float, float]] = None


@dataclass
class ReverbConfig:
    """Configuration for the image reverb effect."""

    sample_rate: float = 44100.0
    length_ms: float = 0.42
    decay: float = 0.69
    damping: float = 0.5


@dataclass
class ProcessingConfig:
    """Combined configuration for processing."""

    input_path: str
    output_path: str
    frames_dir: str
    effects: List[EffectSpec]
    ratio: RatioConfig
    output: OutputConfig
    generate: GenerateConfig
    reverb: ReverbConfig
    workers: int = 1
    max_dimension: int = 0
    progress: bool = True

    @property
    def frame_prefix(self) -> str:
        """Frame filename prefix, derived from the output video name."""
        return _stem(self.output_path)

    @classmethod
    def from_args(
        cls,
        input_path: str,
        output_path: str,
        frames_dir: Optional[str] = None,
        effects: Sequence[str] = ("generate",),
        ratio_init: float = 0.5,
        ratio_adjust: float = 0.45,
        fps: float = 30.0,
        image_format: str = "png",
        # Generate config
        preset: str = "default",
        scale: Tuple[float, float, float] = (1.0, 1.0, 1.0),
        magnitude_exprs: Sequence[Optional[str]] = (None, None, None),
        phase_exprs: Sequence[Optional[str]] = (None, None, None),
        distortion: Optional[Tuple[float, float, float]] = None,
        # Reverb config
        reverb_sample_rate: float = 44100.0,
        reverb_length_ms: float = 0.42,
        reverb_decay: float = 0.69,
        reverb_damping: float = 0.5,
        workers: int = 1,
        max_dimension: int = 0,
        progress: bool = True,
    ) -> "ProcessingConfig":
        """Create ProcessingConfig from CLI arguments.

        Raises:
            ValueError: If an effect specification is invalid, or the output
                name would make source frames look like processed ones.
        """
        prefix = _stem(output_path)
        if prefix.endswith(FX_SUFFIX):
            raise ValueError(
                f"Output name '{prefix}' must not end with '{FX_SUFFIX}'; "
                "frame files would be mistaken for processed frames"
            )

        return cls(
            input_path=input_path,
            output_path=output_path,
            frames_dir=frames_dir or f"frames/{prefix}",
            effects=[parse_effect_spec(spec) for spec in effects],
            ratio=RatioConfig(init=ratio_init, adjust=ratio_adjust),
            output=OutputConfig(fps=fps, image_format=image_format),
            generate=GenerateConfig(
                preset=preset,
                scale=tuple(scale),
                magnitude_exprs=tuple(magnitude_exprs),
                phase_exprs=tuple(phase_exprs),
                distortion=tuple(distortion) if distortion is not None else None,
            ),
            reverb=ReverbConfig(
                sample_rate=reverb_sample_rate,
                length_ms=reverb_length_ms,
                decay=reverb_decay,
                damping=reverb_damping,
            ),
            workers=workers,
            max_dimension=max_dimension,
            progress=progress,
        )


def _stem(path: str) -> str:
    return Path(path).stem or "frame"
