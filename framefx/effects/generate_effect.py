"""Procedural color generation blended into the source frame."""

from dataclasses import dataclass, replace
from typing import Callable, ClassVar, Dict, Optional, Sequence, Tuple, Union

import numexpr
import numpy as np

from ..core.buffer import round_half_up, to_uint8


CoordFn = Callable[[np.ndarray, np.ndarray], Union[np.ndarray, float]]
ChannelFns = Tuple[CoordFn, CoordFn, CoordFn]
Distortion = Tuple[float, float, float]


def pointwise(fn: Callable[[float, float], float]) -> CoordFn:
    """Adapt a scalar ``(x, y) -> float`` function to coordinate arrays."""
    vectorized = np.vectorize(fn, otypes=[np.float64])
    return lambda x, y: vectorized(x, y)


def _const(value: float) -> CoordFn:
    return lambda x, y: value


def expression(text: str) -> CoordFn:
    """Compile an arithmetic expression over ``x`` and ``y`` into a CoordFn.

    The expression is evaluated by numexpr over the coordinate arrays, e.g.
    ``"128 + 127 * sin(x / 16)"`` or ``"x * y"``.

    Raises:
        ValueError: If the expression does not compile or uses names other
            than ``x`` and ``y``.
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty expression")
    sample = np.zeros(1)
    try:
        numexpr.evaluate(text, local_dict={"x": sample, "y": sample}, global_dict={})
    except (
        SyntaxError, AttributeError, KeyError, TypeError, ValueError, NotImplementedError
    ) as exc:
        raise ValueError(f"Invalid expression {text!r}: {exc}") from exc

    return lambda x, y: numexpr.evaluate(text, local_dict={"x": x, "y": y}, global_dict={})


def _evaluate(fn: CoordFn, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.broadcast_to(np.asarray(fn(x, y), dtype=np.float64), x.shape)


PRESETS: Dict[str, Tuple[ChannelFns, ChannelFns]] = {
    "default": (
        (
            lambda x, y: x * y,
            lambda x, y: x + y,
            lambda x, y: x - y,
        ),
        (
            lambda x, y: np.sin(x),
            lambda x, y: np.cos(y),
            lambda x, y: np.tan(x * y),
        ),
    ),
    "waves": (
        (
            lambda x, y: 128.0 + 127.0 * np.sin(x / 16.0),
            lambda x, y: 128.0 + 127.0 * np.sin(y / 16.0),
            lambda x, y: 128.0 + 127.0 * np.sin((x + y) / 24.0),
        ),
        (_const(1.0), _const(1.0), _const(1.0)),
    ),
    "rings": (
        (_const(255.0), _const(255.0), _const(255.0)),
        (
            lambda x, y: 0.5 + 0.5 * np.cos(np.hypot(x, y) / 8.0),
            lambda x, y: 0.5 + 0.5 * np.cos(np.hypot(x, y) / 12.0),
            lambda x, y: 0.5 + 0.5 * np.sin(np.hypot(x, y) / 16.0),
        ),
    ),
}


@dataclass(frozen=True)
class ProceduralGenerate:
    """Blend a generated color field into the frame.

    For each channel c at pixel (x, y)::

        generated = round(clamp(phase_c(x, y) * scale_c * magnitude_c(x, y), 0, 255))
        out = round(src * ratio + generated * (1 - ratio))

    Alpha is forced to 255. The coordinate functions receive float64
    arrays of x and y and may return an array or a scalar; wrap scalar-only
    functions with :func:`pointwise`, or compile text with :func:`expression`.

    With ``distortion = (amp, freq, phase)`` the coordinates handed to the
    functions are remapped first::

        x' = clamp(y + trunc(amp * sin(freq * x + phase)), 0, width - 1)
        y' = clamp(x + trunc(amp * sin(freq * y + phase)), 0, height - 1)
    """

    magnitude: ChannelFns
    phase: ChannelFns
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    ratio: float = 0.5
    distortion: Optional[Distortion] = None
    kind: ClassVar[str] = "generate"

    @classmethod
    def from_preset(
        cls,
        name: str = "default",
        scale: Tuple[float, float, float] = (1.0, 1.0, 1.0),
        ratio: float = 0.5,
        distortion: Optional[Distortion] = None,
    ) -> "ProceduralGenerate":
        """Create an effect from a named set of functions.

        Raises:
            ValueError: If the preset is unknown.
        """
        if name not in PRESETS:
            raise ValueError(f"Unknown preset: {name}")
        magnitude, phase = PRESETS[name]
        return cls(
            magnitude=magnitude,
            phase=phase,
            scale=tuple(scale),
            ratio=ratio,
            distortion=tuple(distortion) if distortion is not None else None,
        )

    def with_ratio(self, ratio: float) -> "ProceduralGenerate":
        """Copy of this effect with a different interpolation ratio."""
        return replace(self, ratio=ratio)

    def with_expressions(
        self,
        magnitude: Sequence[Optional[str]] = (None, None, None),
        phase: Sequence[Optional[str]] = (None, None, None),
    ) -> "ProceduralGenerate":
        """Copy with some channel functions replaced by compiled expressions.

        Args:
            magnitude: R, G, B magnitude expressions; None keeps the current function.
            phase: R, G, B phase expressions; None keeps the current function.

        Raises:
            ValueError: If an expression is invalid.
        """
        return replace(
            self,
            magnitude=_override(self.magnitude, magnitude),
            phase=_override(self.phase, phase),
        )

    def coordinates(self, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """(x, y) float64 arrays passed to the coordinate functions."""
        y, x = np.mgrid[0:height, 0:width].astype(np.float64)
        if self.distortion is None:
            return x, y

        amp, freq, phase = self.distortion
        dx = np.clip(y + np.trunc(amp * np.sin(freq * x + phase)), 0, width - 1)
        dy = np.clip(x + np.trunc(amp * np.sin(freq * y + phase)), 0, height - 1)
        return dx, dy

    def generate(self, width: int, height: int) -> np.ndarray:
        """Generated (H, W, 3) field before blending, as float64 integers."""
        x, y = self.coordinates(width, height)

        channels = []
        for magnitude_fn, phase_fn, scale in zip(self.magnitude, self.phase, self.scale):
            with np.errstate(invalid="ignore", over="ignore"):
                value = _evaluate(phase_fn, x, y) * scale * _evaluate(magnitude_fn, x, y)
            value = np.nan_to_num(value, nan=0.0, posinf=255.0, neginf=0.0)
            channels.append(round_half_up(np.clip(value, 0.0, 255.0)))
        return np.stack(channels, axis=2)

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Blend the generated field into the frame in place."""
        height, width = frame.shape[:2]
        generated = self.generate(width, height)

        source = frame[:, :, :3].astype(np.float64)
        blended = source * self.ratio + generated * (1.0 - self.ratio)

        frame[:, :, :3] = to_uint8(round_half_up(blended))
        frame[:, :, 3] = 255
        return frame


def _override(fns: ChannelFns, texts: Sequence[Optional[str]]) -> ChannelFns:
    if len(texts) != 3:
        raise ValueError(f"expected three channel expressions, got {len(texts)}")
    return tuple(fn if text is None else expression(text) for fn, text in zip(fns, texts))
