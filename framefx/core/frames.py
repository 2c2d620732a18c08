"""Frame file naming and per-frame interpolation ratios."""

import re
from dataclasses import dataclass
from typing import Optional


FX_SUFFIX = "_fx"
FX_TAG = FX_SUFFIX + "_"
INDEX_WIDTH = 4
RATIO_CEILING = 0.999
RATIO_FLOOR = 0.0

_FRAME_NAME = re.compile(r"^(?P<prefix>.+)_(?P<index>\d+)\.(?P<ext>\w+)$")


@dataclass(frozen=True)
class FrameName:
    """Parsed ``<prefix>_<index>.<ext>`` frame filename."""

    prefix: str
    index: int
    ext: str

    def tagged(self) -> str:
        """Name of the processed frame."""
        return f"{self.prefix}{FX_TAG}{self.index:0{INDEX_WIDTH}d}.{self.ext}"


@dataclass(frozen=True)
class FramePlan:
    """Per-frame processing parameters."""

    index: int
    ratio: float


def parse_frame_name(filename: str) -> Optional[FrameName]:
    """Parse a frame filename.

    Args:
        filename: Base name such as ``clip_0007.png``.

    Returns:
        FrameName, or None if the name has no numeric index suffix.
    """
    match = _FRAME_NAME.match(filename)
    if match is None:
        return None
    return FrameName(
        prefix=match.group("prefix"),
        index=int(match.group("index")),
        ext=match.group("ext"),
    )


def is_tagged(filename: str) -> bool:
    """Check whether a filename names a processed frame.

    Only the part before the index counts: ``clip_fx_0007.png`` is tagged,
    ``clip_fx_v2_0007.png`` is a source frame of the ``clip_fx_v2`` clip.
    """
    name = parse_frame_name(filename)
    return name is not None and name.prefix.endswith(FX_SUFFIX)


def interpolation_ratio(index: int, total: int, init: float, adjust: float) -> float:
    """Interpolation ratio for a frame.

    ``init + adjust * index / total``, then capped at 0.999 and floored at 0.

    Args:
        index: Frame index parsed from the filename.
        total: Number of frames in the run.
        init: Ratio at index 0.
        adjust: Ratio change across the whole sequence.

    Returns:
        Ratio in [0, 0.999].

    Raises:
        ValueError: If total is not positive.
    """
    if total <= 0:
        raise ValueError(f"total frame count must be positive, got {total}")

    ratio = init + adjust * (index / total)
    if ratio > RATIO_CEILING:
        ratio = RATIO_CEILING
    if ratio < RATIO_FLOOR:
        ratio = RATIO_FLOOR
    return ratio


def plan_frame(name: FrameName, total: int, init: float, adjust: float) -> FramePlan:
    """Build the FramePlan for a parsed frame name."""
    return FramePlan(
        index=name.index,
        ratio=interpolation_ratio(name.index, total, init, adjust),
    )
