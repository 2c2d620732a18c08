"""Command-line interface for framefx."""

import argparse
import logging
from pathlib import Path

from . import __version__
from .config import EFFECT_NAMES, ProcessingConfig
from .core.io import IMAGE_FORMATS, is_video_file
from .effects.generate_effect import PRESETS, expression

EPILOG = """\
Examples:
  framefx clip.mp4 -o out/clip_edges.mp4 -e edge
  framefx clip.mp4 -o out.mp4 -e grayscale -e dither
  framefx clip.mp4 -o out.mp4 -e generate --ratio 0.5 --ratio-adjust 0.45
  framefx clip.mp4 -o out.mp4 -e filter:1,0.6,0.6 -e dct:16 --format bmp
  framefx clip.mp4 -o out.mp4 --expr-r "x * y" --phase-r "sin(x)" --distort --distort-amp 4 --distort-freq 0.1

Effects (applied in the order given):
  invert          Invert R, G and B
  invert-legacy   Invert with green taken from the blue channel (old renders)
  grayscale       Luma grayscale
  filter:R,G,B    Scale each channel
  edge            Sobel edge magnitude
  dct[:N]         Block DCT visualisation, N x N blocks (default 8)
  dst[:N]         Block DST visualisation, N x N blocks (default 8)
  dither          Floyd-Steinberg 1-bit dither
  generate        Blend a procedural color field (see --preset, --ratio, --expr-*, --distort)
  reverb          Horizontal echo (see --reverb-*)
"""


def _triple(text: str):
    try:
        values = tuple(float(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected R,G,B numbers, got {text!r}") from None
    if len(values) != 3:
        raise argparse.ArgumentTypeError(f"expected three values R,G,B, got {text!r}")
    return values


def parse_args(args=None) -> ProcessingConfig:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv).

    Returns:
        ProcessingConfig with parsed options.
    """
    parser = argparse.ArgumentParser(
        prog="framefx",
        description="Apply a sequence of pixel effects to every frame of a video.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input video file (.mp4, .avi, .mov, .mkv)",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        required=True,
        help="Output video file",
    )

    parser.add_argument(
        "--frames-dir",
        type=str,
        default=None,
        help="Working directory for frames; cleared before use (default: frames/<output name>)",
    )

    parser.add_argument(
        "-e", "--effect",
        dest="effects",
        action="append",
        metavar="EFFECT",
        help=f"Effect to apply; repeat for a chain ({', '.join(EFFECT_NAMES)}) (default: generate)",
    )

    parser.add_argument(
        "--ratio",
        type=float,
        default=0.5,
        help="Interpolation ratio at the first frame; 1.0 keeps the source (default: 0.5)",
    )

    parser.add_argument(
        "--ratio-adjust",
        type=float,
        default=0.45,
        help="Ratio change across the whole clip (default: 0.45)",
    )

    parser.add_argument(
        "--preset",
        type=str,
        default="default",
        choices=sorted(PRESETS),
        help="Procedural function preset for the generate effect (default: default)",
    )

    parser.add_argument(
        "--scale",
        type=_triple,
        default=(1.0, 1.0, 1.0),
        metavar="R,G,B",
        help="Per-channel scale for the generate effect (default: 1,1,1)",
    )

    for channel, label in (("r", "red"), ("g", "green"), ("b", "blue")):
        parser.add_argument(
            f"--expr-{channel}",
            type=str,
            default=None,
            metavar="EXPR",
            help=f"Magnitude expression over x, y for the {label} channel, e.g. 'x * y' "
                 "(overrides the preset)",
        )
        parser.add_argument(
            f"--phase-{channel}",
            type=str,
            default=None,
            metavar="EXPR",
            help=f"Phase expression over x, y for the {label} channel, e.g. 'sin(x)' "
                 "(overrides the preset)",
        )

    # Distortion arguments
    parser.add_argument(
        "--distort",
        action="store_true",
        help="Remap x, y with a sinusoidal distortion before the generate functions",
    )

    parser.add_argument(
        "--distort-amp",
        type=float,
        default=0.0,
        help="Distortion amplitude in pixels (default: 0)",
    )

    parser.add_argument(
        "--distort-freq",
        type=float,
        default=0.0,
        help="Distortion frequency in radians per pixel (default: 0)",
    )

    parser.add_argument(
        "--distort-phase",
        type=float,
        default=0.0,
        help="Distortion phase in radians (default: 0)",
    )

    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Frame sampling rate and output frames per second (default: 30)",
    )

    parser.add_argument(
        "--format",
        dest="image_format",
        type=str,
        default="png",
        choices=sorted(IMAGE_FORMATS),
        help="Intermediate frame image format (default: png)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Frames processed concurrently (default: 1)",
    )

    parser.add_argument(
        "--max-dimension",
        type=int,
        default=0,
        help="Scale down frames to this max width/height before effects; 0 = off (default: 0)",
    )

    # Reverb arguments
    parser.add_argument(
        "--reverb-sample-rate",
        type=float,
        default=44100.0,
        help="Reverb sample rate used to size the delay (default: 44100)",
    )

    parser.add_argument(
        "--reverb-length",
        type=float,
        default=0.42,
        help="Reverb delay in milliseconds (default: 0.42)",
    )

    parser.add_argument(
        "--reverb-decay",
        type=float,
        default=0.69,
        help="Reverb echo decay, 0.0-1.0 (default: 0.69)",
    )

    parser.add_argument(
        "--reverb-damping",
        type=float,
        default=0.5,
        help="Reverb damping, 0.0-1.0 (default: 0.5)",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide the progress bar",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parsed = parser.parse_args(args)

    # Validate input exists
    if not Path(parsed.input).is_file():
        parser.error(f"Input file not found: {parsed.input}")
    if not is_video_file(parsed.input):
        parser.error(f"Input is not a supported video file: {parsed.input}")
    if parsed.workers < 1:
        parser.error("--workers must be at least 1")
    if parsed.fps <= 0:
        parser.error("--fps must be positive")
    if not 0.0 <= parsed.reverb_decay <= 1.0:
        parser.error("--reverb-decay must be between 0.0 and 1.0")
    if not 0.0 <= parsed.reverb_damping <= 1.0:
        parser.error("--reverb-damping must be between 0.0 and 1.0")

    magnitude_exprs = (parsed.expr_r, parsed.expr_g, parsed.expr_b)
    phase_exprs = (parsed.phase_r, parsed.phase_g, parsed.phase_b)
    for text in magnitude_exprs + phase_exprs:
        if text is not None:
            try:
                expression(text)
            except ValueError as exc:
                parser.error(str(exc))

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return ProcessingConfig.from_args(
            input_path=parsed.input,
            output_path=parsed.output,
            frames_dir=parsed.frames_dir,
            effects=parsed.effects or ["generate"],
            ratio_init=parsed.ratio,
            ratio_adjust=parsed.ratio_adjust,
            fps=parsed.fps,
            image_format=parsed.image_format,
            preset=parsed.preset,
            scale=parsed.scale,
            magnitude_exprs=magnitude_exprs,
            phase_exprs=phase_exprs,
            distortion=(
                (parsed.distort_amp, parsed.distort_freq, parsed.distort_phase)
                if parsed.distort else None
            ),
            reverb_sample_rate=parsed.reverb_sample_rate,
            reverb_length_ms=parsed.reverb_length,
            reverb_decay=parsed.reverb_decay,
            reverb_damping=parsed.reverb_damping,
            workers=parsed.workers,
            max_dimension=parsed.max_dimension,
            progress=not parsed.no_progress,
        )
    except ValueError as exc:
        parser.error(str(exc))
