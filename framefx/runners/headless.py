"""Headless batch processing runner."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from ..config import DEFAULT_BLOCK_SIZE, EffectSpec, ProcessingConfig
from ..core.frames import FrameName, parse_frame_name, plan_frame
from ..core.io import (
    encode_frames,
    extract_frames,
    list_frame_files,
    load_frame,
    normalize_format,
    prune_untagged,
    save_frame,
    stage_directory,
)
from ..core.utils import limit_dimension
from ..effects.base import Effect
from ..effects.block_effect import BlockTransform
from ..effects.color_effect import ColorFilter, Grayscale, Invert
from ..effects.dither_effect import ErrorDiffusionDither
from ..effects.edge_effect import EdgeDetect
from ..effects.generate_effect import ProceduralGenerate
from ..effects.pipeline import EffectPipeline
from ..effects.reverb_effect import ImageReverb


logger = logging.getLogger(__name__)


def create_effect(spec: EffectSpec, config: ProcessingConfig) -> Effect:
    """Create an effect from its parsed specification.

    Args:
        spec: Parsed effect specification.
        config: Processing configuration supplying shared parameters.

    Returns:
        Effect instance.
    """
    if spec.name == "invert":
        return Invert()
    if spec.name == "invert-legacy":
        return Invert(legacy_channels=True)
    if spec.name == "grayscale":
        return Grayscale()
    if spec.name == "filter":
        return ColorFilter(*spec.params)
    if spec.name == "edge":
        return EdgeDetect()
    if spec.name in ("dct", "dst"):
        block_size = int(spec.params[0]) if spec.params else DEFAULT_BLOCK_SIZE
        return BlockTransform(transform=spec.name, block_size=block_size)
    if spec.name == "dither":
        return ErrorDiffusionDither()
    if spec.name == "generate":
        return ProceduralGenerate.from_preset(
            config.generate.preset,
            scale=config.generate.scale,
            ratio=config.ratio.init,
            distortion=config.generate.distortion,
        ).with_expressions(config.generate.magnitude_exprs, config.generate.phase_exprs)
    if spec.name == "reverb":
        return ImageReverb(
            sample_rate=config.reverb.sample_rate,
            length_ms=config.reverb.length_ms,
            decay=config.reverb.decay,
            damping=config.reverb.damping,
        )
    raise ValueError(f"Unknown effect: {spec.name}")


def build_pipeline(config: ProcessingConfig) -> EffectPipeline:
    """Build the effect pipeline described by the configuration."""
    return EffectPipeline(create_effect(spec, config) for spec in config.effects)


def process_frame(
    path: Path,
    name: FrameName,
    pipeline: EffectPipeline,
    total: int,
    ratio_init: float,
    ratio_adjust: float,
    image_format: str,
    max_dimension: int = 0,
) -> Path:
    """Decode, transform and write one frame.

    Returns:
        Path of the tagged output frame.
    """
    plan = plan_frame(name, total, ratio_init, ratio_adjust)
    frame = limit_dimension(load_frame(path), max_dimension)

    output = pipeline.with_ratio(plan.ratio).apply(frame)

    out_path = path.with_name(name.tagged())
    save_frame(output, out_path, image_format)
    logger.debug("Frame %d (ratio %.4f) -> %s", plan.index, plan.ratio, out_path.name)
    return out_path


def process_frames(
    frames_dir: Path,
    pipeline: EffectPipeline,
    ratio_init: float = 0.5,
    ratio_adjust: float = 0.0,
    image_format: str = "png",
    workers: int = 1,
    max_dimension: int = 0,
    progress: bool = True,
) -> List[Path]:
    """Apply the pipeline to every numbered frame in a directory.

    Frames named ``<prefix>_<index>.<ext>`` are written back as
    ``<prefix>_fx_<index>.<ext>``. Files that do not follow the naming
    pattern are skipped with a warning. Afterwards every untagged file is
    deleted from the directory.

    Args:
        frames_dir: Working directory holding the source frames.
        pipeline: Effects to apply.
        ratio_init: Interpolation ratio at frame 0.
        ratio_adjust: Ratio change across the sequence.
        image_format: Frame image format.
        workers: Number of frames processed concurrently.
        max_dimension: Downscale frames to this size first (0 = off).
        progress: Show a progress bar.

    Returns:
        Paths of the processed frames, in enumeration order.
    """
    frames_dir = Path(frames_dir)
    image_format = normalize_format(image_format)

    files = list_frame_files(frames_dir, image_format)
    total = len(files)

    jobs = []
    for path in files:
        name = parse_frame_name(path.name)
        if name is None:
            logger.warning("Failed to extract frame number from filename: %s", path.name)
            continue
        jobs.append((path, name))

    def run(job):
        path, name = job
        return process_frame(
            path,
            name,
            pipeline,
            total,
            ratio_init,
            ratio_adjust,
            image_format,
            max_dimension,
        )

    bar = tqdm(total=len(jobs), desc="Processing", disable=not progress)
    outputs = []
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for out_path in executor.map(run, jobs):
                outputs.append(out_path)
                bar.update(1)
    else:
        for job in jobs:
            outputs.append(run(job))
            bar.update(1)
    bar.close()

    prune_untagged(frames_dir)
    logger.info("Processed %d of %d frames in %s", len(outputs), total, frames_dir)
    return outputs


def run_headless(config: ProcessingConfig, pipeline: Optional[EffectPipeline] = None) -> Path:
    """Run the full demux, process, encode cycle.

    Args:
        config: Processing configuration.
        pipeline: Pipeline to apply; built from the configuration if omitted.

    Returns:
        Path to the output video.

    Raises:
        FileNotFoundError: If the input video does not exist. Raised before
            any directory is touched.
    """
    input_path = Path(config.input_path)
    if not input_path.is_file():
        raise FileNotFoundError(f"Input video not found: {input_path}")

    if pipeline is None:
        pipeline = build_pipeline(config)
    logger.info("Effects: %s", pipeline)

    frames_dir = stage_directory(Path(config.frames_dir))
    prefix = config.frame_prefix
    image_format = normalize_format(config.output.image_format)

    extract_frames(input_path, frames_dir, prefix, image_format, config.output.fps)

    process_frames(
        frames_dir,
        pipeline,
        ratio_init=config.ratio.init,
        ratio_adjust=config.ratio.adjust,
        image_format=image_format,
        workers=config.workers,
        max_dimension=config.max_dimension,
        progress=config.progress,
    )

    output_path = encode_frames(
        frames_dir, prefix, Path(config.output_path), image_format, config.output.fps
    )

    print(f"Output saved to: {output_path}")
    return output_path
