"""Frame image codec, working directory staging and ffmpeg wrappers."""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List

import numpy as np
from PIL import Image

from .buffer import ensure_rgba
from .frames import FX_TAG, INDEX_WIDTH, is_tagged


logger = logging.getLogger(__name__)

IMAGE_FORMATS = {
    "png": "PNG",
    "bmp": "BMP",
    "jpg": "JPEG",
}
VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv"}

FFMPEG_TIMEOUT = 600


def is_video_file(filename: str) -> bool:
    """Check if filename has a video extension.

    Args:
        filename: Path to file.

    Returns:
        True if file has a video extension.
    """
    return Path(filename).suffix.lower() in VIDEO_EXTENSIONS


def normalize_format(image_format: str) -> str:
    """Normalize ".PNG", "png", "jpeg" etc. to a supported extension.

    Raises:
        ValueError: If the format is not supported.
    """
    ext = image_format.lower().lstrip(".")
    if ext == "jpeg":
        ext = "jpg"
    if ext not in IMAGE_FORMATS:
        raise ValueError(
            f"Unsupported image format: {image_format} "
            f"(choose from {', '.join(sorted(IMAGE_FORMATS))})"
        )
    return ext


def load_frame(path: Path) -> np.ndarray:
    """Decode an image file into an RGBA8 buffer."""
    with Image.open(path) as img:
        return ensure_rgba(np.array(img.convert("RGBA")))


def save_frame(frame: np.ndarray, path: Path, image_format: str = "png") -> None:
    """Encode an RGBA8 buffer to an image file.

    The image is written to a temporary sibling and moved into place, so
    ``path`` is either complete or absent.

    Args:
        frame: RGBA8 buffer.
        path: Destination path.
        image_format: "png", "bmp" or "jpg". JPEG drops alpha.
    """
    ext = normalize_format(image_format)
    path = Path(path)

    img = Image.fromarray(ensure_rgba(frame))
    if ext == "jpg":
        img = img.convert("RGB")

    partial = path.with_name(f".{path.name}.partial")
    try:
        img.save(partial, format=IMAGE_FORMATS[ext])
        os.replace(partial, path)
    finally:
        if partial.exists():
            partial.unlink()


def stage_directory(path: Path) -> Path:
    """Clear an existing directory or create it.

    Args:
        path: Working directory.

    Returns:
        The directory path.
    """
    path = Path(path)
    if path.exists():
        logger.info("Cleaning directory %s", path)
        for entry in path.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    else:
        logger.info("Creating directory %s", path)
        path.mkdir(parents=True)
    return path


def list_frame_files(frames_dir: Path, image_format: str) -> List[Path]:
    """List unprocessed frame files with the given extension, sorted by name."""
    ext = "." + normalize_format(image_format)
    return sorted(
        entry
        for entry in Path(frames_dir).iterdir()
        if entry.is_file() and entry.suffix.lower() == ext and not is_tagged(entry.name)
    )


def prune_untagged(frames_dir: Path) -> List[Path]:
    """Delete every file that is not a processed frame (see ``is_tagged``).

    Returns:
        The removed paths.
    """
    removed = []
    for entry in sorted(Path(frames_dir).iterdir()):
        if entry.is_file() and not is_tagged(entry.name):
            entry.unlink()
            removed.append(entry)
    logger.debug("Pruned %d untagged files from %s", len(removed), frames_dir)
    return removed


def find_ffmpeg() -> str:
    """Find the ffmpeg binary.

    Raises:
        RuntimeError: If ffmpeg is not on PATH.
    """
    path = shutil.which("ffmpeg")
    if not path:
        raise RuntimeError("ffmpeg not found on PATH")
    return path


def _run_ffmpeg(cmd: List[str], action: str) -> None:
    logger.debug("Running %s", " ".join(cmd))
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=FFMPEG_TIMEOUT)
    if result.returncode != 0:
        raise RuntimeError(
            f"ffmpeg failed to {action} (exit {result.returncode}):\n{result.stderr}"
        )


def extract_frames(
    video_path: Path,
    frames_dir: Path,
    prefix: str,
    image_format: str = "png",
    fps: float = 30,
) -> List[Path]:
    """Demux a video into ``<prefix>_%04d.<ext>`` frame files.

    Args:
        video_path: Input video.
        frames_dir: Directory receiving the frames.
        prefix: Frame filename prefix.
        image_format: Frame image format.
        fps: Sampling rate in frames per second.

    Returns:
        Sorted list of extracted frame paths.

    Raises:
        RuntimeError: If ffmpeg fails or produces no frames.
    """
    ext = normalize_format(image_format)
    pattern = Path(frames_dir) / f"{prefix}_%0{INDEX_WIDTH}d.{ext}"
    cmd = [
        find_ffmpeg(),
        "-i", str(video_path),
        "-vf", f"fps={fps}",
        str(pattern),
    ]
    _run_ffmpeg(cmd, f"extract frames from {video_path}")

    frames = list_frame_files(frames_dir, ext)
    if not frames:
        raise RuntimeError(f"No frames extracted from {video_path}")

    logger.info("Extracted %d frames from %s into %s", len(frames), video_path, frames_dir)
    return frames


def encode_frames(
    frames_dir: Path,
    prefix: str,
    output_path: Path,
    image_format: str = "png",
    fps: float = 30,
) -> Path:
    """Encode ``<prefix>_fx_%04d.<ext>`` frames into a video.

    Args:
        frames_dir: Directory holding the processed frames.
        prefix: Frame filename prefix.
        output_path: Output video file.
        image_format: Frame image format.
        fps: Output frame rate.

    Returns:
        Path to the output video.

    Raises:
        RuntimeError: If ffmpeg fails or no output is produced.
    """
    ext = normalize_format(image_format)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    pattern = Path(frames_dir) / f"{prefix}{FX_TAG}%0{INDEX_WIDTH}d.{ext}"
    cmd = [
        find_ffmpeg(),
        "-y",
        "-framerate", str(fps),
        "-i", str(pattern),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        str(output_path),
    ]
    _run_ffmpeg(cmd, f"encode {output_path}")

    if not output_path.exists():
        raise RuntimeError(f"Failed to create output video: {output_path}")

    logger.info("Encoded %s from frames in %s", output_path, frames_dir)
    return output_path
