import subprocess
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from framefx.core.io import (
    encode_frames,
    extract_frames,
    list_frame_files,
    load_frame,
    normalize_format,
    prune_untagged,
    save_frame,
    stage_directory,
)


def _frame(seed=0):
    return np.random.default_rng(seed).integers(0, 256, size=(5, 7, 4), dtype=np.uint8)


def test_png_keeps_rgba(tmp_path: Path):
    frame = _frame()
    path = tmp_path / "clip_fx_0000.png"

    save_frame(frame, path, "png")

    np.testing.assert_array_equal(load_frame(path), frame)
    assert [p.name for p in tmp_path.iterdir()] == ["clip_fx_0000.png"]


def test_bmp_keeps_rgb(tmp_path: Path):
    frame = _frame(1)
    path = tmp_path / "clip_fx_0000.bmp"

    save_frame(frame, path, "bmp")

    np.testing.assert_array_equal(load_frame(path)[:, :, :3], frame[:, :, :3])


def test_jpg_is_opaque(tmp_path: Path):
    path = tmp_path / "clip_fx_0000.jpg"

    save_frame(_frame(2), path, "jpg")

    loaded = load_frame(path)
    assert loaded.shape == (5, 7, 4)
    np.testing.assert_array_equal(loaded[:, :, 3], 255)


def test_load_frame_adds_alpha_to_rgb(tmp_path: Path):
    from PIL import Image

    path = tmp_path / "rgb.png"
    Image.new("RGB", (3, 2), color=(10, 20, 30)).save(path)

    loaded = load_frame(path)

    assert loaded.shape == (2, 3, 4)
    np.testing.assert_array_equal(loaded[0, 0], [10, 20, 30, 255])


@pytest.mark.parametrize(
    "given,expected",
    [("png", "png"), (".PNG", "png"), ("bmp", "bmp"), ("jpeg", "jpg"), (".jpg", "jpg")],
)
def test_normalize_format(given, expected):
    assert normalize_format(given) == expected


def test_normalize_format_rejects_unknown():
    with pytest.raises(ValueError):
        normalize_format("gif")


def test_stage_directory_creates(tmp_path: Path):
    target = tmp_path / "a" / "b"

    stage_directory(target)

    assert target.is_dir()


def test_stage_directory_clears(tmp_path: Path):
    (tmp_path / "old.png").write_bytes(b"x")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "deep.png").write_bytes(b"x")

    stage_directory(tmp_path)

    assert tmp_path.is_dir()
    assert list(tmp_path.iterdir()) == []


def test_list_frame_files_filters_and_sorts(tmp_path: Path):
    for name in ["clip_0002.png", "clip_0000.png", "clip_fx_0000.png", "notes.txt", "clip_0001.bmp"]:
        (tmp_path / name).write_bytes(b"x")

    files = list_frame_files(tmp_path, "png")

    assert [f.name for f in files] == ["clip_0000.png", "clip_0002.png"]


def test_prune_untagged(tmp_path: Path):
    for name in ["clip_0000.png", "clip_fx_0000.png", "notes.txt", "clip_fx_0001.png"]:
        (tmp_path / name).write_bytes(b"x")

    removed = prune_untagged(tmp_path)

    assert sorted(p.name for p in removed) == ["clip_0000.png", "notes.txt"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["clip_fx_0000.png", "clip_fx_0001.png"]


def test_list_and_prune_ignore_fx_inside_prefix(tmp_path: Path):
    for name in ["clip_fx_v2_0001.png", "clip_fx_v2_0000.png", "clip_fx_v2_fx_0000.png"]:
        (tmp_path / name).write_bytes(b"x")

    assert [f.name for f in list_frame_files(tmp_path, "png")] == [
        "clip_fx_v2_0000.png",
        "clip_fx_v2_0001.png",
    ]

    prune_untagged(tmp_path)

    assert [p.name for p in tmp_path.iterdir()] == ["clip_fx_v2_fx_0000.png"]


def _completed(cmd, returncode=0, stderr=""):
    return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr=stderr)


@patch("framefx.core.io.shutil.which", return_value="/usr/bin/ffmpeg")
@patch("framefx.core.io.subprocess.run")
def test_extract_frames_builds_command(mock_run, mock_which, tmp_path: Path):
    def fake_ffmpeg(cmd, **kwargs):
        for index in range(3):
            (tmp_path / f"clip_{index:04d}.png").write_bytes(b"x")
        return _completed(cmd)

    mock_run.side_effect = fake_ffmpeg

    frames = extract_frames(Path("in.mp4"), tmp_path, "clip", "png", 30)

    cmd = mock_run.call_args[0][0]
    assert cmd == [
        "/usr/bin/ffmpeg",
        "-i", "in.mp4",
        "-vf", "fps=30",
        str(tmp_path / "clip_%04d.png"),
    ]
    assert [f.name for f in frames] == ["clip_0000.png", "clip_0001.png", "clip_0002.png"]


@patch("framefx.core.io.shutil.which", return_value="/usr/bin/ffmpeg")
@patch("framefx.core.io.subprocess.run")
def test_extract_frames_failure_is_fatal(mock_run, mock_which, tmp_path: Path):
    mock_run.side_effect = lambda cmd, **kwargs: _completed(cmd, 1, "Invalid data")

    with pytest.raises(RuntimeError, match="Invalid data"):
        extract_frames(Path("in.mp4"), tmp_path, "clip")


@patch("framefx.core.io.shutil.which", return_value="/usr/bin/ffmpeg")
@patch("framefx.core.io.subprocess.run")
def test_extract_frames_without_output_is_fatal(mock_run, mock_which, tmp_path: Path):
    mock_run.side_effect = lambda cmd, **kwargs: _completed(cmd)

    with pytest.raises(RuntimeError, match="No frames"):
        extract_frames(Path("in.mp4"), tmp_path, "clip")


@patch("framefx.core.io.shutil.which", return_value="/usr/bin/ffmpeg")
@patch("framefx.core.io.subprocess.run")
def test_encode_frames_builds_command(mock_run, mock_which, tmp_path: Path):
    output = tmp_path / "out" / "clip.mp4"

    def fake_ffmpeg(cmd, **kwargs):
        output.write_bytes(b"video")
        return _completed(cmd)

    mock_run.side_effect = fake_ffmpeg

    result = encode_frames(tmp_path, "clip", output, "bmp", 24)

    cmd = mock_run.call_args[0][0]
    assert cmd == [
        "/usr/bin/ffmpeg",
        "-y",
        "-framerate", "24",
        "-i", str(tmp_path / "clip_fx_%04d.bmp"),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        str(output),
    ]
    assert result == output


@patch("framefx.core.io.shutil.which", return_value=None)
def test_missing_ffmpeg(mock_which, tmp_path: Path):
    with pytest.raises(RuntimeError, match="ffmpeg not found"):
        encode_frames(tmp_path, "clip", tmp_path / "out.mp4")
