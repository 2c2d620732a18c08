import pytest

from framefx.core.frames import (
    FrameName,
    interpolation_ratio,
    is_tagged,
    parse_frame_name,
    plan_frame,
)


def test_parse_frame_name():
    assert parse_frame_name("clip_0007.png") == FrameName("clip", 7, "png")
    assert parse_frame_name("my_clip_0012.bmp") == FrameName("my_clip", 12, "bmp")


@pytest.mark.parametrize("filename", ["clip.png", "clip_abc.png", "clip_0001", "_0001.png"])
def test_parse_frame_name_rejects_unnumbered(filename):
    assert parse_frame_name(filename) is None


def test_tagged_names():
    name = FrameName("clip", 7, "png")

    assert name.tagged() == "clip_fx_0007.png"
    assert FrameName("clip", 12345, "bmp").tagged() == "clip_fx_12345.bmp"
    assert is_tagged(name.tagged())
    assert not is_tagged("clip_0007.png")


@pytest.mark.parametrize(
    "filename,tagged",
    [
        ("clip_fx_v2_0003.png", False),
        ("clip_fx_v2_fx_0003.png", True),
        ("fx_0003.png", False),
        ("notes_fx_.txt", False),
        ("cover.png", False),
    ],
)
def test_is_tagged_only_looks_at_prefix_suffix(filename, tagged):
    assert is_tagged(filename) is tagged


def test_ratio_scenario():
    assert interpolation_ratio(0, 10, 0.5, 0.5) == 0.5
    assert interpolation_ratio(9, 10, 0.5, 0.5) == pytest.approx(0.95)


def test_ratio_upper_clamp():
    assert interpolation_ratio(9, 10, 0.9, 1.0) == 0.999
    assert interpolation_ratio(0, 10, 2.0, 0.0) == 0.999


def test_ratio_lower_clamp():
    assert interpolation_ratio(3, 10, -0.5, 0.1) == 0.0
    assert interpolation_ratio(9, 10, 0.5, -1.0) == 0.0


@pytest.mark.parametrize("init", [-1.0, 0.0, 0.3, 0.999, 1.5])
def test_ratio_at_zero_is_clamped_init(init):
    assert interpolation_ratio(0, 25, init, 0.7) == min(max(init, 0.0), 0.999)


@pytest.mark.parametrize("init,adjust", [(0.0, 0.45), (0.5, 0.5), (-0.2, 2.0)])
def test_ratio_non_decreasing_and_bounded(init, adjust):
    ratios = [interpolation_ratio(n, 30, init, adjust) for n in range(30)]

    assert ratios == sorted(ratios)
    assert all(0.0 <= ratio <= 0.999 for ratio in ratios)


def test_ratio_requires_positive_total():
    with pytest.raises(ValueError):
        interpolation_ratio(0, 0, 0.5, 0.5)


def test_plan_frame():
    plan = plan_frame(FrameName("clip", 5, "png"), 10, 0.5, 0.5)

    assert plan.index == 5
    assert plan.ratio == pytest.approx(0.75)
