import numpy as np

from framefx.core.buffer import ensure_rgba
from framefx.effects.edge_effect import EdgeDetect


def _gray_frame(values):
    return ensure_rgba(np.array(values, dtype=np.uint8))


def test_uniform_frame_has_zero_interior_and_default_border():
    frame = np.full((5, 7, 4), 180, dtype=np.uint8)

    output = EdgeDetect().apply(frame)

    interior = output[1:-1, 1:-1]
    np.testing.assert_array_equal(interior[:, :, :3], 0)
    np.testing.assert_array_equal(interior[:, :, 3], 255)

    for border in (output[0], output[-1], output[:, 0], output[:, -1]):
        np.testing.assert_array_equal(border, 0)


def test_ramp_gives_expected_magnitude():
    row = [0, 10, 20, 30, 40]
    frame = _gray_frame([row] * 4)

    output = EdgeDetect().apply(frame)

    # (I(x+1) - I(x-1)) * (1 + 2 + 1) = 20 * 4
    np.testing.assert_array_equal(output[1:-1, 1:-1, 0], 80)
    np.testing.assert_array_equal(output[1:-1, 1:-1, 1], 80)
    np.testing.assert_array_equal(output[1:-1, 1:-1, 2], 80)


def test_strong_step_saturates():
    row = [0, 0, 255, 255, 255]
    frame = _gray_frame([row] * 5)

    output = EdgeDetect().apply(frame)

    np.testing.assert_array_equal(output[2, 1:-1, 0], [255, 255, 0])


def test_horizontal_edge_uses_vertical_kernel():
    frame = _gray_frame([[0] * 4, [0] * 4, [10] * 4, [10] * 4])

    output = EdgeDetect().apply(frame)

    # Gy = (10 - 0) * 4 on both interior rows.
    np.testing.assert_array_equal(output[1:-1, 1:-1, 0], 40)


def test_border_ignores_input():
    rng = np.random.default_rng(11)
    frame = rng.integers(0, 256, size=(6, 9, 4), dtype=np.uint8)

    output = EdgeDetect().apply(frame)

    np.testing.assert_array_equal(output[0], 0)
    np.testing.assert_array_equal(output[-1], 0)
    np.testing.assert_array_equal(output[:, 0], 0)
    np.testing.assert_array_equal(output[:, -1], 0)
    assert output.shape == frame.shape


def test_tiny_frame_is_all_default():
    frame = np.full((2, 2, 4), 200, dtype=np.uint8)

    output = EdgeDetect().apply(frame)

    np.testing.assert_array_equal(output, 0)
