"""Block frequency transforms (DCT-II / DST) over N x N tiles."""

import math

import numpy as np

from .buffer import gray_rgba, to_uint8


TRANSFORM_KINDS = ("dct", "dst")


def dct_matrix(n: int) -> np.ndarray:
    """DCT basis with ``A[u, i] = C(u) * cos((2i + 1) * u * pi / 2n)``.

    ``C(0) = 1/sqrt(2)`` and ``C(u) = 1`` otherwise.
    """
    u = np.arange(n, dtype=np.float64)[:, np.newaxis]
    i = np.arange(n, dtype=np.float64)[np.newaxis, :]
    basis = np.cos((2.0 * i + 1.0) * u * math.pi / (2.0 * n))
    basis[0, :] *= 1.0 / math.sqrt(2.0)
    return basis


def dst_matrix(n: int) -> np.ndarray:
    """DST basis with ``B[u, i] = sin((i + 0.5) * u * pi / n)``."""
    u = np.arange(n, dtype=np.float64)[:, np.newaxis]
    i = np.arange(n, dtype=np.float64)[np.newaxis, :]
    return np.sin((i + 0.5) * u * math.pi / n)


def transform_block(block: np.ndarray, kind: str = "dct") -> np.ndarray:
    """Transform a single N x N block.

    Args:
        block: Square float array of samples in [0, 1].
        kind: "dct" or "dst".

    Returns:
        N x N coefficient array (unbounded).
    """
    engine = BlockTransformEngine(block.shape[0], kind)
    return engine.transform(block[np.newaxis, np.newaxis])[0, 0]


class BlockTransformEngine:
    """Decompose a plane into N x N blocks, transform each, reassemble.

    Blocks are visited in row-major block order. Blocks hanging over the
    right or bottom edge are padded with 0.0 samples; the padding is
    cropped again on reassembly. There is no inverse transform.
    """

    def __init__(self, block_size: int = 8, kind: str = "dct"):
        """Initialize the engine.

        Args:
            block_size: Side length N of each block.
            kind: "dct" or "dst".

        Raises:
            ValueError: If block_size < 1 or kind is unknown.
        """
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {block_size}")
        if kind not in TRANSFORM_KINDS:
            raise ValueError(f"Unknown transform kind: {kind}")

        self.block_size = block_size
        self.kind = kind
        self._basis = dct_matrix(block_size) if kind == "dct" else dst_matrix(block_size)
        self._scale = 2.0 / math.sqrt(block_size)

    def decompose(self, samples: np.ndarray) -> np.ndarray:
        """Split a (H, W) plane into blocks.

        Returns:
            Array of shape (block_rows, block_cols, N, N).
        """
        n = self.block_size
        height, width = samples.shape
        rows = -(-height // n)
        cols = -(-width // n)

        padded = np.zeros((rows * n, cols * n), dtype=np.float64)
        padded[:height, :width] = samples

        return padded.reshape(rows, n, cols, n).transpose(0, 2, 1, 3)

    def reassemble(self, blocks: np.ndarray, height: int, width: int) -> np.ndarray:
        """Stitch blocks back into a (height, width) plane."""
        rows, cols, n, _ = blocks.shape
        plane = blocks.transpose(0, 2, 1, 3).reshape(rows * n, cols * n)
        return plane[:height, :width]

    def transform(self, blocks: np.ndarray) -> np.ndarray:
        """Apply the kernel to every block.

        ``F[u, v] = (2 / sqrt(N)) * sum_ij K[u, i] * f[i, j] * K[v, j]``
        """
        basis = self._basis
        return self._scale * np.einsum("ui,rcij,vj->rcuv", basis, blocks, basis)

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Run the block transform over an RGBA frame.

        Samples are the red channel scaled to [0, 1]. Coefficients are
        clamped to [0, 1] and written back as opaque gray.

        Args:
            frame: RGBA8 buffer.

        Returns:
            New RGBA8 buffer of the same size.
        """
        height, width = frame.shape[:2]
        samples = frame[:, :, 0].astype(np.float64) / 255.0

        coeffs = self.transform(self.decompose(samples))
        plane = self.reassemble(coeffs, height, width)

        gray = to_uint8(np.clip(plane, 0.0, 1.0) * 255.0)
        return gray_rgba(gray)
