"""
Kernel application engine.

Apply a kernel to an image, pixel by pixel:

    g(x, y) = sum_{i, j} trunc(f(x + i, y + j) * h(i, j))

where f is clamped to the image border on each axis, h is the kernel and
(i, j) range over its columns and rows. Each product is truncated to an
integer before it is summed, and only the final sum is clamped to [0, 255].
"""
import logging

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs

from kernelfilters.errors import InvalidKernel, InvalidParameter
from kernelfilters.io import ensure_image
from kernelfilters.kernels import Kernel
from kernelfilters.pixel_ops import CHANNEL_MAX, CHANNEL_MIN, OPAQUE

logger = logging.getLogger(__name__)

_INT32_MIN = np.iinfo(np.int32).min
_INT32_MAX = np.iinfo(np.int32).max


def convolve_rows(img, kernel, start_y, end_y):
    """
    Unclamped r, g, b sums for output rows [start_y, end_y).

    Reads from the whole of img, so any row range can be computed on its own.
    Returns an int64 array of shape (end_y - start_y, W, 3).
    """
    h, w = img.shape[:2]
    kh, kw = kernel.shape

    # Only the rows this block can reach
    region_start = start_y
    region_end = min(h, end_y + kh - 1)
    region = img[region_start:region_end, :, :3].astype(np.float32)

    weights = kernel.weights.astype(np.float32)
    ys = np.arange(start_y, end_y)
    xs = np.arange(w)

    total = np.zeros((end_y - start_y, w, 3), dtype=np.int64)
    for j in range(kh):
        rows = np.clip(ys + j, 0, h - 1) - region_start
        for i in range(kw):
            cols = np.clip(xs + i, 0, w - 1)
            sample = region[rows[:, None], cols[None, :]]
            with np.errstate(over="ignore"):
                term = sample * weights[j, i]
            total += np.clip(term, _INT32_MIN, _INT32_MAX).astype(np.int64)
    return total


def process_block(img, kernel, start_y, end_y):
    """Process a horizontal band of output rows."""
    return start_y, end_y, convolve_rows(img, kernel, start_y, end_y)


def row_blocks(height, block_size):
    blocks = []
    for start in range(0, height, block_size):
        blocks.append((start, min(start + block_size, height)))
    return blocks


def _auto_block_size(height, n_jobs):
    # Aim for ~4 blocks per core for better load balancing
    n_cores = effective_n_jobs(n_jobs)
    total_blocks = max(1, n_cores * 4)
    return max(1, -(-height // total_blocks))


def apply_kernel(img, kernel, *, preserve_alpha=False, n_jobs=1, block_size=None, prefer=None):
    """
    Apply a kernel to every pixel of img and return a new image of the same size.

    Args:
        img: (H, W, 4) uint8 image.
        kernel: Kernel, or anything Kernel() accepts.
        preserve_alpha: copy the input alpha instead of writing 255 everywhere.
        n_jobs: 1 runs in-process; anything else splits the output rows into
            blocks and evaluates them with joblib (-1 uses all cores).
        block_size: rows per block for the parallel path, None = automatic.
        prefer: joblib backend hint ("processes" or "threads").

    Returns:
        (H, W, 4) uint8 image. Alpha is 255 unless preserve_alpha is set.
    """
    ensure_image(img, "apply_kernel")
    if not isinstance(kernel, Kernel):
        try:
            kernel = Kernel(kernel)
        except InvalidKernel as err:
            raise InvalidKernel(f"apply_kernel: {err}") from err
    if block_size is not None and block_size < 1:
        raise InvalidParameter(f"apply_kernel: block_size must be >= 1, got {block_size}")

    h, w = img.shape[:2]
    logger.debug("Applying kernel of size %dx%d to %dx%d image", kernel.width, kernel.height, w, h)

    out = np.empty_like(img)
    if n_jobs == 1:
        sums = convolve_rows(img, kernel, 0, h)
        out[:, :, :3] = np.clip(sums, CHANNEL_MIN, CHANNEL_MAX)
    else:
        if block_size is None:
            block_size = _auto_block_size(h, n_jobs)
        blocks = row_blocks(h, block_size)
        logger.debug("Parallel kernel pass: %d blocks of %d rows, n_jobs=%s", len(blocks), block_size, n_jobs)

        results = Parallel(n_jobs=n_jobs, prefer=prefer)(
            delayed(process_block)(img, kernel, start_y, end_y)
            for start_y, end_y in blocks
        )

        # Assemble results into output array
        for start_y, end_y, sums in results:
            out[start_y:end_y, :, :3] = np.clip(sums, CHANNEL_MIN, CHANNEL_MAX)

    out[:, :, 3] = img[:, :, 3] if preserve_alpha else OPAQUE
    return out
