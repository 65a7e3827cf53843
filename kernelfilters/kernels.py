"""
Convolution kernels and the preset catalogue.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np

from kernelfilters.errors import InvalidKernel


@dataclass(frozen=True, eq=False)
class Kernel:
    """
    Immutable 2D grid of float32 weights.

    Rows run along y and columns along x: the weight applied to the sample at
    offset (i, j) from the target pixel is weights[j, i]. Offsets start at
    (0, 0) and only grow, so kernels are anchored at their top-left cell.
    """
    weights: np.ndarray
    name: Optional[str] = None

    def __post_init__(self):
        label = f"Kernel {self.name!r}" if self.name else "Kernel"
        try:
            weights = np.array(self.weights, dtype=np.float64)
        except (TypeError, ValueError) as err:
            raise InvalidKernel(f"{label}: weights are not numeric: {err}") from err
        if weights.ndim != 2:
            raise InvalidKernel(f"{label}: must be 2D, got {weights.ndim} dimension(s)")
        if weights.shape[0] == 0 or weights.shape[1] == 0:
            raise InvalidKernel(f"{label}: must have at least one row and column, got shape {weights.shape}")
        # weights are applied in float32, so they must be finite there
        with np.errstate(over="ignore"):
            weights = weights.astype(np.float32)
        if not np.all(np.isfinite(weights)):
            raise InvalidKernel(f"{label}: weights must be finite float32 values")
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)

    @property
    def width(self):
        return self.weights.shape[1]

    @property
    def height(self):
        return self.weights.shape[0]

    @property
    def shape(self):
        """(height, width), numpy order."""
        return self.weights.shape

    def weight(self, i, j):
        """Weight for the sample i columns right and j rows below the target."""
        return float(self.weights[j, i])

    def sum(self):
        return float(self.weights.sum())

    def normalized(self):
        """Kernel divided by its sum; unchanged when the sum is zero."""
        s = self.sum()
        if s == 0:
            return self
        return Kernel(self.weights / s, name=self.name)

    def __repr__(self):
        label = f" {self.name!r}" if self.name else ""
        return f"<Kernel{label} {self.width}x{self.height}>"


# Kernel presets
BLUR_3X3 = Kernel(np.array([[1, 2, 1], [2, 4, 2], [1, 2, 1]]) / 16, name="blur_3x3")
BLUR_5X5 = Kernel(np.array([
    [1,  4,  6,  4, 1],
    [4, 16, 24, 16, 4],
    [6, 24, 36, 24, 6],
    [4, 16, 24, 16, 4],
    [1,  4,  6,  4, 1]
]) / 256, name="blur_5x5")
GRADIENT_X = Kernel([[-1, 1]], name="gradient_x")
GRADIENT_Y = Kernel([[1], [-1]], name="gradient_y")

# Unnormalised, call .normalized() where a weight sum of 1 is wanted
BOX_BLUR = Kernel([[1, 1, 1], [1, 1, 1], [1, 1, 1]], name="box_blur")
SHARPEN = Kernel([[0, -1, 0], [-1, 5, -1], [0, -1, 0]], name="sharpen")
EDGE = Kernel([[-1, -1, -1], [-1, 8, -1], [-1, -1, -1]], name="edge")
EMBOSS = Kernel([[-2, -1, 0], [-1, 1, 1], [0, 1, 2]], name="emboss")
GAUSSIAN_7X7 = Kernel([
    [1,  6,  15,  20,  15,  6, 1],
    [6,  36,  90, 120,  90, 36, 6],
    [15, 90, 225, 300, 225, 90, 15],
    [20, 120, 300, 400, 300, 120, 20],
    [15, 90, 225, 300, 225, 90, 15],
    [6,  36,  90, 120,  90, 36, 6],
    [1,  6,  15,  20,  15,  6, 1]
], name="gaussian_7x7")

PRESETS = {k.name: k for k in (
    BLUR_3X3, BLUR_5X5, GRADIENT_X, GRADIENT_Y,
    BOX_BLUR, SHARPEN, EDGE, EMBOSS, GAUSSIAN_7X7,
)}


def get_kernel(name):
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"unknown kernel {name!r}, available: {', '.join(sorted(PRESETS))}") from None
