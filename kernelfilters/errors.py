"""
Error types raised by the filter engine.
"""


class KernelFilterError(Exception):
    """Base class for every error raised by kernelfilters."""


class DimensionMismatch(KernelFilterError):
    """Two images combined pixel-wise do not share the same width and height."""

    def __init__(self, op, shape_a, shape_b):
        self.op = op
        self.shape_a = tuple(shape_a)
        self.shape_b = tuple(shape_b)
        super().__init__(
            f"{op}: image dimensions differ "
            f"({self.shape_a[1]}x{self.shape_a[0]} vs {self.shape_b[1]}x{self.shape_b[0]})"
        )


class InvalidKernel(KernelFilterError):
    """Kernel has no rows, no columns, or is not a finite 2D array."""


class InvalidParameter(KernelFilterError, ValueError):
    """A scalar filter parameter is out of its allowed range."""


class InvalidImage(KernelFilterError, ValueError):
    """Pixel buffer is not an (H, W, 4) uint8 array with H, W >= 1."""
