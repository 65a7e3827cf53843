"""
Kernel convolution and saturating pixel arithmetic on RGBA uint8 images.
"""
from kernelfilters.convolution import apply_kernel
from kernelfilters.errors import (
    DimensionMismatch,
    InvalidImage,
    InvalidKernel,
    InvalidParameter,
    KernelFilterError,
)
from kernelfilters.filters import (
    FILTERS,
    apply_filter,
    blur_3x3,
    blur_5x5,
    default_pipeline,
    edge_detect,
    gradient_x,
    gradient_y,
    median_filter,
    sharpen,
)
from kernelfilters.image_ops import (
    adjust_brightness,
    adjust_contrast,
    image_add,
    image_sub,
    linear_blend,
)
from kernelfilters.io import ensure_image, load_image, save_image, to_rgba
from kernelfilters.kernels import Kernel, get_kernel
from kernelfilters.pixel_ops import (
    pixel_add,
    pixel_scale,
    pixel_shift,
    pixel_sub,
    saturating_add_int,
    saturating_mul_float,
)

__version__ = "0.1.0"
