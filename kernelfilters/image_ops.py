"""
Pixel-wise operations on whole images built on the saturating pixel ops.

Alpha always comes from the first (primary) image.
"""
import numpy as np

from kernelfilters.errors import DimensionMismatch
from kernelfilters.io import ensure_image
from kernelfilters.pixel_ops import add_rgb, scale_rgb, shift_rgb, sub_rgb


def _check_pair(op, img_1, img_2):
    ensure_image(img_1, op)
    ensure_image(img_2, op)
    if img_1.shape[:2] != img_2.shape[:2]:
        raise DimensionMismatch(op, img_1.shape[:2], img_2.shape[:2])


def image_add(img_1, img_2):
    _check_pair("image_add", img_1, img_2)
    return add_rgb(img_1, img_2)


def image_sub(img_1, img_2):
    _check_pair("image_sub", img_1, img_2)
    return sub_rgb(img_1, img_2)


def linear_blend(img_1, img_2, value):
    """
    Blend two images as scale(img_1, 1 - value) + scale(img_2, value).

    Each scaled operand is clamped before the sum, which is clamped again.
    """
    _check_pair("linear_blend", img_1, img_2)
    value = np.float32(value)
    scaled_1 = scale_rgb(img_1, np.float32(1.0) - value)
    scaled_2 = scale_rgb(img_2, value)
    return add_rgb(scaled_1, scaled_2)


def adjust_brightness(img, value):
    """
    For each pixel p, adjust brightness to p + value.

    value is an integer; r, g, b saturate at 0 and 255, alpha is kept.
    """
    ensure_image(img, "adjust_brightness")
    return shift_rgb(img, int(value))


def adjust_contrast(img, value):
    """
    For each pixel p, adjust contrast to p * value.

    Products are truncated toward zero and saturate at 0 and 255, alpha is kept.
    """
    ensure_image(img, "adjust_contrast")
    return scale_rgb(img, value)
