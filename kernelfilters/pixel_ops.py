"""
Saturating arithmetic on 8-bit channel values.

Every function here clamps into [0, 255] instead of wrapping, works on plain
ints as well as numpy arrays, and leaves the alpha channel of the primary
operand untouched.
"""
import numbers

import numpy as np

from kernelfilters.errors import InvalidParameter

CHANNEL_MIN = 0
CHANNEL_MAX = 255
OPAQUE = 255


def _clamp_delta(delta):
    # any delta outside [-255, 255] already saturates every channel value
    if isinstance(delta, numbers.Integral):
        return max(-CHANNEL_MAX, min(CHANNEL_MAX, int(delta)))
    return np.clip(np.asarray(delta, dtype=np.int64), -CHANNEL_MAX, CHANNEL_MAX)


def saturating_add_int(base, delta):
    """base + delta computed as int64, clamped to [0, 255]."""
    total = np.asarray(base, dtype=np.int64) + np.asarray(_clamp_delta(delta), dtype=np.int64)
    return np.clip(total, CHANNEL_MIN, CHANNEL_MAX).astype(np.uint8)


def saturating_mul_float(base, factor):
    """
    base * factor computed in float32, truncated toward zero and clamped to [0, 255].

    NaN products map to 0, +inf to 255 and -inf to 0.
    """
    with np.errstate(over="ignore", invalid="ignore"):
        prod = np.asarray(base, dtype=np.float32) * np.asarray(factor, dtype=np.float32)
    prod = np.nan_to_num(prod, nan=0.0, posinf=CHANNEL_MAX, neginf=CHANNEL_MIN)
    # clamping before the cast keeps astype's truncation in range
    return np.clip(prod, CHANNEL_MIN, CHANNEL_MAX).astype(np.uint8)


# ---------------------------------------------------------------------------
# Single pixels (3- or 4-tuples)
# ---------------------------------------------------------------------------

def _as_pixel(pixel):
    values = tuple(int(c) for c in pixel)
    if len(values) not in (3, 4):
        raise InvalidParameter(f"pixel must have 3 or 4 channels, got {len(values)}")
    return values


def _with_alpha(rgb, primary):
    return tuple(int(c) for c in rgb) + primary[3:]


def pixel_add(pixel_1, pixel_2):
    p1, p2 = _as_pixel(pixel_1), _as_pixel(pixel_2)
    rgb = [saturating_add_int(a, b) for a, b in zip(p1[:3], p2[:3])]
    return _with_alpha(rgb, p1)


def pixel_sub(pixel_1, pixel_2):
    p1, p2 = _as_pixel(pixel_1), _as_pixel(pixel_2)
    rgb = [saturating_add_int(a, -b) for a, b in zip(p1[:3], p2[:3])]
    return _with_alpha(rgb, p1)


def pixel_shift(pixel, delta):
    """Shift a pixel's r, g, b values by a constant (positive or negative)."""
    p = _as_pixel(pixel)
    return _with_alpha([saturating_add_int(c, delta) for c in p[:3]], p)


def pixel_scale(pixel, factor):
    """Multiply a pixel's r, g, b values by a constant factor."""
    p = _as_pixel(pixel)
    return _with_alpha([saturating_mul_float(c, factor) for c in p[:3]], p)


# ---------------------------------------------------------------------------
# Whole (..., 4) arrays
# ---------------------------------------------------------------------------

def add_rgb(arr_1, arr_2):
    out = arr_1.copy()
    out[..., :3] = saturating_add_int(arr_1[..., :3], arr_2[..., :3])
    return out


def sub_rgb(arr_1, arr_2):
    out = arr_1.copy()
    out[..., :3] = saturating_add_int(arr_1[..., :3], -arr_2[..., :3].astype(np.int64))
    return out


def shift_rgb(arr, delta):
    out = arr.copy()
    out[..., :3] = saturating_add_int(arr[..., :3], delta)
    return out


def scale_rgb(arr, factor):
    out = arr.copy()
    out[..., :3] = saturating_mul_float(arr[..., :3], factor)
    return out
