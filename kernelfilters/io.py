"""
Pixel buffer glue: coercion to the RGBA layout and Pillow load/save.
"""
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from kernelfilters.errors import InvalidImage
from kernelfilters.pixel_ops import OPAQUE

logger = logging.getLogger(__name__)

# Pillow has no alpha channel for these
_NO_ALPHA_SUFFIXES = {".jpg", ".jpeg", ".bmp"}


def ensure_image(img, op="image"):
    """Check that img is an (H, W, 4) uint8 array with H, W >= 1 and return it."""
    if not isinstance(img, np.ndarray):
        raise InvalidImage(f"{op}: expected numpy array, got {type(img).__name__}")
    if img.ndim != 3 or img.shape[2] != 4:
        raise InvalidImage(f"{op}: expected shape (H, W, 4), got {img.shape}")
    if img.dtype != np.uint8:
        raise InvalidImage(f"{op}: expected uint8 pixels, got {img.dtype}")
    if img.shape[0] < 1 or img.shape[1] < 1:
        raise InvalidImage(f"{op}: image must be at least 1x1, got {img.shape[1]}x{img.shape[0]}")
    return img


def to_rgba(arr):
    """
    Coerce a grey (H, W), RGB (H, W, 3) or RGBA (H, W, 4) array into a new
    (H, W, 4) uint8 image. Grey is replicated into r, g, b and a missing alpha
    channel is filled with 255.
    """
    arr = np.asarray(arr)
    if arr.ndim == 2:
        arr = np.repeat(arr[:, :, None], 3, axis=2)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise InvalidImage(f"cannot interpret array of shape {arr.shape} as an image")

    h, w = arr.shape[:2]
    out = np.full((h, w, 4), OPAQUE, dtype=np.uint8)
    out[:, :, :arr.shape[2]] = arr
    return ensure_image(out, op="to_rgba")


def load_image(path):
    """Decode any Pillow-readable file into an RGBA image."""
    path = Path(path)
    logger.info("Loading %s", path)
    with Image.open(path) as img:
        return np.array(img.convert("RGBA"))


def save_image(img, path):
    """Encode an RGBA image; the format follows the file suffix."""
    ensure_image(img, op="save_image")
    path = Path(path)
    out = Image.fromarray(np.ascontiguousarray(img))
    if path.suffix.lower() in _NO_ALPHA_SUFFIXES:
        out = out.convert("RGB")
    out.save(path)
    logger.info("Saved %s", path)
    return path
