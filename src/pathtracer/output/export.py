"""Image export utilities for rendered images.

This module turns the linear float images returned by the renderer into
8-bit channels and writes them to disk.

Each channel is gamma encoded and scaled to a byte:

    byte = clamp(color^(1/gamma) * 255, 0, 255)

with a truncating conversion to an integer.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from src.pathtracer.output.export import save_png
    >>> from src.pathtracer.core.integrator import render
    >>>
    >>> image = render(scene, camera, 320, 180)
    >>> save_png(image, "renders/spheres.png", gamma=2.2)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

DEFAULT_GAMMA = 2.2

ColorLike = TypeVar("ColorLike", float, npt.NDArray[np.float32])


def _check_gamma(gamma: float) -> None:
    if not gamma > 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")


def encode_gamma(color: ColorLike, gamma: float = DEFAULT_GAMMA) -> ColorLike:
    """Apply gamma encoding c^(1/gamma) to a linear value or array.

    Negative values are clamped to zero first.

    Raises:
        ValueError: If gamma is not positive.
    """
    _check_gamma(gamma)
    if isinstance(color, np.ndarray):
        return np.power(np.maximum(color, 0.0), 1.0 / gamma).astype(np.float32)
    return float(max(color, 0.0) ** (1.0 / gamma))


def decode_gamma(value: ColorLike, gamma: float = DEFAULT_GAMMA) -> ColorLike:
    """Invert encode_gamma: v^gamma.

    Raises:
        ValueError: If gamma is not positive.
    """
    _check_gamma(gamma)
    if isinstance(value, np.ndarray):
        return np.power(np.maximum(value, 0.0), gamma).astype(np.float32)
    return float(max(value, 0.0) ** gamma)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for export.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.2).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    encoded = encode_gamma(np.asarray(image, dtype=np.float32), gamma)
    scaled = np.clip(encoded * 255.0, 0.0, 255.0)

    # astype truncates toward zero
    return scaled.astype(np.uint8)


def save_png(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    gamma: float = DEFAULT_GAMMA,
) -> Path:
    """Save a linear image as an 8-bit PNG file.

    Args:
        image: Linear image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (should end in .png). The parent
            directory must exist.
        gamma: Gamma correction value (default 2.2).

    Returns:
        The path that was written.

    Raises:
        ValueError: If the image is not an (H, W, 3) array.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    path = Path(filepath)
    image_uint8 = image_to_uint8(image, gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(path)

    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], path)
    return path
