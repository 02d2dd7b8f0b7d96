"""Output module for writing rendered images.

Components:
    export: Gamma encoding, 8-bit conversion and PNG export via Pillow

Example:
    >>> from src.pathtracer.output import save_png
    >>> save_png(image, "renders/spheres.png", gamma=2.2)
"""

from src.pathtracer.output.export import (
    DEFAULT_GAMMA,
    decode_gamma,
    encode_gamma,
    image_to_uint8,
    save_png,
)

__all__ = [
    "DEFAULT_GAMMA",
    "encode_gamma",
    "decode_gamma",
    "image_to_uint8",
    "save_png",
]
