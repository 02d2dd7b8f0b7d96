"""Render settings shared by the renderer and the command line tool.

This module holds no Taichi fields, so it can be imported before ti.init()
to validate a configuration and pick the random seed the runtime is
initialized with.

Example:
    >>> from src.pathtracer.core.settings import RenderSettings
    >>> import taichi as ti
    >>> settings = RenderSettings(width=320, height=180, seed=7)
    >>> ti.init(arch=ti.cpu, random_seed=settings.seed)
"""

from dataclasses import dataclass
from typing import Any

# Default samples per pixel and bounce budget
DEFAULT_SAMPLES_PER_PIXEL = 48
DEFAULT_MAX_BOUNCES = 8

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@dataclass
class RenderSettings:
    """Settings for a single frame.

    Attributes:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).
        samples_per_pixel: Jittered samples averaged per pixel (>= 1).
        max_bounces: Bounce budget per path (>= 0). 0 shows only the sky.
        gamma: Gamma used when encoding the output (> 0).
        seed: Seed for Taichi's random number generator. It only takes
            effect when passed to ti.init(random_seed=...), which must happen
            before the first kernel runs.
    """

    width: int = 640
    height: int = 360
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_bounces: int = DEFAULT_MAX_BOUNCES
    gamma: float = 2.2
    seed: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_IMAGE_WIDTH or not 1 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be between 1x1 and "
                f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces must be >= 0, got {self.max_bounces}")
        if not self.gamma > 0.0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.seed < 0:
            raise ValueError(f"seed must be >= 0, got {self.seed}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Build settings from a dictionary, ignoring unknown keys."""
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        return cls(**known)
