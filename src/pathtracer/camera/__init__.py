"""Camera module for primary ray generation.

Components:
    pinhole: Look-at pinhole camera with jittered pixel sampling
"""

from .pinhole import (
    PinholeCamera,
    default_camera,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "default_camera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
]
