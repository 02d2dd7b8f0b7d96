"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector helpers and Schlick's approximation
    sampler: Per-thread random numbers and direction sampling
    settings: Render settings, importable before ti.init()
    integrator: Radiance estimator and render kernel

All per-ray computation runs inside Taichi kernels, parallelised over pixels.
The integrator sits on top of the scene and material modules and is imported
directly from src.pathtracer.core.integrator.
"""

from .ray import (
    DIELECTRIC_F0,
    Color,
    Ray,
    dot,
    f0_from_ior,
    length,
    length_squared,
    lerp,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    saturate,
    schlick,
    schlick_color,
)
from .sampler import random_in_unit_square, random_unit_vector, uniform
from .settings import RenderSettings

__all__ = [
    # Ray and vector helpers
    "Ray",
    "Color",
    "DIELECTRIC_F0",
    "ray_at",
    "make_ray",
    "dot",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "refract",
    "near_zero",
    "lerp",
    "saturate",
    "f0_from_ior",
    "schlick",
    "schlick_color",
    # Sampler
    "uniform",
    "random_unit_vector",
    "random_in_unit_square",
    # Settings
    "RenderSettings",
]
