"""Random sampling utilities for Monte Carlo path tracing.

All randomness comes from Taichi's built-in generator (``ti.random``). Every
thread of a parallel kernel owns its own generator state, so there is no
shared generator and no synchronisation between pixels. The whole stream is
seeded once per process via ``ti.init(random_seed=...)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=7)
    >>> from src.pathtracer.core.sampler import random_unit_vector
    >>> # Use within a Taichi kernel:
    >>> # direction = random_unit_vector()
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def uniform() -> ti.f32:
    """Draw a uniform scalar in [0, 1)."""
    return ti.random(ti.f32)


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Samples the azimuth theta uniformly in [0, 2pi) and cos(phi) uniformly in
    [-1, 1], which gives a uniform density over the sphere surface without
    rejection sampling.

    Returns:
        (sin(phi)cos(theta), sin(phi)sin(theta), cos(phi))
    """
    theta = 2.0 * tm.pi * uniform()
    cos_phi = 2.0 * uniform() - 1.0
    sin_phi = ti.sqrt(tm.max(0.0, 1.0 - cos_phi * cos_phi))
    return vec3(sin_phi * ti.cos(theta), sin_phi * ti.sin(theta), cos_phi)


@ti.func
def random_in_unit_square():
    """Sub-pixel jitter offsets, each uniform in [0, 1).

    Returns:
        A tuple (du, dv).
    """
    du = uniform()
    dv = uniform()
    return du, dv
