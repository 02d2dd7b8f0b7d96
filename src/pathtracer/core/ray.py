"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass, the vector helpers used by every
other layer (dot, length, normalize, reflect, refract) and the Schlick
Fresnel helpers shared by all material models. Everything here is pure math
and is designed to be called from within Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Colors share the vector representation (r, g, b)
Color = tm.vec3

# Base reflectance at normal incidence for common dielectrics (plastic, paint)
DIELECTRIC_F0 = 0.04


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The result is undefined for a zero-length vector; callers must make sure
    the input is nonzero.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes I - 2(I . N)N. The normal should be unit length; the incident
    vector keeps its length, so a unit input gives a unit output.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract an incident vector through a surface.

    Computes the refracted direction using Snell's law. If total internal
    reflection occurs, returns a zero vector.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal on the incident side (should be normalized,
            pointing against the incident direction).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector, or zero vector if total internal
        reflection occurs.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        result = eta * incident + (eta * cos_i - cos_t) * normal
    return result


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linearly interpolate from a (t=0) to b (t=1)."""
    return (1.0 - t) * a + t * b


# =============================================================================
# Fresnel (Schlick) Helpers
# =============================================================================


@ti.func
def saturate(x: ti.f32) -> ti.f32:
    """Clamp a scalar to [0, 1]."""
    return tm.clamp(x, 0.0, 1.0)


@ti.func
def f0_from_ior(ior: ti.f32) -> ti.f32:
    """Base reflectance at normal incidence for a dielectric.

    Args:
        ior: Index of refraction of the material (relative to air).

    Returns:
        ((1 - ior) / (1 + ior))^2
    """
    r0 = (1.0 - ior) / (1.0 + ior)
    return r0 * r0


@ti.func
def schlick(cosine: ti.f32, f0: ti.f32) -> ti.f32:
    """Schlick's approximation of the Fresnel reflectance.

    F = F0 + (1 - F0)(1 - cos)^5, with cos clamped to [0, 1]. Gives F0 at
    normal incidence (cos = 1) and 1 at grazing incidence (cos = 0).

    Args:
        cosine: Cosine of the angle between the view direction and the normal.
        f0: Reflectance at normal incidence.

    Returns:
        The approximate Fresnel reflectance.
    """
    c = saturate(cosine)
    return f0 + (1.0 - f0) * ((1.0 - c) ** 5)


@ti.func
def schlick_color(cosine: ti.f32, f0: vec3) -> vec3:
    """Component-wise Schlick approximation over a reflectance color."""
    c = saturate(cosine)
    return f0 + (vec3(1.0, 1.0, 1.0) - f0) * ((1.0 - c) ** 5)
