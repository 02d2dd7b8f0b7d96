"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord produced by every
intersection query, and the half-b quadratic intersection test.

The ray-sphere intersection is found by solving:
    |ray_origin + t * ray_direction - center|^2 = radius^2

which, with oc = origin - center, is the quadratic
    a*t^2 + 2*h*t + c = 0
    a = dot(direction, direction)
    h = dot(oc, direction)
    c = dot(oc, oc) - radius^2

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter at the intersection, inside [t_min, t_max).
            Only valid if hit == 1.
        point: The world-space intersection point.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point. Unit length and
            always pointing outward from the sphere center, whichever root
            was taken. Only valid if hit == 1.
        material_id: The material ID of the hit primitive. -1 on a miss or
            when the record comes straight from hit_sphere.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def _in_range(t: ti.f32, t_min: ti.f32, t_max: ti.f32) -> ti.i32:
    """Half-open range test: t_min <= t < t_max."""
    return t >= t_min and t < t_max


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Takes the near root (-h - sqrt(d)) / a if it lies in [t_min, t_max),
    otherwise the far root (-h + sqrt(d)) / a, otherwise reports a miss. A
    negative discriminant is a miss.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be
            normalized, must be nonzero).
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted ray parameter (inclusive).
        t_max: Upper bound on the ray parameter (exclusive).

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration
    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-h - sqrt_d) / a
        valid = _in_range(t, t_min, t_max)

        if not valid:
            t = (-h + sqrt_d) / a
            valid = _in_range(t, t_min, t_max)

        if valid:
            point = ray_origin + t * ray_direction
            result.hit = 1
            result.t = t
            result.point = point
            result.normal = (point - sphere.center) / sphere.radius

    return result
