"""Geometry module for ray-traceable primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record

__all__ = ["Sphere", "HitRecord", "hit_sphere", "make_miss_record"]
