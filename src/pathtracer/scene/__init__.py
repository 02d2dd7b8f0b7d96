"""Scene module for scene storage and ray-scene queries.

Components:
    intersection: Sphere storage in Taichi fields and nearest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    spheres: Factory for the default sphere scene

Scene data is kept in structure-of-arrays Taichi fields, written from
Python between renders and read-only inside kernels.
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .spheres import SphereSceneParams, create_sphere_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Default scene
    "create_sphere_scene",
    "SphereSceneParams",
]
