"""Metal (specular reflective) material implementation.

Metals reflect the incident ray about the surface normal. Rough metals add a
random offset scaled by the roughness parameter:

    R = I - 2(I . N)N + roughness * random_unit_vector()

The attenuation is the Schlick reflectance of the metal's colored F0, so
metals brighten toward white at grazing angles:

    attenuation = F0 + (1 - F0)(1 - cos)^5,  cos = saturate(N . -normalize(I))

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_metal(f0, roughness, incident_dir, normal)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import (
    normalize,
    reflect,
    saturate,
    schlick_color,
)
from src.pathtracer.core.sampler import random_unit_vector
from src.pathtracer.materials.validation import validate_color, validate_roughness

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    f0: vec3,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute scattered ray direction for metal material.

    Metals never absorb a ray outright; a fuzzed direction that dips below
    the surface is left to the next intersection query.

    Args:
        f0: Reflectance at normal incidence (RGB).
        roughness: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction.
        normal: The outward surface normal (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation) where:
        - scattered_direction: The reflected direction, fuzzed by roughness.
        - attenuation: The Schlick reflectance for the viewing angle.
    """
    scattered_direction = reflect(incident_direction, normal) + roughness * random_unit_vector()

    cos = saturate(tm.dot(normal, -normalize(incident_direction)))
    attenuation = schlick_color(cos, f0)

    return scattered_direction, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_f0s = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_roughnesses = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    f0: tuple[float, float, float],
    roughness: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        f0: Reflectance at normal incidence as (R, G, B) tuple.
            Each component should be in [0, 1].
        roughness: The surface roughness in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any f0 component is outside [0, 1].
        ValueError: If roughness is outside [0, 1].
    """
    validate_color("F0", f0)
    validate_roughness(roughness)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_f0s[idx] = vec3(f0[0], f0[1], f0[2])
    metal_roughnesses[idx] = roughness
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_f0(material_idx: ti.i32) -> vec3:
    """Get the normal-incidence reflectance for a metal material by index."""
    return metal_f0s[material_idx]


@ti.func
def get_metal_roughness(material_idx: ti.i32) -> ti.f32:
    """Get the roughness for a metal material by index."""
    return metal_roughnesses[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Sample a scattered ray direction for a metal material by index.

    Looks up f0 and roughness from the registry and calls scatter_metal.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    f0 = get_metal_f0(material_idx)
    roughness = get_metal_roughness(material_idx)
    return scatter_metal(f0, roughness, incident_direction, normal)
