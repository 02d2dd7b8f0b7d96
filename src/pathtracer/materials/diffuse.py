"""Diffuse material with a Fresnel-weighted glossy coat.

A diffuse surface is modelled as a dielectric base (F0 = 0.04) over a
diffuse layer. At each bounce the Schlick reflectance for the viewing angle
decides which lobe is sampled:

    - with probability 1 - F: diffuse bounce, normal + random_unit_vector()
    - with probability F: glossy bounce, reflect(I, N) + roughness * random_unit_vector()

The attenuation is always the albedo, whichever lobe was taken. Grazing views
therefore pick up more specular reflections, the way painted or plastic
surfaces do.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_diffuse(albedo, roughness, incident, normal)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import (
    DIELECTRIC_F0,
    near_zero,
    normalize,
    reflect,
    saturate,
    schlick,
)
from src.pathtracer.core.sampler import random_unit_vector, uniform
from src.pathtracer.materials.validation import validate_color, validate_roughness

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def diffuse_fresnel(incident_direction: vec3, normal: vec3) -> ti.f32:
    """Probability of taking the glossy lobe for a given view.

    Args:
        incident_direction: The incoming ray direction (any nonzero length).
        normal: The outward surface normal (unit length).

    Returns:
        Schlick(saturate(N . -normalize(I)), 0.04)
    """
    cos = saturate(tm.dot(normal, -normalize(incident_direction)))
    return schlick(cos, DIELECTRIC_F0)


@ti.func
def scatter_diffuse(
    albedo: vec3,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered direction for a diffuse material.

    Args:
        albedo: The diffuse reflectance color (RGB).
        roughness: Fuzz of the glossy lobe in [0, 1].
        incident_direction: The incoming ray direction.
        normal: The outward surface normal (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation) where:
        - scattered_direction: The outgoing direction (not normalized).
        - attenuation: The albedo.
    """
    fresnel = diffuse_fresnel(incident_direction, normal)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if uniform() > fresnel:
        scattered_direction = normal + random_unit_vector()
        # The random vector can cancel the normal almost exactly
        if near_zero(scattered_direction):
            scattered_direction = normal
    else:
        scattered_direction = reflect(incident_direction, normal) + roughness * random_unit_vector()

    attenuation = albedo

    return scattered_direction, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of diffuse materials in the scene
MAX_DIFFUSE_MATERIALS = 256

# Storage for diffuse material properties
diffuse_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
diffuse_roughnesses = ti.field(dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
num_diffuse_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_materials() -> None:
    """Clear all diffuse materials."""
    num_diffuse_materials[None] = 0


def add_diffuse_material(
    albedo: tuple[float, float, float],
    roughness: float = 0.0,
) -> int:
    """Add a diffuse material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].
        roughness: Fuzz of the glossy lobe in [0, 1]. Default is 0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If roughness is outside [0, 1].
    """
    validate_color("Albedo", albedo)
    validate_roughness(roughness)

    idx = num_diffuse_materials[None]
    if idx >= MAX_DIFFUSE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of diffuse materials ({MAX_DIFFUSE_MATERIALS}) exceeded"
        )

    diffuse_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    diffuse_roughnesses[idx] = roughness
    num_diffuse_materials[None] = idx + 1
    return idx


def get_diffuse_material_count() -> int:
    """Get the number of diffuse materials in the registry."""
    return int(num_diffuse_materials[None])


@ti.func
def scatter_diffuse_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Scatter using the diffuse material stored at material_idx.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    albedo = diffuse_albedos[material_idx]
    roughness = diffuse_roughnesses[material_idx]
    return scatter_diffuse(albedo, roughness, incident_direction, normal)
