"""Refractive (glass/water) material implementation.

This module implements the refractive BSDF, which models transparent
materials like glass and water with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance with
      F0 = ((1 - ior) / (1 + ior))^2
    - Total internal reflection when sin(theta_t) > 1

The side of the surface is decided from the sign of I . N with the outward
normal N. Entering the medium uses eta = 1/ior and N; leaving it uses
eta = ior and -N. The material then reflects with probability F and refracts
otherwise, adding roughness-scaled fuzz to either branch. The attenuation is
the material's fixed tint.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.refractive import scatter_refractive
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_refractive(
    >>> #     tint, roughness, ior, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import (
    f0_from_ior,
    normalize,
    reflect,
    refract,
    saturate,
    schlick,
)
from src.pathtracer.core.sampler import random_unit_vector, uniform
from src.pathtracer.materials.validation import validate_color, validate_roughness

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def resolve_interface(ior: ti.f32, incident_direction: vec3, normal: vec3):
    """Work out which side of the surface the ray arrives from.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any nonzero length).
        normal: The outward surface normal (unit length).

    Returns:
        A tuple of (refract_normal, eta, cos_theta) where refract_normal faces
        the incoming ray, eta is n_incident / n_transmitted, and cos_theta is
        the cosine between the reversed view direction and refract_normal.
    """
    unit_direction = normalize(incident_direction)
    cos_theta = tm.dot(normal, unit_direction)

    refract_normal = normal
    eta = 1.0 / ior
    if tm.dot(incident_direction, normal) > 0.0:
        # Leaving the medium
        refract_normal = -normal
        eta = ior
    else:
        cos_theta = -cos_theta

    return refract_normal, eta, cos_theta


@ti.func
def refractive_fresnel(ior: ti.f32, cos_theta: ti.f32) -> ti.f32:
    """Probability that the refractive material reflects a ray.

    Args:
        ior: Index of refraction of the material.
        cos_theta: Cosine from resolve_interface(), clamped to [0, 1] here.
    """
    return schlick(saturate(cos_theta), f0_from_ior(ior))


@ti.func
def scatter_refractive(
    f0: vec3,
    roughness: ti.f32,
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute scattered ray direction for refractive material.

    When Snell's law has no solution the reflected direction is used, so the
    outgoing direction is never the zero vector.

    Args:
        f0: Tint color (RGB).
        roughness: Fuzz in [0, 1] added to the outgoing direction.
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The outward surface normal (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation) where:
        - scattered_direction: The reflected or refracted direction, fuzzed.
        - attenuation: The material tint.
    """
    fuzz = roughness * random_unit_vector()
    refract_normal, eta, cos_theta = resolve_interface(ior, incident_direction, normal)

    fresnel = refractive_fresnel(ior, cos_theta)

    scattered_direction = reflect(incident_direction, normal)
    if fresnel <= uniform():
        refracted = refract(normalize(incident_direction), refract_normal, eta)
        # refract() returns zero under total internal reflection
        if tm.dot(refracted, refracted) > 0.0:
            scattered_direction = refracted

    scattered_direction += fuzz
    attenuation = f0

    return scattered_direction, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of refractive materials in the scene
MAX_REFRACTIVE_MATERIALS = 256

# Storage for refractive material properties
refractive_f0s = ti.Vector.field(3, dtype=ti.f32, shape=MAX_REFRACTIVE_MATERIALS)
refractive_roughnesses = ti.field(dtype=ti.f32, shape=MAX_REFRACTIVE_MATERIALS)
refractive_iors = ti.field(dtype=ti.f32, shape=MAX_REFRACTIVE_MATERIALS)
num_refractive_materials = ti.field(dtype=ti.i32, shape=())


def clear_refractive_materials() -> None:
    """Clear all refractive materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_refractive_materials[None] = 0


def add_refractive_material(
    f0: tuple[float, float, float] = (1.0, 1.0, 1.0),
    roughness: float = 0.0,
    ior: float = 1.5,
) -> int:
    """Add a refractive material to the material registry.

    Args:
        f0: Tint color as (R, G, B). Default is clear (white).
        roughness: Fuzz in [0, 1]. Default is 0 (clear glass).
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any tint component is outside [0, 1].
        ValueError: If roughness is outside [0, 1].
        ValueError: If IOR is not positive.
    """
    validate_color("F0", f0)
    validate_roughness(roughness)
    if not ior > 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_refractive_materials[None]
    if idx >= MAX_REFRACTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of refractive materials ({MAX_REFRACTIVE_MATERIALS}) exceeded"
        )

    refractive_f0s[idx] = vec3(f0[0], f0[1], f0[2])
    refractive_roughnesses[idx] = roughness
    refractive_iors[idx] = ior
    num_refractive_materials[None] = idx + 1
    return idx


def get_refractive_material_count() -> int:
    """Get the number of refractive materials in the registry."""
    return int(num_refractive_materials[None])


@ti.func
def get_refractive_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a refractive material by index."""
    return refractive_iors[material_idx]


@ti.func
def scatter_refractive_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Sample a scattered ray direction for a refractive material by index.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    f0 = refractive_f0s[material_idx]
    roughness = refractive_roughnesses[material_idx]
    ior = get_refractive_ior(material_idx)
    return scatter_refractive(f0, roughness, ior, incident_direction, normal)
