"""Materials module for scattering models.

This module implements the three material kinds a surface can have:

Components:
    diffuse: Diffuse base under a dielectric (F0 = 0.04) glossy coat
    metal: Specular reflection with colored Schlick reflectance and roughness
    refractive: Glass-like materials with Fresnel-weighted reflect/refract
    validation: Construction-time parameter checks shared by the registries

Each material provides:
    - scatter_*(): sample an outgoing direction and return the attenuation
    - a registry (add_*, clear_*, scatter_*_by_id) backed by Taichi fields

All scatter functions are Taichi functions and use the Schlick approximation
F(cos) = F0 + (1 - F0)(1 - cos)^5 with cos clamped to [0, 1].
"""

from .diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
    diffuse_fresnel,
    get_diffuse_material_count,
    scatter_diffuse,
    scatter_diffuse_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_f0,
    get_metal_material_count,
    get_metal_roughness,
    scatter_metal,
    scatter_metal_by_id,
)
from .refractive import (
    add_refractive_material,
    clear_refractive_materials,
    get_refractive_ior,
    get_refractive_material_count,
    refractive_fresnel,
    resolve_interface,
    scatter_refractive,
    scatter_refractive_by_id,
)

__all__ = [
    # Diffuse
    "scatter_diffuse",
    "scatter_diffuse_by_id",
    "diffuse_fresnel",
    "add_diffuse_material",
    "clear_diffuse_materials",
    "get_diffuse_material_count",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_f0",
    "get_metal_roughness",
    # Refractive
    "scatter_refractive",
    "scatter_refractive_by_id",
    "resolve_interface",
    "refractive_fresnel",
    "add_refractive_material",
    "clear_refractive_materials",
    "get_refractive_material_count",
    "get_refractive_ior",
]
