"""Unified scene manager for coordinating spheres and materials.

This module provides the scene-building API. It tracks which material kind
(Diffuse, Metal, Refractive) each material ID corresponds to, enabling
material dispatch in the path tracer, and validates everything before it
reaches the Taichi fields the kernels read.

The SceneManager maintains:
- A unified material_id space across all material kinds
- Mapping from material_id to (material_type, type_local_index)
- Convenience methods for adding a sphere and its material in one call
- Scene serialization to and from plain dictionaries (JSON-friendly)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_diffuse_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from src.pathtracer.materials.diffuse import (
    MAX_DIFFUSE_MATERIALS,
    add_diffuse_material,
    clear_diffuse_materials,
)
from src.pathtracer.materials.metal import (
    MAX_METAL_MATERIALS,
    add_metal_material,
    clear_metal_materials,
)
from src.pathtracer.materials.refractive import (
    MAX_REFRACTIVE_MATERIALS,
    add_refractive_material,
    clear_refractive_materials,
)
from src.pathtracer.materials.validation import validate_color, validate_roughness
from src.pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material kinds.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    DIFFUSE = 0
    METAL = 1
    REFRACTIVE = 2


# Maximum number of materials across all kinds
MAX_MATERIALS = 768  # 256 per kind * 3 kinds

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the kind-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the kind-local index for a given material ID.

    Returns:
        The index into the kind-specific material arrays, or -1 for invalid
        material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _parse_vec3(values: Any, default: tuple[float, float, float]) -> tuple[float, float, float]:
    """Turn a list from a config dict into a 3-tuple of floats."""
    if values is None:
        return default
    try:
        if len(values) != 3:
            raise ValueError(f"Expected 3 components, got {values!r}")
        return (float(values[0]), float(values[1]), float(values[2]))
    except (TypeError, KeyError) as exc:
        raise ValueError(f"Expected 3 components, got {values!r}") from exc


def _parse_float(value: Any, name: str) -> float:
    """Turn a config value into a float."""
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The kind of material.
        type_index: The index within the kind-specific material arrays.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


_MATERIAL_LIMITS = {
    MaterialType.DIFFUSE: MAX_DIFFUSE_MATERIALS,
    MaterialType.METAL: MAX_METAL_MATERIALS,
    MaterialType.REFRACTIVE: MAX_REFRACTIVE_MATERIALS,
}


def _parse_material(index: int, mat_config: Any) -> tuple[MaterialType, tuple[Any, ...]]:
    """Validate one material entry and return its kind and add_*_material arguments."""
    if not isinstance(mat_config, dict):
        raise ValueError(f"Material {index} must be a mapping, got {mat_config!r}")

    mat_type = str(mat_config.get("type", "")).lower()
    roughness = _parse_float(mat_config.get("roughness", 0.0), "roughness")
    validate_roughness(roughness)

    if mat_type == "diffuse":
        albedo = _parse_vec3(mat_config.get("albedo"), (0.5, 0.5, 0.5))
        validate_color("Albedo", albedo)
        return MaterialType.DIFFUSE, (albedo, roughness)
    if mat_type == "metal":
        f0 = _parse_vec3(mat_config.get("f0"), (0.8, 0.8, 0.8))
        validate_color("F0", f0)
        return MaterialType.METAL, (f0, roughness)
    if mat_type == "refractive":
        f0 = _parse_vec3(mat_config.get("f0"), (1.0, 1.0, 1.0))
        validate_color("F0", f0)
        ior = _parse_float(mat_config.get("ior", 1.5), "ior")
        if not ior > 0.0:
            raise ValueError(f"Index of refraction = {ior} must be positive.")
        return MaterialType.REFRACTIVE, (f0, roughness, ior)
    raise ValueError(f"Unknown material type: {mat_type}")


def _parse_config(
    config: SceneConfig,
) -> tuple[list[tuple[MaterialType, tuple[Any, ...]]], list[tuple[Any, ...]]]:
    """Validate a whole scene configuration without touching the live scene.

    Returns:
        A tuple of (materials, spheres). Each material is a (MaterialType,
        arguments) pair and each sphere a (center, radius, material_id) triple.

    Raises:
        ValueError: If any entry is malformed or out of range, or the scene
            does not fit in the fixed-size storage.
    """
    materials = [_parse_material(i, m) for i, m in enumerate(config.materials)]
    for kind, limit in _MATERIAL_LIMITS.items():
        count = sum(1 for mat_type, _ in materials if mat_type == kind)
        if count > limit:
            raise ValueError(f"Scene has {count} {kind.name.lower()} materials, limit is {limit}")

    if len(config.spheres) > MAX_SPHERES:
        raise ValueError(f"Scene has {len(config.spheres)} spheres, limit is {MAX_SPHERES}")

    spheres = []
    for i, sphere_config in enumerate(config.spheres):
        if not isinstance(sphere_config, dict):
            raise ValueError(f"Sphere {i} must be a mapping, got {sphere_config!r}")
        center = _parse_vec3(sphere_config.get("center"), (0.0, 0.0, 0.0))
        radius = _parse_float(sphere_config.get("radius", 1.0), "radius")
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        material_id = int(_parse_float(sphere_config.get("material_id", 0), "material_id"))
        if not 0 <= material_id < len(materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        spheres.append((center, radius, material_id))

    return materials, spheres


class SceneManager:
    """Unified scene manager coordinating spheres and materials.

    There is a single scene per process: the manager writes to the module
    level Taichi fields that the render kernel reads, and creating a new
    manager clears them.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_diffuse_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = scene.add_metal_material(f0=(0.8, 0.6, 0.2), roughness=0.3)
        >>> glass = scene.add_refractive_material(ior=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_diffuse_materials()
        clear_metal_materials()
        clear_refractive_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a kind-local material."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Registered %s material %d", material_type.name.lower(), material_id)
        return material_id

    def add_diffuse_material(
        self,
        albedo: tuple[float, float, float],
        roughness: float = 0.0,
    ) -> int:
        """Add a diffuse material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.
            roughness: Fuzz of the glossy lobe in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If albedo or roughness is out of range.
        """
        type_index = add_diffuse_material(albedo, roughness)
        return self._register_material(
            MaterialType.DIFFUSE,
            type_index,
            {"albedo": tuple(albedo), "roughness": roughness},
        )

    def add_metal_material(
        self,
        f0: tuple[float, float, float],
        roughness: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            f0: Reflectance at normal incidence as (R, G, B) tuple.
            roughness: The surface roughness in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If f0 or roughness is out of range.
        """
        type_index = add_metal_material(f0, roughness)
        return self._register_material(
            MaterialType.METAL,
            type_index,
            {"f0": tuple(f0), "roughness": roughness},
        )

    def add_refractive_material(
        self,
        f0: tuple[float, float, float] = (1.0, 1.0, 1.0),
        roughness: float = 0.0,
        ior: float = 1.5,
    ) -> int:
        """Add a refractive (glass/water) material to the scene.

        Args:
            f0: Tint color as (R, G, B). Default is clear.
            roughness: Fuzz in [0, 1].
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a parameter is out of range.
        """
        type_index = add_refractive_material(f0, roughness, ior)
        return self._register_material(
            MaterialType.REFRACTIVE,
            type_index,
            {"f0": tuple(f0), "roughness": roughness, "ior": ior},
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )

        return sphere_index

    def add_diffuse_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        roughness: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new diffuse material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_diffuse_material(albedo, roughness)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        f0: tuple[float, float, float],
        roughness: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(f0, roughness)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_refractive_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        f0: tuple[float, float, float] = (1.0, 1.0, 1.0),
        roughness: float = 0.0,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new refractive material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_refractive_material(f0, roughness, ior)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        The whole configuration is validated before the current scene is
        cleared, so an invalid configuration leaves the scene untouched.
        Material IDs in the sphere entries refer to positions in the
        materials list.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        materials, spheres = _parse_config(config)
        self.clear()

        adders = {
            MaterialType.DIFFUSE: self.add_diffuse_material,
            MaterialType.METAL: self.add_metal_material,
            MaterialType.REFRACTIVE: self.add_refractive_material,
        }
        # Materials first, spheres reference them by ID
        for mat_type, args in materials:
            adders[mat_type](*args)
        for center, radius, material_id in spheres:
            self.add_sphere(center, radius, material_id)

        logger.info(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)
