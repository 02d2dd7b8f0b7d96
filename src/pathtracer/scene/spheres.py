"""Default sphere scene configuration.

This module provides a factory function for the scene rendered by the
command line tool: a small sphere resting on a very large one that acts as
the ground, flanked by a metal and a glass sphere, all under the sky
gradient.

Layout (world units, camera at z = 1 looking down -Z):
- Ground: sphere at (0, -100.5, -1) with radius 100, diffuse gray
- Center: sphere at (0, 0, -1) with radius 0.5, diffuse red
- Left: sphere at (-1, 0, -1) with radius 0.5, glass (IOR 1.5)
- Right: sphere at (1, 0, -1) with radius 0.5, brushed gold metal

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.spheres import create_sphere_scene
    >>> from src.pathtracer.core.integrator import render
    >>>
    >>> scene, camera = create_sphere_scene(aspect_ratio=16.0 / 9.0)
    >>> image = render(scene, camera, 320, 180)
"""

from dataclasses import dataclass

from src.pathtracer.camera.pinhole import PinholeCamera, default_camera
from src.pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Parameters
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

CENTER_SPHERE_CENTER = (0.0, 0.0, -1.0)
SPHERE_RADIUS = 0.5


@dataclass
class SphereSceneParams:
    """Material parameters of the default sphere scene.

    Attributes:
        ground_albedo: Diffuse color of the ground sphere.
        center_albedo: Diffuse color of the center sphere.
        center_roughness: Glossy fuzz of the center sphere's coat.
        metal_f0: Reflectance at normal incidence of the right sphere.
        metal_roughness: Roughness of the right sphere.
        glass_ior: Index of refraction of the left sphere.
        include_side_spheres: If False, only the ground and center spheres
            are added.
    """

    ground_albedo: tuple[float, float, float] = (0.5, 0.5, 0.5)
    center_albedo: tuple[float, float, float] = (0.7, 0.3, 0.3)
    center_roughness: float = 0.5
    metal_f0: tuple[float, float, float] = (0.8, 0.6, 0.2)
    metal_roughness: float = 0.1
    glass_ior: float = 1.5
    include_side_spheres: bool = True


def create_sphere_scene(
    aspect_ratio: float = 16.0 / 9.0,
    params: SphereSceneParams | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the default sphere scene and its camera.

    Args:
        aspect_ratio: Width divided by height of the output image.
        params: Optional material parameters. Defaults are used if None.

    Returns:
        Tuple of (scene, camera).
    """
    if params is None:
        params = SphereSceneParams()

    scene = SceneManager()

    scene.add_diffuse_sphere(GROUND_CENTER, GROUND_RADIUS, albedo=params.ground_albedo)
    scene.add_diffuse_sphere(
        CENTER_SPHERE_CENTER,
        SPHERE_RADIUS,
        albedo=params.center_albedo,
        roughness=params.center_roughness,
    )

    if params.include_side_spheres:
        scene.add_refractive_sphere((-1.0, 0.0, -1.0), SPHERE_RADIUS, ior=params.glass_ior)
        scene.add_metal_sphere(
            (1.0, 0.0, -1.0),
            SPHERE_RADIUS,
            f0=params.metal_f0,
            roughness=params.metal_roughness,
        )

    camera = default_camera(aspect_ratio)

    return scene, camera
