"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the per-pixel rendering
kernel. The estimator follows a camera ray through the scene, bouncing off
surfaces according to their material, and returns the background
environment term attenuated by every surface the path touched.

The estimator is a bounded recursion written as a loop with a running
throughput product:

    - miss:      return throughput * background(direction)
    - hit with no bounces left: return black (truncation, not an error)
    - hit:       scatter; absorbed -> black, otherwise
                 throughput *= attenuation and continue from the hit point

Key features:
    - Material dispatch (Diffuse, Metal, Refractive)
    - Sky gradient background standing in for an environment light
    - Per-pixel averaging of jittered samples, one pixel per parallel task
    - Self-intersection avoidance with a small t_min

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import render
    >>> from src.pathtracer.scene.spheres import create_sphere_scene
    >>>
    >>> scene, camera = create_sphere_scene(aspect_ratio=16.0 / 9.0)
    >>> image = render(scene, camera, 320, 180, samples_per_pixel=16, max_bounces=8)
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera
from src.pathtracer.core.ray import lerp, normalize
from src.pathtracer.core.settings import (
    DEFAULT_MAX_BOUNCES,
    DEFAULT_SAMPLES_PER_PIXEL,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    RenderSettings,
)
from src.pathtracer.materials.diffuse import scatter_diffuse_by_id
from src.pathtracer.materials.metal import scatter_metal_by_id
from src.pathtracer.materials.refractive import scatter_refractive_by_id
from src.pathtracer.output.export import encode_gamma
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import (
    MaterialType,
    SceneManager,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Active ray parameter range [T_MIN, T_MAX); T_MIN suppresses self-intersection acne
T_MIN = 1e-3
T_MAX = 1e10

# Sky gradient endpoints: horizon (t=0) and zenith (t=1)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear color buffer, indexed [x, y] with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffer. The buffer is
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Background and Material Dispatch
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky gradient seen by rays that escape the scene.

    Blends from the horizon color to the zenith color with
    t = 0.5 * (normalize(direction).y + 1).
    """
    t = 0.5 * (normalize(direction).y + 1.0)
    return lerp(SKY_HORIZON_COLOR, SKY_ZENITH_COLOR, t)


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Dispatch to the scattering function of the material's kind.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The outward surface normal (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The outgoing direction.
        - attenuation: The color attenuation for this bounce.
        - did_scatter: 1 if ray scattered, 0 if absorbed (unknown material).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.DIFFUSE):
        scattered_direction, attenuation = scatter_diffuse_by_id(
            type_index, incident_direction, normal
        )
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation = scatter_metal_by_id(
            type_index, incident_direction, normal
        )
        did_scatter = 1

    elif mat_type == int(MaterialType.REFRACTIVE):
        scattered_direction, attenuation = scatter_refractive_by_id(
            type_index, incident_direction, normal
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def estimate_radiance(origin: vec3, direction: vec3, max_bounces: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (nonzero, any length).
        max_bounces: Number of scattering events allowed along the path.

    Returns:
        The estimated radiance (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    ray_origin = origin
    ray_direction = direction

    # Active flag instead of break
    active = 1

    for depth in range(max_bounces + 1):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * background(ray_direction)
                active = 0
            elif depth >= max_bounces:
                # Bounce budget exhausted
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter_material(
                    rec.material_id, ray_direction, rec.normal
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32, samples: ti.i32, max_bounces: ti.i32):
    """Render every pixel of the active region.

    The outer loop is parallel; each pixel averages its own samples and is
    written exactly once.
    """
    for i, j in ti.ndrange(width, height):
        color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples):
            ray = get_ray_jittered(i, j, width, height)
            color += estimate_radiance(ray.origin, ray.direction, max_bounces)
        _color_buffer[i, j] = color / ti.cast(samples, ti.f32)


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_bounces: ti.i32,
) -> vec3:
    """Estimate the radiance along a single ray."""
    return estimate_radiance(vec3(ox, oy, oz), vec3(dx, dy, dz), max_bounces)


@ti.kernel
def _background_kernel(dx: ti.f32, dy: ti.f32, dz: ti.f32) -> vec3:
    """Evaluate the background for a single direction."""
    return background(vec3(dx, dy, dz))


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_bounces: int = DEFAULT_MAX_BOUNCES,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray against the current scene.

    This is a Python-callable function for testing and debugging. For
    production rendering, use render() which processes all pixels in
    parallel.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), must be nonzero.
        max_bounces: Bounce budget for the path.

    Returns:
        Tuple of (R, G, B) linear radiance.
    """
    color = _trace_ray_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], max_bounces
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def background_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Python-callable evaluation of the background gradient."""
    color = _background_kernel(direction[0], direction[1], direction[2])
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered linear image as a NumPy array.

    Returns:
        Array of shape (height, width, 3), row 0 at the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Buffer rows start at the bottom, images start at the top
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


def render(
    scene: SceneManager,
    camera: PinholeCamera,
    width: int,
    height: int,
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
    max_bounces: int = DEFAULT_MAX_BOUNCES,
    gamma: float | None = None,
) -> npt.NDArray[np.float32]:
    """Render a frame of the scene as seen by the camera.

    Each pixel averages samples_per_pixel jittered rays, each estimated with
    the full bounce budget. Pixels are independent and rendered in parallel.

    Args:
        scene: The scene to render. Its data lives in the scene fields read by
            the kernel and is not modified.
        camera: The camera generating the primary rays.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples per pixel (>= 1).
        max_bounces: Bounce budget per path (>= 0).
        gamma: If given, apply c^(1/gamma) to the result.

    Returns:
        Array of shape (height, width, 3) with dtype float32, row 0 at the
        top. Linear colors unless gamma is given.

    Raises:
        ValueError: If any parameter is out of range.
    """
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be >= 1, got {samples_per_pixel}")
    if max_bounces < 0:
        raise ValueError(f"max_bounces must be >= 0, got {max_bounces}")
    if gamma is not None and not gamma > 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    setup_camera(camera)
    setup_render_target(width, height)

    logger.info(
        "Rendering %dx%d, %d spp, %d bounces, %d spheres",
        width,
        height,
        samples_per_pixel,
        max_bounces,
        scene.get_sphere_count(),
    )
    start_time = time.perf_counter()

    _render_kernel(width, height, samples_per_pixel, max_bounces)
    image = get_image_numpy()

    logger.info("Rendered in %.2fs", time.perf_counter() - start_time)

    if gamma is not None:
        image = encode_gamma(image, gamma)

    return image


def render_with_settings(
    scene: SceneManager,
    camera: PinholeCamera,
    settings: RenderSettings,
    apply_gamma: bool = False,
) -> npt.NDArray[np.float32]:
    """Render a frame using a RenderSettings object.

    The result is linear by default, ready for save_png(image, path,
    gamma=settings.gamma). With apply_gamma the image is encoded with
    settings.gamma here instead.

    settings.seed is not applied: Taichi takes its seed from
    ti.init(random_seed=...), which the caller runs before rendering.
    """
    return render(
        scene,
        camera,
        settings.width,
        settings.height,
        samples_per_pixel=settings.samples_per_pixel,
        max_bounces=settings.max_bounces,
        gamma=settings.gamma if apply_gamma else None,
    )
