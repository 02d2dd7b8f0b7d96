"""Monte Carlo path tracer for sphere scenes, built on Taichi.

This package estimates the light arriving at a virtual camera by tracing
random paths through a scene of spheres, with support for:
- Diffuse, metal and refractive materials with Schlick Fresnel weighting
- A sky gradient background acting as the only light source
- Parallel per-pixel sampling with jittered anti-aliasing
- Gamma-encoded 8-bit PNG output

Subpackages:
    core: Vector and ray utilities, sampling, and the radiance integrator
    geometry: Sphere primitive and intersection
    materials: Scattering models for the three material kinds
    scene: Scene storage, material dispatch tables and scene factories
    camera: Pinhole camera with ray generation
    output: Gamma encoding and image export
"""

__version__ = "0.1.0"
