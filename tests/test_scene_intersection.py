"""Unit tests for scene-level intersection.

Tests cover:
- Sphere storage (add, clear, count, validation, capacity)
- Nearest hit over several spheres
- Ties resolving to the first inserted sphere
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=0.001, t_max=1e10):
    """Run intersect_scene in a kernel and return (hit, t, normal, material_id)."""
    from src.pathtracer.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_min: ti.f32, t_max: ti.f32,
    ):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), t_min, t_max)
        hit[None] = rec.hit
        t_val[None] = rec.t
        normal[None] = rec.normal
        material_id[None] = rec.material_id

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t_val[None], normal[None], material_id[None]


class TestSphereStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_index(self):
        """Test add_sphere returns consecutive indices."""
        from src.pathtracer.scene.intersection import add_sphere, get_sphere_count, vec3

        assert add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=0) == 0
        assert add_sphere(vec3(1.0, 0.0, -1.0), 0.5, material_id=1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Test clear_scene removes all spheres."""
        from src.pathtracer.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5)
        clear_scene()
        assert get_sphere_count() == 0

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_rejected(self, radius):
        """Test a sphere needs a positive radius."""
        from src.pathtracer.scene.intersection import add_sphere, get_sphere_count, vec3

        with pytest.raises(ValueError, match="radius"):
            add_sphere(vec3(0.0, 0.0, 0.0), radius)
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self):
        """Test adding more than MAX_SPHERES raises RuntimeError."""
        from src.pathtracer.scene.intersection import MAX_SPHERES, add_sphere, num_spheres, vec3

        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(vec3(0.0, 0.0, 0.0), 1.0)


class TestIntersectScene:
    """Tests for the nearest-hit query."""

    def test_empty_scene_misses(self):
        """Test nothing is hit in an empty scene."""
        hit, _, _, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1

    def test_material_id_propagated(self):
        """Test the hit record carries the sphere's material ID."""
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=7)

        hit, t, n, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 0.5) < 1e-5
        assert abs(n[2] - 1.0) < 1e-5
        assert material_id == 7

    def test_nearest_of_overlapping_spheres(self):
        """Test the scene hit equals the minimum of the individual hits."""
        from src.pathtracer.scene.intersection import add_sphere, clear_scene, vec3

        origin = (0.0, 0.0, 2.0)
        direction = (0.0, 0.0, -1.0)

        # Individual queries
        add_sphere(vec3(0.0, 0.0, -1.0), 1.0, material_id=0)
        _, t_far, _, _ = _intersect(origin, direction)
        clear_scene()
        add_sphere(vec3(0.0, 0.0, 0.0), 1.0, material_id=1)
        _, t_near, _, _ = _intersect(origin, direction)
        clear_scene()

        # Overlapping, farther one inserted first
        add_sphere(vec3(0.0, 0.0, -1.0), 1.0, material_id=0)
        add_sphere(vec3(0.0, 0.0, 0.0), 1.0, material_id=1)
        hit, t, _, material_id = _intersect(origin, direction)

        assert hit == 1
        assert abs(t - min(t_far, t_near)) < 1e-6
        assert abs(t - 1.0) < 1e-5
        assert material_id == 1

    def test_tie_resolves_to_first_sphere(self):
        """Test identical spheres report the first inserted one."""
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=3)
        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=4)

        hit, _, _, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert material_id == 3

    def test_t_min_skips_surface_at_origin(self):
        """Test a ray leaving a surface does not hit it again at t ~ 0."""
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 0.0), 1.0, material_id=0)

        # Start on the surface, pointing outward
        hit, _, _, _ = _intersect((0.0, 0.0, 1.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_t_max_limits_hits(self):
        """Test spheres beyond t_max are ignored."""
        from src.pathtracer.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -10.0), 1.0, material_id=0)

        hit, _, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=5.0)
        assert hit == 0
