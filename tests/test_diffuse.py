"""Unit tests for the diffuse material.

Tests cover:
- Dielectric coat Fresnel weight (F0 = 0.04)
- Scattered directions stay on the outside of the surface
- Glossy lobe probability follows Schlick
- Attenuation equals the albedo
- Material registry and parameter validation
"""

import math

import pytest
import taichi as ti

N_SAMPLES = 4096


class TestDiffuseFresnel:
    """Tests for the coat reflectance."""

    def test_normal_incidence(self):
        """Test head-on view gives the dielectric base reflectance."""
        from src.pathtracer.materials.diffuse import diffuse_fresnel, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = diffuse_fresnel(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-6

    def test_grazing_incidence(self):
        """Test a view parallel to the surface is fully reflective."""
        from src.pathtracer.materials.diffuse import diffuse_fresnel, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = diffuse_fresnel(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-6

    def test_incident_length_does_not_matter(self):
        """Test the incident direction is normalized before use."""
        from src.pathtracer.materials.diffuse import diffuse_fresnel, vec3

        unit = ti.field(dtype=ti.f32, shape=())
        long = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            unit[None] = diffuse_fresnel(ti.math.normalize(vec3(1.0, -1.0, 0.0)), n)
            long[None] = diffuse_fresnel(vec3(5.0, -5.0, 0.0), n)

        test_kernel()
        assert abs(unit[None] - long[None]) < 1e-6


class TestScatterDiffuse:
    """Tests for diffuse scattering."""

    def test_attenuation_is_albedo(self):
        """Test every sample is attenuated by the albedo."""
        from src.pathtracer.materials.diffuse import scatter_diffuse, vec3

        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                _, attenuation = scatter_diffuse(
                    vec3(0.8, 0.3, 0.1), 0.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                attenuations[i] = attenuation

        test_kernel()
        values = attenuations.to_numpy()
        assert abs(values[:, 0] - 0.8).max() < 1e-6
        assert abs(values[:, 1] - 0.3).max() < 1e-6
        assert abs(values[:, 2] - 0.1).max() < 1e-6

    def test_directions_leave_surface(self):
        """Test smooth-coat samples never point into the surface."""
        from src.pathtracer.materials.diffuse import scatter_diffuse, vec3

        cosines = ti.field(dtype=ti.f32, shape=N_SAMPLES)
        lengths = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(N_SAMPLES):
                direction, _ = scatter_diffuse(
                    vec3(0.5, 0.5, 0.5), 0.0, vec3(1.0, -1.0, 0.0), normal
                )
                cosines[i] = ti.math.dot(direction, normal)
                lengths[i] = ti.math.length(direction)

        test_kernel()
        assert cosines.to_numpy().min() >= -1e-5
        # Never the zero vector
        assert lengths.to_numpy().min() > 0.0

    def test_glossy_probability_follows_schlick(self):
        """Test the share of mirror bounces matches the coat reflectance."""
        from src.pathtracer.materials.diffuse import scatter_diffuse, vec3

        mirrored = ti.field(dtype=ti.i32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = ti.math.normalize(vec3(1.0, -0.2, 0.0))
            expected = incident - 2.0 * ti.math.dot(incident, normal) * normal
            for i in range(N_SAMPLES):
                direction, _ = scatter_diffuse(vec3(0.5, 0.5, 0.5), 0.0, incident, normal)
                mirrored[i] = 1 if ti.math.length(direction - expected) < 1e-5 else 0

        test_kernel()
        cos = 0.2 / math.sqrt(1.04)
        expected_fraction = 0.04 + 0.96 * (1.0 - cos) ** 5
        fraction = mirrored.to_numpy().mean()
        assert abs(fraction - expected_fraction) < 0.05


class TestDiffuseRegistry:
    """Tests for the diffuse material registry."""

    def test_add_and_count(self):
        """Test materials get consecutive indices."""
        from src.pathtracer.materials.diffuse import (
            add_diffuse_material,
            get_diffuse_material_count,
        )

        assert add_diffuse_material((0.5, 0.5, 0.5)) == 0
        assert add_diffuse_material((0.8, 0.1, 0.1), roughness=0.3) == 1
        assert get_diffuse_material_count() == 2

    def test_scatter_by_id_uses_stored_albedo(self):
        """Test lookup by index returns the stored albedo."""
        from src.pathtracer.materials.diffuse import (
            add_diffuse_material,
            scatter_diffuse_by_id,
            vec3,
        )

        add_diffuse_material((0.1, 0.2, 0.3))
        idx = add_diffuse_material((0.7, 0.6, 0.5))

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(idx: ti.i32):
            _, attenuation = scatter_diffuse_by_id(idx, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
            result[None] = attenuation

        test_kernel(idx)
        r = result[None]
        assert abs(r[0] - 0.7) < 1e-6
        assert abs(r[1] - 0.6) < 1e-6
        assert abs(r[2] - 0.5) < 1e-6

    @pytest.mark.parametrize("albedo", [(1.2, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_albedo_out_of_range(self, albedo):
        """Test albedo components must be in [0, 1]."""
        from src.pathtracer.materials.diffuse import add_diffuse_material

        with pytest.raises(ValueError, match="Albedo"):
            add_diffuse_material(albedo)

    def test_albedo_wrong_arity(self):
        """Test albedo needs three components."""
        from src.pathtracer.materials.diffuse import add_diffuse_material

        with pytest.raises(ValueError, match="3 components"):
            add_diffuse_material((0.5, 0.5))

    @pytest.mark.parametrize("roughness", [-0.1, 1.5])
    def test_roughness_out_of_range(self, roughness):
        """Test roughness must be in [0, 1]."""
        from src.pathtracer.materials.diffuse import add_diffuse_material

        with pytest.raises(ValueError, match="Roughness"):
            add_diffuse_material((0.5, 0.5, 0.5), roughness=roughness)

    def test_capacity_exceeded(self):
        """Test the registry refuses materials beyond its capacity."""
        from src.pathtracer.materials.diffuse import (
            MAX_DIFFUSE_MATERIALS,
            add_diffuse_material,
            num_diffuse_materials,
        )

        num_diffuse_materials[None] = MAX_DIFFUSE_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number of diffuse materials"):
            add_diffuse_material((0.5, 0.5, 0.5))
