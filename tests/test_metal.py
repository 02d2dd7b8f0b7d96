"""Unit tests for the metal material.

Tests cover:
- Perfect mirror reflection
- Schlick attenuation over the f0 color
- Roughness fuzz bounds
- Material registry and parameter validation
"""

import pytest
import taichi as ti

N_SAMPLES = 2048


class TestScatterMetal:
    """Tests for metal scattering."""

    def test_mirror_head_on(self):
        """Test a ray hitting a mirror head-on bounces straight back."""
        from src.pathtracer.materials.metal import scatter_metal, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, a = scatter_metal(
                vec3(0.9, 0.9, 0.9), 0.0, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0)
            )
            direction[None] = d
            attenuation[None] = a

        test_kernel()
        d = direction[None]
        a = attenuation[None]
        assert abs(d[0]) < 1e-6
        assert abs(d[1]) < 1e-6
        assert abs(d[2] - 1.0) < 1e-6
        # cos = 1, so Schlick gives f0
        for i in range(3):
            assert abs(a[i] - 0.9) < 1e-6

    def test_mirror_45_degrees(self):
        """Test the angle of reflection equals the angle of incidence."""
        from src.pathtracer.materials.metal import scatter_metal, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, _ = scatter_metal(
                vec3(0.5, 0.5, 0.5), 0.0, vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d

        test_kernel()
        d = direction[None]
        assert abs(d[0] - 1.0) < 1e-6
        assert abs(d[1] - 1.0) < 1e-6
        assert abs(d[2]) < 1e-6

    def test_grazing_attenuation_is_white(self):
        """Test reflectance goes to one at grazing angles."""
        from src.pathtracer.materials.metal import scatter_metal, vec3

        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            _, a = scatter_metal(
                vec3(0.8, 0.6, 0.2), 0.0, vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            attenuation[None] = a

        test_kernel()
        a = attenuation[None]
        for i in range(3):
            assert abs(a[i] - 1.0) < 1e-6

    def test_colored_attenuation_at_45_degrees(self):
        """Test each channel follows Schlick's formula independently."""
        from src.pathtracer.materials.metal import scatter_metal, vec3

        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            _, a = scatter_metal(
                vec3(0.8, 0.6, 0.2), 0.0, vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            attenuation[None] = a

        test_kernel()
        a = attenuation[None]
        weight = (1.0 - 2.0**-0.5) ** 5
        for i, f0 in enumerate((0.8, 0.6, 0.2)):
            assert abs(a[i] - (f0 + (1.0 - f0) * weight)) < 1e-5

    def test_roughness_bounds_fuzz(self):
        """Test fuzz moves the direction by at most the roughness."""
        from src.pathtracer.materials.metal import scatter_metal, vec3

        offsets = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            incident = vec3(0.0, 0.0, -1.0)
            normal = vec3(0.0, 0.0, 1.0)
            for i in range(N_SAMPLES):
                d, _ = scatter_metal(vec3(0.9, 0.9, 0.9), 0.3, incident, normal)
                offsets[i] = ti.math.length(d - vec3(0.0, 0.0, 1.0))

        test_kernel()
        values = offsets.to_numpy()
        # random_unit_vector has unit length, scaled by the roughness
        assert abs(values - 0.3).max() < 1e-4


class TestMetalRegistry:
    """Tests for the metal material registry."""

    def test_add_and_lookup(self):
        """Test stored f0 and roughness are read back by index."""
        from src.pathtracer.materials.metal import (
            add_metal_material,
            get_metal_f0,
            get_metal_material_count,
            get_metal_roughness,
        )

        add_metal_material((0.9, 0.9, 0.9))
        idx = add_metal_material((0.8, 0.6, 0.2), roughness=0.25)
        assert idx == 1
        assert get_metal_material_count() == 2

        f0 = ti.field(dtype=ti.math.vec3, shape=())
        roughness = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(idx: ti.i32):
            f0[None] = get_metal_f0(idx)
            roughness[None] = get_metal_roughness(idx)

        test_kernel(idx)
        assert abs(f0[None][1] - 0.6) < 1e-6
        assert abs(roughness[None] - 0.25) < 1e-6

    def test_scatter_by_id(self):
        """Test scatter_metal_by_id matches the mirror scenario."""
        from src.pathtracer.materials.metal import add_metal_material, scatter_metal_by_id, vec3

        idx = add_metal_material((0.9, 0.9, 0.9))
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(idx: ti.i32):
            _, a = scatter_metal_by_id(idx, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))
            attenuation[None] = a

        test_kernel(idx)
        assert abs(attenuation[None][0] - 0.9) < 1e-6

    def test_f0_out_of_range(self):
        """Test f0 components must be in [0, 1]."""
        from src.pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="F0"):
            add_metal_material((1.1, 0.5, 0.5))

    def test_roughness_out_of_range(self):
        """Test roughness must be in [0, 1]."""
        from src.pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Roughness"):
            add_metal_material((0.5, 0.5, 0.5), roughness=2.0)

    def test_clear(self):
        """Test clearing resets the count."""
        from src.pathtracer.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5))
        clear_metal_materials()
        assert get_metal_material_count() == 0
