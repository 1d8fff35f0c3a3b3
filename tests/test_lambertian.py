"""Unit tests for the Lambertian material module.

Tests cover:
- Scatter direction lies on the normal side of the surface
- Attenuation equals the albedo and the material always scatters
- Degenerate direction fallback
- Material registry operations
"""

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 2000


class TestScatterLambertian:
    """Tests for the scatter function."""

    def test_scatter_direction_in_hemisphere(self):
        """Test that scattered directions never point into the surface."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.lambertian import scatter_lambertian

        dots = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(N_SAMPLES):
                direction, att = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal)
                dots[i] = direction.dot(normal)

        test_kernel()
        assert np.all(dots.to_numpy() >= -1e-6)

    def test_scatter_direction_is_not_biased_to_an_octant(self):
        """Test tangential components average to zero about the normal."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.lambertian import scatter_lambertian

        directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for i in range(N_SAMPLES):
                direction, att = scatter_lambertian(vec3(1.0, 1.0, 1.0), normal)
                directions[i] = direction

        test_kernel()
        d = directions.to_numpy()
        assert abs(d[:, 0].mean()) < 0.1
        assert abs(d[:, 1].mean()) < 0.1
        # normal + unit vector averages to the normal
        assert abs(d[:, 2].mean() - 1.0) < 0.1

    def test_attenuation_is_albedo(self):
        from pathtracer.core.vector import vec3
        from pathtracer.materials.lambertian import scatter_lambertian

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                direction, attenuation = scatter_lambertian(
                    vec3(0.8, 0.3, 0.1), vec3(0.0, 1.0, 0.0)
                )
                result[None] = attenuation

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [0.8, 0.3, 0.1], atol=1e-6)

    def test_scatter_never_degenerate(self):
        """Test scattered directions are never (near) zero."""
        from pathtracer.core.vector import near_zero, vec3
        from pathtracer.materials.lambertian import scatter_lambertian

        degenerate = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            normal = vec3(1.0, 0.0, 0.0)
            for i in range(N_SAMPLES):
                direction, att = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal)
                if near_zero(direction):
                    ti.atomic_add(degenerate[None], 1)

        test_kernel()
        assert degenerate[None] == 0


class TestLambertianRegistry:
    """Tests for the Lambertian material registry."""

    def test_add_and_count(self):
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_material_count,
        )

        assert get_lambertian_material_count() == 0
        assert add_lambertian_material((0.5, 0.5, 0.5)) == 0
        assert add_lambertian_material((0.1, 0.2, 0.3)) == 1
        assert get_lambertian_material_count() == 2

    def test_stored_albedo_read_back(self):
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
        )

        add_lambertian_material((0.9, 0.9, 0.9))
        idx = add_lambertian_material((0.2, 0.4, 0.6))

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_lambertian_albedo(idx)

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [0.2, 0.4, 0.6], atol=1e-6)

    @pytest.mark.parametrize("albedo", [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_albedo_out_of_range(self, albedo):
        from pathtracer.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError, match="outside"):
            add_lambertian_material(albedo)

    @pytest.mark.parametrize(
        "albedo", [(float("nan"), 0.5, 0.5), (0.5, float("inf"), 0.5), (0.5, 0.5, float("-inf"))]
    )
    def test_non_finite_albedo_rejected(self, albedo):
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_material_count,
        )

        with pytest.raises(ValueError, match="outside"):
            add_lambertian_material(albedo)
        assert get_lambertian_material_count() == 0

    def test_clear(self):
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            clear_lambertian_materials,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.5, 0.5, 0.5))
        clear_lambertian_materials()
        assert get_lambertian_material_count() == 0

    def test_capacity_exceeded(self):
        from pathtracer.materials import lambertian

        lambertian.num_lambertian_materials[None] = lambertian.MAX_LAMBERTIAN_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number of Lambertian"):
            lambertian.add_lambertian_material((0.5, 0.5, 0.5))
