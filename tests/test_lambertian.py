"""Unit tests for the Lambertian (diffuse) material.

Tests cover:
- Scatter always succeeds and attenuates by exactly the albedo
- Scattered directions stay on the normal's side
- Material registry and validation
"""

import pytest
import taichi as ti


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    N = 1000

    def test_never_absorbs_and_attenuation_is_albedo(self):
        """Test every scatter succeeds with attenuation equal to the albedo."""
        from src.spheretracer.materials.lambertian import scatter_lambertian, vec3

        n = self.N
        did_scatter = ti.field(dtype=ti.i32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                _, att, ok = scatter_lambertian(vec3(0.8, 0.3, 0.1), vec3(0.0, 1.0, 0.0))
                did_scatter[i] = ok
                attenuation[i] = att

        test_kernel()
        assert (did_scatter.to_numpy() == 1).all()
        att = attenuation.to_numpy()
        assert abs(att[:, 0] - 0.8).max() < 1e-7
        assert abs(att[:, 1] - 0.3).max() < 1e-7
        assert abs(att[:, 2] - 0.1).max() < 1e-7

    def test_direction_in_normal_hemisphere(self):
        """Test scattered directions never point into the surface."""
        from src.spheretracer.materials.lambertian import scatter_lambertian, vec3

        n = self.N
        dots = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for i in range(n):
                direction, _, _ = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal)
                dots[i] = direction.dot(normal)

        test_kernel()
        assert (dots.to_numpy() >= -1e-6).all()

    def test_directions_are_spread_out(self):
        """Test the mean scattered direction leans along the normal."""
        from src.spheretracer.materials.lambertian import scatter_lambertian, vec3

        n = self.N
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                direction, _, _ = scatter_lambertian(vec3(0.5, 0.5, 0.5), vec3(0.0, 1.0, 0.0))
                directions[i] = direction

        test_kernel()
        d = directions.to_numpy()
        mean = d.mean(axis=0)
        # E[normal + unit vector] == normal
        assert abs(mean[1] - 1.0) < 0.1
        assert abs(mean[0]) < 0.1
        assert abs(mean[2]) < 0.1
        assert d[:, 0].std() > 0.2


class TestLambertianRegistry:
    """Tests for the Lambertian material registry."""

    def test_add_and_lookup(self):
        """Test albedos are stored by index."""
        from src.spheretracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
            get_lambertian_material_count,
        )

        assert add_lambertian_material((0.1, 0.2, 0.3)) == 0
        assert add_lambertian_material((0.9, 0.8, 0.7)) == 1
        assert get_lambertian_material_count() == 2

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_lambertian_albedo(1)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.9) < 1e-6
        assert abs(r[1] - 0.8) < 1e-6
        assert abs(r[2] - 0.7) < 1e-6

    def test_scatter_by_id(self):
        """Test scatter_lambertian_by_id attenuates by the stored albedo."""
        from src.spheretracer.materials.lambertian import (
            add_lambertian_material,
            scatter_lambertian_by_id,
            vec3,
        )

        idx = add_lambertian_material((0.25, 0.5, 0.75))
        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(material_idx: ti.i32):
            _, att, _ = scatter_lambertian_by_id(material_idx, vec3(0.0, 1.0, 0.0))
            result[None] = att

        test_kernel(idx)
        r = result[None]
        assert abs(r[0] - 0.25) < 1e-6
        assert abs(r[1] - 0.5) < 1e-6
        assert abs(r[2] - 0.75) < 1e-6

    @pytest.mark.parametrize("albedo", [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_invalid_albedo_raises(self, albedo):
        """Test albedo components outside [0, 1] are rejected."""
        from src.spheretracer.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError):
            add_lambertian_material(albedo)

    def test_clear(self):
        """Test clearing resets the count."""
        from src.spheretracer.materials.lambertian import (
            add_lambertian_material,
            clear_lambertian_materials,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.5, 0.5, 0.5))
        clear_lambertian_materials()
        assert get_lambertian_material_count() == 0
