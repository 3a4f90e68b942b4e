"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect, refract)
- Random sampling functions for Monte Carlo
"""

import math

import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from src.spheretracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_scales_unnormalized_direction(self):
        """Test ray_at computes origin + t * direction without normalizing."""
        from src.spheretracer.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 3.0) < 1e-6
        assert abs(r[2]) < 1e-6


class TestVectorUtilities:
    """Tests for vector math functions."""

    def test_dot_and_cross(self):
        """Test dot and cross on the standard basis."""
        from src.spheretracer.core.ray import cross, dot, vec3

        dot_result = ti.field(dtype=ti.f32, shape=())
        cross_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            cross_result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(dot_result[None] - 12.0) < 1e-6
        c = cross_result[None]
        assert abs(c[0]) < 1e-6
        assert abs(c[1]) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6

    def test_length(self):
        """Test length and length_squared of a 3-4-0 vector."""
        from src.spheretracer.core.ray import length, length_squared, vec3

        len_result = ti.field(dtype=ti.f32, shape=())
        len_sq_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            len_result[None] = length(v)
            len_sq_result[None] = length_squared(v)

        test_kernel()
        assert abs(len_result[None] - 5.0) < 1e-6
        assert abs(len_sq_result[None] - 25.0) < 1e-6

    def test_normalize_has_unit_length(self):
        """Test normalized vectors have unit length for several inputs."""
        from src.spheretracer.core.ray import length, normalize

        inputs = [(3.0, 4.0, 0.0), (-1.0, 2.0, -3.0), (1e-3, 0.0, 0.0), (100.0, 50.0, 25.0)]
        n = len(inputs)
        result = ti.field(dtype=ti.f32, shape=len(inputs))
        vectors = ti.Vector.field(3, dtype=ti.f32, shape=len(inputs))
        for i, v in enumerate(inputs):
            vectors[i] = v

        @ti.kernel
        def test_kernel():
            for i in range(n):
                result[i] = length(normalize(vectors[i]))

        test_kernel()
        for i in range(len(inputs)):
            assert abs(result[i] - 1.0) < 1e-5

    def test_near_zero(self):
        """Test near_zero only accepts vectors with all tiny components."""
        from src.spheretracer.core.ray import near_zero, vec3

        tiny = ti.field(dtype=ti.i32, shape=())
        small_but_not_tiny = ti.field(dtype=ti.i32, shape=())
        one_large = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            tiny[None] = near_zero(vec3(1e-9, -1e-9, 0.0))
            small_but_not_tiny[None] = near_zero(vec3(1e-6, 0.0, 0.0))
            one_large[None] = near_zero(vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert tiny[None] == 1
        assert small_but_not_tiny[None] == 0
        assert one_large[None] == 0


class TestReflectRefract:
    """Tests for reflection, refraction and Schlick reflectance."""

    def test_reflect_45_degrees(self):
        """Test reflection of a 45 degree ray off a horizontal surface."""
        from src.spheretracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_reflect_is_self_inverse(self):
        """Test reflect(reflect(v, n), n) == v for several vectors and normals."""
        from src.spheretracer.core.ray import normalize, reflect

        cases = [
            ((1.0, -2.0, 0.5), (0.0, 1.0, 0.0)),
            ((-3.0, 1.0, 2.0), (1.0, 1.0, 1.0)),
            ((0.2, 0.3, -0.9), (0.0, 0.0, 1.0)),
            ((5.0, 5.0, 5.0), (-1.0, 2.0, 0.5)),
        ]
        num_cases = len(cases)
        vs = ti.Vector.field(3, dtype=ti.f32, shape=len(cases))
        ns = ti.Vector.field(3, dtype=ti.f32, shape=len(cases))
        out = ti.Vector.field(3, dtype=ti.f32, shape=len(cases))
        for i, (v, normal) in enumerate(cases):
            vs[i] = v
            ns[i] = normal

        @ti.kernel
        def test_kernel():
            for i in range(num_cases):
                normal = normalize(ns[i])
                out[i] = reflect(reflect(vs[i], normal), normal)

        test_kernel()
        for i, (v, _) in enumerate(cases):
            r = out[i]
            for k in range(3):
                assert abs(r[k] - v[k]) < 1e-4

    def test_refract_straight_through_at_normal_incidence(self):
        """Test a ray hitting head-on passes straight through."""
        from src.spheretracer.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1] + 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_refract_obeys_snell(self):
        """Test the refracted ray satisfies sin(theta_t) = eta * sin(theta_i)."""
        from src.spheretracer.core.ray import normalize, refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        eta = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), eta)

        test_kernel()
        r = result[None]
        length_r = math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2)
        assert abs(length_r - 1.0) < 1e-5
        sin_t = abs(r[0]) / length_r
        assert abs(sin_t - eta * math.sin(math.pi / 4)) < 1e-5
        assert r[1] < 0.0

    def test_schlick_reflectance(self):
        """Test Schlick at normal incidence is r0 and at grazing is 1."""
        from src.spheretracer.core.ray import schlick_reflectance

        normal = ti.field(dtype=ti.f32, shape=())
        grazing = ti.field(dtype=ti.f32, shape=())
        inverse_ior = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal[None] = schlick_reflectance(1.0, 1.5)
            grazing[None] = schlick_reflectance(0.0, 1.5)
            inverse_ior[None] = schlick_reflectance(1.0, 1.0 / 1.5)

        test_kernel()
        assert abs(normal[None] - 0.04) < 1e-6
        assert abs(grazing[None] - 1.0) < 1e-6
        # r0 is the same for ior and 1 / ior
        assert abs(inverse_ior[None] - 0.04) < 1e-6


class TestRandomSampling:
    """Tests for Monte Carlo sampling functions."""

    N = 2000

    def test_random_in_unit_sphere_is_inside(self):
        """Test every sample has squared length strictly below 1."""
        from src.spheretracer.core.ray import length_squared, random_in_unit_sphere

        n = self.N
        lengths = ti.field(dtype=ti.f32, shape=self.N)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                lengths[i] = length_squared(random_in_unit_sphere())

        test_kernel()
        values = lengths.to_numpy()
        assert (values < 1.0).all()

    def test_random_in_unit_disk_is_inside(self):
        """Test disk samples lie in the xy-plane with squared length below 1."""
        from src.spheretracer.core.ray import random_in_unit_disk

        n = self.N
        samples = ti.Vector.field(3, dtype=ti.f32, shape=self.N)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_disk()

        test_kernel()
        values = samples.to_numpy()
        assert (values[:, 2] == 0.0).all()
        assert ((values[:, 0] ** 2 + values[:, 1] ** 2) < 1.0).all()

    def test_random_unit_vector_has_unit_length(self):
        """Test random unit vectors are normalized."""
        from src.spheretracer.core.ray import length, random_unit_vector

        n = self.N
        lengths = ti.field(dtype=ti.f32, shape=self.N)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                lengths[i] = length(random_unit_vector())

        test_kernel()
        values = lengths.to_numpy()
        assert (abs(values - 1.0) < 1e-4).all()

    def test_random_in_hemisphere_faces_normal(self):
        """Test hemisphere samples never point against the normal."""
        from src.spheretracer.core.ray import dot, random_in_hemisphere, vec3

        n = self.N
        dots = ti.field(dtype=ti.f32, shape=self.N)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for i in range(n):
                dots[i] = dot(random_in_hemisphere(normal), normal)

        test_kernel()
        assert (dots.to_numpy() >= 0.0).all()
