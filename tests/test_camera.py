"""Unit tests for the thin-lens camera.

Tests cover:
- Orthonormal basis and viewport derivation
- Pinhole rays (aperture 0)
- Defocus: lens-sampled rays converge on the focus plane
"""

import math

import numpy as np
import taichi as ti


def _standard_camera(aperture=0.0, focus_dist=1.0):
    from src.spheretracer.camera.thin_lens import ThinLensCamera

    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=2.0,
        aperture=aperture,
        focus_dist=focus_dist,
    )


class TestCameraSetup:
    """Tests for setup_camera."""

    def test_viewport_for_standard_camera(self):
        """Test basis and viewport of a 90 degree, 2:1 camera looking down -z."""
        from src.spheretracer.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_standard_camera())
        info = get_camera_info()

        np.testing.assert_allclose(info["origin"], (0.0, 0.0, 0.0), atol=1e-6)
        np.testing.assert_allclose(info["u"], (1.0, 0.0, 0.0), atol=1e-6)
        np.testing.assert_allclose(info["v"], (0.0, 1.0, 0.0), atol=1e-6)
        np.testing.assert_allclose(info["w"], (0.0, 0.0, 1.0), atol=1e-6)
        np.testing.assert_allclose(info["horizontal"], (4.0, 0.0, 0.0), atol=1e-5)
        np.testing.assert_allclose(info["vertical"], (0.0, 2.0, 0.0), atol=1e-5)
        np.testing.assert_allclose(info["lower_left"], (-2.0, -1.0, -1.0), atol=1e-5)
        assert info["lens_radius"] == 0.0

    def test_viewport_scales_with_focus_distance(self):
        """Test the viewport sits on the focus plane."""
        from src.spheretracer.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_standard_camera(aperture=0.5, focus_dist=3.0))
        info = get_camera_info()

        np.testing.assert_allclose(info["horizontal"], (12.0, 0.0, 0.0), atol=1e-4)
        np.testing.assert_allclose(info["vertical"], (0.0, 6.0, 0.0), atol=1e-4)
        np.testing.assert_allclose(info["lower_left"], (-6.0, -3.0, -3.0), atol=1e-4)
        assert abs(info["lens_radius"] - 0.25) < 1e-6

    def test_basis_is_orthonormal_for_oblique_view(self):
        """Test u, v, w form an orthonormal basis for an arbitrary view."""
        from src.spheretracer.camera.thin_lens import (
            ThinLensCamera,
            get_camera_info,
            setup_camera,
        )

        setup_camera(
            ThinLensCamera(
                lookfrom=(13.0, 2.0, 3.0),
                lookat=(0.0, 0.0, 0.0),
                vup=(0.0, 1.0, 0.0),
                vfov=20.0,
                aspect_ratio=1.5,
                aperture=0.1,
                focus_dist=10.0,
            )
        )
        info = get_camera_info()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for vec in (u, v, w):
            assert abs(np.linalg.norm(vec) - 1.0) < 1e-5
        assert abs(u @ v) < 1e-5
        assert abs(u @ w) < 1e-5
        assert abs(v @ w) < 1e-5
        expected_w = np.array((13.0, 2.0, 3.0)) / math.sqrt(13.0**2 + 2.0**2 + 3.0**2)
        np.testing.assert_allclose(w, expected_w, atol=1e-5)


class TestRayGeneration:
    """Tests for get_ray."""

    def test_pinhole_center_ray(self):
        """Test the center ray of a pinhole camera points along -w."""
        from src.spheretracer.camera.thin_lens import get_ray, setup_camera

        setup_camera(_standard_camera())
        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = get_ray(0.5, 0.5)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        o = origin[None]
        d = direction[None]
        np.testing.assert_allclose((o[0], o[1], o[2]), (0.0, 0.0, 0.0), atol=1e-6)
        np.testing.assert_allclose((d[0], d[1], d[2]), (0.0, 0.0, -1.0), atol=1e-5)

    def test_pinhole_corner_ray_is_not_normalized(self):
        """Test the lower-left ray points at the viewport corner."""
        from src.spheretracer.camera.thin_lens import camera_ray_numpy, get_ray, setup_camera

        setup_camera(_standard_camera())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            direction[None] = get_ray(0.0, 0.0).direction

        test_kernel()
        d = direction[None]
        np.testing.assert_allclose((d[0], d[1], d[2]), (-2.0, -1.0, -1.0), atol=1e-5)
        _, expected = camera_ray_numpy(0.0, 0.0)
        np.testing.assert_allclose((d[0], d[1], d[2]), expected, atol=1e-5)

    def test_defocus_rays_converge_on_focus_plane(self):
        """Test lens samples vary the origin but hit the same focus point."""
        from src.spheretracer.camera.thin_lens import get_ray, setup_camera

        setup_camera(_standard_camera(aperture=1.0, focus_dist=2.0))
        n = 500
        origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
        targets = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                ray = get_ray(0.25, 0.75)
                origins[i] = ray.origin
                targets[i] = ray.origin + ray.direction

        test_kernel()
        o = origins.to_numpy()
        t = targets.to_numpy()

        # Origins lie on the lens disk (z = 0 plane, radius 0.5)
        assert (abs(o[:, 2]) < 1e-6).all()
        assert ((o[:, 0] ** 2 + o[:, 1] ** 2) < 0.25 + 1e-5).all()
        assert o[:, 0].std() > 0.05

        # All rays aim at lower_left + s * horizontal + t * vertical
        expected = np.array((-4.0 + 0.25 * 8.0, -2.0 + 0.75 * 4.0, -2.0))
        assert (abs(t - expected) < 1e-4).all()
