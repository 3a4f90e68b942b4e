"""Ready-made sphere scenes.

This module provides factory functions for the two demo scenes:

- The random scene: a huge ground sphere, a 22x22 grid of small spheres
  with randomly chosen materials, and three large feature spheres
  (glass, diffuse brown, polished metal).
- The three-sphere scene: a small diffuse/glass/metal lineup on a yellow
  ground, handy for quick renders and smoke tests.

Both return the populated SceneManager together with a ThinLensCamera
matching the scene. The camera still has to be pushed to the GPU with
setup_camera().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.spheretracer.scene.weekend import create_random_scene
    >>> from src.spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=7)
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import logging
import math

import numpy as np

from src.spheretracer.camera.thin_lens import ThinLensCamera
from src.spheretracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Random Scene Constants
# =============================================================================

# Ground: a huge diffuse sphere standing in for a plane
GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on a grid cell (a, b) for a, b in [-11, 11)
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2

# Cumulative material odds for small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95  # 0.8 <= choice < 0.95

# Small spheres too close to this point would overlap the metal feature sphere
FEATURE_CLEARANCE_POINT = (4.0, 0.2, 0.0)
FEATURE_CLEARANCE = 0.9

GLASS_IOR = 1.5

# Feature spheres
FEATURE_RADIUS = 1.0
GLASS_FEATURE_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_FEATURE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_FEATURE_ALBEDO = (0.4, 0.2, 0.1)
METAL_FEATURE_CENTER = (4.0, 1.0, 0.0)
METAL_FEATURE_ALBEDO = (0.7, 0.6, 0.5)

# Camera
RANDOM_SCENE_LOOKFROM = (11.0, 2.0, 7.0)
RANDOM_SCENE_LOOKAT = (0.0, 0.0, 0.0)
RANDOM_SCENE_VFOV = 20.0
RANDOM_SCENE_APERTURE = 0.1
RANDOM_SCENE_FOCUS_DIST = 10.0


def _random_color(rng: np.random.Generator, low: float = 0.0, high: float = 1.0):
    """Draw a color with each channel uniform in [low, high)."""
    values = rng.uniform(low, high, size=3)
    return (float(values[0]), float(values[1]), float(values[2]))


def create_random_scene(
    seed: int | None = None,
    aspect_ratio: float = 1.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random-spheres scene.

    For every grid cell (a, b) a small sphere is placed at
    (a + 0.9 * U, 0.2, b + U) unless it lands within 0.9 of
    (4, 0.2, 0). Its material is chosen by a uniform draw:
    - below 0.8: diffuse, albedo = random color * random color
    - below 0.95: metal, albedo in [0.5, 1), fuzz in [0, 0.5)
    - otherwise: glass with IOR 1.5

    Every small sphere gets its own material. The ground and the three
    feature spheres are fixed.

    Args:
        seed: Seed for the scene layout. None draws a fresh layout.
        aspect_ratio: Width / height of the target image.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground_mat)

    clearance_point = np.array(FEATURE_CLEARANCE_POINT)
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = (
                a + 0.9 * rng.random(),
                SMALL_SPHERE_RADIUS,
                b + rng.random(),
            )

            if np.linalg.norm(np.array(center) - clearance_point) <= FEATURE_CLEARANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                c1 = _random_color(rng)
                c2 = _random_color(rng)
                albedo = (c1[0] * c2[0], c1[1] * c2[1], c1[2] * c2[2])
                scene.add_lambertian_sphere(center, SMALL_SPHERE_RADIUS, albedo)
            elif choose_mat < METAL_PROBABILITY:
                albedo = _random_color(rng, 0.5, 1.0)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(center, SMALL_SPHERE_RADIUS, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center, SMALL_SPHERE_RADIUS, GLASS_IOR)

    scene.add_dielectric_sphere(GLASS_FEATURE_CENTER, FEATURE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(DIFFUSE_FEATURE_CENTER, FEATURE_RADIUS, DIFFUSE_FEATURE_ALBEDO)
    scene.add_metal_sphere(METAL_FEATURE_CENTER, FEATURE_RADIUS, METAL_FEATURE_ALBEDO, 0.0)

    logger.info(
        "Built random scene (seed=%s): %d spheres, %d materials",
        seed,
        scene.get_sphere_count(),
        scene.get_material_count(),
    )

    camera = ThinLensCamera(
        lookfrom=RANDOM_SCENE_LOOKFROM,
        lookat=RANDOM_SCENE_LOOKAT,
        vup=(0.0, 1.0, 0.0),
        vfov=RANDOM_SCENE_VFOV,
        aspect_ratio=aspect_ratio,
        aperture=RANDOM_SCENE_APERTURE,
        focus_dist=RANDOM_SCENE_FOCUS_DIST,
    )
    return scene, camera


def create_three_sphere_scene(
    aspect_ratio: float = 1.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a small scene with one sphere of each material.

    Layout (spheres along x at z = -1, viewed from above and to the right):
    - ground: large yellow diffuse sphere
    - center: diffuse blue
    - left: glass
    - right: fuzzy gold metal

    Args:
        aspect_ratio: Width / height of the target image.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    center = scene.add_lambertian_material(albedo=(0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(ior=GLASS_IOR)
    gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    logger.debug("Built three-sphere scene: %d spheres", scene.get_sphere_count())

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    focus_dist = math.dist(lookfrom, lookat)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=focus_dist,
    )
    return scene, camera
