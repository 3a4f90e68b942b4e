"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the render kernels.

A camera ray is followed through the scene: at every surface hit the
material scatters it into a new ray and its attenuation is multiplied into
the path throughput. The path ends when
    - the ray escapes, picking up the sky gradient (the only light source),
    - the material absorbs it, contributing black,
    - or the bounce budget runs out, also contributing black.

This is the recursive estimator
    ray_color(ray, depth) = attenuation * ray_color(scattered, depth - 1)
written as a loop with an accumulated attenuation product, so raising the
depth budget never grows the call stack.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background lighting
    - Jittered sampling for anti-aliasing
    - Per-pixel sample accumulation in parallel Taichi kernels

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretracer.core.integrator import render_image, setup_render_target
    >>> from src.spheretracer.scene.weekend import create_three_sphere_scene
    >>> from src.spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_sphere_scene(aspect_ratio=1.0)
    >>> setup_camera(camera)
    >>> setup_render_target(128, 128)
    >>> render_image(num_samples=100, max_depth=50)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretracer.camera.thin_lens import get_ray
from src.spheretracer.core.ray import normalize
from src.spheretracer.materials.dielectric import scatter_dielectric_by_id
from src.spheretracer.materials.lambertian import scatter_lambertian_by_id
from src.spheretracer.materials.metal import scatter_metal_by_id
from src.spheretracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)
from src.spheretracer.scene.world import hit_world

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget per path
MAX_DEPTH = 50

# t_min suppresses self-intersection (shadow acne) at the previous hit point
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints: straight down and straight up
SKY_BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
SKY_TOP_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of sample radiance per pixel, indexed [column, row] with row 0 at the bottom
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers
    are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels, between 2 and MAX_IMAGE_WIDTH.
        height: Image height in pixels, between 2 and MAX_IMAGE_HEIGHT.

    Raises:
        ValueError: If dimensions are outside the supported range.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    # Screen coordinates divide by (width - 1) and (height - 1)
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scatter function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if the ray hit the outside of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter), with
        did_scatter == 0 when the ray is absorbed. Unknown material IDs
        absorb.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene.

    Blends white and light blue by the height of the unit direction:
        t = 0.5 * (unit(direction).y + 1)
        color = (1 - t) * white + t * (0.5, 0.7, 1.0)
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_BOTTOM_COLOR + t * SKY_TOP_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any length).
        max_depth: Number of surface interactions allowed. A budget of 0
            returns black without touching the scene.

    Returns:
        The estimated radiance (RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    depth = max_depth

    # Active flag for path continuation
    active = 1
    while active == 1:
        if depth <= 0:
            # Bounce budget exhausted, the path contributes black
            active = 0
        else:
            rec = hit_world(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction
                    depth -= 1

    return color


@ti.func
def sample_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Trace one jittered camera sample through a pixel.

    The screen coordinates are
        s = (i + U) / (width - 1), t = (j + U) / (height - 1)
    with a fresh uniform U in [0, 1) for each axis.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Bounce budget for the path.

    Returns:
        The radiance estimate of this sample.
    """
    s = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(width - 1, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(height - 1, ti.f32)
    ray = get_ray(s, t)
    return ray_color(ray.origin, ray.direction, max_depth)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_samples(width: ti.i32, height: ti.i32, num_samples: ti.i32, max_depth: ti.i32):
    """Accumulate num_samples paths into every pixel.

    Pixels run in parallel; each pixel's samples run sequentially in its
    worker and are summed before the single write to the buffer.
    """
    for i, j in ti.ndrange(width, height):
        total = vec3(0.0, 0.0, 0.0)
        for _ in range(num_samples):
            total += sample_pixel(i, j, width, height, max_depth)

        _color_sum[i, j] += total
        _sample_count[i, j] += num_samples


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
) -> vec3:
    return ray_color(vec3(ox, oy, oz), vec3(dx, dy, dz), max_depth)


@ti.kernel
def _sky_color_kernel(dx: ti.f32, dy: ti.f32, dz: ti.f32) -> vec3:
    return sky_color(vec3(dx, dy, dz))


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray against the current scene.

    This is a Python-callable probe for testing and debugging. It uses the
    same estimator as the render kernels, so each call draws fresh
    randomness at every scatter event.

    Args:
        origin: The ray origin.
        direction: The ray direction.
        max_depth: Bounce budget.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    color = _trace_ray_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], max_depth
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def sky_color_at(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the sky gradient for a direction (Python-callable)."""
    color = _sky_color_kernel(direction[0], direction[1], direction[2])
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Accumulate samples into every pixel of the render target.

    Can be called repeatedly; samples keep adding up until the target is
    cleared. Returns once every pixel has all its samples.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Bounce budget per path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    if num_samples <= 0:
        return

    width, height = get_image_dimensions()
    _render_samples(width, height, num_samples, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel so far.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_color_sum_numpy() -> npt.NDArray[np.float32]:
    """Get the accumulated radiance sums as a NumPy array.

    The array shape is (height, width, 3), first row at the top of the
    image, ready for row-major output.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_sum = _color_sum.to_numpy()
    image = full_sum[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (row 0 is the bottom in the buffer, the top in images)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
