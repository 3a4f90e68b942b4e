"""Ray data structure and vector utilities for Monte Carlo path tracing.

This module provides the fundamental Ray dataclass and the vector primitives
the rest of the renderer is built on. Points, directions and RGB colors all
share the same ``vec3`` type; componentwise arithmetic (including the
Hadamard product used for colors) comes from Taichi's vector operators.

All operations are designed to work within Taichi kernels. The random
samplers draw from ``ti.random``, which keeps an independent generator
per parallel worker, so concurrent samples never share a random stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to
            be unit length; camera and scattered rays generally are not.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean norm of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean norm of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input produces NaN components; callers never pass one.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if every component's magnitude is below 1e-8, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes v - 2 (v . n) n. The normal must be unit length; the incident
    vector keeps its length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    The refracted direction is split into a component perpendicular to the
    normal and one parallel to it. The radicand of the parallel part is
    clamped at zero so floating-point overshoot near grazing angles cannot
    produce NaNs. Callers decide on total internal reflection beforehand.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal facing the incident ray (unit length).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector.
    """
    cos_theta = tm.min(-tm.dot(incident, normal), 1.0)
    r_out_perp = eta * (incident + cos_theta * normal)
    r_out_parallel = -ti.sqrt(tm.max(0.0, 1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ior: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    R(cos) = r0 + (1 - r0) (1 - cos)^5 with r0 = ((1 - ior) / (1 + ior))^2.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ior: Index of refraction of the material.

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = (1.0 - ior) / (1.0 + ior)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Rejection sampling: draw each component uniformly in [-1, 1] until the
    point falls inside. The acceptance rate is about 52%, so the expected
    number of draws is small, but the loop itself is unbounded.

    Returns:
        A random point with squared length < 1.
    """
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = vec3(
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
        )
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Normalized random_in_unit_sphere() sample."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Generate a random point in the unit ball on the side of a normal.

    Args:
        normal: The surface normal defining the hemisphere orientation.

    Returns:
        A random_in_unit_sphere() sample, negated if it points away from
        the normal.
    """
    in_unit_sphere = random_in_unit_sphere()
    result = in_unit_sphere
    if tm.dot(in_unit_sphere, normal) < 0.0:
        result = -in_unit_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Same rejection scheme as random_in_unit_sphere() with z fixed at 0
    (about 79% acceptance). Used for thin-lens sampling.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(1.0, 1.0, 0.0)
    while length_squared(p) >= 1.0:
        p = vec3(
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
            0.0,
        )
    return p
