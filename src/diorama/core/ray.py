"""Ray data structure and vector utilities for voxel ray tracing.

This module provides the Ray dataclass and the vector helpers used by the
traversal and shading code. All operations are Taichi functions so they can
be called from inside kernels; Python-side math (camera, sun) uses NumPy and
the math module instead.

Vectors double as points, directions and RGB colors. Directions produced by
the engine are expected to be unit length.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec3(0.0), vec3(0.0, 0.0, -1.0), 3)
    ...     return ray_at(ray, 2.0).z
"""

import taichi as ti
import taichi.math as tm

# Type aliases for 3D vectors using Taichi's math module
vec3 = tm.vec3
ivec3 = tm.ivec3

# Below this length a vector is treated as degenerate by normalize()
NORMALIZE_EPSILON = 1e-8

# Direction components smaller than this are substituted during traversal
DIRECTION_EPSILON = 1e-6

# Returned by normalize() for zero-length input
FALLBACK_DIRECTION = (0.0, 1.0, 0.0)


@ti.dataclass
class Ray:
    """A ray with an origin, a unit direction and a remaining bounce budget.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The unit direction of the ray (vec3).
        bounce_budget: Remaining reflections allowed. A ray with a budget of
            zero is not traced and resolves to the sky color.
    """

    origin: vec3
    direction: vec3
    bounce_budget: ti.i32


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
def make_ray(origin: vec3, direction: vec3, bounce_budget: ti.i32) -> Ray:
    """Create a ray from origin, direction and bounce budget.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector (should be normalized).
        bounce_budget: Remaining reflections allowed.

    Returns:
        A new Ray instance.
    """
    return Ray(origin=origin, direction=direction, bounce_budget=bounce_budget)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v. If the length of v is
        below NORMALIZE_EPSILON, FALLBACK_DIRECTION is returned instead of
        dividing by a vanishing length.
    """
    len_v = length(v)
    result = vec3(FALLBACK_DIRECTION[0], FALLBACK_DIRECTION[1], FALLBACK_DIRECTION[2])
    if len_v >= NORMALIZE_EPSILON:
        result = v / len_v
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 * (incident . normal) * normal. The normal must be
    unit length; this is not checked.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def guard_direction(direction: vec3) -> vec3:
    """Replace near-zero direction components with a signed epsilon.

    Grid traversal divides by each direction component. Components whose
    magnitude is below DIRECTION_EPSILON are replaced by +/-DIRECTION_EPSILON
    (keeping the sign, +epsilon for an exact zero) so the axis-crossing
    distances stay finite.

    Args:
        direction: The ray direction.

    Returns:
        The direction with every component at least DIRECTION_EPSILON in magnitude.
    """
    guarded = direction
    for axis in ti.static(range(3)):
        if ti.abs(direction[axis]) < DIRECTION_EPSILON:
            guarded[axis] = DIRECTION_EPSILON
            if direction[axis] < 0.0:
                guarded[axis] = -DIRECTION_EPSILON
    return guarded
