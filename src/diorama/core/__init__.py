"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    integrator: Direct shading with bounded mirror reflections
    animator: Frame loop advancing the day/night cycle

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    DIRECTION_EPSILON,
    FALLBACK_DIRECTION,
    NORMALIZE_EPSILON,
    Ray,
    cross,
    dot,
    guard_direction,
    ivec3,
    length,
    length_squared,
    make_ray,
    normalize,
    ray_at,
    reflect,
    vec3,
)

# Note: integrator and animator are NOT imported here to avoid circular imports.
# Import directly from diorama.core.integrator or diorama.core.animator when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "ivec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "guard_direction",
    "NORMALIZE_EPSILON",
    "DIRECTION_EPSILON",
    "FALLBACK_DIRECTION",
]
