"""Camera module for primary ray generation.

Components:
    orbit: Camera orbiting the diorama center, driven by rotate/zoom input
"""

from .orbit import PITCH_LIMIT, CameraFrame, OrbitCamera, primary_ray_direction

__all__ = [
    "OrbitCamera",
    "CameraFrame",
    "primary_ray_direction",
    "PITCH_LIMIT",
]
