"""Orbit camera for primary ray generation.

The camera circles a fixed target (the chunk center) on a sphere. Its state is
three numbers: the orbit radius, the yaw (rotation about the vertical axis)
and the pitch (elevation above the horizontal plane). The eye position is

    eye = target + radius * (cos(pitch) * sin(yaw), sin(pitch), cos(pitch) * cos(yaw))

The view basis is derived by looking from the eye toward the target:
- forward: unit vector from eye to target
- right: forward x world_up, normalized
- up: right x forward

World up is (0, 1, 0). Pitch is clamped to +/-(pi/2 - 0.1) so forward never
becomes parallel to it in normal use; if it does, (0, 0, 1) is used instead.

For pixel (px, py) of a width x height image, with py = 0 the top row:

    u = (2 * (px + 0.5) / width - 1) * aspect * tan(fov / 2)
    v = (1 - 2 * (py + 0.5) / height) * tan(fov / 2)
    direction = normalize(forward + u * right + v * up)

Basis construction runs on the Python side with NumPy, once per frame. The
result is handed to kernels as a CameraFrame and consumed by the Taichi
function primary_ray_direction().

Example:
    >>> from diorama.camera.orbit import OrbitCamera
    >>> camera = OrbitCamera(target=(8.0, 4.0, 8.0), radius=30.0, yaw=0.0, pitch=0.0)
    >>> origin, direction = camera.primary_ray(320, 240, 640, 480)
    >>> camera.zoom_in()
    >>> camera.rotate_left()
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from diorama.core.ray import normalize, vec3

TWO_PI = 2.0 * math.pi

# Pitch stays this far away from the poles
PITCH_LIMIT = 0.5 * math.pi - 0.1

WORLD_UP = (0.0, 1.0, 0.0)
FALLBACK_UP = (0.0, 0.0, 1.0)

# Gap kept between the eye and the chunk's bounding sphere
DEFAULT_ZOOM_MARGIN = 0.5


@dataclass(frozen=True)
class CameraFrame:
    """Snapshot of the camera for one render pass.

    Attributes:
        eye: Camera position in world space.
        forward: Unit view direction.
        right: Unit right vector of the image plane.
        up: Unit up vector of the image plane.
        tan_half_fov: tan(vertical_fov / 2).
        aspect: Image width divided by height.
    """

    eye: tuple[float, float, float]
    forward: tuple[float, float, float]
    right: tuple[float, float, float]
    up: tuple[float, float, float]
    tan_half_fov: float
    aspect: float


def _unit(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)


class OrbitCamera:
    """Camera orbiting a target point.

    Attributes:
        target: Look-at point (the scene center).
        radius: Distance from the target to the eye.
        yaw: Rotation about the vertical axis in radians, wrapped to [0, 2*pi).
        pitch: Elevation in radians, clamped to [-PITCH_LIMIT, PITCH_LIMIT].
        vfov: Vertical field of view in degrees.
        min_radius: Smallest allowed radius.
        max_radius: Largest allowed radius.
        rotate_step: Angle used by rotate_left/right/up/down().
        zoom_step: Radius change used by zoom_in/out().
    """

    def __init__(
        self,
        target: tuple[float, float, float] = (0.0, 0.0, 0.0),
        radius: float = 20.0,
        yaw: float = 0.0,
        pitch: float = 0.4,
        vfov: float = 60.0,
        min_radius: float = 1.0,
        max_radius: float = 200.0,
        rotate_step: float = math.pi / 16.0,
        zoom_step: float = 1.0,
    ) -> None:
        if not 0.0 < vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
        if min_radius <= 0.0:
            raise ValueError(f"min_radius must be positive, got {min_radius}")
        if max_radius < min_radius:
            raise ValueError(f"max_radius ({max_radius}) must be >= min_radius ({min_radius})")
        if rotate_step <= 0.0 or zoom_step <= 0.0:
            raise ValueError("rotate_step and zoom_step must be positive")

        self.target = tuple(float(c) for c in target)
        self.vfov = vfov
        self.min_radius = min_radius
        self.max_radius = max_radius
        self.rotate_step = rotate_step
        self.zoom_step = zoom_step
        self.radius = min(max(radius, min_radius), max_radius)
        self.yaw = yaw % TWO_PI
        self.pitch = min(max(pitch, -PITCH_LIMIT), PITCH_LIMIT)

    # =========================================================================
    # Mutation
    # =========================================================================

    def rotate(self, d_yaw: float, d_pitch: float) -> None:
        """Rotate around the target; yaw wraps, pitch is clamped."""
        self.yaw = (self.yaw + d_yaw) % TWO_PI
        self.pitch = min(max(self.pitch + d_pitch, -PITCH_LIMIT), PITCH_LIMIT)

    def rotate_left(self) -> None:
        self.rotate(self.rotate_step, 0.0)

    def rotate_right(self) -> None:
        self.rotate(-self.rotate_step, 0.0)

    def rotate_up(self) -> None:
        self.rotate(0.0, self.rotate_step)

    def rotate_down(self) -> None:
        self.rotate(0.0, -self.rotate_step)

    def zoom(self, delta: float) -> None:
        """Change the orbit radius by delta (negative moves closer), clamped."""
        self.radius = min(max(self.radius + delta, self.min_radius), self.max_radius)

    def zoom_in(self) -> None:
        self.zoom(-self.zoom_step)

    def zoom_out(self) -> None:
        self.zoom(self.zoom_step)

    def fit_to_bounds(
        self,
        lo: tuple[float, float, float],
        hi: tuple[float, float, float],
        margin: float = DEFAULT_ZOOM_MARGIN,
    ) -> None:
        """Center the orbit on a bounding box and keep the eye outside it.

        The target moves to the box center and min_radius is raised past the
        box's bounding sphere, so no amount of zooming in puts the eye inside.

        Args:
            lo: Minimum corner of the box.
            hi: Maximum corner of the box.
            margin: Extra distance kept between the eye and the bounding sphere.
        """
        lo_arr = np.asarray(lo, dtype=np.float64)
        hi_arr = np.asarray(hi, dtype=np.float64)
        self.target = tuple(float(c) for c in 0.5 * (lo_arr + hi_arr))
        enclosing = 0.5 * float(np.linalg.norm(hi_arr - lo_arr)) + margin
        self.min_radius = max(self.min_radius, enclosing)
        self.max_radius = max(self.max_radius, self.min_radius)
        self.radius = min(max(self.radius, self.min_radius), self.max_radius)

    # =========================================================================
    # Derived state
    # =========================================================================

    def eye(self) -> tuple[float, float, float]:
        """Get the eye position in world space."""
        cp = math.cos(self.pitch)
        return (
            self.target[0] + self.radius * cp * math.sin(self.yaw),
            self.target[1] + self.radius * math.sin(self.pitch),
            self.target[2] + self.radius * cp * math.cos(self.yaw),
        )

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Get the orthonormal view basis (forward, right, up)."""
        eye = np.array(self.eye(), dtype=np.float64)
        target = np.array(self.target, dtype=np.float64)
        forward = _unit(target - eye)

        right = np.cross(forward, np.array(WORLD_UP))
        if np.linalg.norm(right) < 1e-6:
            # Looking straight up or down
            right = np.cross(forward, np.array(FALLBACK_UP))
        right = _unit(right)
        up = np.cross(right, forward)
        return forward, right, up

    def frame(self, aspect: float) -> CameraFrame:
        """Take a snapshot of the camera for a render pass."""
        forward, right, up = self.basis()
        return CameraFrame(
            eye=self.eye(),
            forward=tuple(forward.tolist()),
            right=tuple(right.tolist()),
            up=tuple(up.tolist()),
            tan_half_fov=math.tan(math.radians(self.vfov) / 2.0),
            aspect=aspect,
        )

    def primary_ray(self, px: float, py: float, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
        """Generate the primary ray through the center of pixel (px, py).

        Args:
            px: Pixel column, 0 is the left edge.
            py: Pixel row, 0 is the top edge.
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            Tuple of (origin, unit direction) as NumPy arrays.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        forward, right, up = self.basis()
        h = math.tan(math.radians(self.vfov) / 2.0)
        aspect = width / height
        u = (2.0 * (px + 0.5) / width - 1.0) * aspect * h
        v = (1.0 - 2.0 * (py + 0.5) / height) * h
        direction = _unit(forward + u * right + v * up)
        return np.array(self.eye(), dtype=np.float64), direction


@ti.func
def primary_ray_direction(
    px: ti.i32,
    py: ti.i32,
    width: ti.i32,
    height: ti.i32,
    forward: vec3,
    right: vec3,
    up: vec3,
    tan_half_fov: ti.f32,
    aspect: ti.f32,
) -> vec3:
    """Direction of the primary ray through the center of pixel (px, py).

    Kernel-side counterpart of OrbitCamera.primary_ray(); py = 0 is the top row.
    """
    u = (2.0 * (ti.cast(px, ti.f32) + 0.5) / ti.cast(width, ti.f32) - 1.0) * aspect * tan_half_fov
    v = (1.0 - 2.0 * (ti.cast(py, ti.f32) + 0.5) / ti.cast(height, ti.f32)) * tan_half_fov
    return normalize(forward + u * right + v * up)
