"""Whitted-style shading integrator for the voxel diorama.

This module implements the per-pixel rendering kernel: a primary ray from the
camera frame, chunk traversal, direct sun shading of the hit voxel and a
bounded chain of mirror reflections for reflective materials.

Shading of a ray with bounce budget b:

    1. b == 0            -> sky color
    2. ray misses        -> sky color
    3. direct            = max(0, n . sun_dir) * sun_color * sun_intensity * albedo
                           + ambient * albedo
    4. direct           += emissive * albedo  (independent of sun and ambient)
    5. reflectivity r>0  -> (1 - r) * direct + r * shade(reflected ray, b - 1)
    6. clamp to [0, 1] per channel

Taichi functions cannot recurse, so step 5 runs in two loops. The first walks
the mirror chain forward and records the unclamped direct term and the
reflectivity of every reflective surface it meets. The second folds those
levels back from the deepest one outward:

    color = clamp((1 - r_i) * direct_i + r_i * color)

which is the value of the clamped recursion.

There is no shadow ray: the direct term only depends on the face normal.

All per-frame inputs (camera frame, sun state, ambient level, bounce budget)
are copied into small Taichi fields by load_frame() before a render pass, so
the kernel reads one frozen snapshot.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.core.integrator import Integrator
    >>> integrator = Integrator(chunk, palette, max_width=800, max_height=600)
    >>> integrator.load_frame(camera.frame(4 / 3), sun.state(), ambient=0.1, max_depth=3)
    >>> image = integrator.render(400, 300)
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from diorama.camera.orbit import CameraFrame, primary_ray_direction
from diorama.core.ray import Ray, dot, make_ray, normalize, ray_at, reflect, vec3
from diorama.materials.palette import MaterialPalette
from diorama.scene.chunk import Chunk
from diorama.scene.config import MAX_DEPTH
from diorama.scene.sun import SunState

logger = logging.getLogger(__name__)

# Offset of reflected ray origins along the face normal
RAY_EPSILON = 1e-3

# Preallocated render target size
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@ti.data_oriented
class Integrator:
    """Renders a chunk with a material palette into a preallocated color buffer.

    Attributes:
        chunk: The voxel chunk to render.
        palette: Material properties for the chunk's voxel tags.
        max_width: Largest supported image width.
        max_height: Largest supported image height.
    """

    def __init__(
        self,
        chunk: Chunk,
        palette: MaterialPalette,
        max_width: int = MAX_IMAGE_WIDTH,
        max_height: int = MAX_IMAGE_HEIGHT,
    ) -> None:
        if max_width <= 0 or max_height <= 0:
            raise ValueError(f"Render target size must be positive, got {max_width}x{max_height}")
        self.chunk = chunk
        self.palette = palette
        self.max_width = max_width
        self.max_height = max_height

        self._width = 0
        self._height = 0
        self._frame_loaded = False

        # Color buffer indexed [x, y] with y = 0 the bottom row
        self._color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(max_width, max_height))

        # Camera snapshot
        self._eye = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._forward = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._right = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._up = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._tan_half_fov = ti.field(dtype=ti.f32, shape=())

        # Lighting snapshot
        self._sun_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._sun_color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._sun_intensity = ti.field(dtype=ti.f32, shape=())
        self._sky_color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._ambient = ti.field(dtype=ti.f32, shape=())
        self._max_depth = ti.field(dtype=ti.i32, shape=())

    # =========================================================================
    # Frame snapshot
    # =========================================================================

    def load_frame(self, camera: CameraFrame, sun: SunState, ambient: float, max_depth: int) -> None:
        """Copy the camera and lighting state used by the next render pass.

        Args:
            camera: Camera snapshot from OrbitCamera.frame().
            sun: Lighting from Sun.state().
            ambient: Constant ambient level in [0, 1].
            max_depth: Bounce budget of primary rays, in [1, MAX_DEPTH].

        Raises:
            ValueError: If ambient or max_depth are out of range.
        """
        if not 0.0 <= ambient <= 1.0:
            raise ValueError(f"ambient must be in [0, 1], got {ambient}")
        if not 1 <= max_depth <= MAX_DEPTH:
            raise ValueError(f"max_depth must be in [1, {MAX_DEPTH}], got {max_depth}")

        self._eye[None] = list(camera.eye)
        self._forward[None] = list(camera.forward)
        self._right[None] = list(camera.right)
        self._up[None] = list(camera.up)
        self._tan_half_fov[None] = camera.tan_half_fov

        self.load_lighting(sun, ambient)
        self._max_depth[None] = max_depth
        self._frame_loaded = True

    def load_lighting(self, sun: SunState, ambient: float) -> None:
        """Copy only the lighting state (used by the single-ray probes)."""
        self._sun_direction[None] = list(sun.direction)
        self._sun_color[None] = list(sun.color)
        self._sun_intensity[None] = sun.intensity
        self._sky_color[None] = list(sun.sky_color)
        self._ambient[None] = ambient

    # =========================================================================
    # Shading
    # =========================================================================

    @ti.func
    def direct_lighting(self, tag: ti.i32, voxel: tm.ivec3, normal: vec3) -> vec3:
        """Unclamped direct shading of a voxel face: Lambert + ambient + emission."""
        albedo = self.palette.color_at(tag, voxel)
        lambert = ti.max(0.0, dot(normal, self._sun_direction[None]))
        diffuse = lambert * self._sun_intensity[None] * self._sun_color[None] * albedo
        ambient = self._ambient[None] * albedo
        emission = self.palette.emissive(tag) * albedo
        return diffuse + ambient + emission

    @ti.func
    def shade(self, ray: Ray) -> vec3:
        """Shade a ray.

        Args:
            ray: The ray to shade. A bounce budget of zero returns the sky color.

        Returns:
            The shaded RGB color, clamped to [0, 1].
        """
        # Unclamped direct term and reflectivity of each mirror surface, outermost first
        directs = ti.Matrix.zero(ti.f32, MAX_DEPTH, 3)
        weights = ti.Vector.zero(ti.f32, MAX_DEPTH)
        levels = 0

        # Color where the chain ends: sky, or the direct term of an opaque block
        tail = self._sky_color[None]

        current = make_ray(ray.origin, ray.direction, ray.bounce_budget)
        active = 1

        for _ in range(MAX_DEPTH + 1):
            if active == 1:
                if current.bounce_budget <= 0:
                    active = 0
                else:
                    rec = self.chunk.intersect(current.origin, current.direction)
                    if rec.hit == 0:
                        active = 0
                    else:
                        direct = self.direct_lighting(rec.material, rec.voxel, rec.normal)
                        r = self.palette.reflectivity(rec.material)
                        if r > 0.0:
                            for c in ti.static(range(3)):
                                directs[levels, c] = direct[c]
                            weights[levels] = r
                            levels += 1

                            hit_point = ray_at(current, rec.distance)
                            current.origin = hit_point + RAY_EPSILON * rec.normal
                            current.direction = normalize(reflect(current.direction, rec.normal))
                            current.bounce_budget -= 1
                        else:
                            tail = direct
                            active = 0

        color = tm.clamp(tail, 0.0, 1.0)
        for n in range(MAX_DEPTH):
            level = levels - 1 - n
            if level >= 0:
                w = weights[level]
                direct = vec3(directs[level, 0], directs[level, 1], directs[level, 2])
                color = tm.clamp((1.0 - w) * direct + w * color, 0.0, 1.0)

        return color

    # =========================================================================
    # Rendering kernels
    # =========================================================================

    @ti.kernel
    def _render(self, width: ti.i32, height: ti.i32):
        """Shade one primary ray per pixel into the color buffer."""
        for i, j in ti.ndrange(width, height):
            # Buffer rows count up from the bottom; camera rows count down from the top
            direction = primary_ray_direction(
                i,
                height - 1 - j,
                width,
                height,
                self._forward[None],
                self._right[None],
                self._up[None],
                self._tan_half_fov[None],
                ti.cast(width, ti.f32) / ti.cast(height, ti.f32),
            )
            color = self.shade(make_ray(self._eye[None], direction, self._max_depth[None]))

            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            self._color_buffer[i, j] = color

    @ti.kernel
    def _shade_single_ray(
        self, ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, budget: ti.i32
    ) -> vec3:
        return self.shade(make_ray(vec3(ox, oy, oz), normalize(vec3(dx, dy, dz)), budget))

    @ti.kernel
    def _direct_single(
        self, tag: ti.i32, i: ti.i32, j: ti.i32, k: ti.i32, nx: ti.f32, ny: ti.f32, nz: ti.f32
    ) -> vec3:
        return self.direct_lighting(tag, tm.ivec3(i, j, k), vec3(nx, ny, nz))

    # =========================================================================
    # Public API
    # =========================================================================

    def render(self, width: int, height: int) -> npt.NDArray[np.float32]:
        """Render the loaded frame.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            Array of shape (height, width, 3), float32 in [0, 1], top row first.

        Raises:
            ValueError: If the size is not positive.
            RuntimeError: If the size exceeds the render target or no frame
                has been loaded.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        if width > self.max_width or height > self.max_height:
            raise RuntimeError(
                f"Image dimensions ({width}x{height}) exceed the render target "
                f"({self.max_width}x{self.max_height})"
            )
        if not self._frame_loaded:
            raise RuntimeError("No frame loaded. Call load_frame() before render().")

        start = time.perf_counter()
        self._width = width
        self._height = height
        self._render(width, height)
        image = self.get_image_numpy()
        logger.debug("Rendered %dx%d in %.1f ms", width, height, 1000.0 * (time.perf_counter() - start))
        return image

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the last rendered image as an (height, width, 3) array, top row first."""
        if self._width == 0:
            raise RuntimeError("Nothing rendered yet. Call render() first.")

        # Active region of the preallocated buffer
        image = self._color_buffer.to_numpy()[: self._width, : self._height, :]

        # (width, height, 3) -> (height, width, 3), then top row first
        image = np.transpose(image, (1, 0, 2))
        image = np.flipud(image)

        return np.clip(image, 0.0, 1.0).astype(np.float32)

    def shade_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        bounce_budget: int,
    ) -> tuple[float, float, float]:
        """Shade a single ray with the loaded lighting (Python-callable).

        Args:
            origin: Ray origin.
            direction: Ray direction; normalized before shading.
            bounce_budget: Remaining traced segments, in [0, MAX_DEPTH].

        Returns:
            The shaded (R, G, B) color.
        """
        if not 0 <= bounce_budget <= MAX_DEPTH:
            raise ValueError(f"bounce_budget must be in [0, {MAX_DEPTH}], got {bounce_budget}")
        d = np.asarray(direction, dtype=np.float64)
        norm = float(np.linalg.norm(d))
        if norm < 1e-12:
            raise ValueError("Ray direction must be non-zero")
        d = d / norm
        color = self._shade_single_ray(origin[0], origin[1], origin[2], d[0], d[1], d[2], bounce_budget)
        return (float(color[0]), float(color[1]), float(color[2]))

    def direct_light(
        self,
        material: int,
        voxel: tuple[int, int, int],
        normal: tuple[float, float, float],
    ) -> tuple[float, float, float]:
        """Evaluate the unclamped direct term for a voxel face (Python-callable)."""
        color = self._direct_single(
            int(material), voxel[0], voxel[1], voxel[2], normal[0], normal[1], normal[2]
        )
        return (float(color[0]), float(color[1]), float(color[2]))
