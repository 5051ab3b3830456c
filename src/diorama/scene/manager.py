"""Scene: the diorama's chunk, sun and camera, plus the per-frame render entry.

The Scene owns every piece of mutable renderer state: the sun phase (driven by
elapsed time) and the camera orbit (driven by input). Both are changed only
between frames. Each call to render() takes a snapshot of the camera and the
sun, loads it into the integrator and shades every pixel, so a frame never
observes a half-applied update.

The chunk and the material palette are built once and never change.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.scene.config import MAX_DEPTH, DioramaConfig
    >>> from diorama.scene.manager import create_diorama_scene
    >>> scene = create_diorama_scene(DioramaConfig(width=320, height=200))
    >>> scene.advance_time(1.0 / 30.0)
    >>> scene.rotate_camera(0.1, 0.0)
    >>> image = scene.render(320, 200)
    >>> image.shape
    (200, 320, 3)
"""

import logging
import math

import numpy as np
import numpy.typing as npt

from diorama.camera.orbit import OrbitCamera
from diorama.core.integrator import Integrator
from diorama.materials.palette import MaterialPalette
from diorama.materials.types import MaterialType
from diorama.materials.water import WATER
from diorama.scene.chunk import Chunk
from diorama.scene.config import MAX_DEPTH, DioramaConfig
from diorama.scene.layout import build_default_layout
from diorama.scene.sun import Sun, SunState

logger = logging.getLogger(__name__)


class Scene:
    """Chunk, sun and camera plus the render entry point.

    Attributes:
        chunk: The voxel chunk (read-only).
        palette: Material properties (read-only).
        sun: Day/night light source.
        camera: Orbit camera.
        ambient: Constant ambient light level.
        max_depth: Bounce budget of primary rays.
        integrator: Shading kernels and render target.
        pixels: The last rendered frame, (height, width, 3) float32, or None.
    """

    def __init__(
        self,
        chunk: Chunk,
        palette: MaterialPalette,
        sun: Sun,
        camera: OrbitCamera,
        ambient: float = 0.12,
        max_depth: int = 3,
        max_width: int = 2048,
        max_height: int = 2048,
    ) -> None:
        if not 0.0 <= ambient <= 1.0:
            raise ValueError(f"ambient must be in [0, 1], got {ambient}")
        if not 1 <= max_depth <= MAX_DEPTH:
            raise ValueError(f"max_depth must be in [1, {MAX_DEPTH}], got {max_depth}")

        self.chunk = chunk
        self.palette = palette
        self.sun = sun
        self.camera = camera
        self.ambient = ambient
        self.max_depth = max_depth
        self.integrator = Integrator(chunk, palette, max_width=max_width, max_height=max_height)
        self.pixels: npt.NDArray[np.float32] | None = None

        # Keep the eye outside the chunk for every zoom level
        lo, hi = chunk.bounds()
        camera.fit_to_bounds(lo, hi)

    # =========================================================================
    # Between-frame updates
    # =========================================================================

    def advance_time(self, dt: float) -> float:
        """Advance the day/night cycle by dt seconds. Returns the new phase."""
        return self.sun.advance(dt)

    def set_time_of_day(self, name: str) -> None:
        self.sun.set_time_of_day(name)

    def rotate_camera(self, d_yaw: float, d_pitch: float) -> None:
        self.camera.rotate(d_yaw, d_pitch)

    def zoom_camera(self, delta: float) -> None:
        self.camera.zoom(delta)

    def sun_state(self) -> SunState:
        return self.sun.state()

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, width: int, height: int) -> npt.NDArray[np.float32]:
        """Render one frame from the current camera and sun state.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            The frame as (height, width, 3) float32 RGB in [0, 1], top row
            first. Also stored in self.pixels.

        Raises:
            ValueError: If the size is not positive.
            RuntimeError: If the size exceeds the preallocated render target
                (max_width x max_height; create_diorama_scene() sizes it from
                DioramaConfig.width and DioramaConfig.height).
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        frame = self.camera.frame(width / height)
        self.integrator.load_frame(frame, self.sun.state(), self.ambient, self.max_depth)
        self.pixels = self.integrator.render(width, height)
        return self.pixels

    def shade_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        bounce_budget: int | None = None,
    ) -> tuple[float, float, float]:
        """Shade a single ray under the current sun state.

        Args:
            origin: Ray origin.
            direction: Ray direction.
            bounce_budget: Remaining traced segments; defaults to max_depth.
        """
        budget = self.max_depth if bounce_budget is None else bounce_budget
        self.integrator.load_lighting(self.sun.state(), self.ambient)
        return self.integrator.shade_ray(origin, direction, budget)

    def material_at(self, i: int, j: int, k: int) -> MaterialType:
        return self.chunk.material_at(i, j, k)


def create_diorama_scene(config: DioramaConfig | None = None) -> Scene:
    """Build a Scene from a configuration.

    Uses the config's explicit layout when it has one, otherwise the built-in
    diorama for config.chunk_size. The render target is preallocated for the
    configured output resolution.

    Args:
        config: Startup configuration. Defaults to DioramaConfig().

    Returns:
        The assembled Scene.
    """
    if config is None:
        config = DioramaConfig()

    if config.layout is not None:
        layout = np.asarray(config.layout, dtype=np.int32)
    else:
        layout = build_default_layout(config.chunk_size)

    chunk = Chunk(layout, cell_size=config.cell_size)
    palette = MaterialPalette(
        overrides={MaterialType.WATER: WATER.with_reflectivity(config.water_reflectivity)}
    )
    sun = Sun(
        phase=config.initial_phase,
        cycle_speed=config.cycle_speed,
        tilt=math.radians(config.sun_tilt),
    )
    camera = OrbitCamera(
        radius=config.camera_radius,
        yaw=config.camera_yaw,
        pitch=config.camera_pitch,
        vfov=config.vfov,
        min_radius=config.min_radius,
        max_radius=config.max_radius,
        rotate_step=config.rotate_step,
        zoom_step=config.zoom_step,
    )

    scene = Scene(
        chunk,
        palette,
        sun,
        camera,
        ambient=config.ambient,
        max_depth=config.max_depth,
        max_width=config.width,
        max_height=config.height,
    )
    logger.info(
        "Created diorama scene: chunk %s with %d voxels, camera radius %.1f (min %.1f)",
        chunk.shape,
        chunk.occupied_count(),
        camera.radius,
        camera.min_radius,
    )
    return scene
