"""Day/night animation driver.

DayNightAnimator is the frame loop that sits between a clock and a Scene: each
step advances the sun by the elapsed time and then renders a frame. It supports:
- Single steps for event-driven loops (the interactive preview)
- Fixed-length runs with a per-frame callback (offline time-lapse renders)
- A generator of frames, where a consumer that stops iterating simply
  abandons the remaining frames
- Frame timing (last frame duration and frames per second)

Example:
    >>> from diorama.core.animator import DayNightAnimator
    >>> animator = DayNightAnimator(scene, width=320, height=200)
    >>> for index, image in animator.frames(num_frames=24, dt=0.5):
    ...     save_png(image, f"frame_{index:03d}.png")
"""

import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from diorama.scene.manager import Scene

# Callback receives (frame_index, image)
FrameCallback = Callable[[int, npt.NDArray[np.float32]], None]


class DayNightAnimator:
    """Advances the sun and renders frames of a Scene.

    Attributes:
        scene: The scene being animated.
        width: Frame width in pixels.
        height: Frame height in pixels.
        paused: When True, step() renders without advancing the sun.
        frame_count: Number of frames rendered so far.
    """

    def __init__(self, scene: Scene, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {width}x{height}")
        self.scene = scene
        self.width = width
        self.height = height
        self.paused = False
        self.frame_count = 0
        self._last_frame_time = 0.0

    @property
    def last_frame_time(self) -> float:
        """Wall-clock duration of the last rendered frame, in seconds."""
        return self._last_frame_time

    @property
    def fps(self) -> float:
        """Frames per second implied by the last frame time (0 before any frame)."""
        if self._last_frame_time <= 0.0:
            return 0.0
        return 1.0 / self._last_frame_time

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        return self.paused

    def step(self, dt: float) -> npt.NDArray[np.float32]:
        """Advance the day/night cycle by dt seconds and render one frame.

        Returns:
            The rendered frame, (height, width, 3) float32.
        """
        start = time.perf_counter()
        if not self.paused:
            self.scene.advance_time(dt)
        image = self.scene.render(self.width, self.height)
        self._last_frame_time = time.perf_counter() - start
        self.frame_count += 1
        return image

    def run(self, num_frames: int, dt: float, callback: FrameCallback | None = None) -> None:
        """Render num_frames frames, advancing the sun by dt before each.

        Args:
            num_frames: Number of frames to render.
            dt: Simulated seconds between frames.
            callback: Optional function called after each frame with
                (frame_index, image).
        """
        for index, image in self.frames(num_frames, dt):
            if callback is not None:
                callback(index, image)

    def frames(self, num_frames: int, dt: float) -> Generator[tuple[int, npt.NDArray[np.float32]], None, None]:
        """Render frames lazily, yielding (frame_index, image) after each.

        A frame is only rendered when the consumer asks for it, so breaking
        out of the loop leaves no partially rendered frame behind.
        """
        for index in range(num_frames):
            yield index, self.step(dt)
