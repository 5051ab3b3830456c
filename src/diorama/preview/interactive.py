"""Interactive preview window using Taichi GGUI.

This module maps keyboard input to the scene's camera and sun entry points and
presents each rendered frame in a ti.ui.Window.

Key bindings:
    - Left/Right arrows: orbit around the diorama
    - Up/Down arrows: raise/lower the camera
    - w/s: zoom in/out
    - 1/2/3: jump to day/sunset/night
    - Space: pause/resume the day/night cycle
    - Escape: close the window

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from diorama.preview.interactive import InteractivePreview
    >>> from diorama.scene.manager import create_diorama_scene
    >>>
    >>> scene = create_diorama_scene()
    >>> preview = InteractivePreview(scene, 600, 400)
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import os
import time
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from diorama.core.animator import DayNightAnimator
from diorama.preview.display import apply_gamma

if TYPE_CHECKING:
    import numpy.typing as npt

    from diorama.scene.manager import Scene

TIME_OF_DAY_KEYS = {"1": "day", "2": "sunset", "3": "night"}


def handle_key(key: str, scene: Scene, animator: DayNightAnimator | None = None) -> bool:
    """Apply one key press to the scene.

    Args:
        key: Key name as reported by ti.ui (e.g. ti.ui.LEFT, "w", "1").
        scene: The scene to update.
        animator: Optional animator, needed for pausing the cycle.

    Returns:
        True if the key was bound to an action, False otherwise.
    """
    camera = scene.camera
    if key == ti.ui.LEFT:
        camera.rotate_left()
    elif key == ti.ui.RIGHT:
        camera.rotate_right()
    elif key == ti.ui.UP:
        camera.rotate_up()
    elif key == ti.ui.DOWN:
        camera.rotate_down()
    elif key == "w":
        camera.zoom_in()
    elif key == "s":
        camera.zoom_out()
    elif key in TIME_OF_DAY_KEYS:
        scene.set_time_of_day(TIME_OF_DAY_KEYS[key])
    elif key == ti.ui.SPACE and animator is not None:
        animator.toggle_pause()
    else:
        return False
    return True


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Attributes:
        scene: The scene being displayed.
        width: Window width in pixels.
        height: Window height in pixels.
        animator: Frame loop driving the sun and the renderer.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        scene: Scene,
        width: int,
        height: int,
        *,
        title: str = "Diorama",
        gamma: float = 2.2,
    ) -> None:
        """Initialize the interactive preview window.

        Args:
            scene: The scene to render.
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.
            gamma: Display gamma applied to each frame.

        Note:
            The window is created lazily on first use.
        """
        self.scene = scene
        self.width = width
        self.height = height
        self.gamma = gamma
        self.animator = DayNightAnimator(scene, width, height)
        self._title = title

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(name=self._title, res=(self.width, self.height), vsync=True)
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, image: npt.NDArray[np.float32]) -> None:
        """Update the display image from a (height, width, 3) frame.

        Raises:
            ValueError: If image shape doesn't match (height, width, 3).
        """
        expected_shape = (self.height, self.width, 3)
        if image.shape != expected_shape:
            raise ValueError(f"Image shape {image.shape} doesn't match expected {expected_shape}")

        encoded = apply_gamma(image, self.gamma)

        # NumPy frames are (height, width) with the top row first;
        # the field is (width, height) with the bottom row first
        self.display_image.from_numpy(np.ascontiguousarray(np.transpose(np.flipud(encoded), (1, 0, 2))))

    def is_running(self) -> bool:
        return self.window.running

    def process_events(self) -> None:
        """Apply all pending key presses to the scene."""
        for event in self.window.get_events(ti.ui.PRESS):
            if event.key == ti.ui.ESCAPE:
                self.window.running = False
            else:
                handle_key(event.key, self.scene, self.animator)

    def _draw_hud(self) -> None:
        # GGUI titles are fixed after creation, so FPS goes into a panel
        state = self.scene.sun_state()
        with self.window.GUI.sub_window("Diorama", 0.02, 0.02, 0.3, 0.16) as gui:
            gui.text(f"FPS: {self.animator.fps:.1f}")
            gui.text(f"Sun elevation: {state.elevation:+.2f}")
            gui.text("Paused" if self.animator.paused else "Running")
            if gui.button("Export PNG"):
                self._export_png()

    def _export_png(self) -> None:
        """Save the last frame to a timestamped PNG in the working directory."""
        from diorama.preview.export import save_png

        if self.scene.pixels is None:
            print("Error: No frame rendered yet")
            return
        filename = f"diorama_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
        save_png(self.scene.pixels, filename, gamma=self.gamma)
        print(f"Exported: {filename}")

    def run(self) -> None:
        """Run the render loop until the window is closed.

        Each iteration applies pending input, advances the sun by the real
        elapsed time and renders one frame.
        """
        self._initialize_window()
        last = time.perf_counter()

        while self.is_running():
            self.process_events()

            now = time.perf_counter()
            image = self.animator.step(now - last)
            last = now

            self.update_image(image)
            self._draw_hud()
            self.canvas.set_image(self.display_image)
            self.window.show()

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        if os.name == "nt" or os.uname().sysname == "Darwin":
            return True
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
