"""Preview module for output and visualization.

Components:
    display: Matplotlib-based still preview and gamma encoding
    export: PNG export via Pillow
    interactive: Taichi GGUI window with keyboard controls

Example:
    >>> from diorama.preview import save_png, show_preview
    >>> image = scene.render(600, 400)
    >>> show_preview(image)
    >>> save_png(image, "diorama.png", gamma=2.2)
"""

from diorama.preview.display import apply_gamma, image_to_uint8, show_preview, show_time_lapse
from diorama.preview.export import frame_path, save_png

# Note: interactive is NOT imported here; it pulls in the renderer.
# Import InteractivePreview and handle_key from diorama.preview.interactive.

__all__ = [
    "show_preview",
    "show_time_lapse",
    "apply_gamma",
    "image_to_uint8",
    "save_png",
    "frame_path",
]
