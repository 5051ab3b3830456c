"""Image export utilities for rendered frames.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from diorama.preview.export import save_png
    >>> save_png(scene.render(600, 400), "diorama.png")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from diorama.preview.display import image_to_uint8


def save_png(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = 2.2,
) -> None:
    """Save a rendered frame as a PNG file.

    Args:
        image: Linear frame of shape (H, W, 3) in [0, 1].
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 2.2 for sRGB).

    Raises:
        ValueError: If the image is not an (H, W, 3) array.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    pil_image = PILImage.fromarray(image_to_uint8(image, gamma=gamma))
    pil_image.save(filepath)


def frame_path(directory: str | Path, index: int, prefix: str = "frame") -> Path:
    """Path of frame number index in a numbered sequence, e.g. frame_0007.png."""
    return Path(directory) / f"{prefix}_{index:04d}.png"
