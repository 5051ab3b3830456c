"""Matplotlib-based preview display for rendered frames.

Frames from Scene.render() are linear RGB in [0, 1]; this module gamma-encodes
them for display and shows them with Matplotlib.

Example:
    >>> from diorama.preview.display import show_preview
    >>> image = scene.render(320, 200)
    >>> show_preview(image, title="Noon")
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value (default 2.2 for sRGB). Must be positive.

    Returns:
        Gamma corrected image, clamped to [0, 1].
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    if gamma == 1.0:
        return image.astype(np.float32)

    return np.power(image, 1.0 / gamma).astype(np.float32)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to 8-bit sRGB for display/export.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (default 2.2 for sRGB).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    encoded = apply_gamma(image, gamma)
    return np.round(encoded * 255.0).astype(np.uint8)


def show_preview(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.2,
    title: str | None = None,
    figsize: tuple[float, float] = (9, 6),
    block: bool = True,
) -> None:
    """Display a rendered frame as a Matplotlib figure.

    Args:
        image: Linear frame of shape (H, W, 3).
        gamma: Gamma correction value (default 2.2 for sRGB).
        title: Figure title (default shows the frame size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(apply_gamma(image, gamma))
    ax.axis("off")
    ax.set_title(title if title is not None else f"Diorama {image.shape[1]}x{image.shape[0]}")

    plt.tight_layout()
    plt.show(block=block)


def show_time_lapse(
    images: Sequence[npt.NDArray[np.float32]],
    labels: Sequence[str],
    *,
    gamma: float = 2.2,
    figsize: tuple[float, float] = (16, 5),
    block: bool = True,
) -> None:
    """Display several frames side by side, e.g. day, sunset and night.

    Raises:
        ValueError: If images and labels differ in length or are empty.
    """
    import matplotlib.pyplot as plt

    if len(images) != len(labels) or not images:
        raise ValueError("images and labels must be non-empty and of equal length")

    fig, axes = plt.subplots(1, len(images), figsize=figsize, squeeze=False)
    for ax, image, label in zip(axes[0], images, labels):
        ax.imshow(apply_gamma(image, gamma))
        ax.set_title(label)
        ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)
