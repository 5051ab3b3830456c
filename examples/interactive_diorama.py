#!/usr/bin/env python3
"""Interactive voxel diorama viewer with a running day/night cycle.

This script opens a Taichi GGUI window that renders the diorama every frame
while the sun moves through its cycle.

Usage:
    python examples/interactive_diorama.py [--config PATH] [--width W] [--height H]

Controls:
    - Left/Right arrows: orbit around the diorama
    - Up/Down arrows: raise/lower the camera
    - w/s: zoom in/out
    - 1/2/3: jump to day/sunset/night
    - Space: pause/resume the day/night cycle
    - Export PNG button: save the current frame with a timestamp
    - Escape or closing the window: exit
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # Try generic GPU (CUDA on Linux/Windows, Vulkan as fallback)
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive voxel diorama viewer.")
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--width", type=int, default=None, help="Window width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Window height in pixels")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # Initialize Taichi first (before importing modules that use ti.kernel)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    # Import after Taichi initialization
    from diorama.preview.interactive import InteractivePreview
    from diorama.scene.config import DioramaConfig, load_config
    from diorama.scene.manager import create_diorama_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    config = load_config(args.config) if args.config else DioramaConfig()
    if args.width:
        config.width = args.width
    if args.height:
        config.height = args.height

    scene = create_diorama_scene(config)

    print(f"Creating interactive preview window ({config.width}x{config.height})...")
    preview = InteractivePreview(scene, config.width, config.height, title="Diorama")

    print("Starting interactive rendering...")
    print("  - Arrows rotate, w/s zoom, 1/2/3 day/sunset/night, space pauses")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
