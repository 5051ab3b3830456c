#!/usr/bin/env python3
"""Render the voxel diorama offline.

Renders a single still or a day/night time-lapse of the built-in diorama (or
a layout from a JSON config) and saves the frames as PNG files.

Usage:
    python examples/render_diorama.py [options]

Options:
    --config PATH       JSON config file (default: built-in settings)
    --width WIDTH       Image width in pixels (default: from config)
    --height HEIGHT     Image height in pixels (default: from config)
    --time-of-day NAME  Start at "day", "sunset" or "night"
    --frames N          Number of frames; more than 1 renders a time-lapse (default: 1)
    --dt SECONDS        Simulated seconds between frames (default: 1.0)
    --output PATH       Output file for a still, or directory for a time-lapse
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python examples/render_diorama.py --frames 48 --dt 0.65 --output frames/
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the voxel diorama.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Image height in pixels")
    parser.add_argument(
        "--time-of-day",
        choices=["day", "sunset", "night"],
        default=None,
        help="Start the cycle at a named time of day",
    )
    parser.add_argument("--frames", type=int, default=1, help="Number of frames (default: 1)")
    parser.add_argument(
        "--dt",
        type=float,
        default=1.0,
        help="Simulated seconds between frames (default: 1.0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="diorama.png",
        help="Output file (still) or directory (time-lapse)",
    )
    parser.add_argument("--preview", action="store_true", help="Show the last frame with Matplotlib")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_diorama(args: argparse.Namespace) -> Path:
    """Render the frames requested on the command line.

    Returns:
        Path to the saved image, or to the frame directory for a time-lapse.
    """
    # Lazy imports to allow Taichi initialization first
    from diorama.core.animator import DayNightAnimator
    from diorama.preview.display import show_preview
    from diorama.preview.export import frame_path, save_png
    from diorama.scene.config import DioramaConfig, load_config
    from diorama.scene.manager import create_diorama_scene

    config = load_config(args.config) if args.config else DioramaConfig()
    width = args.width or config.width
    height = args.height or config.height
    config.width = max(config.width, width)
    config.height = max(config.height, height)

    if not args.quiet:
        print(f"Creating diorama scene {config.chunk_size} ({width}x{height})...")
    scene = create_diorama_scene(config)
    if args.time_of_day:
        scene.set_time_of_day(args.time_of_day)

    start_time = time.time()

    if args.frames <= 1:
        image = scene.render(width, height)
        output = Path(args.output)
        save_png(image, output)
    else:
        output = Path(args.output)
        output.mkdir(parents=True, exist_ok=True)
        animator = DayNightAnimator(scene, width, height)

        def save_frame(index: int, frame) -> None:
            save_png(frame, frame_path(output, index))
            if not args.quiet:
                print(
                    f"\r  Frame {index + 1}/{args.frames} "
                    f"(phase {scene.sun.phase:.2f}, {animator.fps:.1f} fps)",
                    end="",
                    flush=True,
                )

        animator.run(args.frames, args.dt, callback=save_frame)
        image = scene.pixels
        if not args.quiet:
            print()  # Newline after progress

    if not args.quiet:
        print(f"Saved to: {output.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    if args.preview and image is not None:
        show_preview(image, title=f"Sun elevation {scene.sun_state().elevation:+.2f}")

    return output


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO, format="%(name)s: %(message)s")

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_diorama(args)
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
