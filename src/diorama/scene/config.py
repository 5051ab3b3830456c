"""Startup configuration for the diorama renderer.

DioramaConfig gathers every tunable the renderer reads once at startup:
chunk dimensions and voxel layout, camera orbit parameters, reflection depth,
day/night cycle speed and lighting levels, and the output resolution. Values
are validated when the config is constructed; nothing is reloaded while the
renderer runs.

Configs round-trip through plain dictionaries (for JSON files):

Example:
    >>> from diorama.scene.config import DioramaConfig, load_config
    >>> config = DioramaConfig(max_depth=4, cycle_speed=0.5)
    >>> data = config.to_dict()
    >>> DioramaConfig.from_dict(data) == config
    True

    >>> # Load from a JSON file with only the fields that differ from the defaults
    >>> config = load_config("diorama.json")  # doctest: +SKIP
"""

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

# Reflection depth limits
MIN_DEPTH = 1
MAX_DEPTH = 8


@dataclass
class DioramaConfig:
    """Parameters for building and rendering a diorama.

    Attributes:
        chunk_size: Grid dimensions (nx, ny, nz) in voxels.
        layout: Optional explicit voxel layout as nested lists indexed
            [i][j][k] holding MaterialType values. None selects the built-in
            diorama generated for chunk_size.
        cell_size: Edge length of one voxel in world units.
        vfov: Vertical field of view in degrees.
        camera_radius: Initial orbit radius.
        camera_yaw: Initial yaw in radians.
        camera_pitch: Initial pitch in radians.
        min_radius: Lower zoom limit. Raised automatically so the eye stays
            outside the chunk.
        max_radius: Upper zoom limit.
        rotate_step: Angle (radians) of one rotate input.
        zoom_step: Radius change of one zoom input.
        max_depth: Bounce budget of primary rays, in [1, 8].
        cycle_speed: Sun phase advance in radians per second.
        initial_phase: Sun phase at startup, in radians.
        sun_tilt: Angle (degrees) rotating the sun's path about the vertical axis.
        ambient: Constant ambient light level in [0, 1].
        water_reflectivity: Mirror blend coefficient of water in [0, 1].
        width: Output image width in pixels.
        height: Output image height in pixels.
    """

    chunk_size: tuple[int, int, int] = (16, 10, 16)
    layout: list[list[list[int]]] | None = None
    cell_size: float = 1.0
    vfov: float = 60.0
    camera_radius: float = 28.0
    camera_yaw: float = 0.6
    camera_pitch: float = 0.45
    min_radius: float = 1.0
    max_radius: float = 120.0
    rotate_step: float = math.pi / 16.0
    zoom_step: float = 1.0
    max_depth: int = 3
    cycle_speed: float = 0.2
    initial_phase: float = 0.5 * math.pi
    sun_tilt: float = 30.0
    ambient: float = 0.12
    water_reflectivity: float = 0.45
    width: int = 600
    height: int = 400

    def __post_init__(self) -> None:
        self.chunk_size = tuple(int(n) for n in self.chunk_size)
        if len(self.chunk_size) != 3 or min(self.chunk_size) <= 0:
            raise ValueError(f"chunk_size must be three positive integers, got {self.chunk_size}")
        if self.layout is not None:
            self._validate_layout()
        if self.cell_size <= 0.0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.min_radius <= 0.0:
            raise ValueError(f"min_radius must be positive, got {self.min_radius}")
        if self.max_radius < self.min_radius:
            raise ValueError(f"max_radius ({self.max_radius}) must be >= min_radius ({self.min_radius})")
        if self.camera_radius <= 0.0:
            raise ValueError(f"camera_radius must be positive, got {self.camera_radius}")
        if self.rotate_step <= 0.0 or self.zoom_step <= 0.0:
            raise ValueError("rotate_step and zoom_step must be positive")
        if not MIN_DEPTH <= self.max_depth <= MAX_DEPTH:
            raise ValueError(f"max_depth must be in [{MIN_DEPTH}, {MAX_DEPTH}], got {self.max_depth}")
        if not math.isfinite(self.cycle_speed) or not math.isfinite(self.initial_phase):
            raise ValueError("cycle_speed and initial_phase must be finite")
        if not 0.0 <= self.ambient <= 1.0:
            raise ValueError(f"ambient must be in [0, 1], got {self.ambient}")
        if not 0.0 <= self.water_reflectivity <= 1.0:
            raise ValueError(f"water_reflectivity must be in [0, 1], got {self.water_reflectivity}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")

    def _validate_layout(self) -> None:
        nx, ny, nz = self.chunk_size
        if len(self.layout) != nx or any(len(plane) != ny for plane in self.layout):
            raise ValueError(f"layout does not match chunk_size {self.chunk_size}")
        for plane in self.layout:
            if any(len(column) != nz for column in plane):
                raise ValueError(f"layout does not match chunk_size {self.chunk_size}")

    def to_dict(self) -> dict[str, Any]:
        """Export the config to a dictionary (for JSON serialization)."""
        data = asdict(self)
        data["chunk_size"] = list(self.chunk_size)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DioramaConfig":
        """Build a config from a dictionary.

        Missing keys take their default values.

        Raises:
            ValueError: If the dictionary has unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        values = dict(data)
        if "chunk_size" in values:
            values["chunk_size"] = tuple(values["chunk_size"])
        return cls(**values)


def load_config(path: str | Path) -> DioramaConfig:
    """Load a DioramaConfig from a JSON file.

    Raises:
        ValueError: If the file is not a JSON object or holds invalid values.
    """
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return DioramaConfig.from_dict(data)


def save_config(config: DioramaConfig, path: str | Path) -> None:
    """Write a DioramaConfig to a JSON file."""
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
