"""Day/night sun model.

The sun moves on a fixed circle parameterized by a phase in [0, 2*pi). Its
direction (pointing from the scene toward the sun) is

    direction = (cos(p) * cos(tilt), sin(p), cos(p) * sin(tilt))

so the elevation is sin(p): the sun rises at p = 0, peaks at p = pi/2, sets
at p = pi and reaches its lowest point at p = 3*pi/2.

Light color, light intensity and the sky color are all interpolated between a
night value and a day value with

    s = smoothstep((elevation + 1) / 2)

which is continuous and monotonic in the elevation, so there is no jump when
the sun crosses the horizon. Daylight is bright and bluish-white under a light
blue sky; the night light is a dim warm orange under a dark sky.

Example:
    >>> import math
    >>> from diorama.scene.sun import Sun
    >>> sun = Sun(phase=math.pi / 2)
    >>> sun.state().elevation
    1.0
    >>> phase = sun.advance(0.5)  # half a second at the default cycle speed
"""

import math
from dataclasses import dataclass

TWO_PI = 2.0 * math.pi

# Named phases for set_time_of_day()
TIME_OF_DAY_PHASES: dict[str, float] = {
    "day": 0.5 * math.pi,
    "sunset": math.pi - 0.2,
    "night": 1.5 * math.pi,
}

DAY_LIGHT_COLOR = (0.95, 0.97, 1.0)
NIGHT_LIGHT_COLOR = (0.98, 0.55, 0.28)
DAY_INTENSITY = 1.0
NIGHT_INTENSITY = 0.08
DAY_SKY_COLOR = (0.53, 0.81, 0.92)
NIGHT_SKY_COLOR = (0.07, 0.05, 0.09)


def smoothstep(x: float) -> float:
    """Cubic smoothstep of x clamped to [0, 1]."""
    x = min(max(x, 0.0), 1.0)
    return x * x * (3.0 - 2.0 * x)


def _lerp3(a: tuple[float, float, float], b: tuple[float, float, float], s: float) -> tuple[float, float, float]:
    return (a[0] + (b[0] - a[0]) * s, a[1] + (b[1] - a[1]) * s, a[2] + (b[2] - a[2]) * s)


@dataclass(frozen=True)
class SunState:
    """Lighting derived from a sun phase.

    Attributes:
        direction: Unit vector pointing from the scene toward the sun.
        color: RGB light color.
        intensity: Light intensity multiplier.
        sky_color: RGB color returned for rays that hit nothing.
        elevation: sin(phase), in [-1, 1]. Positive during the day.
    """

    direction: tuple[float, float, float]
    color: tuple[float, float, float]
    intensity: float
    sky_color: tuple[float, float, float]
    elevation: float

    @property
    def is_day(self) -> bool:
        return self.elevation > 0.0


class Sun:
    """Time-driven light source for the day/night cycle.

    Attributes:
        phase: Current phase in [0, 2*pi).
        cycle_speed: Phase advance in radians per second of elapsed time.
        tilt: Fixed angle (radians) rotating the sun's path about the vertical axis.
    """

    def __init__(self, phase: float = 0.5 * math.pi, cycle_speed: float = 0.2, tilt: float = math.radians(30.0)):
        if not math.isfinite(phase):
            raise ValueError(f"phase must be finite, got {phase}")
        if not math.isfinite(cycle_speed):
            raise ValueError(f"cycle_speed must be finite, got {cycle_speed}")
        self.phase = phase % TWO_PI
        self.cycle_speed = cycle_speed
        self.tilt = tilt

    def advance(self, dt: float) -> float:
        """Advance the phase by dt seconds of elapsed time.

        Returns:
            The new phase, wrapped into [0, 2*pi).
        """
        self.phase = (self.phase + dt * self.cycle_speed) % TWO_PI
        return self.phase

    def set_phase(self, phase: float) -> None:
        self.phase = phase % TWO_PI

    def set_time_of_day(self, name: str) -> None:
        """Jump to a named time of day: "day", "sunset" or "night".

        Raises:
            ValueError: If the name is not a known preset.
        """
        try:
            phase = TIME_OF_DAY_PHASES[name]
        except KeyError:
            raise ValueError(
                f"Unknown time of day {name!r}, expected one of {sorted(TIME_OF_DAY_PHASES)}"
            ) from None
        self.set_phase(phase)

    def state(self) -> SunState:
        """Get the lighting for the current phase."""
        return self.state_at(self.phase)

    def state_at(self, phase: float) -> SunState:
        """Derive the lighting for an arbitrary phase.

        This is a pure function of the phase (and the fixed tilt); phases
        that differ by a multiple of 2*pi give identical states.
        """
        p = phase % TWO_PI
        elevation = math.sin(p)
        horizontal = math.cos(p)
        direction = (
            horizontal * math.cos(self.tilt),
            elevation,
            horizontal * math.sin(self.tilt),
        )

        s = smoothstep(0.5 * (elevation + 1.0))
        return SunState(
            direction=direction,
            color=_lerp3(NIGHT_LIGHT_COLOR, DAY_LIGHT_COLOR, s),
            intensity=NIGHT_INTENSITY + (DAY_INTENSITY - NIGHT_INTENSITY) * s,
            sky_color=_lerp3(NIGHT_SKY_COLOR, DAY_SKY_COLOR, s),
            elevation=elevation,
        )
