"""Tests for the day/night animation driver."""

import numpy as np
import pytest


def _floor():
    from diorama.materials.types import MaterialType

    return {(i, 0, k): MaterialType.GRASS for i in range(3) for k in range(3)}


class TestDayNightAnimator:
    """Tests for DayNightAnimator."""

    def test_invalid_size_raises(self, make_scene):
        """Test non-positive frame sizes are rejected."""
        from diorama.core.animator import DayNightAnimator

        with pytest.raises(ValueError):
            DayNightAnimator(make_scene(), 0, 8)

    def test_step_advances_sun_and_renders(self, make_scene):
        """Test a step moves the sun and returns a frame."""
        from diorama.core.animator import DayNightAnimator

        scene = make_scene((3, 3, 3), _floor(), phase=1.0)
        animator = DayNightAnimator(scene, 8, 6)
        image = animator.step(2.0)

        assert image.shape == (6, 8, 3)
        assert scene.sun.phase == pytest.approx(1.0 + 2.0 * scene.sun.cycle_speed)
        assert animator.frame_count == 1
        assert animator.last_frame_time > 0.0
        assert animator.fps > 0.0

    def test_fps_zero_before_first_frame(self, make_scene):
        """Test timing values start at zero."""
        from diorama.core.animator import DayNightAnimator

        animator = DayNightAnimator(make_scene(), 8, 8)
        assert animator.fps == 0.0
        assert animator.last_frame_time == 0.0

    def test_paused_keeps_phase(self, make_scene):
        """Test a paused animator renders without moving the sun."""
        from diorama.core.animator import DayNightAnimator

        scene = make_scene(phase=1.0)
        animator = DayNightAnimator(scene, 8, 8)
        assert animator.toggle_pause()

        animator.step(10.0)
        assert scene.sun.phase == pytest.approx(1.0)
        assert animator.frame_count == 1

    def test_run_calls_callback_in_order(self, make_scene):
        """Test run() renders the requested frames and reports each."""
        from diorama.core.animator import DayNightAnimator

        scene = make_scene((3, 3, 3), _floor())
        animator = DayNightAnimator(scene, 8, 8)
        seen = []

        animator.run(4, 0.5, callback=lambda index, image: seen.append((index, image.shape)))

        assert seen == [(i, (8, 8, 3)) for i in range(4)]
        assert animator.frame_count == 4

    def test_time_lapse_changes_lighting(self, make_scene):
        """Test frames across a half cycle differ as the sun moves."""
        from diorama.core.animator import DayNightAnimator

        scene = make_scene((3, 3, 3), _floor())
        scene.sun.cycle_speed = 1.0
        animator = DayNightAnimator(scene, 8, 8)

        frames = [image.copy() for _, image in animator.frames(3, 1.5)]
        assert not np.array_equal(frames[0], frames[2])

    def test_frames_is_lazy(self, make_scene):
        """Test stopping the generator early renders no further frames."""
        from diorama.core.animator import DayNightAnimator

        animator = DayNightAnimator(make_scene(), 8, 8)
        for index, _ in animator.frames(100, 0.1):
            if index == 2:
                break

        assert animator.frame_count == 3
