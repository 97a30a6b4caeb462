import math

import numpy as np
import pytest

from twistcube.animation import (
    SpiralState,
    TwistAnimation,
    spiral_angle,
    spiral_offset,
    spiral_scale,
)
from twistcube.config import MAXSTEPS, TwistConfig
from twistcube.entity import DeletedEntityError, InvalidDefinition
from twistcube.geom import ORIGIN, Z_AXIS, Transformation
from twistcube.session import TwistCubeSession


@pytest.fixture
def session():
    return TwistCubeSession.create()


@pytest.fixture
def animator(session):
    return session.animator


def run_until_done(animator) -> int:
    calls = 0
    while True:
        calls += 1
        if not animator.advance():
            return calls


def test_spiral_scale_endpoints():
    assert spiral_scale(0.0) == pytest.approx(1.0)
    assert spiral_scale(1.0) == pytest.approx(0.2)
    assert spiral_scale(0.5) == pytest.approx(0.6)


def test_spiral_scale_strictly_decreasing():
    scales = [spiral_scale(f) for f in np.linspace(0.0, 1.0, 257)]
    assert all(a > b for a, b in zip(scales, scales[1:]))


def test_spiral_angle_is_four_orbits():
    assert spiral_angle(0.0) == 0.0
    assert spiral_angle(1.0) == 8 * math.pi
    assert spiral_angle(0.25) == pytest.approx(2 * math.pi)
    assert spiral_angle(1.0, orbits=1) == pytest.approx(2 * math.pi)


def test_spiral_offset_out_and_back():
    assert spiral_offset(0.0, 100) == 0.0
    assert spiral_offset(0.5, 100) == pytest.approx(125.0)
    assert spiral_offset(1.0, 100) == pytest.approx(0.0, abs=1e-9)


def test_new_animator_is_idle(animator):
    assert animator.state is SpiralState.IDLE
    assert animator.steps == 0
    assert animator.copies == ()
    assert animator.advance() is False
    assert animator.copies == ()


def test_start_captures_size(animator, session):
    animator.start(True)
    assert animator.state is SpiralState.GROWING
    assert animator.forward is True
    assert animator.zoff == session.size

    animator.start(False)
    assert animator.state is SpiralState.SHRINKING
    assert animator.forward is False


def test_step_bound(animator):
    animator.start(True)
    results = [animator.advance() for _ in range(MAXSTEPS)]
    assert results[:-1] == [True] * (MAXSTEPS - 1)
    assert results[-1] is False
    assert animator.steps == MAXSTEPS
    assert animator.state is SpiralState.IDLE
    assert len(animator.copies) == MAXSTEPS

    # Nothing more happens once the run is complete.
    assert animator.advance() is False
    assert len(animator.copies) == MAXSTEPS


def test_rotation_total(animator):
    animator.start(True)
    run_until_done(animator)
    assert animator.angle == 8 * math.pi


def test_height_accumulates(animator, session):
    animator.start(True)
    run_until_done(animator)
    expected = session.size + sum(
        spiral_scale(k / MAXSTEPS) * session.size for k in range(1, MAXSTEPS + 1))
    assert animator.zoff == pytest.approx(expected)


def test_first_copy_placement(animator, session):
    animator.start(True)
    animator.advance()
    (copy,) = animator.copies
    size = session.size
    frac = 1 / MAXSTEPS
    sfrac = spiral_scale(frac)
    movex = 2.5 * frac * size * math.sin(frac * math.pi)

    # Scaling about the template's center leaves that center in place.
    rotation = Transformation.rotation(ORIGIN, Z_AXIS, frac * 8 * math.pi)
    expected_center = rotation * (size / 2 + movex, size / 2, size + size / 2)
    assert np.allclose(copy.bounds.center, expected_center)
    assert np.allclose(copy.transformation * (size / 2, size / 2, size / 2), expected_center)

    # The scaled cube's edge is sfrac of the template's.
    corner = copy.transformation * (0, 0, 0)
    opposite = copy.transformation * (size, 0, 0)
    assert np.linalg.norm(opposite - corner) == pytest.approx(sfrac * size)


def test_last_copy_is_axis_aligned(animator, session):
    animator.start(True)
    run_until_done(animator)
    last = animator.copies[-1]
    size = session.size
    zoff = size + sum(spiral_scale(k / MAXSTEPS) * size for k in range(1, MAXSTEPS))

    bbox = last.bounds
    assert np.allclose(bbox.size, [0.2 * size] * 3)
    assert np.allclose(bbox.center, [size / 2, size / 2, zoff + size / 2])


def test_copies_live_in_group(animator, session):
    animator.start(True)
    animator.advance()
    animator.advance()
    group_entities = session.group.entities.to_list()
    assert group_entities == [session.cube, *animator.copies]
    assert all(c.definition is session.definition for c in animator.copies)


def test_symmetry(animator, session):
    animator.start(True)
    forward_calls = run_until_done(animator)
    built = animator.copies
    assert forward_calls == len(built) == MAXSTEPS

    animator.start(False)
    reverse_calls = run_until_done(animator)
    assert reverse_calls == len(built)
    assert animator.copies == ()
    assert all(c.deleted for c in built)
    assert session.group.entities.to_list() == [session.cube]


def test_unwind_is_lifo(animator):
    animator.start(True)
    for _ in range(5):
        animator.advance()
    built = animator.copies

    animator.start(False)
    for removed in range(1, 5):
        assert animator.advance() is True
        assert animator.copies == built[:-removed]
        assert built[-removed].deleted
        assert not built[-removed - 1].deleted
    assert animator.advance() is False
    assert animator.state is SpiralState.IDLE


def test_partial_run_unwinds(animator):
    animator.start(True)
    for _ in range(10):
        animator.advance()
    animator.start(False)
    assert run_until_done(animator) == 10
    assert animator.copies == ()


def test_shrinking_with_nothing_to_remove(animator):
    animator.start(False)
    assert animator.advance() is False
    assert animator.state is SpiralState.IDLE


def test_reset_on_idle_is_noop(animator, session):
    before = session.group.entities.to_list()
    animator.reset()
    assert animator.state is SpiralState.IDLE
    assert animator.steps == 0
    assert animator.copies == ()
    assert session.group.entities.to_list() == before

    animator.reset()
    assert animator.state is SpiralState.IDLE
    assert session.group.entities.to_list() == before


def test_reset_erases_copies(animator, session):
    animator.start(True)
    for _ in range(7):
        animator.advance()
    built = animator.copies

    animator.reset()
    assert animator.state is SpiralState.IDLE
    assert animator.steps == 0
    assert animator.copies == ()
    assert all(c.deleted for c in built)
    assert session.group.entities.to_list() == [session.cube]


def test_missing_template_is_fatal(animator, session):
    session.definition = None
    animator.start(True)
    with pytest.raises(InvalidDefinition):
        animator.advance()


def test_erased_template_is_fatal(animator, session):
    session.model.definitions.remove(session.definition)
    animator.start(True)
    with pytest.raises(InvalidDefinition):
        animator.advance()


def test_erased_group_is_fatal(animator, session):
    session.group.erase()
    animator.start(True)
    with pytest.raises(DeletedEntityError):
        animator.advance()


def test_custom_config():
    config = TwistConfig(initial_size=10, max_steps=8, orbits=1, min_scale=0.5)
    session = TwistCubeSession.create(config)
    animator = session.animator
    animator.start(True)
    assert run_until_done(animator) == 8
    assert animator.angle == pytest.approx(2 * math.pi)
    assert np.allclose(animator.copies[-1].bounds.size, [5, 5, 5])


def test_next_frame_shows_frames(animator, session):
    view = session.model.active_view
    animator.start(True)
    animator.next_frame(view)
    animator.next_frame(view)
    assert view.frames_shown == 2
