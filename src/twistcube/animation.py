"""
The TwistCube spiral animation.

Growing stamps one shrinking, rotated copy of the template per frame along
a rising spiral. Shrinking erases the copies again, newest first, so the
spiral unwinds in exactly the reverse order it was built.
"""

import logging
import math
from enum import Enum

from twistcube.config import MAXSTEPS
from twistcube.entities import ComponentInstance
from twistcube.entity import InvalidDefinition
from twistcube.geom import ORIGIN, Z_AXIS, Transformation


log = logging.getLogger(__name__)


def spiral_scale(frac: float, min_scale: float = 0.2) -> float:
    """Copy scale at frac of the run: 1.0 at the start down to min_scale."""
    return (1.0 - frac) * (1.0 - min_scale) + min_scale


def spiral_angle(frac: float, orbits: float = 4) -> float:
    """Rotation about +Z in radians at frac of the run."""
    return frac * (2 * orbits) * math.pi


def spiral_offset(frac: float, size: float, spread: float = 2.5) -> float:
    """Distance from the spiral axis: out and back in again over the run."""
    return spread * frac * size * math.sin(frac * math.pi)


class SpiralState(Enum):
    IDLE = 'idle'
    GROWING = 'growing'
    SHRINKING = 'shrinking'


class TwistAnimation:
    """Builds (forward) or unwinds (reverse) the spiral one copy per frame.

    Copies are added to the session's group. The animator is installed as
    the view's animation, so the view calls next_frame until it returns
    False.
    """

    MAXSTEPS = MAXSTEPS

    def __init__(self, session):
        self.session = session
        self._state = SpiralState.IDLE
        self._forward: bool | None = None
        self._steps = 0
        self._copies: list[ComponentInstance] = []
        self._base_size = 0.0
        self._zoff = 0.0
        self._angle = 0.0

    @property
    def state(self) -> SpiralState:
        return self._state

    @property
    def forward(self) -> bool | None:
        return self._forward

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def copies(self) -> tuple[ComponentInstance, ...]:
        return tuple(self._copies)

    @property
    def zoff(self) -> float:
        return self._zoff

    @property
    def angle(self) -> float:
        """Rotation of the most recently stamped copy."""
        return self._angle

    @property
    def max_steps(self) -> int:
        return self.session.config.max_steps

    def start(self, forward: bool):
        self._forward = bool(forward)
        self._steps = 0
        self._base_size = self.session.size
        self._zoff = float(self.session.size)
        self._state = SpiralState.GROWING if self._forward else SpiralState.SHRINKING
        log.info('New twist with direction: %s', 'forward' if self._forward else 'reverse')

    def reset(self):
        if self._copies:
            self.session.group.entities.erase_entities(self._copies)
            self._copies.clear()
        self._steps = 0
        self._set_idle()

    def _set_idle(self):
        self._state = SpiralState.IDLE
        self.session.spiral_idle()

    def stop(self, view):
        # The session stays suspended until the next start() or reset().
        log.debug('animation stopped at step %d with %d copies', self._steps, len(self._copies))

    def advance(self) -> bool:
        return self.next_frame(None)

    def next_frame(self, view) -> bool:
        if self._state is SpiralState.GROWING:
            return self._grow(view)
        if self._state is SpiralState.SHRINKING:
            return self._unwind()
        return False

    def _grow(self, view) -> bool:
        config = self.session.config
        max_steps = config.max_steps
        if self._steps >= max_steps:
            self._set_idle()
            return False
        definition = self.session.definition
        if definition is None:
            raise InvalidDefinition('No template to stamp copies from')
        group = self.session.group
        group.check_alive()

        self._steps += 1
        frac = self._steps / max_steps
        sfrac = spiral_scale(frac, config.min_scale)
        angle = spiral_angle(frac, config.orbits)
        tform = Transformation.rotation(ORIGIN, Z_AXIS, angle)
        movex = spiral_offset(frac, self._base_size, config.spread)
        tform *= Transformation.translation((movex, 0, self._zoff))
        newcube = group.entities.add_instance(definition, tform)
        # Scale about the copy's own center so shrinking does not move it.
        center = newcube.definition.bounds.center
        newcube.transformation *= Transformation.scaling(center, sfrac)
        self._zoff += sfrac * self._base_size
        self._angle = angle
        self._copies.append(newcube)
        if view is not None:
            view.show_frame()
        log.debug('step %d: scale %.3f angle %.3f offset %.3f', self._steps, sfrac, angle, movex)

        more = self._steps < max_steps
        if not more:
            self._set_idle()
        return more

    def _unwind(self) -> bool:
        if self._copies:
            self._copies.pop().erase()
        more = bool(self._copies)
        if not more:
            self._set_idle()
        return more
