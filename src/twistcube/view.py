"""
The model root and its view.

A view drives at most one animation at a time. Each tick calls the
animation's next_frame(view); the animation stays installed while it keeps
returning True.
"""

import logging
from typing import Protocol

from twistcube.entities import DefinitionList, Entities


log = logging.getLogger(__name__)


class FrameAnimation(Protocol):
    def next_frame(self, view: 'View') -> bool: ...


class View:
    def __init__(self, model: 'Model'):
        self.model = model
        self._animation: FrameAnimation | None = None
        self.frames_shown = 0

    @property
    def animation(self) -> FrameAnimation | None:
        return self._animation

    @animation.setter
    def animation(self, animation: FrameAnimation | None):
        previous = self._animation
        self._animation = animation
        if previous is not None and previous is not animation:
            stop = getattr(previous, 'stop', None)
            if stop is not None:
                stop(self)
        log.debug('view animation set to %r', animation)

    @property
    def animating(self) -> bool:
        return self._animation is not None

    def show_frame(self):
        self.frames_shown += 1

    def tick(self) -> bool:
        """Runs one frame. Returns True while the animation wants more."""
        animation = self._animation
        if animation is None:
            return False
        more = bool(animation.next_frame(self))
        # next_frame may have installed a different animation.
        if not more and self._animation is animation:
            self._animation = None
        return more

    def run_animation(self, max_frames: int | None = None) -> int:
        """Ticks until the animation finishes or max_frames have run.
        Returns the number of frames run."""
        frames = 0
        while self._animation is not None:
            if max_frames is not None and frames >= max_frames:
                break
            self.tick()
            frames += 1
        return frames


class Model:
    """Top level of a scene: definitions, entities and the active view."""

    def __init__(self):
        self.definitions = DefinitionList()
        self.entities = Entities(self)
        self.active_view = View(self)

    @property
    def active_entities(self) -> Entities:
        return self.entities
