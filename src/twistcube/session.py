"""
TwistCube: a dynamic component that grows a spiral of shrinking copies of
itself when clicked with the Interact tool, and unwinds it on the next
click. Changing its "size" option rebuilds the cube.

TwistCubeSession owns everything the component needs: the model, the cube
template, the group holding the spiral, the animator and the observer.
"""

import logging

import manifold3d as m3d
from datatrees import datatree, dtfield

from twistcube.animation import SpiralState, TwistAnimation
from twistcube.attributes import AttributeDictionary
from twistcube.config import TwistConfig
from twistcube.dynamic import add_dynamic_attribute, init_dynamic_component, interact
from twistcube.entities import ComponentDefinition, ComponentInstance, Group
from twistcube.export import manifold_to_stl
from twistcube.geom import ORIGIN, Transformation
from twistcube.observer import DynamicAttributeObserver
from twistcube.view import Model


log = logging.getLogger(__name__)


@datatree
class TwistCubeSession:
    """Creates and drives one TwistCube in a model."""

    config: TwistConfig = dtfield(default_factory=TwistConfig)
    model: Model = dtfield(default_factory=Model)
    size: int = dtfield(default=None)
    definition: ComponentDefinition | None = dtfield(default=None, init=False)
    cube: ComponentInstance | None = dtfield(default=None, init=False)
    group: Group | None = dtfield(default=None, init=False)
    dattr: AttributeDictionary | None = dtfield(default=None, init=False)
    animator: TwistAnimation | None = dtfield(default=None, init=False)
    observer: DynamicAttributeObserver | None = dtfield(default=None, init=False)
    pending_size: int | None = dtfield(default=None, init=False)

    def __post_init__(self):
        if self.size is None:
            self.size = self.config.initial_size

    @classmethod
    def create(cls, config: TwistConfig | None = None, model: Model | None = None):
        session = cls(config=config or TwistConfig(), model=model or Model())
        session.build()
        return session

    def build(self):
        """Creates the template, the cube instance, its group and the dynamic
        attributes, then starts watching them."""
        log.info('Dynamic Component Interface Example: TwistCube')
        self.definition = self.model.definitions.add(self.config.definition_name)
        self.build_component(self.size)

        entities = self.model.active_entities
        self.cube = entities.add_instance(self.definition, Transformation())
        self.group = entities.add_group(self.cube)
        self.group.name = self.config.group_name

        # All spiral copies live inside the group.
        self.dattr = init_dynamic_component(self.group)
        add_dynamic_attribute(self.dattr, 'size', self.size, units=self.config.units, access=True)

        self.animator = TwistAnimation(self)
        self.observer = DynamicAttributeObserver(self, self.animator)
        self.dattr.add_observer(self.observer)
        return self

    def build_component(self, size: float):
        """Replaces the template's geometry with a cube of edge length size."""
        entities = self.definition.entities
        entities.erase_entities(entities.to_list())
        points = [ORIGIN, (size, 0, 0), (size, size, 0), (0, size, 0)]
        face = entities.add_face(points)
        if face.normal[2] < 0:
            face.reverse()
        face.pushpull(size)

    def resize(self, size: int):
        """Applies a new cube size. Deferred while a spiral is in progress so
        the template never changes under the animation."""
        if self.animator is not None and self.animator.state is not SpiralState.IDLE:
            log.info('Deferring resize to %d until the spiral finishes', size)
            self.pending_size = size
            return
        self.size = size
        self.build_component(size)

    def spiral_idle(self):
        """Called by the animator whenever it returns to idle."""
        if self.pending_size is not None:
            size, self.pending_size = self.pending_size, None
            self.resize(size)

    def click(self) -> dict[str, str]:
        """Clicks the group with the Interact tool."""
        return interact(self.group)

    def set_size(self, size: int):
        """Sets the size option, as the component options dialog would."""
        self.dattr['size'] = size

    def play(self, max_frames: int | None = None) -> int:
        return self.model.active_view.run_animation(max_frames)

    @property
    def copies(self) -> tuple[ComponentInstance, ...]:
        return self.animator.copies

    def to_manifold(self) -> m3d.Manifold:
        return self.model.active_entities.to_manifold()

    def export_stl(self, filename: str, file_obj=None, update_normals: bool = True) -> int:
        return manifold_to_stl(
            self.to_manifold(), filename, file_obj=file_obj, update_normals=update_normals)
