"""
The scene graph: faces, solids, component definitions, instances and groups.

Geometry is held as manifold3d solids. A face is a planar polygon that only
becomes a solid when it is push-pulled.
"""

import logging
from typing import Iterable, Iterator

import manifold3d as m3d
import numpy as np

from twistcube.entity import Entity, InvalidDefinition, InvalidGeometry
from twistcube.geom import BoundingBox, Transformation


log = logging.getLogger(__name__)

PLANAR_TOLERANCE = 1e-9


def _make_array(v, t=np.float64) -> np.ndarray:
    """Condition array to be C-style contiguous and writeable."""
    if not isinstance(v, np.ndarray) or not (
        v.flags.c_contiguous and v.flags.writeable and v.dtype == t
    ):
        v = np.array(v, dtype=t, order="C")
    return v


def newell_normal(points: np.ndarray) -> np.ndarray:
    """Unnormalised polygon normal by Newell's method. Counter-clockwise
    winding seen from the normal's side."""
    nxt = np.roll(points, -1, axis=0)
    return np.array([
        np.sum((points[:, 1] - nxt[:, 1]) * (points[:, 2] + nxt[:, 2])),
        np.sum((points[:, 2] - nxt[:, 2]) * (points[:, 0] + nxt[:, 0])),
        np.sum((points[:, 0] - nxt[:, 0]) * (points[:, 1] + nxt[:, 1])),
    ])


class SceneElement(Entity):
    """An entity held in an Entities collection."""

    def __init__(self):
        super().__init__()
        self._parent: 'Entities | None' = None

    @property
    def parent(self) -> 'Entities | None':
        return self._parent

    def _detach(self):
        if self._parent is not None:
            self._parent._remove(self)

    @property
    def bounds(self) -> BoundingBox:
        raise NotImplementedError("bounds is not implemented")


class Face(SceneElement):
    """A planar polygon."""

    def __init__(self, points):
        super().__init__()
        points = _make_array(points)
        if points.ndim != 2 or points.shape[1] != 3 or len(points) < 3:
            raise InvalidGeometry(f'A face needs at least 3 (x, y, z) points, got {points.shape}')
        normal = newell_normal(points)
        length = np.linalg.norm(normal)
        if length < PLANAR_TOLERANCE:
            raise InvalidGeometry('Face points are collinear or coincident')
        normal = normal / length
        distances = (points - points[0]) @ normal
        if np.max(np.abs(distances)) > PLANAR_TOLERANCE * max(1.0, np.max(np.abs(points))):
            raise InvalidGeometry('Face points are not coplanar')
        self._points = points
        self._normal = normal

    @property
    def vertices(self) -> np.ndarray:
        return self._points.copy()

    @property
    def normal(self) -> np.ndarray:
        return self._normal.copy()

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_points(self._points)

    def reverse(self) -> 'Face':
        self.check_alive()
        self._points = self._points[::-1].copy()
        self._normal = -self._normal
        return self

    def _local_frame(self) -> Transformation:
        """Maps the face's 2D frame (z along the normal) to model space."""
        origin = self._points[0]
        n = self._normal
        u = self._points[1] - origin
        u = u - (u @ n) * n
        u = u / np.linalg.norm(u)
        v = np.cross(n, u)
        frame = np.eye(4)
        frame[:3, 0] = u
        frame[:3, 1] = v
        frame[:3, 2] = n
        frame[:3, 3] = origin
        return Transformation(frame)

    def pushpull(self, distance: float) -> 'Solid':
        """Extrudes the face along its normal, consuming the face.

        A negative distance extrudes against the normal. The resulting solid
        replaces the face in its parent collection.
        """
        self.check_alive()
        if not distance:
            raise InvalidGeometry('Cannot push-pull a face by zero')
        frame = self._local_frame()
        local = frame.inverse().apply_points(self._points)[:, :2]
        cross_section = m3d.CrossSection([_make_array(local)], m3d.FillRule.Positive)
        manifold = cross_section.extrude(abs(distance))
        if distance < 0:
            frame = frame * Transformation.translation((0, 0, distance))
        manifold = manifold.transform(frame.to_object_transform())

        parent = self._parent
        self.erase()
        solid = Solid(manifold)
        if parent is not None:
            parent._add(solid)
        log.debug('push-pulled face by %s into %r', distance, solid)
        return solid


class Solid(SceneElement):
    """A closed manifold volume."""

    def __init__(self, manifold: m3d.Manifold):
        super().__init__()
        self.manifold = manifold

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_manifold(self.manifold)


class Entities:
    """An ordered collection of scene elements owned by a definition, a group
    or the model."""

    def __init__(self, owner=None):
        self.owner = owner
        self._items: list[SceneElement] = []

    def _add(self, entity: SceneElement) -> SceneElement:
        entity._parent = self
        self._items.append(entity)
        return entity

    def _remove(self, entity: SceneElement):
        self._items.remove(entity)
        entity._parent = None

    def __iter__(self) -> Iterator[SceneElement]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity) -> bool:
        return entity in self._items

    def __getitem__(self, index: int) -> SceneElement:
        return self._items[index]

    def to_list(self) -> list[SceneElement]:
        return list(self._items)

    def add_face(self, points) -> Face:
        """Adds a face. Faces lying flat on the ground plane are oriented to
        face downwards."""
        face = Face(points)
        if np.allclose(face.vertices[:, 2], 0) and face.normal[2] > 0:
            face.reverse()
        return self._add(face)

    def add_instance(
        self, definition: 'ComponentDefinition', transformation: Transformation | None = None
    ) -> 'ComponentInstance':
        if not isinstance(definition, ComponentDefinition):
            raise InvalidDefinition(f'Cannot instance {definition!r}')
        if definition.deleted:
            raise InvalidDefinition(f'Definition {definition.name!r} has been erased')
        instance = ComponentInstance(definition, transformation or Transformation())
        return self._add(instance)

    def add_group(self, *entities: SceneElement) -> 'Group':
        """Creates a group, moving the given entities of this collection into it."""
        group = Group()
        for entity in entities:
            entity.check_alive()
            if entity.parent is not self:
                raise ValueError(f'{entity!r} does not belong to this collection')
            self._remove(entity)
            group.entities._add(entity)
        return self._add(group)

    def erase_entities(self, entities: Iterable[SceneElement]):
        for entity in tuple(entities):
            entity.erase()

    def clear(self):
        self.erase_entities(self._items)

    @property
    def bounds(self) -> BoundingBox:
        bbox = BoundingBox()
        for entity in self._items:
            bbox = bbox.union(entity.bounds)
        return bbox

    def to_manifold(self, transformation: Transformation | None = None) -> m3d.Manifold:
        """Union of every solid in this collection, in the frame given by
        transformation. Instances and groups are expanded recursively."""
        transformation = transformation or Transformation()
        manifs: list[m3d.Manifold] = []
        for entity in self._items:
            if isinstance(entity, Solid):
                if transformation.is_identity():
                    manifs.append(entity.manifold)
                else:
                    manifs.append(entity.manifold.transform(transformation.to_object_transform()))
            elif isinstance(entity, ComponentInstance):
                manifs.append(
                    entity.definition.entities.to_manifold(transformation * entity.transformation))
            elif isinstance(entity, Group):
                manifs.append(entity.entities.to_manifold(transformation * entity.transformation))
        manifs = [m for m in manifs if m.num_vert() > 0]
        if not manifs:
            return m3d.Manifold()
        return sum(manifs[1:], start=manifs[0])


class ComponentDefinition(Entity):
    """Prototype geometry that instances are stamped from."""

    def __init__(self, name: str):
        super().__init__()
        self.name = name
        self.entities = Entities(self)
        self._instances: list['ComponentInstance'] = []

    @property
    def bounds(self) -> BoundingBox:
        return self.entities.bounds

    def instances(self) -> tuple['ComponentInstance', ...]:
        return tuple(self._instances)

    def erase(self):
        if not self.deleted:
            for instance in self.instances():
                instance.erase()
        super().erase()


class DefinitionList:
    """The model's component definitions, keyed by unique name."""

    def __init__(self):
        self._definitions: dict[str, ComponentDefinition] = {}

    def add(self, name: str) -> ComponentDefinition:
        unique_name = name
        count = 0
        while unique_name in self._definitions:
            count += 1
            unique_name = f'{name}#{count}'
        definition = ComponentDefinition(unique_name)
        self._definitions[unique_name] = definition
        return definition

    def remove(self, definition: ComponentDefinition) -> bool:
        if self._definitions.get(definition.name) is not definition:
            return False
        del self._definitions[definition.name]
        definition.erase()
        return True

    def __getitem__(self, name: str) -> ComponentDefinition:
        return self._definitions[name]

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[ComponentDefinition]:
        return iter(tuple(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)


class ComponentInstance(SceneElement):
    """A placed copy of a component definition."""

    def __init__(self, definition: ComponentDefinition, transformation: Transformation):
        super().__init__()
        self.definition = definition
        self._transformation = transformation
        definition._instances.append(self)

    @property
    def transformation(self) -> Transformation:
        return self._transformation

    @transformation.setter
    def transformation(self, value: Transformation):
        self.check_alive()
        self._transformation = value

    @property
    def bounds(self) -> BoundingBox:
        return self.definition.bounds.transformed(self._transformation)

    def _detach(self):
        super()._detach()
        if self in self.definition._instances:
            self.definition._instances.remove(self)


class Group(SceneElement):
    """A named container with its own entities and placement."""

    def __init__(self, name: str = ''):
        super().__init__()
        self.name = name
        self.entities = Entities(self)
        self._transformation = Transformation()

    @property
    def transformation(self) -> Transformation:
        return self._transformation

    @transformation.setter
    def transformation(self, value: Transformation):
        self.check_alive()
        self._transformation = value

    @property
    def bounds(self) -> BoundingBox:
        return self.entities.bounds.transformed(self._transformation)
