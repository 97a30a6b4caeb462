"""
Scene entities: ids, liveness, observers and attribute dictionaries.
"""

import logging
from typing import Any, Protocol


log = logging.getLogger(__name__)


# Exceptions for dealing with the scene model.
class TwistCubeException(Exception):
    """Base exception functionality"""


class DeletedEntityError(TwistCubeException):
    """Attempting to use or modify an entity that has been erased."""


class InvalidDefinition(TwistCubeException):
    """Attempting to instance a missing or erased component definition."""


class InvalidGeometry(TwistCubeException):
    """Degenerate geometry, e.g. a face with collinear points."""


class FormulaError(TwistCubeException):
    """A dynamic component formula could not be parsed or evaluated."""


class EntityObserver(Protocol):
    def on_change_entity(self, entity: 'Entity') -> None: ...

    def on_erase_entity(self, entity: 'Entity') -> None: ...


class UidGen:
    """Basic id generator class"""
    curid: int = 1

    def genid(self) -> int:
        self.curid += 1
        return self.curid
_UIDGENNY = UidGen()


class Entity:
    """Base class for everything that lives in the scene.

    Observers are plain objects; an observer receives
    on_change_entity(entity) and on_erase_entity(entity) calls when it
    defines them. Hooks it does not define are skipped.
    """

    def __init__(self):
        self._entity_id = _UIDGENNY.genid()
        self._deleted = False
        self._observers = []
        self._attribute_dicts = {}

    @property
    def entity_id(self) -> int:
        return self._entity_id

    @property
    def deleted(self) -> bool:
        return self._deleted

    def check_alive(self):
        if self._deleted:
            raise DeletedEntityError(f'{type(self).__name__} {self._entity_id} has been erased')

    def add_observer(self, observer: EntityObserver) -> bool:
        if observer in self._observers:
            return False
        self._observers.append(observer)
        return True

    def remove_observer(self, observer: EntityObserver) -> bool:
        if observer not in self._observers:
            return False
        self._observers.remove(observer)
        return True

    def observers(self) -> tuple:
        return tuple(self._observers)

    def _notify(self, hook: str):
        # Copy since an observer may remove itself.
        for observer in tuple(self._observers):
            func = getattr(observer, hook, None)
            if func is not None:
                func(self)

    def _notify_change(self):
        self._notify('on_change_entity')

    def erase(self):
        """Erases this entity. Erasing twice is a no-op."""
        if self._deleted:
            return
        self._detach()
        self._deleted = True
        for dictionary in tuple(self._attribute_dicts.values()):
            dictionary.erase()
        self._notify('on_erase_entity')

    def _detach(self):
        """Removes this entity from its owner. Overridden by owned entities."""

    # Attribute dictionary helpers.

    @property
    def attribute_dictionaries(self) -> tuple[str, ...]:
        return tuple(self._attribute_dicts)

    def attribute_dictionary(self, name: str, create: bool = False):
        dictionary = self._attribute_dicts.get(name)
        if dictionary is None and create:
            self.check_alive()
            from twistcube.attributes import AttributeDictionary

            dictionary = AttributeDictionary(name, self)
            self._attribute_dicts[name] = dictionary
        return dictionary

    def set_attribute(self, dict_name: str, key: str, value: Any) -> Any:
        self.attribute_dictionary(dict_name, create=True)[key] = value
        return value

    def get_attribute(self, dict_name: str, key: str, default: Any = None) -> Any:
        dictionary = self.attribute_dictionary(dict_name)
        if dictionary is None:
            return default
        return dictionary.get(key, default)

    def __repr__(self):
        state = ' deleted' if self._deleted else ''
        return f'<{type(self).__name__} {self._entity_id}{state}>'
