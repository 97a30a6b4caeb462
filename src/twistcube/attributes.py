"""
Observable key/value dictionaries attached to entities.
"""

import logging
import re
from typing import Any, Iterable, Mapping

from twistcube.entity import Entity


log = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r'^\s*([-+]?\d+)')


def to_int(value: Any) -> int:
    """Lenient integer conversion for stored attribute values.

    Strings convert from their leading integer ("12abc" -> 12), floats are
    truncated and anything else, including None, converts to 0.
    """
    if value is None or isinstance(value, bool):
        return int(bool(value))
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


class AttributeDictionary(Entity):
    """A named dictionary owned by an entity.

    Every write notifies the dictionary's observers with on_change_entity.
    The notification does not say which key changed.
    """

    def __init__(self, name: str, owner: Entity):
        super().__init__()
        self.name = name
        self.owner = owner
        self._values = {}

    def __getitem__(self, key: str) -> Any:
        return self._values.get(key)

    def __setitem__(self, key: str, value: Any):
        self.check_alive()
        self._values[key] = value
        log.debug('%s[%r] = %r', self.name, key, value)
        self._notify_change()

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def keys(self) -> list[str]:
        return list(self._values.keys())

    def items(self) -> list[tuple[str, Any]]:
        return list(self._values.items())

    def update(self, values: Mapping[str, Any] | Iterable[tuple[str, Any]]):
        """Writes several values with a single change notification."""
        self.check_alive()
        self._values.update(values)
        self._notify_change()

    def delete_key(self, key: str) -> Any:
        self.check_alive()
        value = self._values.pop(key, None)
        self._notify_change()
        return value

    def _detach(self):
        if self.owner._attribute_dicts.get(self.name) is self:
            del self.owner._attribute_dicts[self.name]
