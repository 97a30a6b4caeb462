"""
Dynamic component attributes.

An entity becomes a dynamic component by carrying a "dynamic_attributes"
dictionary. Besides user visible parameters, the dictionary holds hidden
bookkeeping keys (prefixed with "_") and an "onclick" formula evaluated
when the entity is clicked with the Interact tool.

Supported onclick functions, separated by ";":
    ANIMATE(attribute, v1, v2, ...)
    SET(attribute, v1, v2, ...)
Both advance the attribute to the value following its current one,
wrapping around. If the current value is not listed the first value is
used.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from twistcube.attributes import AttributeDictionary
from twistcube.entity import Entity, FormulaError, TwistCubeException


log = logging.getLogger(__name__)

DYNAMIC_ATTRIBUTES = 'dynamic_attributes'
FORMAT_VERSION = 1.0
ONCLICK_FUNCTIONS = ('ANIMATE', 'SET')

_CALL_RE = re.compile(r'^\s*([A-Za-z_]\w*)\s*\((.*)\)\s*$', re.DOTALL)
_NAME_RE = re.compile(r'^[A-Za-z_]\w*$')


class NotDynamicComponent(TwistCubeException):
    """The entity has no dynamic attributes."""


@dataclass(frozen=True)
class OnClickAction:
    function: str
    attribute: str
    values: tuple[str, ...]

    def next_value(self, current: Any) -> str:
        current = '' if current is None else str(current).strip()
        for i, value in enumerate(self.values):
            if _same_value(value, current):
                return self.values[(i + 1) % len(self.values)]
        return self.values[0]


def _same_value(a: str, b: str) -> bool:
    if a == b:
        return True
    try:
        return float(a) == float(b)
    except ValueError:
        return False


def init_dynamic_component(entity: Entity) -> AttributeDictionary:
    """Makes entity a dynamic component whose clicks toggle "_touched"
    between 0 and 1. Returns the dynamic attribute dictionary."""
    entity.set_attribute(DYNAMIC_ATTRIBUTES, '_formatversion', FORMAT_VERSION)
    dattr = entity.attribute_dictionary(DYNAMIC_ATTRIBUTES)
    dattr['onclick'] = 'Animate(_touched,0,1)'
    dattr['_touched'] = '0'
    return dattr


def add_dynamic_attribute(
    dattr: AttributeDictionary,
    attribute: str,
    value: Any,
    units: str = 'INCHES',
    access: bool = False,
):
    """Adds a dynamic attribute with its label and units. With access the
    attribute is editable from the component options dialog."""
    dattr[attribute] = value
    dattr[f'_{attribute}_label'] = attribute
    if access:
        dattr[f'_{attribute}_access'] = 'TEXTBOX'
        dattr[f'_{attribute}_formlabel'] = attribute
    for suffix in ('', 'formula'):
        dattr[f'_{attribute}_{suffix}units'] = units


def _split_args(text: str) -> list[str]:
    args = [a.strip().strip('"').strip("'") for a in text.split(',')]
    if args == ['']:
        return []
    return args


def parse_onclick(formula: str) -> list[OnClickAction]:
    actions = []
    for statement in (formula or '').split(';'):
        if not statement.strip():
            continue
        match = _CALL_RE.match(statement)
        if not match:
            raise FormulaError(f'Cannot parse onclick statement {statement.strip()!r}')
        function = match.group(1).upper()
        if function not in ONCLICK_FUNCTIONS:
            raise FormulaError(
                f'Unsupported onclick function {match.group(1)!r}. '
                f'Must be one of {ONCLICK_FUNCTIONS!r}')
        args = _split_args(match.group(2))
        if len(args) < 2:
            raise FormulaError(f'{function} needs an attribute and at least one value')
        if not _NAME_RE.match(args[0]):
            raise FormulaError(f'Invalid attribute name {args[0]!r}')
        actions.append(OnClickAction(function, args[0], tuple(args[1:])))
    return actions


def interact(entity: Entity) -> dict[str, str]:
    """Clicks entity with the Interact tool.

    Evaluates the onclick formula and writes the new values in one batch so
    observers receive a single change notification. Returns the values
    written.
    """
    entity.check_alive()
    dattr = entity.attribute_dictionary(DYNAMIC_ATTRIBUTES)
    if dattr is None:
        raise NotDynamicComponent(f'{entity!r} is not a dynamic component')
    actions = parse_onclick(dattr['onclick'])
    if not actions:
        return {}
    updates = {}
    for action in actions:
        current = updates.get(action.attribute, dattr[action.attribute])
        updates[action.attribute] = action.next_value(current)
    log.debug('interact %r: %r', entity, updates)
    dattr.update(updates)
    return updates
