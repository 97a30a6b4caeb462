"""TwistCube: a dynamic component scripting example.

A cube component grows a spiral of shrinking copies of itself when it is
clicked with the Interact tool and unwinds the spiral on the next click.
The package carries the small scene model the example needs: entities with
observable attribute dictionaries, component definitions and instances,
transformations and a view that drives per-frame animations.
"""

from twistcube.animation import (
    SpiralState,
    TwistAnimation,
    spiral_angle,
    spiral_offset,
    spiral_scale,
)
from twistcube.attributes import AttributeDictionary, to_int
from twistcube.config import MAXSTEPS, TwistConfig
from twistcube.dynamic import (
    DYNAMIC_ATTRIBUTES,
    NotDynamicComponent,
    add_dynamic_attribute,
    init_dynamic_component,
    interact,
    parse_onclick,
)
from twistcube.entities import (
    ComponentDefinition,
    ComponentInstance,
    DefinitionList,
    Entities,
    Face,
    Group,
    Solid,
)
from twistcube.entity import (
    DeletedEntityError,
    Entity,
    FormulaError,
    InvalidDefinition,
    InvalidGeometry,
    TwistCubeException,
)
from twistcube.export import manifold_to_stl
from twistcube.geom import ORIGIN, X_AXIS, Y_AXIS, Z_AXIS, BoundingBox, Transformation
from twistcube.observer import DynamicAttributeObserver
from twistcube.session import TwistCubeSession
from twistcube.view import Model, View
