"""
Tunable parameters for the TwistCube component and its spiral.
"""

from datatrees import datatree

MAXSTEPS = 64


@datatree
class TwistConfig:
    """Defaults reproduce the classic TwistCube: a 100 inch cube and a 64 step
    spiral of four orbits whose copies shrink to 20% of the cube size."""

    initial_size: int = 100
    max_steps: int = MAXSTEPS
    orbits: float = 4
    min_scale: float = 0.2
    spread: float = 2.5
    definition_name: str = 'TwistCube'
    group_name: str = 'TwistCube'
    units: str = 'INCHES'
