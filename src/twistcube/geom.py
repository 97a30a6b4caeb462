"""
Transformation math and bounding boxes for the scene model.

Transformations are 4x4 homogeneous matrices acting on column vectors, so
``a * b`` applies ``b`` first and then ``a``.
"""

from dataclasses import dataclass, field
from typing import Iterable

import manifold3d as m3d
import numpy as np
from datatrees import datatree, dtfield


ORIGIN = np.array([0.0, 0.0, 0.0])
X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])

IDENTITY_TRANSFORM = np.eye(4)
IDENTITY_TRANSFORM.flags.writeable = False


def is_iterable(v):
    """Return True if v is an iterable."""
    return isinstance(v, Iterable) and not isinstance(v, (str, bytes))


def _as_vector3(v) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f'Expected a 3 element vector, got shape {v.shape}')
    return v


def _translate(v: np.ndarray) -> np.ndarray:
    return np.array([[1.0, 0, 0, v[0]], [0, 1, 0, v[1]], [0, 0, 1, v[2]], [0, 0, 0, 1]])


def _rotVSinCos(v: np.ndarray, sinr: float, cosr: float) -> np.ndarray:
    """Returns a matrix that causes a rotation about an axis vector v by the
    given sin and cos of the rotation angle."""
    u = v / np.linalg.norm(v[:3])
    ux = u[0]
    uy = u[1]
    uz = u[2]
    u2 = u * u
    ux2 = u2[0]
    uy2 = u2[1]
    uz2 = u2[2]
    uxz = ux * uz
    uxy = ux * uy
    uyz = uy * uz
    lcosr = 1 - cosr
    return np.array([
        [cosr + ux2 * lcosr, uxy * lcosr - uz * sinr, uxz * lcosr + uy * sinr, 0],
        [uxy * lcosr + uz * sinr, cosr + uy2 * lcosr, uyz * lcosr - ux * sinr, 0],
        [uxz * lcosr - uy * sinr, uyz * lcosr + ux * sinr, cosr + uz2 * lcosr, 0],
        [0.0, 0, 0, 1],
    ])


def _exactSinCos(radians: float) -> tuple[float, float]:
    """Returns the sin and cos of an angle in radians, with exact values for
    whole quarter turns."""
    quarters = radians / (np.pi / 2)
    nearest = round(quarters)
    if abs(quarters - nearest) < 1e-12:
        return ((0.0, 1.0), (1.0, 0.0), (0.0, -1.0), (-1.0, 0.0))[nearest % 4]
    return np.sin(radians), np.cos(radians)


@dataclass(frozen=True, eq=False)
class Transformation:
    """An affine transformation of 3D space."""

    matrix: np.ndarray = field(default_factory=lambda: IDENTITY_TRANSFORM)

    def __post_init__(self):
        matrix = np.asarray(self.matrix, dtype=np.float64)
        if matrix.shape == (3, 4):
            matrix = np.concatenate([matrix, [[0, 0, 0, 1]]])
        if matrix.shape != (4, 4):
            raise ValueError(f'Expected a 4x4 matrix, got shape {matrix.shape}')
        if not np.allclose(matrix[-1], [0, 0, 0, 1]):
            raise ValueError('Bottom row of an affine transformation must be [0, 0, 0, 1]')
        if matrix is not IDENTITY_TRANSFORM:
            matrix = matrix.copy()
            matrix.flags.writeable = False
        object.__setattr__(self, 'matrix', matrix)

    @classmethod
    def translation(cls, v) -> 'Transformation':
        return cls(_translate(_as_vector3(v)))

    @classmethod
    def rotation(cls, point, axis, angle: float) -> 'Transformation':
        """Rotation by angle radians about axis through point."""
        point = _as_vector3(point)
        axis = _as_vector3(axis)
        if not np.linalg.norm(axis):
            raise ValueError('Rotation axis must be non-zero')
        rot = _rotVSinCos(axis, *_exactSinCos(angle))
        return cls(_translate(point) @ rot @ _translate(-point))

    @classmethod
    def scaling(cls, point, factor) -> 'Transformation':
        """Scale about point. factor is a scalar or an (x, y, z) triple."""
        point = _as_vector3(point)
        if is_iterable(factor):
            sx, sy, sz = factor
        else:
            sx = sy = sz = factor
        scale = np.array([[sx, 0, 0, 0], [0, sy, 0, 0], [0, 0, sz, 0], [0, 0, 0, 1.0]])
        return cls(_translate(point) @ scale @ _translate(-point))

    @property
    def origin(self) -> np.ndarray:
        return self.matrix[:3, 3].copy()

    def is_identity(self) -> bool:
        return self.matrix is IDENTITY_TRANSFORM or np.allclose(self.matrix, IDENTITY_TRANSFORM)

    def inverse(self) -> 'Transformation':
        return Transformation(np.linalg.inv(self.matrix))

    def to_array(self) -> np.ndarray:
        return self.matrix.copy()

    def to_object_transform(self) -> np.ndarray:
        """The 3x4 form manifold3d's transform() accepts."""
        return np.ascontiguousarray(self.matrix[:3, :])

    def apply_points(self, points) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64)
        return points @ self.matrix[:3, :3].T + self.matrix[:3, 3]

    def almost_equal(self, other: 'Transformation', atol: float = 1e-9) -> bool:
        return np.allclose(self.matrix, other.matrix, atol=atol)

    def __mul__(self, other):
        if isinstance(other, Transformation):
            return Transformation(self.matrix @ other.matrix)
        return self.apply_points(_as_vector3(other))

    def __repr__(self):
        return f'Transformation({self.matrix.tolist()!r})'


@datatree
class BoundingBox:
    """3D bounding box with min and max points."""

    min_point: np.ndarray = dtfield(
        default_factory=lambda: np.array([float("inf"), float("inf"), float("inf")])
    )
    max_point: np.ndarray = dtfield(
        default_factory=lambda: np.array([float("-inf"), float("-inf"), float("-inf")])
    )

    @classmethod
    def from_points(cls, points) -> 'BoundingBox':
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if not len(points):
            return cls()
        return cls(min_point=points.min(axis=0), max_point=points.max(axis=0))

    @classmethod
    def from_manifold(cls, manifold: m3d.Manifold) -> 'BoundingBox':
        if manifold.num_vert() == 0:
            return cls()
        bbox: tuple[float, float, float, float, float, float] = manifold.bounding_box()
        return cls(min_point=np.array(bbox[:3]), max_point=np.array(bbox[3:]))

    def is_empty(self) -> bool:
        return bool(np.any(np.isinf(self.min_point)) or np.any(np.isinf(self.max_point)))

    @property
    def size(self) -> np.ndarray:
        """Get the size of the bounding box as a 3D vector."""
        if self.is_empty():
            return np.array([0.0, 0.0, 0.0])
        return self.max_point - self.min_point

    @property
    def center(self) -> np.ndarray:
        """Get the center of the bounding box."""
        # Ensure we always return a 3D vector even for an empty bounding box
        if self.is_empty():
            return np.array([0.0, 0.0, 0.0])
        return (self.max_point + self.min_point) / 2.0

    @property
    def diagonal(self) -> float:
        """Get the diagonal length of the bounding box."""
        if self.is_empty():
            return 0.0
        return float(np.linalg.norm(self.size))

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Compute the union of this bounding box with another."""
        # Handle the case where one of the bounding boxes is empty
        if self.is_empty():
            return other
        if other.is_empty():
            return self

        return BoundingBox(
            min_point=np.minimum(self.min_point, other.min_point),
            max_point=np.maximum(self.max_point, other.max_point),
        )

    def add_points(self, points) -> "BoundingBox":
        return self.union(BoundingBox.from_points(points))

    def contains_point(self, point) -> bool:
        """Check if a point is inside the bounding box."""
        if self.is_empty():
            return False
        point = np.asarray(point)
        return bool(np.all(point >= self.min_point) and np.all(point <= self.max_point))

    def corners(self) -> np.ndarray:
        if self.is_empty():
            return np.zeros((0, 3))
        lo, hi = self.min_point, self.max_point
        return np.array([
            [x, y, z] for x in (lo[0], hi[0]) for y in (lo[1], hi[1]) for z in (lo[2], hi[2])
        ])

    def transformed(self, transformation: Transformation) -> "BoundingBox":
        """Bounds of this box after transformation (axis aligned, so it may grow)."""
        if self.is_empty():
            return BoundingBox()
        return BoundingBox.from_points(transformation.apply_points(self.corners()))
