from __future__ import annotations

from typing import Any, Tuple

import numpy as np
import pylinalg as la

from . import logger


class cached:  # noqa: N801
    """Cache for computed properties.

    This descriptor implements a minimal counter-based cache for computed
    properties. The value of the property is computed using ``compute_fn`` and
    the result is cached until ``obj.last_modified`` changes. At this point the
    value of the computed property is recomputed upon the next read.

    """

    __slots__ = ("compute_fn", "name")

    def __init__(self, compute_fn=None) -> None:
        self.compute_fn = compute_fn
        self.name = None

    def __set_name__(self, clazz, name) -> None:
        self.name = f"cache_{name}_cache"

    def __get__(self, instance, clazz=None) -> Any:
        if instance is None:
            return self

        last_modified = instance.last_modified
        cache = getattr(instance, self.name, None)

        if cache is None or last_modified != cache[0]:
            cache = (last_modified, self.compute_fn(instance))
            setattr(instance, self.name, cache)

        return cache[1]


def readonly(array: np.ndarray) -> np.ndarray:
    """Get a read-only view of an array."""
    view = array.view()
    view.flags.writeable = False
    return view


def as_vector(value, size=3, name="vector") -> np.ndarray:
    """Convert to a float array of the given size, or raise ValueError."""
    value = np.asarray(value, dtype=float)
    if value.shape != (size,):
        raise ValueError(f"Expected {name} of shape ({size},), not {value.shape}")
    return value


def as_matrix(value, name="matrix") -> np.ndarray:
    """Convert to a (4, 4) float array, or raise ValueError."""
    value = np.asarray(value, dtype=float)
    if value.shape != (4, 4):
        raise ValueError(f"Expected {name} of shape (4, 4), not {value.shape}")
    return value


def inverse_or_identity(matrix: np.ndarray) -> np.ndarray:
    """The inverse of a square matrix, or identity if it is singular.

    The inverse comes from ``pylinalg.mat_inverse`` in its non-raising mode,
    which gives zeros for a singular matrix. A scene must stay renderable
    when a node is momentarily degenerate (e.g. scaled to zero), so this
    never raises.
    """
    matrix = np.asarray(matrix, dtype=float)
    if np.isfinite(matrix).all():
        with np.errstate(all="ignore"):
            inverse = la.mat_inverse(matrix, raise_err=False)
        if np.isfinite(inverse).all() and inverse.any():
            return inverse
    logger.debug("Singular matrix, using identity as its inverse.")
    return np.eye(matrix.shape[0])


def compose(position, orientation, scale) -> np.ndarray:
    """Compose an affine matrix from translation, rotation and scale."""
    return la.mat_compose(position, orientation, scale)


def decompose(matrix) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Decompose an affine matrix into (position, orientation, scale).

    The scale is the norm of each column of the upper 3x3 block and the
    orientation is the quaternion of the column-normalised block. Shear has no
    place in this representation and is dropped. Degenerate matrices give
    degenerate (possibly non-finite) components instead of an error.
    """
    with np.errstate(all="ignore"):
        position, orientation, scale = la.mat_decompose(matrix)
    return position, orientation, scale


def rotation_from_matrix(matrix) -> np.ndarray:
    """The quaternion of the rotation in the upper 3x3 block of a 3x3 or 4x4 matrix."""
    matrix = np.asarray(matrix, dtype=float)
    if matrix.shape not in ((3, 3), (4, 4)):
        raise ValueError(f"Expected a 3x3 or 4x4 matrix, not {matrix.shape}")
    full = np.eye(4)
    full[:3, :3] = matrix[:3, :3]
    return la.quat_from_mat(full)


def normal_matrix_from(matrix: np.ndarray) -> np.ndarray:
    """The 3x3 matrix that transforms normals for the given affine matrix.

    This is the inverse transpose of the upper 3x3 block, and identity if
    that block is singular.
    """
    return inverse_or_identity(np.asarray(matrix, dtype=float)[:3, :3]).T
