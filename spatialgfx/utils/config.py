"""Defaults that new spatial nodes are created with.

Nodes copy these values when they are constructed. Changing the process-wide
defaults afterwards does not affect nodes that already exist. Scenes that
should not share state can pass their own ``NodeDefaults`` to each node.
"""

import numpy as np


class NodeDefaults:
    """The initial values for a node's ``up`` vector and ``auto_update_matrix``.

    Parameters
    ----------
    up : ndarray, [3]
        The reference up direction used by ``look_at``. Default (0, 1, 0).
    auto_update_matrix : bool
        Whether the local matrix is recomputed from position, orientation and
        scale by the traversal pass. Default True.

    """

    __slots__ = ["_auto_update_matrix", "_up"]

    def __init__(self, up=(0, 1, 0), auto_update_matrix=True):
        self.up = up
        self.auto_update_matrix = auto_update_matrix

    def __repr__(self):
        return (
            f"NodeDefaults(up={tuple(float(x) for x in self._up)}, "
            f"auto_update_matrix={self.auto_update_matrix})"
        )

    @property
    def up(self) -> np.ndarray:
        """The default up vector (a copy, so nodes never share it)."""
        return self._up.copy()

    @up.setter
    def up(self, value):
        value = np.array(value, dtype=float)
        if value.shape != (3,):
            raise ValueError(f"NodeDefaults.up must be a 3-vector, not {value!r}")
        self._up = value

    @property
    def auto_update_matrix(self) -> bool:
        return self._auto_update_matrix

    @auto_update_matrix.setter
    def auto_update_matrix(self, value):
        self._auto_update_matrix = bool(value)

    def copy(self):
        """Get an independent copy of these defaults."""
        return NodeDefaults(self._up, self._auto_update_matrix)


defaults = NodeDefaults()


def set_defaults(*, up=None, auto_update_matrix=None):
    """Change the process-wide defaults for nodes created from now on.

    Arguments that are None are left unchanged.
    """
    if up is not None:
        defaults.up = up
    if auto_update_matrix is not None:
        defaults.auto_update_matrix = auto_update_matrix


def get_defaults() -> NodeDefaults:
    """Get a snapshot of the current process-wide defaults."""
    return defaults.copy()
