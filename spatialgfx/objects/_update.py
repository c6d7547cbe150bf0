"""The traversal pass that refreshes the cached matrices of a tree.

Nodes never update their own world matrix. This pass walks a tree from the
top down and writes ``local_matrix`` (when the node's update mode asks for
it), ``world_matrix``, and optionally ``model_view_matrix`` and
``normal_matrix``.
"""

import numpy as np

from ._base import as_node
from ..utils.transform import as_matrix, normal_matrix_from


def update_world_matrices(root, force=False):
    """Recompute the world matrices of ``root`` and all its descendants.

    A node's local matrix is recomputed from its position, orientation and
    scale if ``force`` is set or its ``matrix_update_mode`` asks for it. If
    ``root`` has a parent, the parent's (cached) world matrix is used as the
    base, so that a subtree can be refreshed on its own.
    """
    root = as_node(root)
    parent = root.parent
    base = None if parent is None else parent.world_matrix
    _update_node(root, base, force)


def _update_node(node, parent_world, force):
    # Consume first, so that a one-shot request is cleared even when forced
    if node.consume_matrix_update() or force:
        node.update_matrix()
    if parent_world is None:
        node.world_matrix = node.local_matrix
    else:
        node.world_matrix = parent_world @ node.local_matrix
    world = node.world_matrix
    for child in node.children:
        _update_node(child, world, force)


def update_model_view_matrices(root, view_matrix):
    """Set ``model_view_matrix`` and ``normal_matrix`` for ``root`` and its descendants.

    Uses the world matrices as they are, so run ``update_world_matrices`` first.
    ``view_matrix`` is the world-to-camera transform, i.e. the inverse of the
    camera's world matrix.
    """
    view_matrix = as_matrix(view_matrix, "view_matrix")
    for node in as_node(root).iter():
        model_view = view_matrix @ node.world_matrix
        node.model_view_matrix = model_view
        node.normal_matrix = normal_matrix_from(model_view)


def view_matrix_from(camera) -> np.ndarray:
    """The world-to-camera matrix of a camera node (or object that has one)."""
    return as_node(camera).world_inverse_matrix
