"""Spatial nodes and the scene hierarchy.

* Nodes: ``SpatialNode``, ``HasSpatialNode``, ``Group``, ``Scene``.
* Hierarchy: ``attach``, ``detach``, ``as_node``.
* Traversal: ``update_world_matrices``, ``update_model_view_matrices``.

"""

# ruff: noqa: F401

from ._base import SpatialNode, HasSpatialNode, as_node, attach, detach, id_provider
from ._more import Group, Scene
from ._update import update_world_matrices, update_model_view_matrices
