from __future__ import annotations

import random
import weakref
import threading
from typing import Any, Callable, Iterator, List, Protocol, Tuple, runtime_checkable

import numpy as np
import pylinalg as la

from ..utils import logger
from ..utils.config import NodeDefaults, defaults as _process_defaults
from ..utils.enums import MatrixUpdateMode
from ..utils.layers import Layers
from ..utils.transform import (
    cached,
    readonly,
    as_vector,
    as_matrix,
    compose,
    decompose,
    rotation_from_matrix,
    inverse_or_identity,
)


class IdProvider:
    """Object for internal use to manage node id's."""

    def __init__(self):
        self._ids_in_use = set([0])
        self._map = weakref.WeakValueDictionary()
        self._lock = threading.RLock()

    def claim_id(self, node: SpatialNode) -> int:
        """Used by nodes to claim an id."""
        # We don't simply count up, but keep a pool of ids, so that an
        # application that creates and discards nodes at a high rate
        # re-uses them. An id is unique among the nodes that are alive.

        # Max allowed id, inclusive
        id_max = 2_147_483_647  # 2**31 - 1

        # The max number of ids. This is a lot less than id_max to avoid
        # choking when there are few free id's left.
        max_items = 100_000_000

        with self._lock:
            if len(self._ids_in_use) >= max_items:
                raise RuntimeError("Max number of nodes reached.")
            id = 0
            while id in self._ids_in_use:
                id = random.randint(1, id_max)
            self._ids_in_use.add(id)
            self._map[id] = node

        return id

    def release_id(self, node: SpatialNode, id: int) -> None:
        """Release an id associated with a node."""
        if id > 0:
            with self._lock:
                self._ids_in_use.discard(id)
                self._map.pop(id, None)

    def get_node_from_id(self, id: int) -> SpatialNode | None:
        """Return the node associated with an id, or None."""
        return self._map.get(id)


id_provider = IdProvider()


@runtime_checkable
class HasSpatialNode(Protocol):
    """Capability of scene entities that carry a spatial node.

    The ``node`` property gives access to the node; since Python has no
    read-only borrow, the same property is used to read and to mutate it.
    """

    @property
    def node(self) -> SpatialNode: ...


def as_node(obj) -> SpatialNode:
    """Get the SpatialNode for a node or an object that has one."""
    if isinstance(obj, SpatialNode):
        return obj
    node = getattr(obj, "node", None)
    if isinstance(node, SpatialNode):
        return node
    raise TypeError(f"Expected a SpatialNode or an object with a node, not {obj!r}")


class SpatialNode:
    """A node in the scene graph.

    The node holds a local transform (position, orientation, scale) and the
    matrices derived from it, and defines object hierarchies (parent /
    children). It never walks up its own ancestry: the world matrix is a cache
    that is written by the traversal pass (see
    :func:`spatialgfx.objects.update_world_matrices`) and is only valid after
    that pass has run since the last change upstream.

    Parameters
    ----------
    name : str
        The name of the node.
    visible : bool
        Whether the node is visible.
    render_order : int
        Value that helps control the order in which nodes are rendered.
    defaults : NodeDefaults | None
        The defaults for ``up`` and ``auto_update_matrix``. If None, a snapshot
        of the process-wide defaults is used.

    Notes
    -----
    Array properties return read-only views. Assign to the property to change
    it, e.g. ``node.position = (1, 2, 3)``. In-place updates such as
    ``node.position[0] = 1`` raise an error.

    Two nodes are equal only if they are the same node; their transforms are
    never compared.

    """

    def __init__(
        self,
        *,
        name: str = "",
        visible: bool = True,
        render_order: int = 0,
        defaults: NodeDefaults | None = None,
    ) -> None:
        if defaults is None:
            defaults = _process_defaults

        self._parent: weakref.ReferenceType[SpatialNode] | None = None

        #: Subtrees of the scene graph owned by this node.
        self._children: List[SpatialNode] = []

        self.name = name

        self._up = defaults.up
        self._position = np.zeros(3, dtype=float)
        self._orientation = np.array([0, 0, 0, 1], dtype=float)
        self._scale = np.ones(3, dtype=float)

        self._local_matrix = np.eye(4)
        self._world_matrix = np.eye(4)
        self._model_view_matrix = np.eye(4)
        self._normal_matrix = np.eye(3)

        #: Counter that advances whenever the world matrix is written.
        self.last_modified = 0

        if defaults.auto_update_matrix:
            self._matrix_update_mode = MatrixUpdateMode.always
        else:
            self._matrix_update_mode = MatrixUpdateMode.never

        self._layers = Layers()

        # Init visibility and render props
        self.visible = visible
        self.render_order = render_order
        self.cast_shadow = False
        self.receive_shadow = False
        self.frustum_culled = True

        # Set id
        self._id = id_provider.claim_id(self)

    def __repr__(self):
        return f"<spatialgfx.{self.__class__.__name__} {self.name} at {hex(id(self))}>"

    def __del__(self):
        id_provider.release_id(self, getattr(self, "_id", 0))

    def __eq__(self, other):
        if not isinstance(other, SpatialNode):
            return NotImplemented
        return self._id == other._id

    def __hash__(self):
        return hash(self._id)

    @property
    def node(self) -> SpatialNode:
        """The node itself, so a node can be used where a HasSpatialNode is expected."""
        return self

    @property
    def id(self) -> int:
        """An integer id smaller than 2**31 (read-only)."""
        return self._id

    @property
    def name(self) -> str:
        """The name of the node. Need not be unique."""
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = str(value)

    # %% Flags

    @property
    def visible(self) -> bool:
        """Whether the node is rendered or not. Default True."""
        return self._visible

    @visible.setter
    def visible(self, visible: bool) -> None:
        self._visible = bool(visible)

    @property
    def render_order(self) -> int:
        """A number that helps control the order in which nodes are rendered.
        Default 0.
        """
        return self._render_order

    @render_order.setter
    def render_order(self, value: int) -> None:
        self._render_order = int(value)

    @property
    def cast_shadow(self) -> bool:
        """Whether this node casts shadows. Default False."""
        return self._cast_shadow

    @cast_shadow.setter
    def cast_shadow(self, value: bool) -> None:
        self._cast_shadow = bool(value)

    @property
    def receive_shadow(self) -> bool:
        """Whether this node receives shadows. Default False."""
        return self._receive_shadow

    @receive_shadow.setter
    def receive_shadow(self, value: bool) -> None:
        self._receive_shadow = bool(value)

    @property
    def frustum_culled(self) -> bool:
        """Whether the renderer may skip this node when out of view. Default True."""
        return self._frustum_culled

    @frustum_culled.setter
    def frustum_culled(self, value: bool) -> None:
        self._frustum_culled = bool(value)

    @property
    def layers(self) -> Layers:
        """The layers this node is a member of."""
        return self._layers

    @layers.setter
    def layers(self, value: Layers | int) -> None:
        if isinstance(value, Layers):
            self._layers = value.copy()
        elif isinstance(value, int):
            self._layers = Layers(value)
        else:
            raise TypeError(
                f"SpatialNode.layers must be Layers or int, not {type(value)}"
            )

    # %% Matrix update mode

    @property
    def matrix_update_mode(self) -> MatrixUpdateMode:
        """When the traversal pass recomputes ``local_matrix`` from position,
        orientation and scale. See :class:`MatrixUpdateMode`.
        """
        return self._matrix_update_mode

    @matrix_update_mode.setter
    def matrix_update_mode(self, value: MatrixUpdateMode | str) -> None:
        self._matrix_update_mode = MatrixUpdateMode(value)

    @property
    def auto_update_matrix(self) -> bool:
        """Whether ``local_matrix`` is recomputed on every traversal pass.

        If False, ``local_matrix`` is authoritative and is only recomputed when
        ``world_matrix_needs_update`` is set.
        """
        return self._matrix_update_mode == MatrixUpdateMode.always

    @auto_update_matrix.setter
    def auto_update_matrix(self, value: bool) -> None:
        if value:
            self._matrix_update_mode = MatrixUpdateMode.always
        elif self._matrix_update_mode == MatrixUpdateMode.always:
            self._matrix_update_mode = MatrixUpdateMode.never

    @property
    def world_matrix_needs_update(self) -> bool:
        """One-shot request to recompute ``local_matrix`` on the next traversal
        pass, even though ``auto_update_matrix`` is False.
        """
        return self._matrix_update_mode == MatrixUpdateMode.once

    @world_matrix_needs_update.setter
    def world_matrix_needs_update(self, value: bool) -> None:
        mode = self._matrix_update_mode
        if value and mode == MatrixUpdateMode.never:
            self._matrix_update_mode = MatrixUpdateMode.once
        elif not value and mode == MatrixUpdateMode.once:
            self._matrix_update_mode = MatrixUpdateMode.never

    def consume_matrix_update(self) -> bool:
        """Whether the local matrix must be recomputed now.

        Used by the traversal pass. A pending one-shot request is cleared.
        """
        mode = self._matrix_update_mode
        if mode == MatrixUpdateMode.once:
            self._matrix_update_mode = MatrixUpdateMode.never
            return True
        return mode == MatrixUpdateMode.always

    # %% Local transform

    @property
    def up(self) -> np.ndarray:
        """The reference up direction used by ``look_at``."""
        return readonly(self._up)

    @up.setter
    def up(self, value) -> None:
        self._up[:] = as_vector(value, 3, "up")

    @property
    def position(self) -> np.ndarray:
        """The position relative to the parent."""
        return readonly(self._position)

    @position.setter
    def position(self, value) -> None:
        self._position[:] = as_vector(value, 3, "position")

    @property
    def orientation(self) -> np.ndarray:
        """The rotation relative to the parent, as a quaternion (x, y, z, w).

        This is the only stored form of the rotation; the ``set_rotation_from_*``
        methods convert to it.
        """
        return readonly(self._orientation)

    @orientation.setter
    def orientation(self, value) -> None:
        self._orientation[:] = as_vector(value, 4, "orientation")

    @property
    def scale(self) -> np.ndarray:
        """The per-axis scale relative to the parent."""
        return readonly(self._scale)

    @scale.setter
    def scale(self, value) -> None:
        self._scale[:] = as_vector(value, 3, "scale")

    @property
    def euler(self) -> np.ndarray:
        """The orientation as XYZ euler angles (read-only)."""
        return la.quat_to_euler(self._orientation)

    # %% Matrices

    @property
    def local_matrix(self) -> np.ndarray:
        """Affine matrix of this node expressed in parent space.

        ``vec_parent = local_matrix @ vec_local``. Set it directly together
        with ``auto_update_matrix = False`` to author it by hand.
        """
        return readonly(self._local_matrix)

    @local_matrix.setter
    def local_matrix(self, value) -> None:
        self._local_matrix[:] = as_matrix(value, "local_matrix")

    @property
    def world_matrix(self) -> np.ndarray:
        """Affine matrix of this node expressed in world space.

        ``vec_world = world_matrix @ vec_local``. This is a cache written by
        the traversal pass; it is stale until that pass has run.
        """
        return readonly(self._world_matrix)

    @world_matrix.setter
    def world_matrix(self, value) -> None:
        self._world_matrix[:] = as_matrix(value, "world_matrix")
        self.last_modified += 1

    @cached
    def _world_inverse_matrix(self) -> np.ndarray:
        mat = inverse_or_identity(self._world_matrix)
        mat.flags.writeable = False
        return mat

    @property
    def world_inverse_matrix(self) -> np.ndarray:
        """Inverse of ``world_matrix``, identity if it is singular (read-only)."""
        return self._world_inverse_matrix

    @property
    def model_view_matrix(self) -> np.ndarray:
        """``view_matrix @ world_matrix``, written by the traversal pass."""
        return readonly(self._model_view_matrix)

    @model_view_matrix.setter
    def model_view_matrix(self, value) -> None:
        self._model_view_matrix[:] = as_matrix(value, "model_view_matrix")

    @property
    def normal_matrix(self) -> np.ndarray:
        """The 3x3 matrix that transforms normals into view space,
        written by the traversal pass."""
        return readonly(self._normal_matrix)

    @normal_matrix.setter
    def normal_matrix(self, value) -> None:
        value = np.asarray(value, dtype=float)
        if value.shape != (3, 3):
            raise ValueError(
                f"Expected normal_matrix of shape (3, 3), not {value.shape}"
            )
        self._normal_matrix[:] = value

    def update_matrix(self) -> None:
        """Compose ``local_matrix`` from position, orientation and scale."""
        self._local_matrix[:] = compose(self._position, self._orientation, self._scale)

    # %% Transform mutation

    def apply_matrix(self, matrix) -> None:
        """Apply a transform on top of the local matrix.

        The local matrix becomes ``matrix @ local_matrix``, and position,
        orientation and scale are overwritten with its decomposition. Shear
        cannot be represented and is dropped (see
        :func:`spatialgfx.utils.transform.decompose`).
        """
        matrix = as_matrix(matrix)
        self._local_matrix[:] = matrix @ self._local_matrix
        position, orientation, scale = decompose(self._local_matrix)
        self._position[:] = position
        self._orientation[:] = orientation
        self._scale[:] = scale

    def set_rotation_from_axis_angle(self, axis, angle: float) -> None:
        """Set the orientation from a (normalized) axis and an angle in radians."""
        self._orientation[:] = la.quat_from_axis_angle(axis, angle)

    def set_rotation_from_euler(self, euler, order: str | None = None) -> None:
        """Set the orientation from euler angles in radians.

        ``order`` is passed on to ``pylinalg.quat_from_euler``; by default its
        own default order is used.
        """
        if order is None:
            self._orientation[:] = la.quat_from_euler(euler)
        else:
            self._orientation[:] = la.quat_from_euler(euler, order=order)

    def set_rotation_from_matrix(self, matrix) -> None:
        """Set the orientation from the rotation in a 3x3 or 4x4 matrix."""
        self._orientation[:] = rotation_from_matrix(matrix)

    def set_rotation_from_quaternion(self, quaternion) -> None:
        self._orientation[:] = as_vector(quaternion, 4, "quaternion")

    def rotate_on_axis(self, axis, angle: float) -> None:
        """Rotate around an axis expressed in the node's local space."""
        rotation = la.quat_from_axis_angle(axis, angle)
        self._orientation[:] = la.quat_mul(self._orientation, rotation)

    def rotate_x(self, angle: float) -> None:
        self.rotate_on_axis((1, 0, 0), angle)

    def rotate_y(self, angle: float) -> None:
        self.rotate_on_axis((0, 1, 0), angle)

    def rotate_z(self, angle: float) -> None:
        self.rotate_on_axis((0, 0, 1), angle)

    def translate_on_axis(self, axis, distance: float) -> None:
        """Move along an axis expressed in the node's local space."""
        direction = la.vec_transform_quat(axis, self._orientation)
        self._position += direction * distance

    def translate_x(self, distance: float) -> None:
        self.translate_on_axis((1, 0, 0), distance)

    def translate_y(self, distance: float) -> None:
        self.translate_on_axis((0, 1, 0), distance)

    def translate_z(self, distance: float) -> None:
        self.translate_on_axis((0, 0, 1), distance)

    def local_to_world(self, vector) -> np.ndarray:
        """Transform a point (or an array of points) from local to world space."""
        return la.vec_transform(vector, self._world_matrix)

    def world_to_local(self, vector) -> np.ndarray:
        """Transform a point (or an array of points) from world to local space.

        If the world matrix is singular, identity is used as its inverse.
        """
        return la.vec_transform(vector, self.world_inverse_matrix)

    def look_at(self, target) -> None:
        """Orient the node so that its forward (+Z) axis points at ``target``.

        ``target`` is expressed in the same space as ``position``. The
        rotation around the forward axis is chosen using ``up``. The position
        is not changed. If ``target`` coincides with the position, or the
        direction is parallel to ``up``, the orientation is whatever pylinalg
        produces (possibly non-finite); no error is raised.
        """
        with np.errstate(all="ignore"):
            matrix = la.mat_look_at(self._position, target, self._up)
            self._orientation[:] = rotation_from_matrix(matrix)

    # %% Hierarchy

    @property
    def parent(self) -> SpatialNode | None:
        """Node's parent in the scene graph (read-only).
        A node can have at most one parent.
        """
        if self._parent is None:
            return None
        else:
            return self._parent()

    @property
    def children(self) -> Tuple[SpatialNode, ...]:
        """tuple of children of this node. (read-only)"""
        return tuple(self._children)

    def add(self, *nodes, before=None) -> SpatialNode:
        """Add child nodes.

        Any number of nodes (or objects that have a node) may be added. Any
        current parent of a node passed in here is removed first, since a
        node can have at most one parent. If ``before`` is given, the nodes
        are inserted before that child.

        """
        for obj in nodes:
            if before is None:
                attach(self, obj)
            else:
                _attach_before(self, as_node(obj), as_node(before))
        return self

    def remove(self, *nodes) -> None:
        """Removes nodes as children of this node. Any number may be removed."""
        for obj in nodes:
            if not detach(self, obj):
                logger.warning("Attempting to remove node that was not a child.")

    def remove_from_parent(self) -> bool:
        """Detach this node from its parent. Returns whether it had one."""
        parent = self.parent
        if parent is None:
            return False
        return detach(parent, self)

    def clear(self) -> None:
        """Removes all children."""

        for child in self._children:
            child._parent = None

        self._children.clear()

    def traverse(
        self, callback: Callable[[SpatialNode], Any], skip_invisible: bool = False
    ):
        """Executes the callback on this node and all descendants.

        If ``skip_invisible`` is given and True, nodes whose
        ``visible`` property is False - and their children - are
        skipped. Note that modifying the scene graph inside the callback
        is discouraged.
        """

        for child in self.iter(skip_invisible=skip_invisible):
            callback(child)

    def iter(
        self,
        filter_fn: Callable[[SpatialNode], bool] | None = None,
        skip_invisible: bool = False,
    ) -> Iterator[SpatialNode]:
        """Create a generator that iterates over this node and its descendants.
        If ``filter_fn`` is given, only nodes for which it returns ``True``
        are included.
        """
        if skip_invisible and not self._visible:
            return

        if filter_fn is None:
            yield self
        elif filter_fn(self):
            yield self

        for child in self._children:
            yield from child.iter(filter_fn, skip_invisible)

    def get_root(self) -> SpatialNode:
        """The top-most ancestor, or this node if it has no parent."""
        node = self
        parent = node.parent
        while parent is not None:
            node = parent
            parent = node.parent
        return node

    def is_ancestor_of(self, node: SpatialNode) -> bool:
        """Whether this node is a (grand)parent of the given node."""
        parent = as_node(node).parent
        while parent is not None:
            if parent is self:
                return True
            parent = parent.parent
        return False

    def get_by_name(self, name: str) -> SpatialNode | None:
        """The first node in this subtree (this node included) with the given name."""
        return next(self.iter(lambda n: n.name == name), None)

    def get_by_id(self, id: int) -> SpatialNode | None:
        """The node in this subtree (this node included) with the given id."""
        return next(self.iter(lambda n: n.id == id), None)


def _check_attach(parent: SpatialNode, child: SpatialNode) -> None:
    if child is parent:
        raise ValueError("A node cannot be attached to itself.")
    if child.is_ancestor_of(parent):
        raise ValueError("A node cannot be attached to one of its descendants.")


def attach(parent, child) -> None:
    """Make ``child`` the last child of ``parent``.

    The child's weak parent reference and the parent's strong reference to
    the child are set together. If the child already has a parent, it is
    detached from it first, so it never belongs to two parents.

    Raises ValueError if ``child`` is ``parent`` or one of its ancestors.
    """
    parent = as_node(parent)
    child = as_node(child)
    _check_attach(parent, child)

    old_parent = child.parent
    if old_parent is not None:
        detach(old_parent, child)

    child._parent = weakref.ref(parent)
    parent._children.append(child)


def _attach_before(parent: SpatialNode, child: SpatialNode, before: SpatialNode):
    _check_attach(parent, child)
    if before not in parent._children:
        raise ValueError("The node to insert before is not a child.")
    if child is before:
        return

    old_parent = child.parent
    if old_parent is not None:
        detach(old_parent, child)

    # Look up the index after detaching, the child may have been in front of it
    idx = parent._children.index(before)

    child._parent = weakref.ref(parent)
    parent._children.insert(idx, child)


def detach(node, child) -> bool:
    """Remove ``child`` from the children of ``node``.

    Returns True if it was a child, and False (leaving both nodes untouched)
    otherwise. The order of the remaining children is preserved.
    """
    node = as_node(node)
    child = as_node(child)
    for i, c in enumerate(node._children):
        if c == child:
            del node._children[i]
            child._parent = None
            return True
    return False
