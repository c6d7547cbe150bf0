from ._base import SpatialNode, as_node
from ._update import update_world_matrices, update_model_view_matrices, view_matrix_from


class Group:
    """A group of nodes.

    A Group is useful when manipulating the scene graph as children can be
    jointly moved/scaled/rotated. It has no visual properties. The group is
    not a node itself but carries one, available as ``group.node``.

    Parameters
    ----------
    visible : bool
        If true, the group and its children are visible.
    name : str
        The name of the group.
    defaults : NodeDefaults | None
        Passed on to the group's node.

    """

    def __init__(self, *, visible=True, name="", defaults=None):
        self._node = SpatialNode(name=name, visible=visible, defaults=defaults)

    def __repr__(self):
        name = self._node.name
        return f"<spatialgfx.{self.__class__.__name__} {name} at {hex(id(self))}>"

    @property
    def node(self) -> SpatialNode:
        """The spatial node of this group."""
        return self._node

    def add(self, *objects, before=None):
        """Add nodes (or objects that have a node) as children. Returns self."""
        self._node.add(*objects, before=before)
        return self

    def remove(self, *objects):
        """Remove nodes (or objects that have a node) from the children."""
        self._node.remove(*objects)


class Scene(Group):
    """Root of the scene graph.

    The scene's node is the root of a tree. ``update()`` runs the traversal
    pass that refreshes the cached matrices of every node in it.

    """

    def update(self, camera=None, force=False):
        """Refresh the world matrices of all nodes in the scene.

        If ``camera`` (a node or an object that has one) is given, the
        model-view and normal matrices are refreshed too, relative to that
        camera. A camera that is not part of the scene has its own tree
        updated as well.
        """
        update_world_matrices(self._node, force=force)
        if camera is not None:
            camera = as_node(camera)
            if camera.get_root() is not self._node:
                update_world_matrices(camera.get_root(), force=force)
            update_model_view_matrices(self._node, view_matrix_from(camera))
