import spatialgfx


def test_version():
    assert isinstance(spatialgfx.__version__, str)
    assert spatialgfx.version_info == tuple(
        int(i) for i in spatialgfx.__version__.split(".")
    )
    assert len(spatialgfx.version_info) == 3


def test_namespace():
    for name in [
        "SpatialNode",
        "Group",
        "Scene",
        "attach",
        "detach",
        "update_world_matrices",
        "MatrixUpdateMode",
        "Layers",
        "NodeDefaults",
        "logger",
    ]:
        assert hasattr(spatialgfx, name), name
