import numpy as np
import numpy.testing as npt
import pylinalg as la

from spatialgfx.utils.transform import (
    cached,
    decompose,
    inverse_or_identity,
    normal_matrix_from,
    rotation_from_matrix,
)


def test_inverse_or_identity():
    m = la.mat_compose((1, 2, 3), la.quat_from_axis_angle((0, 0, 1), 0.5), (2, 1, 3))
    npt.assert_allclose(inverse_or_identity(m) @ m, np.eye(4), atol=1e-12)

    singular = np.zeros((4, 4))
    npt.assert_array_equal(inverse_or_identity(singular), np.eye(4))

    npt.assert_array_equal(inverse_or_identity(np.zeros((3, 3))), np.eye(3))
    npt.assert_allclose(inverse_or_identity(np.eye(3) * 4), np.eye(3) / 4)


def test_inverse_of_small_scale():
    # A tiny determinant is still invertible
    m = la.mat_compose((1, 0, 0), (0, 0, 0, 1), (5e-8, 5e-8, 5e-8))
    inverse = inverse_or_identity(m)
    npt.assert_allclose(inverse @ m, np.eye(4), atol=1e-9)
    npt.assert_allclose(inverse_or_identity(m[:3, :3]), np.eye(3) / 5e-8)


def test_inverse_of_singular_is_logged(caplog):
    with caplog.at_level("DEBUG", logger="spatialgfx"):
        inverse_or_identity(np.zeros((4, 4)))
    assert "Singular" in caplog.text


def test_inverse_of_non_finite():
    m = np.eye(4)
    m[0, 0] = np.inf
    npt.assert_array_equal(inverse_or_identity(m), np.eye(4))


def test_normal_matrix_from():
    m = la.mat_compose((5, 5, 5), la.quat_from_axis_angle((1, 0, 0), 0.3), (1, 2, 4))
    normal = normal_matrix_from(m)
    expected = np.linalg.inv(m[:3, :3]).T
    npt.assert_allclose(normal, expected)

    # Pure rotation: normals rotate like vectors
    rot = la.mat_from_quat(la.quat_from_axis_angle((0, 1, 0), 1.0))
    npt.assert_allclose(normal_matrix_from(rot), rot[:3, :3], atol=1e-12)


def test_decompose():
    q = la.quat_from_axis_angle((0, 1, 0), 0.25)
    m = la.mat_compose((1, 2, 3), q, (2, 3, 4))
    position, orientation, scale = decompose(m)
    npt.assert_allclose(position, (1, 2, 3))
    npt.assert_allclose(scale, (2, 3, 4))
    npt.assert_allclose(la.mat_compose(position, orientation, scale), m, atol=1e-12)


def test_rotation_from_matrix():
    q = la.quat_from_axis_angle((0, 0, 1), 0.75)
    m = la.mat_from_quat(q)
    npt.assert_allclose(rotation_from_matrix(m), q, atol=1e-12)
    npt.assert_allclose(rotation_from_matrix(m[:3, :3]), q, atol=1e-12)


def test_cached():
    class Foo:
        def __init__(self):
            self.last_modified = 0
            self.calls = 0

        @cached
        def value(self):
            self.calls += 1
            return self.last_modified * 10

    foo = Foo()
    assert foo.value == 0
    assert foo.value == 0
    assert foo.calls == 1

    foo.last_modified += 1
    assert foo.value == 10
    assert foo.calls == 2
    assert isinstance(Foo.value, cached)
