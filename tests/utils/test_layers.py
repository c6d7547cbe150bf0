import pytest

from spatialgfx import Layers


def test_default_layer():
    layers = Layers()
    assert layers.mask == 1
    assert layers.is_enabled(0)
    assert not layers.is_enabled(1)


def test_set_enable_disable():
    layers = Layers()
    layers.set(3)
    assert layers.mask == 0b1000

    layers.enable(0)
    assert layers.mask == 0b1001

    layers.toggle(3)
    assert layers.mask == 0b0001
    layers.toggle(3)
    assert layers.mask == 0b1001

    layers.disable(0)
    assert layers.mask == 0b1000

    layers.enable_all()
    assert layers.mask == 2**32 - 1
    assert layers.is_enabled(31)

    layers.disable_all()
    assert layers.mask == 0


def test_test():
    a = Layers()
    b = Layers()
    assert a.test(b)

    b.set(5)
    assert not a.test(b)
    a.enable(5)
    assert a.test(b)


def test_invalid_channel():
    layers = Layers()
    with pytest.raises(ValueError):
        layers.set(32)
    with pytest.raises(ValueError):
        layers.enable(-1)


def test_copy_and_equality():
    a = Layers(0b101)
    b = a.copy()
    assert a == b
    assert a is not b
    b.disable(0)
    assert a != b
    assert a.mask == 0b101
