"""A set of 32 layer channels, stored as a bitmask."""


N_LAYERS = 32
_ALL = (1 << N_LAYERS) - 1


def _bit(channel):
    channel = int(channel)
    if not 0 <= channel < N_LAYERS:
        raise ValueError(f"Layer channel must be in 0..{N_LAYERS - 1}, not {channel}")
    return 1 << channel


class Layers:
    """The layers a node is a member of.

    A node is a member of layer 0 by default. What the layers mean (e.g.
    which camera renders which layer) is up to the renderer.
    """

    __slots__ = ["_mask"]

    def __init__(self, mask=1):
        self.mask = mask

    def __repr__(self):
        return f"<Layers {self._mask:#010x}>"

    def __eq__(self, other):
        if not isinstance(other, Layers):
            return NotImplemented
        return self._mask == other._mask

    __hash__ = None

    @property
    def mask(self) -> int:
        """The bitmask of enabled channels."""
        return self._mask

    @mask.setter
    def mask(self, value):
        self._mask = int(value) & _ALL

    def set(self, channel):
        """Make membership exclusive to the given channel."""
        self._mask = _bit(channel)

    def enable(self, channel):
        self._mask |= _bit(channel)

    def enable_all(self):
        self._mask = _ALL

    def toggle(self, channel):
        self._mask ^= _bit(channel)

    def disable(self, channel):
        self._mask &= ~_bit(channel)

    def disable_all(self):
        self._mask = 0

    def test(self, other) -> bool:
        """Whether these layers share at least one channel with ``other``."""
        return (self._mask & other.mask) != 0

    def is_enabled(self, channel) -> bool:
        return (self._mask & _bit(channel)) != 0

    def copy(self):
        return Layers(self._mask)
