"""
The enums used in spatialgfx. The enums are all available from the root
``spatialgfx`` namespace.

* ``MatrixUpdateMode``

"""

import enum


__all__ = [
    "MatrixUpdateMode",
]


class Enum(str, enum.Enum):
    """Enum base class for spatialgfx. Members compare equal to their name."""

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.value}>"


class MatrixUpdateMode(Enum):
    """Enum that defines when the traversal pass recomputes a node's local matrix
    from its position, orientation and scale."""

    always = "always"  #: recompute on every pass.
    never = "never"  #: the local matrix is authored directly and left alone.
    once = "once"  #: recompute on the next pass, then switch to ``never``.
