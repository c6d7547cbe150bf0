"""Spatialgfx: the transform and hierarchy core of a 3D scene graph."""

# ruff: noqa: F401, F403

from ._version import __version__, version_info
from . import utils

from .objects import *

from .utils.config import NodeDefaults, set_defaults, get_defaults
from .utils.layers import Layers
from .utils import enums, logger
from .utils.enums import *

# Temp fix for pyinstaller to pick up pylinalg
import pylinalg

del pylinalg
