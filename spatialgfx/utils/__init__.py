"""
Utility functions for spatialgfx.

* ``config``: the defaults that new nodes are created with.
* ``layers``: the ``Layers`` bitmask.
* ``enums``: the enums, also available from the root namespace.
* ``transform``: matrix helpers used by ``SpatialNode`` and the traversal pass.

"""

import os
import logging

from . import enums  # noqa: F401


logger = logging.getLogger("spatialgfx")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("SPATIALGFX_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid spatialgfx log level: {level}")


_set_log_level()
