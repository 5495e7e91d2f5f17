"""map_captcha.components
=======================

Immutable value objects shared by the capture systems::

    from map_captcha.components import Fragment, Position, TileBuffer
"""

from .fragment import Fragment
from .position import ORIGIN, Position
from .tile import TileBuffer

__all__ = [
    "Fragment",
    "ORIGIN",
    "Position",
    "TileBuffer",
]
