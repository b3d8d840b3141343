"""
Parameter filler public API.

Importing this package registers the built-in fillers (``constant``,
``uniform``, ``gaussian``, ``xavier``) with the `Filler` registry.
"""

from ._constant import *
from ._random import *
from ._xavier import *
from ._base import Filler

__all__ = [
    Filler.__name__,
]
