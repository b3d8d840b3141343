from ._affine import Affine
from ._layer import Layer, ParamLayer

__all__ = [
    Layer.__name__,
    ParamLayer.__name__,
    Affine.__name__,
]
