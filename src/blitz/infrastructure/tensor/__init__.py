from ._cupy import cuda_available, load_cupy
from ._tensor import Tensor

__all__ = [
    Tensor.__name__,
    load_cupy.__name__,
    cuda_available.__name__,
]
