"""
Random fillers drawing through the backend distribution kernels.

Provided fillers
----------------
- ``uniform``: i.i.d. draws from ``U[low, high)``.
- ``gaussian``: i.i.d. draws from ``N(loc, scale^2)``.

Both accept an optional ``rng`` (an `IRandomState`) to make the draw
reproducible; otherwise the backend's own seed source is used.
"""

from typing import Optional

from ...domain._backend import INumericBackend, IRandomState
from ...domain._tensor import ITensor
from ._base import Filler


@Filler.register_filler("uniform")
def uniform(
    backend: INumericBackend,
    tensor: ITensor,
    *,
    low: float = -1.0,
    high: float = 1.0,
    rng: Optional[IRandomState] = None,
) -> ITensor:
    """
    Fill `tensor` with draws from ``U[low, high)``.

    Raises
    ------
    ValueError
        If ``low > high``.
    """
    if low > high:
        raise ValueError(f"uniform filler requires low <= high, got {low} > {high}")
    backend.uniform_distribution(low, high, tensor, rng)
    return tensor


@Filler.register_filler("gaussian")
def gaussian(
    backend: INumericBackend,
    tensor: ITensor,
    *,
    loc: float = 0.0,
    scale: float = 1.0,
    rng: Optional[IRandomState] = None,
) -> ITensor:
    """
    Fill `tensor` with draws from ``N(loc, scale^2)``.

    Raises
    ------
    ValueError
        If ``scale < 0``.
    """
    if scale < 0:
        raise ValueError(f"gaussian filler requires scale >= 0, got {scale}")
    backend.normal_distribution(loc, scale, tensor, rng)
    return tensor
