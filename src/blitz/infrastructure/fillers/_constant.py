"""
Constant filler.

Used for biases (zeros) and deterministic test setups.
"""

from ...domain._backend import INumericBackend
from ...domain._tensor import ITensor
from ._base import Filler


@Filler.register_filler("constant")
def constant(backend: INumericBackend, tensor: ITensor, *, value: float = 0.0) -> ITensor:
    """
    Fill every element of `tensor` with `value`.

    Parameters
    ----------
    backend : INumericBackend
        Backend owning the tensor's device.
    tensor : ITensor
        The tensor to fill in place.
    value : float, optional
        Fill value. Defaults to 0.0.

    Returns
    -------
    ITensor
        The filled tensor (same object).
    """
    backend.constant_distribution(value, tensor)
    return tensor
