"""
Xavier (Glorot) uniform filler.

Draws from ``U[-bound, bound)`` with

    bound = sqrt(6 / (fan_in + fan_out))

Fan values follow the affine weight layout ``(input_dim, nout)``.
"""

import math
from typing import Optional

from ...domain._backend import INumericBackend, IRandomState
from ...domain._tensor import ITensor
from ...domain.utils._fan import calculate_fan_in_and_fan_out
from ._base import Filler


@Filler.register_filler("xavier")
def xavier(
    backend: INumericBackend,
    tensor: ITensor,
    *,
    gain: float = 1.0,
    rng: Optional[IRandomState] = None,
) -> ITensor:
    """
    Apply Xavier uniform initialization in place.

    Parameters
    ----------
    backend : INumericBackend
        Backend owning the tensor's device.
    tensor : ITensor
        Weight tensor, ``(input_dim, nout)``.
    gain : float, optional
        Multiplier applied to the bound. Defaults to 1.0.
    rng : Optional[IRandomState]
        Seed source for a reproducible draw.

    Returns
    -------
    ITensor
        The initialized tensor (same object).
    """
    fan_in, fan_out = calculate_fan_in_and_fan_out(tuple(tensor.shape))
    bound = float(gain) * math.sqrt(6.0 / float(fan_in + fan_out))
    backend.uniform_distribution(-bound, bound, tensor, rng)
    return tensor
