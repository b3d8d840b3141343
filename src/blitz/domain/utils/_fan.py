"""
Fan-in / fan-out helpers for parameter fillers.

Affine weights are stored as `(input_dim, nout)`: rows index the inputs
feeding a unit, columns index the units. Fan values are therefore read in
that order, which is the transpose of the `(out, in)` convention used by
frameworks that multiply `x @ W^T`.
"""

from __future__ import annotations

from typing import Tuple


def calculate_fan_in_and_fan_out(shape: Tuple[int, ...]) -> Tuple[int, int]:
    """
    Compute `(fan_in, fan_out)` for a parameter shape.

    Parameters
    ----------
    shape:
        Parameter shape. Scalars count as `(1, 1)`, vectors use their length
        for both values, matrices are `(input_dim, nout)`. Higher ranks fold
        every dimension after the first into the fan-out.

    Returns
    -------
    tuple[int, int]
        Fan-in and fan-out, each at least 1.
    """
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        n = max(1, int(shape[0]))
        return n, n

    fan_in = int(shape[0])
    fan_out = 1
    for d in shape[1:]:
        fan_out *= int(d)
    return max(1, fan_in), max(1, fan_out)


__all__ = [calculate_fan_in_and_fan_out.__name__]
