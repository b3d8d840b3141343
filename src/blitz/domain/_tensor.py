"""
Tensor interface definitions.

This module defines the domain-level contract for dense tensors consumed by
backend kernels, together with the shape helpers every backend relies on.

A tensor is a fixed shape plus one contiguous buffer of `size` elements of a
single numeric type. The buffer is either row-major (C order) or
column-major (Fortran order); kernels that care about layout (matrix
multiply) read the `row_major` flag, every other kernel treats the buffer as
a flat sequence of `size` elements.

Two-dimensional views used by kernels always take dimension 0 as the
sample/batch axis and fold every remaining dimension into the feature axis:

    num_sample = shape[0]
    dim        = size // shape[0]
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Tuple, runtime_checkable

from .device._device_protocol import DeviceLike

Shape = Tuple[int, ...]


def normalize_shape(shape: Iterable[int]) -> Shape:
    """
    Validate and normalize a shape into a tuple of non-negative ints.

    Parameters
    ----------
    shape : Iterable[int]
        Extents, one per dimension. An int is accepted as a 1-D shape.

    Returns
    -------
    Shape
        The normalized shape.

    Raises
    ------
    ValueError
        If any extent is negative.
    TypeError
        If an extent is not integral.
    """
    if isinstance(shape, int):
        shape = (shape,)
    out = []
    for d in shape:
        if isinstance(d, bool) or int(d) != d:
            raise TypeError(f"shape entries must be integers, got {d!r}")
        if int(d) < 0:
            raise ValueError(f"shape entries must be non-negative, got {tuple(shape)}")
        out.append(int(d))
    return tuple(out)


def shape_size(shape: Shape) -> int:
    """Return the number of elements described by `shape` (1 for a scalar)."""
    n = 1
    for d in shape:
        n *= int(d)
    return n


def sample_dims(shape: Shape) -> Tuple[int, int]:
    """
    Split a shape into `(num_sample, dim)`.

    Dimension 0 is the sample axis; all remaining extents are folded into
    the per-sample feature count, so a 1-D shape `(n,)` is `n` samples of
    one feature each. A scalar shape is one sample of one feature, and an
    empty batch keeps its per-sample feature count.
    """
    if len(shape) == 0:
        return 1, 1
    num_sample = int(shape[0])
    if num_sample == 0:
        return 0, shape_size(shape[1:])
    return num_sample, shape_size(shape) // num_sample


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    Concrete tensors (host NumPy, device CuPy) satisfy this protocol
    structurally. Kernels only rely on the members listed here.
    """

    @property
    def shape(self) -> Shape:
        """Return the tensor's shape."""
        ...

    @property
    def size(self) -> int:
        """Return the total number of elements (`product(shape)`)."""
        ...

    @property
    def row_major(self) -> bool:
        """Return True for row-major (C order) storage."""
        ...

    @property
    def device(self) -> DeviceLike:
        """Return the device on which the buffer resides."""
        ...

    @property
    def dtype(self) -> Any:
        """Return the element type."""
        ...

    @property
    def data(self) -> Any:
        """
        Return the flat, contiguous, backend-native buffer of `size` elements.

        Kernels write through this buffer; its length never changes.
        """
        ...

    def to_numpy(self) -> Any:
        """Return a host copy shaped as `shape` in logical (row-major) order."""
        ...

    def copy_from_numpy(self, arr: Any) -> None:
        """Copy host data of matching shape into this tensor's buffer."""
        ...

    def fill(self, value: float) -> None:
        """Set every element to `value`."""
        ...


__all__ = [
    "Shape",
    normalize_shape.__name__,
    shape_size.__name__,
    sample_dims.__name__,
    ITensor.__name__,
]
