"""
Concrete Tensor implementation (NumPy host buffers, CuPy device buffers).

A `Tensor` owns exactly one flat, contiguous buffer of `size` elements and a
fixed shape. The buffer is a 1-D `numpy.ndarray` on the CPU and a 1-D
`cupy.ndarray` on a CUDA device. Backends write through `Tensor.data`
directly; the buffer is never reallocated or resized, so a shape change
always means constructing a new Tensor.

Storage layout
--------------
`row_major=True` stores elements in C order, `row_major=False` in Fortran
order. Host interop (`to_numpy`, `copy_from_numpy`, `from_numpy`) always
speaks logical, shape-indexed arrays and converts to/from the storage order.

Design notes
------------
- Tensors carry no autograd state; gradients are explicit tensors owned by
  layers.
- Device placement is fixed at construction. There is no implicit transfer;
  use `to(device)` to obtain a copy on another device.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._tensor import ITensor, Shape, normalize_shape, shape_size
from ...domain.device._device import Device
from ._cupy import load_cupy

DeviceSpec = Union[str, Device]


def _resolve_dtype(dtype: Any) -> np.dtype:
    dt = np.dtype(dtype)
    if dt not in (np.float32, np.float64):
        raise TypeError(f"Tensor supports float32/float64 only, got {dt}")
    return dt


class Tensor(ITensor):
    """
    Dense tensor with a fixed shape and one owned buffer.

    Parameters
    ----------
    shape : Iterable[int]
        Tensor shape. Every extent must be non-negative.
    device : str or Device, optional
        Placement of the buffer. Defaults to "cpu".
    dtype : np.dtype, optional
        Element type, float32 or float64. Defaults to float32.
    row_major : bool, optional
        Storage order flag. Defaults to True (C order).
    zero : bool, optional
        If True (default) the buffer is zero-initialized, otherwise its
        contents are unspecified.

    Raises
    ------
    TypeError
        If `dtype` is not float32/float64.
    DeviceNotSupportedError
        If a CUDA placement is requested and CuPy / a device is unavailable.
    """

    __slots__ = ("_shape", "_size", "_device", "_dtype", "_row_major", "_data")

    def __init__(
        self,
        shape: Iterable[int],
        device: Optional[DeviceSpec] = None,
        *,
        dtype: Any = np.float32,
        row_major: bool = True,
        zero: bool = True,
    ) -> None:
        self._shape: Shape = normalize_shape(shape)
        self._size = shape_size(self._shape)
        self._device = Device(device if device is not None else "cpu")
        self._dtype = _resolve_dtype(dtype)
        self._row_major = bool(row_major)

        xp = self.xp
        if self._device.is_cuda():
            with xp.cuda.Device(self._device.index):
                alloc = xp.zeros if zero else xp.empty
                self._data = alloc((self._size,), dtype=self._dtype)
        else:
            alloc = np.zeros if zero else np.empty
            self._data = alloc((self._size,), dtype=self._dtype)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_numpy(
        cls,
        arr: Any,
        device: Optional[DeviceSpec] = None,
        *,
        dtype: Any = None,
        row_major: bool = True,
    ) -> "Tensor":
        """
        Create a tensor holding a copy of `arr`.

        Parameters
        ----------
        arr : array-like
            Logical contents. Its shape becomes the tensor shape.
        device : str or Device, optional
            Target placement. Defaults to "cpu".
        dtype : np.dtype, optional
            Element type. Defaults to `arr.dtype` when it is float32/float64,
            float32 otherwise.
        row_major : bool, optional
            Storage order of the new tensor.
        """
        a = np.asarray(arr)
        if dtype is None:
            dtype = a.dtype if a.dtype in (np.float32, np.float64) else np.float32
        t = cls(a.shape, device, dtype=dtype, row_major=row_major, zero=False)
        t.copy_from_numpy(a)
        return t

    @classmethod
    def zeros_like(cls, other: "Tensor") -> "Tensor":
        """Zero tensor with the same shape, device, dtype and layout as `other`."""
        return cls(
            other.shape, other.device, dtype=other.dtype, row_major=other.row_major
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def size(self) -> int:
        return self._size

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def device(self) -> Device:
        return self._device

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def row_major(self) -> bool:
        return self._row_major

    @property
    def data(self) -> Any:
        """Flat backend-native buffer (`numpy.ndarray` or `cupy.ndarray`)."""
        return self._data

    @property
    def xp(self) -> Any:
        """Array module that owns the buffer (`numpy` or `cupy`)."""
        if self._device.is_cuda():
            return load_cupy()
        return np

    @property
    def _order(self) -> str:
        return "C" if self._row_major else "F"

    # ------------------------------------------------------------------
    # Host interop
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a host copy of the contents shaped as `shape`.

        Notes
        -----
        On CUDA this copies device memory to the host, which synchronizes
        with all kernels previously issued on the current stream.
        """
        host = self._data
        if self._device.is_cuda():
            host = self.xp.asnumpy(host)
        return np.array(host.reshape(self._shape, order=self._order), copy=True)

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy host data into this tensor's buffer.

        Parameters
        ----------
        arr : array-like
            Logical contents with exactly this tensor's shape.

        Raises
        ------
        ShapeMismatchError
            If `arr.shape` differs from `self.shape`.
        """
        a = np.asarray(arr)
        if tuple(a.shape) != self._shape:
            raise ShapeMismatchError.shapes("copy_from_numpy", self._shape, a.shape)
        flat = np.asarray(a, dtype=self._dtype).ravel(order=self._order)
        if self._device.is_cuda():
            with self.xp.cuda.Device(self._device.index):
                self._data[...] = self.xp.asarray(flat)
        else:
            self._data[...] = flat

    def copy_from(self, other: "Tensor") -> None:
        """
        Copy another tensor's contents into this one (same device).

        Raises
        ------
        ShapeMismatchError
            If the shapes differ.
        """
        if other.shape != self._shape:
            raise ShapeMismatchError.shapes("copy_from", self._shape, other.shape)
        if other.device != self._device:
            self.copy_from_numpy(other.to_numpy())
            return
        if other.row_major == self._row_major:
            self._data[...] = other.data
        else:
            logical = other.data.reshape(self._shape, order=other._order)
            self._data[...] = logical.ravel(order=self._order)

    def fill(self, value: float) -> None:
        self._data.fill(self._dtype.type(value))

    def clone(self) -> "Tensor":
        """Return a deep copy on the same device."""
        out = Tensor(
            self._shape,
            self._device,
            dtype=self._dtype,
            row_major=self._row_major,
            zero=False,
        )
        out._data[...] = self._data
        return out

    def to(self, device: DeviceSpec) -> "Tensor":
        """Return a copy placed on `device` (self when already there)."""
        target = Device(device)
        if target == self._device:
            return self
        out = Tensor(
            self._shape, target, dtype=self._dtype, row_major=self._row_major, zero=False
        )
        out.copy_from_numpy(self.to_numpy())
        return out

    def __repr__(self) -> str:
        layout = "row_major" if self._row_major else "col_major"
        return (
            f"Tensor(shape={self._shape}, device={self._device}, "
            f"dtype={self._dtype}, {layout})"
        )


__all__ = [Tensor.__name__]
