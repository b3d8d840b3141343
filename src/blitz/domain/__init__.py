"""
Backend-agnostic contracts for Blitz.

Nothing in this package imports NumPy, CuPy or any concrete implementation.
"""

from ._backend import INumericBackend, IRandomState, Scalar
from ._errors import (
    DeviceMismatchError,
    DeviceNotSupportedError,
    KernelNotImplementedError,
    ShapeMismatchError,
    UnsupportedKernelError,
)
from ._layer import ILayer, LayerState
from ._policies import IActivation, IFiller, ILoss, IOptimizer
from ._tensor import ITensor, Shape, normalize_shape, sample_dims, shape_size
from .device import Device, DeviceLike, DeviceType

__all__ = [
    "INumericBackend",
    "IRandomState",
    "Scalar",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "KernelNotImplementedError",
    "ShapeMismatchError",
    "UnsupportedKernelError",
    "ILayer",
    "LayerState",
    "IActivation",
    "IFiller",
    "ILoss",
    "IOptimizer",
    "ITensor",
    "Shape",
    "normalize_shape",
    "sample_dims",
    "shape_size",
    "Device",
    "DeviceLike",
    "DeviceType",
]
