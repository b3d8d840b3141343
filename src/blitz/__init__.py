"""
Blitz: a dual host/accelerator numerical backend for feed-forward networks.

Typical use::

    from blitz import Affine, Filler, Gradientdescent, Rectlin, Tensor, get_backend

    backend = get_backend("cpu")
    layer = Affine("fc1", Filler("xavier"), Gradientdescent(0.01), Rectlin(), nout=64,
                   backend=backend)
    layer.init((32, 784))
"""

from .domain import (
    Device,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceType,
    KernelNotImplementedError,
    LayerState,
    ShapeMismatchError,
    UnsupportedKernelError,
)
from .infrastructure import (
    Affine,
    BlitzConfig,
    CPUBackend,
    CUDABackend,
    CrossEntropyBinary,
    CrossEntropyMulti,
    Filler,
    Gradientdescent,
    Layer,
    Logistic,
    ParamLayer,
    RandomState,
    Rectlin,
    Softmax,
    Tensor,
    cuda_available,
    get_activation,
    get_backend,
    get_config,
    get_loss,
    get_optimizer,
    register_backend,
    set_config,
)

__version__ = "0.1.0"

__all__ = [
    "Device",
    "DeviceType",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "KernelNotImplementedError",
    "ShapeMismatchError",
    "UnsupportedKernelError",
    "LayerState",
    "BlitzConfig",
    "get_config",
    "set_config",
    "RandomState",
    "Tensor",
    "cuda_available",
    "CPUBackend",
    "CUDABackend",
    "get_backend",
    "register_backend",
    "Rectlin",
    "Logistic",
    "Softmax",
    "get_activation",
    "CrossEntropyBinary",
    "CrossEntropyMulti",
    "get_loss",
    "Filler",
    "Gradientdescent",
    "get_optimizer",
    "Layer",
    "ParamLayer",
    "Affine",
]
