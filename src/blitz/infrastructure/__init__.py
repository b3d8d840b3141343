"""
Concrete implementations: tensors, backends, policies and layers.
"""

from ._config import BlitzConfig, get_config, set_config
from ._random import RandomState
from .activations import Logistic, Rectlin, Softmax, get_activation
from .backend import CPUBackend, CUDABackend, get_backend, register_backend
from .fillers import Filler
from .layers import Affine, Layer, ParamLayer
from .losses import CrossEntropyBinary, CrossEntropyMulti, get_loss
from .optimizers import Gradientdescent, get_optimizer
from .tensor import Tensor, cuda_available

__all__ = [
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
