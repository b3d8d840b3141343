from ._base import KERNELS, SAFE_LOG_MIN, ArrayBackend
from ._cpu import CPUBackend
from ._cuda import CUDABackend
from ._registry import available_backends, get_backend, register_backend

__all__ = [
    ArrayBackend.__name__,
    CPUBackend.__name__,
    CUDABackend.__name__,
    get_backend.__name__,
    register_backend.__name__,
    available_backends.__name__,
    "KERNELS",
    "SAFE_LOG_MIN",
]
