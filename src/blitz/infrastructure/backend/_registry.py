"""
Backend lookup by device kind.

The host backend is always registered; the CUDA backend is registered too
but only constructs successfully when CuPy and a CUDA device are present.
Extra backends can be registered under new device-kind names.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

from ...domain.device._device import Device
from .._config import get_config
from ._base import ArrayBackend
from ._cpu import CPUBackend
from ._cuda import CUDABackend

BackendFactory = Callable[..., ArrayBackend]

_REGISTRY: Dict[str, BackendFactory] = {
    "cpu": lambda dtype, device, **kw: CPUBackend(dtype, **kw),
    "cuda": lambda dtype, device, **kw: CUDABackend(dtype, device=device, **kw),
}


def register_backend(kind: str, factory: BackendFactory) -> None:
    """
    Register a backend factory for a device kind.

    `factory(dtype, device, **kwargs)` must return a backend instance.
    """
    _REGISTRY[str(kind).lower()] = factory


def available_backends() -> List[str]:
    """Names of registered device kinds."""
    return sorted(_REGISTRY)


def get_backend(
    device: Union[str, Device] = "cpu", dtype: Optional[Any] = None, **kwargs: Any
) -> ArrayBackend:
    """
    Return a new backend for `device`.

    Parameters
    ----------
    device : str or Device
        "cpu", "cuda" or "cuda:N". Unregistered kinds are looked up by the
        part before ':'.
    dtype : np.dtype, optional
        Element type. Defaults to `BlitzConfig.dtype`.
    **kwargs
        Forwarded to the backend constructor (`rng`, `debug`, ...).

    Raises
    ------
    KeyError
        If no backend is registered for the device kind.
    DeviceNotSupportedError
        If the CUDA backend is requested without CuPy or a CUDA device.
    """
    if isinstance(device, Device):
        kind = device.type.value
    else:
        kind = str(device).strip().lower().split(":", 1)[0]
    if kind not in _REGISTRY:
        raise KeyError(
            f"Unknown backend: {device}. Available: {available_backends()}."
        )
    if dtype is None:
        dtype = get_config().dtype
    return _REGISTRY[kind](dtype, device, **kwargs)


__all__ = [
    register_backend.__name__,
    available_backends.__name__,
    get_backend.__name__,
]
