"""
CuPy loading for the CUDA execution path.

CuPy is an optional dependency (`pip install blitz[cuda]`). It is imported
lazily so that host-only installations never touch a CUDA driver. A failed
import or a process with no visible device surfaces as
`DeviceNotSupportedError`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from ...domain._errors import DeviceNotSupportedError


@lru_cache(maxsize=1)
def load_cupy() -> Any:
    """
    Import and return the `cupy` module.

    Returns
    -------
    module
        The imported CuPy package.

    Raises
    ------
    DeviceNotSupportedError
        If CuPy is not installed or no CUDA device is available.

    Notes
    -----
    Only successful loads are cached; a failed probe is retried on the next
    call.
    """
    try:
        import cupy  # type: ignore
    except ImportError as e:
        raise DeviceNotSupportedError(
            "load_cupy",
            "cuda",
            "CuPy is not installed. Install with: pip install blitz[cuda]",
        ) from e

    try:
        count = int(cupy.cuda.runtime.getDeviceCount())
    except Exception as e:  # CUDARuntimeError when the driver is missing
        raise DeviceNotSupportedError("load_cupy", "cuda", f"CUDA runtime error: {e}") from e
    if count <= 0:
        raise DeviceNotSupportedError("load_cupy", "cuda", "No CUDA device found.")
    return cupy


def cuda_available() -> bool:
    """Return True if CuPy imports and at least one CUDA device is visible."""
    try:
        load_cupy()
    except DeviceNotSupportedError:
        return False
    return True


__all__ = [
    load_cupy.__name__,
    cuda_available.__name__,
]
