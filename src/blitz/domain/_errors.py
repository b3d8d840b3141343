"""
Error taxonomy for Blitz kernels and layers.

Kernel preconditions (matching element counts, agreeing matrix dimensions,
tensors placed on the backend's device) indicate caller programming errors.
They are raised as typed exceptions and never caught inside the library, so
a violated precondition still stops the computation at the offending call.

Kernels that are declared by the backend interface but whose numerical
formulas were never fixed raise `KernelNotImplementedError` instead of
silently doing nothing.
"""

from __future__ import annotations

from typing import Sequence


class ShapeMismatchError(ValueError):
    """
    Raised when tensor sizes or matrix dimensions violate a kernel contract.

    Attributes
    ----------
    op : str
        Name of the kernel (or layer step) that detected the mismatch.
    """

    def __init__(self, op: str, detail: str) -> None:
        super().__init__(f"{op}: {detail}")
        self.op = op

    @classmethod
    def sizes(cls, op: str, *sizes: int) -> "ShapeMismatchError":
        """Build the error for element counts that were required to match."""
        listed = " vs ".join(str(int(s)) for s in sizes)
        return cls(op, f"element counts must match, got {listed}")

    @classmethod
    def shapes(
        cls, op: str, expected: Sequence[int], actual: Sequence[int]
    ) -> "ShapeMismatchError":
        """Build the error for a shape that differs from the expected one."""
        return cls(op, f"expected shape {tuple(expected)}, got {tuple(actual)}")


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when an operation is requested on a device that cannot run it.

    Typical causes are requesting the CUDA backend while CuPy is not
    installed, or no CUDA device is visible to the process.

    Attributes
    ----------
    op : str
        The operation that was attempted.
    device : str
        The device identifier (e.g. "cuda:0").
    """

    def __init__(self, op: str, device: str, reason: str = "") -> None:
        msg = f"{op} is not supported on device '{device}'."
        if reason:
            msg = f"{msg} {reason}"
        super().__init__(msg)
        self.op = op
        self.device = device


class DeviceMismatchError(RuntimeError):
    """
    Raised when a tensor handed to a backend lives on another device.

    Backends never move data implicitly; callers transfer tensors first.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b


class UnsupportedKernelError(ValueError):
    """
    Raised when a matrix multiply names an unknown kernel implementation.

    Attributes
    ----------
    kernel : str
        The rejected kernel name.
    available : tuple[str, ...]
        Kernel names the backend recognizes.
    """

    def __init__(self, kernel: str, available: Sequence[str]) -> None:
        self.kernel = kernel
        self.available = tuple(available)
        super().__init__(
            f"Unsupported matrix multiply kernel {kernel!r}. "
            f"Available: {', '.join(self.available)}"
        )


class KernelNotImplementedError(NotImplementedError):
    """
    Raised by kernels that are part of the backend interface but have no
    agreed numerical definition yet.
    """

    def __init__(self, op: str, backend: str) -> None:
        super().__init__(f"{op} is not implemented by {backend}.")
        self.op = op
        self.backend = backend


__all__ = [
    ShapeMismatchError.__name__,
    DeviceNotSupportedError.__name__,
    DeviceMismatchError.__name__,
    UnsupportedKernelError.__name__,
    KernelNotImplementedError.__name__,
]
