"""
Device descriptors for Blitz.

This module defines the two placements a tensor (and the backend that
operates on it) can have:

- `DeviceType`: the device category (host CPU or CUDA accelerator)
- `Device`: a normalized descriptor parsed from strings such as "cpu" or
  "cuda:0"

Descriptors are plain values. They never allocate memory or touch a driver;
backends decide what a placement means at execution time.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union
import re


class DeviceType(Enum):
    """
    Enumeration of supported device categories.

    Attributes
    ----------
    CPU : DeviceType
        Host processor. Tensors are backed by NumPy buffers.
    CUDA : DeviceType
        NVIDIA accelerator. Tensors are backed by CuPy buffers.
    """

    CPU = "cpu"
    CUDA = "cuda"


class Device:
    """
    Concrete computation device descriptor.

    Parameters
    ----------
    device : str or Device
        Either "cpu", "cuda" (shorthand for "cuda:0") or "cuda:<index>".
        Passing an existing `Device` copies it.

    Raises
    ------
    ValueError
        If the device string does not match a supported format.

    Notes
    -----
    Two descriptors compare equal when their canonical strings match, so
    `Device("cuda") == Device("cuda:0")`.
    """

    __slots__ = ("type", "index")

    _CUDA_PATTERN = re.compile(r"^cuda(?::(\d+))?$")

    def __init__(self, device: Union[str, "Device"] = "cpu") -> None:
        if isinstance(device, Device):
            self.type = device.type
            self.index: Optional[int] = device.index
            return

        if device == "cpu":
            self.type = DeviceType.CPU
            self.index = None
            return

        m = self._CUDA_PATTERN.match(str(device))
        if not m:
            raise ValueError(
                f"Invalid device '{device}'. Expected 'cpu', 'cuda' or 'cuda:<index>'"
            )
        self.type = DeviceType.CUDA
        self.index = int(m.group(1) or 0)

    def __str__(self) -> str:
        return "cpu" if self.type is DeviceType.CPU else f"cuda:{self.index}"

    def __repr__(self) -> str:
        return f"Device({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = Device(other)
            except ValueError:
                return False
        if not isinstance(other, Device):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def is_cpu(self) -> bool:
        """Return True if this descriptor names the host CPU."""
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        """Return True if this descriptor names a CUDA device."""
        return self.type is DeviceType.CUDA


__all__ = [
    DeviceType.__name__,
    Device.__name__,
]
