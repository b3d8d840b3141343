"""
Structural device contract.

`DeviceLike` lets tensors, backends and layers accept any object that
behaves like a `Device` without importing the concrete class, so the domain
layer never depends on a particular descriptor implementation.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class DeviceLike(Protocol):
    """
    Duck-typed device contract.

    Any object providing these members can be used wherever a device
    descriptor is expected.
    """

    type: object
    index: Optional[int]

    def is_cpu(self) -> bool: ...
    def is_cuda(self) -> bool: ...
    def __str__(self) -> str: ...
