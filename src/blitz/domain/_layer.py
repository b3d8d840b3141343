"""
Layer lifecycle contract.

A layer moves through a small state machine:

    UNINITIALIZED --init--> INITIALIZED --forward_prop--> FORWARD_PROPAGATED
                                 ^                            |      ^
                                 |                       backward_prop|
                                 |                            v      |
                                 +------- init ------- BACKWARD_PROPAGATED

Forward and backward may alternate any number of times once the layer is
initialized. Calling `init` again with a new input shape re-derives and
reallocates every parameter and buffer.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from ._tensor import ITensor, Shape


class LayerState(Enum):
    """Lifecycle states of a layer."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    FORWARD_PROPAGATED = "forward_propagated"
    BACKWARD_PROPAGATED = "backward_propagated"


@runtime_checkable
class ILayer(Protocol):
    """Structural layer interface used by training drivers."""

    @property
    def name(self) -> str: ...

    @property
    def state(self) -> LayerState: ...

    @property
    def forward_output(self) -> Optional[ITensor]: ...

    @property
    def backward_output(self) -> Optional[ITensor]: ...

    def init(self, input_shape: Shape) -> None: ...

    def forward_prop(self, forward_input: ITensor) -> ITensor: ...

    def backward_prop(self, backward_input: ITensor) -> ITensor: ...


__all__ = [
    LayerState.__name__,
    ILayer.__name__,
]
