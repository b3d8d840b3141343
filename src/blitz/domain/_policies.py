"""
Domain-level policy contracts.

Layers are generic over four pluggable collaborators. Each contract is a
structural `Protocol`; concrete policies live in the infrastructure layer and
are resolved by name through small registries there.

- `IActivation`: forward transform and in-place chain-rule derivative
- `ILoss`: scalar loss and its gradient with respect to the prediction
- `IFiller`: initial values for a parameter tensor
- `IOptimizer`: in-place parameter update from a gradient and a velocity

Every policy receives the backend explicitly, so one policy instance can
serve layers placed on different devices.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._backend import INumericBackend
from ._tensor import ITensor


@runtime_checkable
class IActivation(Protocol):
    """
    Activation contract.

    `derivative` assumes `output` already holds the upstream gradient and
    multiplies it in place by the local derivative evaluated at `input`
    (the forward output cached by the layer).
    """

    def apply(self, backend: INumericBackend, input: ITensor, output: ITensor) -> None: ...

    def derivative(
        self, backend: INumericBackend, input: ITensor, output: ITensor
    ) -> None: ...


@runtime_checkable
class ILoss(Protocol):
    """Loss contract: a host scalar and the gradient written into `output`."""

    def apply(self, backend: INumericBackend, input: ITensor, target: ITensor) -> float: ...

    def derivative(
        self,
        backend: INumericBackend,
        input: ITensor,
        target: ITensor,
        output: ITensor,
    ) -> None: ...


@runtime_checkable
class IFiller(Protocol):
    """Filler contract: overwrite `tensor` with initial values in place."""

    def __call__(self, backend: INumericBackend, tensor: ITensor) -> ITensor: ...


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer contract.

    `update` mutates `weight` (and whatever state tensors the rule keeps,
    such as `velocity`) in place. `gradient` may be rescaled in place.
    """

    def update(
        self,
        backend: INumericBackend,
        weight: ITensor,
        gradient: ITensor,
        velocity: ITensor,
        batch_size: int,
    ) -> None: ...


__all__ = [
    IActivation.__name__,
    ILoss.__name__,
    IFiller.__name__,
    IOptimizer.__name__,
]
