"""
Loss policies.

Losses return a host scalar from `apply` and write the gradient with respect
to the prediction into `output` in `derivative`. Both cross-entropy variants
produce the short-cut gradient `input - target`, which is why the logistic
and softmax activations default to an identity derivative.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple, Type, TypeVar

from ...domain._backend import INumericBackend
from ...domain._policies import ILoss
from ...domain._tensor import ITensor

L = TypeVar("L", bound=type)

LOSSES: Dict[str, Type[Any]] = {}


def register_loss(name: str) -> Callable[[L], L]:
    """Class decorator registering a loss under `name`."""

    def decorator(cls: L) -> L:
        if name in LOSSES:
            raise ValueError(f"Loss already registered: {name!r}")
        LOSSES[name] = cls
        return cls

    return decorator


def available_losses() -> Tuple[str, ...]:
    return tuple(sorted(LOSSES))


def get_loss(name: str, **kwargs: Any) -> ILoss:
    """
    Construct a registered loss.

    Raises
    ------
    ValueError
        If `name` is not registered.
    """
    try:
        cls = LOSSES[name]
    except KeyError as e:
        raise ValueError(
            f"Unsupported loss name: {name!r}. Available: {', '.join(available_losses())}"
        ) from e
    return cls(**kwargs)


@register_loss("cross_entropy_binary")
class CrossEntropyBinary(ILoss):
    """
    Binary cross-entropy for logistic outputs.

    `apply` returns `sum(-log(x) t - log(1 - x)(1 - t)) / batch_size`.
    """

    def apply(self, backend: INumericBackend, input: ITensor, target: ITensor) -> float:
        return backend.cross_entropy_binary_apply(input, target)

    def derivative(
        self,
        backend: INumericBackend,
        input: ITensor,
        target: ITensor,
        output: ITensor,
    ) -> None:
        backend.cross_entropy_binary_derivative(input, target, output)


@register_loss("cross_entropy_multi")
class CrossEntropyMulti(ILoss):
    """
    Multi-class cross-entropy for softmax outputs.

    `apply` returns `sum(log(x) t) / batch_size` (not negated).
    """

    def apply(self, backend: INumericBackend, input: ITensor, target: ITensor) -> float:
        return backend.cross_entropy_multi_apply(input, target)

    def derivative(
        self,
        backend: INumericBackend,
        input: ITensor,
        target: ITensor,
        output: ITensor,
    ) -> None:
        backend.cross_entropy_multi_derivative(input, target, output)


__all__ = [
    CrossEntropyBinary.__name__,
    CrossEntropyMulti.__name__,
    get_loss.__name__,
    register_loss.__name__,
    available_losses.__name__,
]
