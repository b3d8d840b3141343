"""
Momentum gradient descent.

The update itself is a single backend kernel
(`INumericBackend.gradient_descent_update`); this policy only carries and
validates the hyperparameters, so a layer can apply it to every
(parameter, gradient, velocity) triple it owns.

Update rule
-----------
For weight `w`, gradient `g`, velocity `v` and batch size `B`:

    g <- g / B
    v <- v * momentum_coef - learning_rate * g + decay * w
    w <- w + v

The decay term is added to the velocity, so a positive `decay` pulls the
weights away from zero. Pass a negative value for classical L2 shrinkage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple, Type, TypeVar

from ...domain._backend import INumericBackend
from ...domain._policies import IOptimizer
from ...domain._tensor import ITensor

O = TypeVar("O", bound=type)

OPTIMIZERS: Dict[str, Type[Any]] = {}


def register_optimizer(name: str) -> Callable[[O], O]:
    """Class decorator registering an optimizer under `name`."""

    def decorator(cls: O) -> O:
        if name in OPTIMIZERS:
            raise ValueError(f"Optimizer already registered: {name!r}")
        OPTIMIZERS[name] = cls
        return cls

    return decorator


def available_optimizers() -> Tuple[str, ...]:
    return tuple(sorted(OPTIMIZERS))


def get_optimizer(name: str, **kwargs: Any) -> IOptimizer:
    """
    Construct a registered optimizer.

    Raises
    ------
    ValueError
        If `name` is not registered.
    """
    try:
        cls = OPTIMIZERS[name]
    except KeyError as e:
        raise ValueError(
            f"Unsupported optimizer name: {name!r}. "
            f"Available: {', '.join(available_optimizers())}"
        ) from e
    return cls(**kwargs)


@register_optimizer("gradientdescent")
@dataclass
class Gradientdescent(IOptimizer):
    """
    Momentum gradient descent hyperparameters.

    Parameters
    ----------
    learning_rate : float
        Step size. Must be > 0.
    momentum_coef : float, optional
        Velocity retention in [0, 1]. Defaults to 0.9.
    decay : float, optional
        Coefficient of the weight term added to the velocity. Defaults to 0.0.

    Raises
    ------
    ValueError
        If `learning_rate <= 0` or `momentum_coef` is outside [0, 1].
    """

    learning_rate: float
    momentum_coef: float = 0.9
    decay: float = 0.0

    def __post_init__(self) -> None:
        self.learning_rate = float(self.learning_rate)
        self.momentum_coef = float(self.momentum_coef)
        self.decay = float(self.decay)

        if self.learning_rate <= 0.0:
            raise ValueError(f"learning_rate must be > 0, got {self.learning_rate}")
        if not (0.0 <= self.momentum_coef <= 1.0):
            raise ValueError(
                f"momentum_coef must be in [0, 1], got {self.momentum_coef}"
            )

    def update(
        self,
        backend: INumericBackend,
        weight: ITensor,
        gradient: ITensor,
        velocity: ITensor,
        batch_size: int,
    ) -> None:
        """
        Apply one update in place.

        `gradient` is divided by `batch_size` as part of the update and is
        left in that normalized state.
        """
        backend.gradient_descent_update(
            self.momentum_coef,
            self.learning_rate,
            self.decay,
            batch_size,
            weight,
            gradient,
            velocity,
        )


__all__ = [
    Gradientdescent.__name__,
    get_optimizer.__name__,
    register_optimizer.__name__,
    available_optimizers.__name__,
]
