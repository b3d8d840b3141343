"""
Name-based activation registry.

Activation classes register themselves with `@register_activation(name)` and
are constructed with `get_activation(name, **kwargs)`, which is how layer
configurations refer to them ("rectlin", "logistic", "softmax").
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple, Type, TypeVar

from ...domain._policies import IActivation

A = TypeVar("A", bound=type)

ACTIVATIONS: Dict[str, Type[Any]] = {}


def register_activation(name: str, *, overwrite: bool = False) -> Callable[[A], A]:
    """
    Class decorator registering an activation under `name`.

    Raises
    ------
    ValueError
        If `name` is empty, or already registered and `overwrite` is False.
    """
    if not isinstance(name, str) or not name:
        raise ValueError("Activation name must be a non-empty string")

    def decorator(cls: A) -> A:
        if not overwrite and name in ACTIVATIONS:
            raise ValueError(f"Activation already registered: {name!r}")
        ACTIVATIONS[name] = cls
        return cls

    return decorator


def available_activations() -> Tuple[str, ...]:
    return tuple(sorted(ACTIVATIONS))


def get_activation(name: str, **kwargs: Any) -> IActivation:
    """
    Construct a registered activation.

    Raises
    ------
    ValueError
        If `name` is not registered.
    """
    try:
        cls = ACTIVATIONS[name]
    except KeyError as e:
        available = ", ".join(available_activations()) or "<none>"
        raise ValueError(
            f"Unsupported activation name: {name!r}. Available: {available}"
        ) from e
    return cls(**kwargs)


__all__ = [
    register_activation.__name__,
    available_activations.__name__,
    get_activation.__name__,
    "ACTIVATIONS",
]
