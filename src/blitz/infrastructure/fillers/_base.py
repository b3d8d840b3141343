"""
Parameter filler registry and dispatch.

A filler overwrites a parameter tensor with its initial values. Fillers are
plain functions registered by name; `Filler` resolves one at construction
time, binds its keyword parameters, and applies it through a backend so the
same policy works for host and device tensors.

Usage example
-------------
Registering a filler:

    @Filler.register_filler("constant")
    def constant(backend, tensor, *, value=0.0):
        backend.constant_distribution(value, tensor)
        return tensor

Applying a filler:

    filler = Filler("gaussian", loc=0.0, scale=0.01)
    filler(backend, weight)
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Tuple, TypeVar

from ...domain._backend import INumericBackend
from ...domain._policies import IFiller
from ...domain._tensor import ITensor

F = TypeVar("F", bound=Callable[..., ITensor])


class Filler(IFiller):
    """
    Registry-backed filler dispatcher.

    Parameters
    ----------
    filler_name : str
        Registered filler name.
    **params
        Keyword parameters bound to every call of the filler
        (e.g. `value`, `low`/`high`, `loc`/`scale`).

    Raises
    ------
    ValueError
        If `filler_name` is not registered.
    """

    FILLERS: ClassVar[Dict[str, Callable[..., ITensor]]] = {}

    def __init__(self, filler_name: str, **params: Any) -> None:
        try:
            self._filler: Callable[..., ITensor] = self.FILLERS[filler_name]
        except KeyError as e:
            available = ", ".join(sorted(self.FILLERS)) or "<none>"
            raise ValueError(
                f"Unsupported filler name: {filler_name!r}. Available: {available}"
            ) from e
        self._name = filler_name
        self._params = dict(params)

    @property
    def name(self) -> str:
        return self._name

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self._params)

    @classmethod
    def register_filler(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[F], F]:
        """
        Decorator to register a filler under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the filler later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Filler name must be a non-empty string")

        def decorator(func: F) -> F:
            if not overwrite and name in cls.FILLERS:
                raise ValueError(f"Filler already registered: {name!r}")
            cls.FILLERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> Tuple[str, ...]:
        """Return registered filler names (sorted)."""
        return tuple(sorted(cls.FILLERS))

    @classmethod
    def get(cls, name: str) -> Callable[..., ITensor]:
        """Get a registered filler function by name."""
        return cls.FILLERS[name]

    def __call__(self, backend: INumericBackend, tensor: ITensor) -> ITensor:
        return self._filler(backend, tensor, **self._params)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in sorted(self._params.items()))
        return f"Filler({self._name!r}{', ' + params if params else ''})"
