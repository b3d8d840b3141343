"""
Activation policies.

Each activation forwards to the backend's kernels:

- `apply(backend, input, output)` writes the activated values,
- `derivative(backend, input, output)` multiplies the upstream gradient in
  `output` by the local derivative, evaluated against `input`.

What `input` means for `derivative` differs per activation. `Rectlin`
evaluates its derivative against the pre-activation values, while
`Logistic` and `Softmax` evaluate theirs against their own forward output.
`input_kind` tells a layer which buffer to hand over.

Notes
-----
`Logistic` and `Softmax` default to `short_cut=True`: paired with a
cross-entropy loss whose derivative is already `y - t`, their derivative is
an identity and `derivative` leaves the gradient untouched.
"""

from __future__ import annotations

from typing import Any, Dict

from ...domain._backend import INumericBackend
from ...domain._policies import IActivation
from ...domain._tensor import ITensor
from ._registry import register_activation

PRE_ACTIVATION = "pre_activation"
ACTIVATED = "activated"


@register_activation("rectlin")
class Rectlin(IActivation):
    """
    Leaky rectified linear unit.

        y = max(x, 0) + slope * min(x, 0)

    Parameters
    ----------
    slope : float, optional
        Negative-side slope. Defaults to 0.0 (plain ReLU).
    """

    input_kind = PRE_ACTIVATION

    def __init__(self, slope: float = 0.0) -> None:
        self.slope = float(slope)

    def apply(self, backend: INumericBackend, input: ITensor, output: ITensor) -> None:
        backend.rectlin_apply(input, self.slope, output)

    def derivative(
        self, backend: INumericBackend, input: ITensor, output: ITensor
    ) -> None:
        backend.rectlin_derivative(input, self.slope, output)

    def get_config(self) -> Dict[str, Any]:
        return {"slope": self.slope}

    def __repr__(self) -> str:
        return f"Rectlin(slope={self.slope})"


@register_activation("logistic")
class Logistic(IActivation):
    """
    Logistic sigmoid, `y = 1 / (1 + exp(-x))`.

    Parameters
    ----------
    short_cut : bool, optional
        If True (default) the derivative is folded into the loss derivative.
    """

    input_kind = ACTIVATED

    def __init__(self, short_cut: bool = True) -> None:
        self.short_cut = bool(short_cut)

    def apply(self, backend: INumericBackend, input: ITensor, output: ITensor) -> None:
        backend.logistic_apply(input, output)

    def derivative(
        self, backend: INumericBackend, input: ITensor, output: ITensor
    ) -> None:
        backend.logistic_derivative(input, output, self.short_cut)

    def get_config(self) -> Dict[str, Any]:
        return {"short_cut": self.short_cut}

    def __repr__(self) -> str:
        return f"Logistic(short_cut={self.short_cut})"


@register_activation("softmax")
class Softmax(IActivation):
    """
    Row-wise softmax over the `(num_sample, dim)` view.

    Parameters
    ----------
    short_cut : bool, optional
        If True (default) the derivative is folded into the loss derivative.
    """

    input_kind = ACTIVATED

    def __init__(self, short_cut: bool = True) -> None:
        self.short_cut = bool(short_cut)

    def apply(self, backend: INumericBackend, input: ITensor, output: ITensor) -> None:
        backend.softmax_apply(input, output)

    def derivative(
        self, backend: INumericBackend, input: ITensor, output: ITensor
    ) -> None:
        backend.softmax_derivative(input, output, self.short_cut)

    def get_config(self) -> Dict[str, Any]:
        return {"short_cut": self.short_cut}

    def __repr__(self) -> str:
        return f"Softmax(short_cut={self.short_cut})"


__all__ = [
    Rectlin.__name__,
    Logistic.__name__,
    Softmax.__name__,
    "PRE_ACTIVATION",
    "ACTIVATED",
]
