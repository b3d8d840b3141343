"""
Numeric backend contract.

A backend is a stateless collection of kernels bound to one device kind and
one element type. Every kernel borrows its tensors for the duration of the
call only: it reads the inputs and writes results into a caller-supplied
output tensor (or returns a host scalar for reductions). Backends keep no
reference to any tensor afterwards.

Two concrete families satisfy this protocol:

- a host implementation backed by NumPy, and
- an accelerator implementation backed by CuPy.

Layers receive a backend by injection and never branch on the device kind
themselves.

Kernel conventions
------------------
- Elementwise kernels require equal element counts on every tensor they
  touch; shapes may differ as long as sizes agree.
- Row-wise kernels view a tensor as `(num_sample, dim)` where
  `num_sample = shape[0]` and `dim = size // shape[0]`.
- Argument order follows "inputs, hyperparameters, output".
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Union, runtime_checkable

from ._tensor import ITensor, Shape
from .device._device_protocol import DeviceLike

Scalar = Union[int, float]


@runtime_checkable
class IRandomState(Protocol):
    """Source of successive seeds for the distribution kernels."""

    def next_seed(self) -> int: ...


@runtime_checkable
class INumericBackend(Protocol):
    """
    Backend interface.

    Notes
    -----
    Kernels listed under "declared" raise `KernelNotImplementedError`.
    """

    # ------------------------------------------------------------------
    # Identity and allocation
    # ------------------------------------------------------------------
    @property
    def device(self) -> DeviceLike: ...

    @property
    def dtype(self) -> Any: ...

    def empty(self, shape: Shape, *, row_major: bool = True) -> ITensor: ...

    def zeros(self, shape: Shape, *, row_major: bool = True) -> ITensor: ...

    def synchronize(self) -> None: ...

    # ------------------------------------------------------------------
    # Activations
    # ------------------------------------------------------------------
    def rectlin_apply(self, input: ITensor, slope: Scalar, output: ITensor) -> None: ...

    def rectlin_derivative(
        self, input: ITensor, slope: Scalar, output: ITensor
    ) -> None: ...

    def logistic_apply(self, input: ITensor, output: ITensor) -> None: ...

    def logistic_derivative(
        self, input: ITensor, output: ITensor, short_cut: bool = True
    ) -> None: ...

    def softmax_apply(self, input: ITensor, output: ITensor) -> None: ...

    def softmax_derivative(
        self, input: ITensor, output: ITensor, short_cut: bool = True
    ) -> None: ...

    # ------------------------------------------------------------------
    # Losses
    # ------------------------------------------------------------------
    def cross_entropy_binary_apply(self, input: ITensor, target: ITensor) -> float: ...

    def cross_entropy_binary_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None: ...

    def cross_entropy_multi_apply(self, input: ITensor, target: ITensor) -> float: ...

    def cross_entropy_multi_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None: ...

    # ------------------------------------------------------------------
    # Bias, optimizer, matrix multiply
    # ------------------------------------------------------------------
    def bias_forward(self, input: ITensor, bias: ITensor, output: ITensor) -> None: ...

    def bias_backward_update(self, input: ITensor, update: ITensor) -> None: ...

    def gradient_descent_update(
        self,
        momentum_coef: Scalar,
        learning_rate: Scalar,
        decay: Scalar,
        batch_size: int,
        weight: ITensor,
        gradient: ITensor,
        velocity: ITensor,
    ) -> None: ...

    def matrix_dot(
        self,
        left: ITensor,
        right: ITensor,
        transa: bool,
        transb: bool,
        alpha: Scalar,
        beta: Scalar,
        output: ITensor,
        kernel: str = "blas",
    ) -> None: ...

    # ------------------------------------------------------------------
    # Elementwise arithmetic and reductions
    # ------------------------------------------------------------------
    def add(self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor) -> None: ...

    def minus(
        self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor
    ) -> None: ...

    def multiply(
        self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor
    ) -> None: ...

    def maximum(
        self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor
    ) -> None: ...

    def sum(self, input: ITensor) -> float: ...

    # ------------------------------------------------------------------
    # Random and constant fills
    # ------------------------------------------------------------------
    def constant_distribution(self, value: Scalar, output: ITensor) -> None: ...

    def uniform_distribution(
        self,
        low: Scalar,
        high: Scalar,
        output: ITensor,
        rng: Optional[IRandomState] = None,
    ) -> None: ...

    def normal_distribution(
        self,
        loc: Scalar,
        scale: Scalar,
        output: ITensor,
        rng: Optional[IRandomState] = None,
    ) -> None: ...

    def make_binary_mask(
        self,
        low: Scalar,
        high: Scalar,
        keep: Scalar,
        output: ITensor,
        rng: Optional[IRandomState] = None,
    ) -> None: ...

    def host_copy_to(self, source: Any, output: ITensor) -> None: ...

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def evaluate_classify(self, output: ITensor, target: ITensor) -> float: ...

    # ------------------------------------------------------------------
    # Declared
    # ------------------------------------------------------------------
    def square_mean_apply(self, input: ITensor, target: ITensor) -> float: ...

    def square_mean_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None: ...

    def abs_mean_apply(self, input: ITensor, target: ITensor) -> float: ...

    def abs_mean_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None: ...

    def batch_norm_forward(self, *args: Any, **kwargs: Any) -> None: ...

    def batch_norm_backward(self, *args: Any, **kwargs: Any) -> None: ...

    def evaluate_regress(self, output: ITensor, target: ITensor) -> float: ...


__all__ = [
    "Scalar",
    IRandomState.__name__,
    INumericBackend.__name__,
]
