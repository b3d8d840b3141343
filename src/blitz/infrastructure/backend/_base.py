"""
Shared backend machinery and array-module reference kernels.

`ArrayBackend` implements every kernel of the backend contract once, in
terms of an array module `xp` (NumPy or CuPy share the same API). Concrete
backends bind the array module, supply random generation and the two
matrix-multiply primitives, and may override individual kernels with fused
device implementations.

Precondition checks
-------------------
Every kernel validates before touching any buffer:

- each tensor lives on the backend's device (`DeviceMismatchError`),
- each tensor has the backend's element type (`TypeError`),
- element counts / matrix dimensions agree (`ShapeMismatchError`).

A failed check leaves every output untouched.

Views
-----
Elementwise kernels operate on the flat storage buffers (index `i` of one
tensor pairs with index `i` of the other). Row-wise kernels (softmax, bias,
classification) operate on the logical `(num_sample, dim)` matrix, so they
are correct for both storage orders.

Matrix multiply
---------------
Both multiply primitives assume row-major buffers. A column-major operand
of logical shape `(r, c)` is, read as row-major, the `(c, r)` transpose, so
its effective transpose flag is `trans XOR (not row_major)`. Operands are
passed to the primitive as raw row-major buffer matrices with those
effective flags. Column-major tensors of rank 3 or more are not a plain
transpose of their folded `(num_sample, dim)` matrix and are gathered into
a row-major copy first; a column-major output is written back the same way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import contextlib
import functools
import logging
import math
from typing import Any, Callable, ContextManager, Optional, Tuple, TypeVar, Union
import warnings

import numpy as np

from ...domain._backend import INumericBackend, IRandomState, Scalar
from ...domain._errors import (
    DeviceMismatchError,
    KernelNotImplementedError,
    ShapeMismatchError,
    UnsupportedKernelError,
)
from ...domain._tensor import ITensor, Shape, sample_dims
from ...domain.device._device import Device
from .._config import KERNELS, get_config
from .._random import RandomState
from ..tensor._tensor import Tensor

logger = logging.getLogger(__name__)

# Lower clamp for safe log: log never returns less than -50.
SAFE_LOG_MIN = math.exp(-50.0)

F = TypeVar("F", bound=Callable[..., Any])


def on_device(method: F) -> F:
    """Run a kernel method with its backend's device made current."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._device_scope():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class ArrayBackend(INumericBackend, ABC):
    """
    Backend base bound to one device and one element type.

    Parameters
    ----------
    dtype : np.dtype, optional
        Element type, float32 or float64. Defaults to float32.
    device : str or Device
        Device on which every tensor handed to this backend must reside.
    rng : Optional[IRandomState]
        Default seed source for distribution kernels. Defaults to a new
        `RandomState` seeded from `BlitzConfig.seed`.
    debug : Optional[bool]
        Log matrix-multiply dimensions at DEBUG level. Defaults to
        `BlitzConfig.debug`.
    """

    KERNELS: Tuple[str, ...] = KERNELS

    def __init__(
        self,
        dtype: Any = np.float32,
        *,
        device: Union[str, Device],
        rng: Optional[IRandomState] = None,
        debug: Optional[bool] = None,
    ) -> None:
        dt = np.dtype(dtype)
        if dt not in (np.float32, np.float64):
            raise TypeError(f"{type(self).__name__} supports float32/float64 only, got {dt}")
        cfg = get_config()
        self._dtype = dt
        self._device = Device(device)
        self._rng: IRandomState = rng if rng is not None else RandomState(cfg.seed)
        self._debug = cfg.debug if debug is None else bool(debug)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    @property
    @abstractmethod
    def xp(self) -> Any:
        """Array module used for every buffer of this backend."""

    @property
    def device(self) -> Device:
        return self._device

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def rng(self) -> IRandomState:
        return self._rng

    @property
    def name(self) -> str:
        return f"{type(self).__name__}[{self._dtype.name}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dtype={self._dtype.name}, device={self._device})"

    def empty(self, shape: Shape, *, row_major: bool = True) -> Tensor:
        """Allocate an uninitialized tensor on this backend's device."""
        return Tensor(
            shape, self._device, dtype=self._dtype, row_major=row_major, zero=False
        )

    def zeros(self, shape: Shape, *, row_major: bool = True) -> Tensor:
        """Allocate a zero-filled tensor on this backend's device."""
        return Tensor(shape, self._device, dtype=self._dtype, row_major=row_major)

    def synchronize(self) -> None:
        """Block until previously issued kernels have completed."""

    def _device_scope(self) -> ContextManager[Any]:
        """
        Context entered around every kernel.

        Temporaries, kernel launches and library calls issued inside it run
        on this backend's device. Host backends have nothing to select.
        """
        return contextlib.nullcontext()

    # ------------------------------------------------------------------
    # Precondition helpers
    # ------------------------------------------------------------------
    def _check(self, op: str, *tensors: ITensor) -> None:
        for t in tensors:
            if str(t.device) != str(self._device):
                raise DeviceMismatchError(str(t.device), str(self._device))
            if np.dtype(t.dtype) != self._dtype:
                raise TypeError(
                    f"{op}: {self.name} expects {self._dtype.name} tensors, "
                    f"got {np.dtype(t.dtype).name}"
                )

    def _check_same_size(self, op: str, *tensors: ITensor) -> None:
        self._check(op, *tensors)
        sizes = [int(t.size) for t in tensors]
        if any(s != sizes[0] for s in sizes[1:]):
            raise ShapeMismatchError.sizes(op, *sizes)

    def _scalar(self, value: Scalar) -> Any:
        return self._dtype.type(value)

    def _operand(self, op: str, left: ITensor, right: Union[ITensor, Scalar]) -> Any:
        """Return the buffer (or typed scalar) for a tensor-or-scalar operand."""
        if isinstance(right, (int, float, np.integer, np.floating)):
            return self._scalar(right)
        self._check_same_size(op, left, right)
        return right.data

    @staticmethod
    def _rows(t: ITensor) -> Any:
        """Logical `(num_sample, dim)` matrix; a view for row-major tensors."""
        n, dim = sample_dims(t.shape)
        if t.row_major:
            return t.data.reshape(n, dim)
        return t.data.reshape(t.shape, order="F").reshape(n, dim)

    @staticmethod
    def _store_rows(t: ITensor, rows: Any) -> None:
        """Write a logical `(num_sample, dim)` matrix into `t`'s buffer."""
        if t.row_major:
            t.data[...] = rows.reshape(-1)
        else:
            t.data[...] = rows.reshape(t.shape).ravel(order="F")

    def _not_implemented(self, op: str) -> KernelNotImplementedError:
        return KernelNotImplementedError(op, self.name)

    def _check_finite(self, op: str, values: Any) -> None:
        """Warn when a kernel produced non-finite values (host backends only)."""

    # ------------------------------------------------------------------
    # Activations
    # ------------------------------------------------------------------
    @on_device
    def rectlin_apply(self, input: ITensor, slope: Scalar, output: ITensor) -> None:
        """
        Leaky rectifier: `output = max(input, 0) + slope * min(input, 0)`.
        """
        self._check_same_size("rectlin_apply", input, output)
        xp = self.xp
        x = input.data
        zero = self._scalar(0)
        neg = xp.minimum(x, zero)
        neg *= self._scalar(slope)
        xp.maximum(x, zero, out=output.data)
        xp.add(output.data, neg, out=output.data)

    @on_device
    def rectlin_derivative(
        self, input: ITensor, slope: Scalar, output: ITensor
    ) -> None:
        """
        Chain-rule multiply: `output *= 1 if input > 0 else slope`.

        `output` must already hold the upstream gradient.
        """
        self._check_same_size("rectlin_derivative", input, output)
        xp = self.xp
        local = xp.where(input.data > 0, self._scalar(1), self._scalar(slope))
        local = local.astype(self._dtype, copy=False)
        xp.multiply(output.data, local, out=output.data)

    @on_device
    def logistic_apply(self, input: ITensor, output: ITensor) -> None:
        """Logistic sigmoid: `output = 1 / (1 + exp(-input))`."""
        self._check_same_size("logistic_apply", input, output)
        xp = self.xp
        with np.errstate(over="ignore"):
            e = xp.exp(-input.data)
            e += self._scalar(1)
            xp.divide(self._scalar(1), e, out=output.data)

    @on_device
    def logistic_derivative(
        self, input: ITensor, output: ITensor, short_cut: bool = True
    ) -> None:
        """
        Logistic derivative against the cached forward output `input`.

        With `short_cut=True` the derivative is folded into the loss
        derivative (`y - t` for cross-entropy) and `output` is untouched.
        Otherwise `output *= input * (1 - input)`.
        """
        self._check_same_size("logistic_derivative", input, output)
        if short_cut:
            return
        y = input.data
        self.xp.multiply(output.data, y * (self._scalar(1) - y), out=output.data)

    @on_device
    def softmax_apply(self, input: ITensor, output: ITensor) -> None:
        """
        Row-wise softmax over the `(num_sample, dim)` view.

        Each row is exponentiated and divided by its sum. No max subtraction
        is performed: callers must keep inputs small enough for `exp`.
        """
        self._check_same_size("softmax_apply", input, output)
        xp = self.xp
        with np.errstate(over="ignore", invalid="ignore"):
            e = xp.exp(self._rows(input))
            e /= e.sum(axis=1, keepdims=True)
        self._check_finite("softmax_apply", e)
        self._store_rows(output, e)

    @on_device
    def softmax_derivative(
        self, input: ITensor, output: ITensor, short_cut: bool = True
    ) -> None:
        """
        Softmax derivative against the cached forward output `input`.

        With `short_cut=True` `output` is untouched (see
        `logistic_derivative`). Otherwise each row becomes
        `y * (u - sum(u * y))` where `u` is the upstream gradient row.
        """
        self._check_same_size("softmax_derivative", input, output)
        if short_cut:
            return
        y = self._rows(input)
        u = self._rows(output)
        dot = (u * y).sum(axis=1, keepdims=True)
        self._store_rows(output, y * (u - dot))

    # ------------------------------------------------------------------
    # Losses
    # ------------------------------------------------------------------
    def _safe_log(self, x: Any) -> Any:
        xp = self.xp
        return xp.log(xp.maximum(x, self._scalar(SAFE_LOG_MIN)))

    @on_device
    def cross_entropy_binary_apply(self, input: ITensor, target: ITensor) -> float:
        """
        Binary cross-entropy summed over all elements and divided by the
        batch size `shape[0]`:

            sum(-log(x) * t - log(1 - x) * (1 - t)) / shape[0]

        Logarithms are clamped at `exp(-50)`.
        """
        self._check_same_size("cross_entropy_binary_apply", input, target)
        x, t = input.data, target.data
        one = self._scalar(1)
        loss = -self._safe_log(x) * t - self._safe_log(one - x) * (one - t)
        return float(loss.sum()) / self._batch_size(input)

    @on_device
    def cross_entropy_binary_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None:
        """`output = input - target`."""
        self._check_same_size("cross_entropy_binary_derivative", input, target, output)
        self.xp.subtract(input.data, target.data, out=output.data)

    @on_device
    def cross_entropy_multi_apply(self, input: ITensor, target: ITensor) -> float:
        """
        Multi-class cross-entropy term `sum(log(x) * t) / shape[0]`.

        The sum is returned without negation, so the value is <= 0 for
        probabilities; negate it for the usual negative log-likelihood.
        """
        self._check_same_size("cross_entropy_multi_apply", input, target)
        loss = self._safe_log(input.data) * target.data
        return float(loss.sum()) / self._batch_size(input)

    @on_device
    def cross_entropy_multi_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None:
        """`output = input - target` (softmax short-cut gradient)."""
        self._check_same_size("cross_entropy_multi_derivative", input, target, output)
        self.xp.subtract(input.data, target.data, out=output.data)

    @staticmethod
    def _batch_size(t: ITensor) -> int:
        n = int(t.shape[0]) if len(t.shape) > 0 else 1
        if n <= 0:
            raise ShapeMismatchError("loss", f"batch size must be positive, got shape {t.shape}")
        return n

    def square_mean_apply(self, input: ITensor, target: ITensor) -> float:
        raise self._not_implemented("square_mean_apply")

    def square_mean_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None:
        raise self._not_implemented("square_mean_derivative")

    def abs_mean_apply(self, input: ITensor, target: ITensor) -> float:
        raise self._not_implemented("abs_mean_apply")

    def abs_mean_derivative(
        self, input: ITensor, target: ITensor, output: ITensor
    ) -> None:
        raise self._not_implemented("abs_mean_derivative")

    # ------------------------------------------------------------------
    # Bias and normalization
    # ------------------------------------------------------------------
    @on_device
    def bias_forward(self, input: ITensor, bias: ITensor, output: ITensor) -> None:
        """
        Broadcast a per-feature bias over the sample axis:

            output[n, j] = input[n, j] + bias[j]

        `bias` must hold exactly `dim = size // shape[0]` elements. `output`
        may be `input` itself.
        """
        self._check_same_size("bias_forward", input, output)
        self._check("bias_forward", bias)
        _, dim = sample_dims(input.shape)
        if int(bias.size) != dim:
            raise ShapeMismatchError(
                "bias_forward", f"bias has {bias.size} elements, expected dim={dim}"
            )
        self._store_rows(output, self._rows(input) + bias.data.reshape(1, dim))

    @on_device
    def bias_backward_update(self, input: ITensor, update: ITensor) -> None:
        """
        Bias gradient: `update[j] = sum over samples of input[n, j]`.

        `update` is overwritten, not accumulated into.
        """
        self._check("bias_backward_update", input, update)
        _, dim = sample_dims(input.shape)
        if int(update.size) != dim:
            raise ShapeMismatchError(
                "bias_backward_update",
                f"update has {update.size} elements, expected dim={dim}",
            )
        update.data[...] = self._rows(input).sum(axis=0)

    def batch_norm_forward(self, *args: Any, **kwargs: Any) -> None:
        raise self._not_implemented("batch_norm_forward")

    def batch_norm_backward(self, *args: Any, **kwargs: Any) -> None:
        raise self._not_implemented("batch_norm_backward")

    # ------------------------------------------------------------------
    # Optimizer
    # ------------------------------------------------------------------
    @on_device
    def gradient_descent_update(
        self,
        momentum_coef: Scalar,
        learning_rate: Scalar,
        decay: Scalar,
        batch_size: int,
        weight: ITensor,
        gradient: ITensor,
        velocity: ITensor,
    ) -> None:
        """
        Momentum gradient descent, in place, in this exact order:

            gradient /= batch_size
            velocity  = velocity * momentum_coef - learning_rate * gradient
                        + decay * weight
            weight   += velocity

        The decay term is added to the velocity as written.
        """
        self._check_same_size("gradient_descent_update", weight, gradient, velocity)
        if int(batch_size) <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        w, g, v = weight.data, gradient.data, velocity.data
        g /= self._scalar(batch_size)
        v *= self._scalar(momentum_coef)
        v -= self._scalar(learning_rate) * g
        v += self._scalar(decay) * w
        w += v

    # ------------------------------------------------------------------
    # Matrix multiply
    # ------------------------------------------------------------------
    def _gemm_operand(self, t: ITensor, trans: bool) -> Tuple[Any, bool]:
        """
        Return `(row-major buffer matrix, effective transpose flag)`.

        The logical matrix is `(shape[0], size // shape[0])`. A column-major
        buffer is only the transpose of that matrix for shapes of rank <= 2;
        higher ranks are gathered into a row-major copy.
        """
        rows, cols = sample_dims(t.shape)
        if t.row_major:
            return t.data.reshape(rows, cols), bool(trans)
        if len(t.shape) <= 2:
            return t.data.reshape(cols, rows), not bool(trans)
        return self.xp.ascontiguousarray(self._rows(t)), bool(trans)

    @on_device
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
    ) -> None:
        """
        General matrix multiply:

            output = alpha * op(left) @ op(right) + beta * output

        where `op(M)` is `M^T` when the corresponding flag is set. `kernel`
        selects the portable library path (`"blas"`) or the hand-written
        tiled path (`"asm"`); both compute the same product.

        Raises
        ------
        UnsupportedKernelError
            If `kernel` is not recognized. `output` is left untouched.
        ShapeMismatchError
            If the common dimensions disagree, a dimension is zero, or
            `output` does not hold `dim_left * dim_right` elements.
        """
        if kernel not in self.KERNELS:
            raise UnsupportedKernelError(kernel, self.KERNELS)
        self._check("matrix_dot", left, right, output)

        a, eff_a = self._gemm_operand(left, transa)
        b, eff_b = self._gemm_operand(right, transb)
        dim_left = a.shape[1] if eff_a else a.shape[0]
        dim_common_left = a.shape[0] if eff_a else a.shape[1]
        dim_common_right = b.shape[1] if eff_b else b.shape[0]
        dim_right = b.shape[0] if eff_b else b.shape[1]

        if dim_common_left != dim_common_right:
            raise ShapeMismatchError(
                "matrix_dot",
                f"common dimension mismatch: {dim_common_left} vs {dim_common_right}",
            )
        if dim_left == 0 or dim_right == 0 or dim_common_left == 0:
            raise ShapeMismatchError(
                "matrix_dot",
                f"zero dimension: left={dim_left}, common={dim_common_left}, "
                f"right={dim_right}",
            )
        if int(output.size) != dim_left * dim_right:
            raise ShapeMismatchError(
                "matrix_dot",
                f"output has {output.size} elements, expected "
                f"{dim_left} x {dim_right}",
            )

        if self._debug:
            logger.debug("dim left: %d", dim_left)
            logger.debug("dim common: %d", dim_common_left)
            logger.debug("dim right: %d", dim_right)

        if output.row_major:
            c = output.data.reshape(dim_left, dim_right)
        else:
            logical = output.data.reshape(output.shape, order="F")
            c = self.xp.ascontiguousarray(logical).reshape(dim_left, dim_right)

        gemm = self._gemm_blas if kernel == "blas" else self._gemm_asm
        gemm(
            eff_a,
            eff_b,
            dim_left,
            dim_right,
            dim_common_left,
            a,
            b,
            self._scalar(alpha),
            self._scalar(beta),
            c,
        )

        if not output.row_major:
            output.data[...] = c.reshape(output.shape).ravel(order="F")

    @staticmethod
    def _gemm_epilogue(prod: Any, alpha: Any, beta: Any, c: Any) -> None:
        """`c = alpha * prod + beta * c`; `c` is ignored when `beta == 0`."""
        prod *= alpha
        if beta == 0:
            c[...] = prod
        else:
            c *= beta
            c += prod

    @abstractmethod
    def _gemm_blas(
        self,
        transa: bool,
        transb: bool,
        m: int,
        n: int,
        k: int,
        a: Any,
        b: Any,
        alpha: Any,
        beta: Any,
        c: Any,
    ) -> None:
        """Library multiply on row-major buffers into the `(m, n)` matrix `c`."""

    @abstractmethod
    def _gemm_asm(
        self,
        transa: bool,
        transb: bool,
        m: int,
        n: int,
        k: int,
        a: Any,
        b: Any,
        alpha: Any,
        beta: Any,
        c: Any,
    ) -> None:
        """Hand-written tiled multiply with the same contract as `_gemm_blas`."""

    # ------------------------------------------------------------------
    # Elementwise arithmetic and reductions
    # ------------------------------------------------------------------
    @on_device
    def add(self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor) -> None:
        """`output = left + right` (tensor or scalar `right`)."""
        self._check_same_size("add", left, output)
        self.xp.add(left.data, self._operand("add", left, right), out=output.data)

    @on_device
    def minus(
        self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor
    ) -> None:
        """`output = left - right` (tensor or scalar `right`)."""
        self._check_same_size("minus", left, output)
        self.xp.subtract(left.data, self._operand("minus", left, right), out=output.data)

    @on_device
    def multiply(
        self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor
    ) -> None:
        """`output = left * right` (tensor or scalar `right`)."""
        self._check_same_size("multiply", left, output)
        self.xp.multiply(
            left.data, self._operand("multiply", left, right), out=output.data
        )

    @on_device
    def maximum(
        self, left: ITensor, right: Union[ITensor, Scalar], output: ITensor
    ) -> None:
        """`output = max(left, right)` elementwise (tensor or scalar `right`)."""
        self._check_same_size("maximum", left, output)
        self.xp.maximum(
            left.data, self._operand("maximum", left, right), out=output.data
        )

    @on_device
    def sum(self, input: ITensor) -> float:
        """Sum of every element, returned as a host float."""
        self._check("sum", input)
        return float(input.data.sum())

    # ------------------------------------------------------------------
    # Random and constant fills
    # ------------------------------------------------------------------
    @abstractmethod
    def _uniform01(self, seed: int, size: int) -> Any:
        """Draw `size` values uniformly from [0, 1) in the backend dtype."""

    @abstractmethod
    def _standard_normal(self, seed: int, size: int) -> Any:
        """Draw `size` standard normal values in the backend dtype."""

    @on_device
    def constant_distribution(self, value: Scalar, output: ITensor) -> None:
        """Fill `output` with `value`."""
        self._check("constant_distribution", output)
        output.fill(value)

    @on_device
    def uniform_distribution(
        self,
        low: Scalar,
        high: Scalar,
        output: ITensor,
        rng: Optional[IRandomState] = None,
    ) -> None:
        """
        Fill `output` with i.i.d. draws from `U[low, high)`.

        Each call takes a fresh seed from `rng` (the backend's own state by
        default), so repeated calls are decorrelated.
        """
        self._check("uniform_distribution", output)
        seed = (rng or self._rng).next_seed()
        u = self._uniform01(seed, int(output.size))
        u *= self._scalar(high) - self._scalar(low)
        u += self._scalar(low)
        output.data[...] = u

    @on_device
    def normal_distribution(
        self,
        loc: Scalar,
        scale: Scalar,
        output: ITensor,
        rng: Optional[IRandomState] = None,
    ) -> None:
        """Fill `output` with i.i.d. draws from `N(loc, scale^2)`."""
        self._check("normal_distribution", output)
        seed = (rng or self._rng).next_seed()
        z = self._standard_normal(seed, int(output.size))
        z *= self._scalar(scale)
        z += self._scalar(loc)
        output.data[...] = z

    @on_device
    def make_binary_mask(
        self,
        low: Scalar,
        high: Scalar,
        keep: Scalar,
        output: ITensor,
        rng: Optional[IRandomState] = None,
    ) -> None:
        """
        Dropout-style mask: draw `U[low, high)` per element, then set the
        element to 1 if the draw is below `keep` and to 0 otherwise.
        """
        self.uniform_distribution(low, high, output, rng)
        mask = output.data < self._scalar(keep)
        output.data[...] = mask.astype(self._dtype)

    @on_device
    def host_copy_to(self, source: Any, output: ITensor) -> None:
        """
        Copy a host buffer of `output.size` elements into `output`'s storage,
        element for element in storage order.
        """
        self._check("host_copy_to", output)
        src = np.asarray(source, dtype=self._dtype).reshape(-1)
        if int(src.size) != int(output.size):
            raise ShapeMismatchError.sizes("host_copy_to", src.size, output.size)
        output.data[...] = self.xp.asarray(src)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    @on_device
    def evaluate_classify(self, output: ITensor, target: ITensor) -> float:
        """
        Classification accuracy over the sample axis.

        For each sample the predicted class is the first index holding the
        row maximum; the sample scores 1 if `target` at that index is
        exactly 1.0.
        """
        self._check_same_size("evaluate_classify", output, target)
        xp = self.xp
        n, _ = sample_dims(output.shape)
        if n <= 0:
            raise ShapeMismatchError("evaluate_classify", "empty batch")
        predicted = xp.argmax(self._rows(output), axis=1)
        t = self._rows(target)
        hits = t[xp.arange(n), predicted] == self._scalar(1.0)
        return float(hits.sum()) / n

    def evaluate_regress(self, output: ITensor, target: ITensor) -> float:
        raise self._not_implemented("evaluate_regress")


class HostWarningsMixin:
    """Finite-value checks for backends whose buffers are host-visible."""

    def _check_finite(self, op: str, values: Any) -> None:
        if not np.isfinite(values).all():
            warnings.warn(
                f"{op} produced non-finite values; inputs overflowed exp. "
                "Pre-scale the inputs (for example subtract the row maximum).",
                RuntimeWarning,
                stacklevel=3,
            )


__all__ = [
    ArrayBackend.__name__,
    HostWarningsMixin.__name__,
    on_device.__name__,
    "SAFE_LOG_MIN",
    "KERNELS",
]
