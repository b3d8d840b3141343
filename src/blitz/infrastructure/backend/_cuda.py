"""
Accelerator backend (CuPy).

Kernels are issued asynchronously on the current CUDA stream and return
before they complete. Host-visible results (loss values, accuracies, sums,
`Tensor.to_numpy`) synchronize implicitly; call `synchronize()` before
timing or reading raw device memory through other means.

Hot elementwise kernels and the loss reductions are fused device kernels
(`cupy.ElementwiseKernel` / `cupy.ReductionKernel`); the remaining kernels
run the shared array-module implementations on CuPy arrays.

Matrix multiply
---------------
- `"blas"`: `cupy.matmul`, which dispatches to cuBLAS.
- `"asm"`: a hand-written shared-memory tiled kernel compiled with
  `cupy.RawKernel`, one instantiation per element type.

Every kernel makes the backend's device current while it runs, so launches,
temporaries and cuBLAS calls land on the same device as the tensors.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional, Union

import numpy as np

from ...domain._backend import IRandomState, Scalar
from ...domain._errors import DeviceNotSupportedError
from ...domain._tensor import ITensor
from ...domain.device._device import Device
from ..tensor._cupy import load_cupy
from ._base import ArrayBackend, SAFE_LOG_MIN, on_device

_TILE = 16

_GEMM_SOURCE = r"""
#define TILE 16
extern "C" __global__
void blitz_gemm_tiled_SUFFIX(const TYPE* A, const TYPE* B, TYPE* C,
                             const int M, const int N, const int K,
                             const int transa, const int transb,
                             const TYPE alpha, const TYPE beta) {
    __shared__ TYPE As[TILE][TILE];
    __shared__ TYPE Bs[TILE][TILE + 1];

    const int tx = threadIdx.x;
    const int ty = threadIdx.y;
    const int row = blockIdx.y * TILE + ty;
    const int col = blockIdx.x * TILE + tx;

    TYPE acc = (TYPE)0;
    for (int t = 0; t < K; t += TILE) {
        const int a_col = t + tx;
        const int b_row = t + ty;
        As[ty][tx] = (row < M && a_col < K)
            ? (transa ? A[a_col * M + row] : A[row * K + a_col])
            : (TYPE)0;
        Bs[ty][tx] = (b_row < K && col < N)
            ? (transb ? B[col * K + b_row] : B[b_row * N + col])
            : (TYPE)0;
        __syncthreads();

        #pragma unroll
        for (int p = 0; p < TILE; ++p) {
            acc += As[ty][p] * Bs[p][tx];
        }
        __syncthreads();
    }

    if (row < M && col < N) {
        const int idx = row * N + col;
        C[idx] = (beta == (TYPE)0) ? alpha * acc : alpha * acc + beta * C[idx];
    }
}
"""

_SAFE_LOG_PREAMBLE = (
    "template <typename T>\n"
    "__device__ T blitz_safe_log(T x) {\n"
    f"    const T floor_ = (T){SAFE_LOG_MIN!r};\n"
    "    return log(x > floor_ ? x : floor_);\n"
    "}\n"
)


@lru_cache(maxsize=None)
def _gemm_kernel(dtype_name: str) -> Any:
    cp = load_cupy()
    ctype, suffix = {"float32": ("float", "f32"), "float64": ("double", "f64")}[dtype_name]
    source = _GEMM_SOURCE.replace("TYPE", ctype).replace("SUFFIX", suffix)
    return cp.RawKernel(source, f"blitz_gemm_tiled_{suffix}")


@lru_cache(maxsize=None)
def _elementwise(name: str) -> Any:
    cp = load_cupy()
    if name == "rectlin_apply":
        return cp.ElementwiseKernel(
            "T x, T slope",
            "T y",
            "y = (x > (T)0 ? x : (T)0) + slope * (x < (T)0 ? x : (T)0)",
            "blitz_rectlin_apply",
        )
    if name == "rectlin_derivative":
        return cp.ElementwiseKernel(
            "T x, T slope",
            "T y",
            "y = y * (x > (T)0 ? (T)1 : slope)",
            "blitz_rectlin_derivative",
        )
    if name == "logistic_apply":
        return cp.ElementwiseKernel(
            "T x",
            "T y",
            "y = (T)1 / ((T)1 + exp(-x))",
            "blitz_logistic_apply",
        )
    if name == "gradient_descent_update":
        return cp.ElementwiseKernel(
            "T momentum, T rate, T decay, T batch",
            "T w, T g, T v",
            """
            g = g / batch;
            v = v * momentum - rate * g + decay * w;
            w = w + v;
            """,
            "blitz_gradient_descent_update",
        )
    raise KeyError(name)


@lru_cache(maxsize=None)
def _reduction(name: str) -> Any:
    cp = load_cupy()
    if name == "cross_entropy_binary":
        map_expr = (
            "-blitz_safe_log(x) * t - blitz_safe_log((T)1 - x) * ((T)1 - t)"
        )
    elif name == "cross_entropy_multi":
        map_expr = "blitz_safe_log(x) * t"
    else:
        raise KeyError(name)
    return cp.ReductionKernel(
        "T x, T t",
        "T y",
        map_expr,
        "a + b",
        "y = a",
        "0",
        f"blitz_{name}",
        preamble=_SAFE_LOG_PREAMBLE,
    )


class CUDABackend(ArrayBackend):
    """
    CuPy backend bound to one CUDA device.

    Parameters
    ----------
    dtype : np.dtype, optional
        float32 (default) or float64.
    device : str or Device, optional
        CUDA placement, e.g. "cuda" or "cuda:1". Defaults to "cuda:0".
    rng : Optional[IRandomState]
        Default seed source for distribution kernels.
    debug : Optional[bool]
        Log matrix-multiply dimensions at DEBUG level.

    Raises
    ------
    DeviceNotSupportedError
        If `device` is not a CUDA device, or CuPy / a CUDA device is
        unavailable.
    """

    def __init__(
        self,
        dtype: Any = np.float32,
        *,
        device: Union[str, Device] = "cuda:0",
        rng: Optional[IRandomState] = None,
        debug: Optional[bool] = None,
    ) -> None:
        dev = Device(device)
        if not dev.is_cuda():
            raise DeviceNotSupportedError(
                "CUDABackend", str(dev), "CUDABackend requires a CUDA device."
            )
        load_cupy()
        super().__init__(dtype, device=dev, rng=rng, debug=debug)

    @property
    def xp(self) -> Any:
        return load_cupy()

    def synchronize(self) -> None:
        cp = load_cupy()
        cp.cuda.Device(self.device.index).synchronize()

    def _device_scope(self) -> Any:
        return load_cupy().cuda.Device(self.device.index)

    # ------------------------------------------------------------------
    # Fused kernels
    # ------------------------------------------------------------------
    @on_device
    def rectlin_apply(self, input: ITensor, slope: Scalar, output: ITensor) -> None:
        self._check_same_size("rectlin_apply", input, output)
        _elementwise("rectlin_apply")(input.data, self._scalar(slope), output.data)

    @on_device
    def rectlin_derivative(
        self, input: ITensor, slope: Scalar, output: ITensor
    ) -> None:
        self._check_same_size("rectlin_derivative", input, output)
        _elementwise("rectlin_derivative")(
            input.data, self._scalar(slope), output.data
        )

    @on_device
    def logistic_apply(self, input: ITensor, output: ITensor) -> None:
        self._check_same_size("logistic_apply", input, output)
        _elementwise("logistic_apply")(input.data, output.data)

    @on_device
    def cross_entropy_binary_apply(self, input: ITensor, target: ITensor) -> float:
        self._check_same_size("cross_entropy_binary_apply", input, target)
        total = _reduction("cross_entropy_binary")(input.data, target.data)
        return float(total) / self._batch_size(input)

    @on_device
    def cross_entropy_multi_apply(self, input: ITensor, target: ITensor) -> float:
        self._check_same_size("cross_entropy_multi_apply", input, target)
        total = _reduction("cross_entropy_multi")(input.data, target.data)
        return float(total) / self._batch_size(input)

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
        self._check_same_size("gradient_descent_update", weight, gradient, velocity)
        if int(batch_size) <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        _elementwise("gradient_descent_update")(
            self._scalar(momentum_coef),
            self._scalar(learning_rate),
            self._scalar(decay),
            self._scalar(batch_size),
            weight.data,
            gradient.data,
            velocity.data,
        )

    # ------------------------------------------------------------------
    # Matrix multiply primitives
    # ------------------------------------------------------------------
    def _gemm_blas(self, transa, transb, m, n, k, a, b, alpha, beta, c) -> None:
        cp = load_cupy()
        opa = a.T if transa else a
        opb = b.T if transb else b
        self._gemm_epilogue(cp.matmul(opa, opb), alpha, beta, c)

    def _gemm_asm(self, transa, transb, m, n, k, a, b, alpha, beta, c) -> None:
        kernel = _gemm_kernel(self.dtype.name)
        grid = ((n + _TILE - 1) // _TILE, (m + _TILE - 1) // _TILE)
        kernel(
            grid,
            (_TILE, _TILE),
            (
                a,
                b,
                c,
                np.int32(m),
                np.int32(n),
                np.int32(k),
                np.int32(bool(transa)),
                np.int32(bool(transb)),
                alpha,
                beta,
            ),
        )

    # ------------------------------------------------------------------
    # Random generation
    # ------------------------------------------------------------------
    def _uniform01(self, seed: int, size: int) -> Any:
        cp = load_cupy()
        return cp.random.RandomState(seed).random_sample(size, dtype=self.dtype)

    def _standard_normal(self, seed: int, size: int) -> Any:
        cp = load_cupy()
        return cp.random.RandomState(seed).standard_normal(size, dtype=self.dtype)


__all__ = [CUDABackend.__name__]
