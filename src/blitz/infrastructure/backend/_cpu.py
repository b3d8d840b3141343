"""
Host backend (NumPy).

Kernels run synchronously on NumPy buffers. The `"blas"` multiply path
delegates to `numpy.matmul` (which calls the linked BLAS); the `"asm"` path
is a cache-blocked multiply that walks the output in square tiles and
accumulates partial products panel by panel along the common dimension.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ...domain._backend import IRandomState
from ._base import ArrayBackend, HostWarningsMixin


class CPUBackend(HostWarningsMixin, ArrayBackend):
    """
    NumPy backend bound to the host.

    Parameters
    ----------
    dtype : np.dtype, optional
        float32 (default) or float64.
    rng : Optional[IRandomState]
        Default seed source for distribution kernels.
    debug : Optional[bool]
        Log matrix-multiply dimensions at DEBUG level.
    tile : int, optional
        Tile edge of the blocked `"asm"` multiply. Defaults to 64.
    """

    def __init__(
        self,
        dtype: Any = np.float32,
        *,
        rng: Optional[IRandomState] = None,
        debug: Optional[bool] = None,
        tile: int = 64,
    ) -> None:
        super().__init__(dtype, device="cpu", rng=rng, debug=debug)
        if int(tile) <= 0:
            raise ValueError(f"tile must be positive, got {tile}")
        self._tile = int(tile)

    @property
    def xp(self) -> Any:
        return np

    @property
    def tile(self) -> int:
        return self._tile

    def _gemm_blas(self, transa, transb, m, n, k, a, b, alpha, beta, c) -> None:
        opa = a.T if transa else a
        opb = b.T if transb else b
        self._gemm_epilogue(np.matmul(opa, opb), alpha, beta, c)

    def _gemm_asm(self, transa, transb, m, n, k, a, b, alpha, beta, c) -> None:
        opa = a.T if transa else a
        opb = b.T if transb else b
        tile = self._tile
        acc = np.zeros((m, n), dtype=self.dtype)
        for i0 in range(0, m, tile):
            i1 = min(i0 + tile, m)
            for p0 in range(0, k, tile):
                p1 = min(p0 + tile, k)
                # packed panel of op(A), reused across every column tile
                panel = np.ascontiguousarray(opa[i0:i1, p0:p1])
                for j0 in range(0, n, tile):
                    j1 = min(j0 + tile, n)
                    acc[i0:i1, j0:j1] += panel @ opb[p0:p1, j0:j1]
        self._gemm_epilogue(acc, alpha, beta, c)

    def _uniform01(self, seed: int, size: int) -> np.ndarray:
        return np.random.default_rng(seed).random(size, dtype=self.dtype)

    def _standard_normal(self, seed: int, size: int) -> np.ndarray:
        return np.random.default_rng(seed).standard_normal(size, dtype=self.dtype)


__all__ = [CPUBackend.__name__]
