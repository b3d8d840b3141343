import itertools
import unittest

import numpy as np

from blitz.domain import ShapeMismatchError, UnsupportedKernelError
from blitz.infrastructure._random import RandomState
from blitz.infrastructure.backend import CPUBackend
from blitz.infrastructure.tensor import Tensor


def _tensor_from_np(arr, *, dtype=np.float32, row_major: bool = True) -> Tensor:
    return Tensor.from_numpy(np.asarray(arr, dtype=dtype), row_major=row_major)


KERNELS = ("blas", "asm")


class TestMatrixDotBasics(unittest.TestCase):
    def setUp(self) -> None:
        self.be = CPUBackend(np.float32, rng=RandomState(0))

    def test_two_by_two_example(self):
        for kernel in KERNELS:
            with self.subTest(kernel=kernel):
                left = _tensor_from_np([[1, 2], [3, 4]])
                right = _tensor_from_np([[5, 6], [7, 8]])
                out = Tensor((2, 2))
                self.be.matrix_dot(left, right, False, False, 1.0, 0.0, out, kernel)
                np.testing.assert_array_equal(out.to_numpy(), [[19, 22], [43, 50]])

    def test_default_kernel_is_blas(self):
        out = Tensor((2, 2))
        self.be.matrix_dot(
            _tensor_from_np([[1, 2], [3, 4]]),
            _tensor_from_np([[5, 6], [7, 8]]),
            False,
            False,
            1.0,
            0.0,
            out,
        )
        np.testing.assert_array_equal(out.to_numpy(), [[19, 22], [43, 50]])

    def test_transpose_flags(self):
        rng = np.random.default_rng(0)
        a = rng.normal(size=(3, 4)).astype(np.float32)
        b = rng.normal(size=(4, 5)).astype(np.float32)
        expected = a @ b
        for kernel, ta, tb in itertools.product(KERNELS, (False, True), (False, True)):
            with self.subTest(kernel=kernel, transa=ta, transb=tb):
                left = _tensor_from_np(a.T.copy() if ta else a)
                right = _tensor_from_np(b.T.copy() if tb else b)
                out = Tensor((3, 5))
                self.be.matrix_dot(left, right, ta, tb, 1.0, 0.0, out, kernel)
                np.testing.assert_allclose(out.to_numpy(), expected, rtol=1e-5, atol=1e-5)

    def test_alpha_and_beta(self):
        a = np.array([[1.0, 2.0], [3.0, 4.0]], dtype=np.float32)
        b = np.array([[1.0, 0.0], [0.0, 1.0]], dtype=np.float32)
        c = np.array([[10.0, 20.0], [30.0, 40.0]], dtype=np.float32)
        for kernel in KERNELS:
            with self.subTest(kernel=kernel):
                out = _tensor_from_np(c)
                self.be.matrix_dot(
                    _tensor_from_np(a), _tensor_from_np(b), False, False, 2.0, 0.5, out, kernel
                )
                np.testing.assert_allclose(out.to_numpy(), 2.0 * a + 0.5 * c)

    def test_beta_zero_ignores_existing_output(self):
        for kernel in KERNELS:
            with self.subTest(kernel=kernel):
                out = _tensor_from_np(np.full((2, 2), np.nan))
                self.be.matrix_dot(
                    _tensor_from_np([[1, 2], [3, 4]]),
                    _tensor_from_np([[5, 6], [7, 8]]),
                    False,
                    False,
                    1.0,
                    0.0,
                    out,
                    kernel,
                )
                np.testing.assert_array_equal(out.to_numpy(), [[19, 22], [43, 50]])

    def test_trailing_dimensions_fold_into_features(self):
        rng = np.random.default_rng(5)
        a = rng.normal(size=(2, 3, 2)).astype(np.float32)
        b = rng.normal(size=(6, 4)).astype(np.float32)
        out = Tensor((2, 4))
        self.be.matrix_dot(_tensor_from_np(a), _tensor_from_np(b), False, False, 1.0, 0.0, out)
        np.testing.assert_allclose(out.to_numpy(), a.reshape(2, 6) @ b, rtol=1e-5, atol=1e-5)


class TestMatrixDotLayouts(unittest.TestCase):
    def setUp(self) -> None:
        self.be = CPUBackend(np.float32, rng=RandomState(0))
        rng = np.random.default_rng(1)
        self.a = rng.normal(size=(4, 3)).astype(np.float32)
        self.b = rng.normal(size=(3, 2)).astype(np.float32)

    def test_column_major_operands_match_row_major(self):
        expected = self.a @ self.b
        for kernel, a_rm, b_rm in itertools.product(KERNELS, (True, False), (True, False)):
            with self.subTest(kernel=kernel, left_row_major=a_rm, right_row_major=b_rm):
                left = _tensor_from_np(self.a, row_major=a_rm)
                right = _tensor_from_np(self.b, row_major=b_rm)
                out = Tensor((4, 2))
                self.be.matrix_dot(left, right, False, False, 1.0, 0.0, out, kernel)
                np.testing.assert_allclose(out.to_numpy(), expected, rtol=1e-5, atol=1e-6)

    def test_column_major_operand_with_transpose(self):
        left = _tensor_from_np(self.a.T.copy(), row_major=False)
        out = Tensor((4, 2))
        self.be.matrix_dot(left, _tensor_from_np(self.b), True, False, 1.0, 0.0, out)
        np.testing.assert_allclose(out.to_numpy(), self.a @ self.b, rtol=1e-5, atol=1e-6)

    def test_column_major_output(self):
        c = np.ones((4, 2), dtype=np.float32)
        for kernel in KERNELS:
            with self.subTest(kernel=kernel):
                out = _tensor_from_np(c, row_major=False)
                self.be.matrix_dot(
                    _tensor_from_np(self.a), _tensor_from_np(self.b), False, False, 1.0, 1.0, out, kernel
                )
                self.assertFalse(out.row_major)
                np.testing.assert_allclose(
                    out.to_numpy(), self.a @ self.b + c, rtol=1e-5, atol=1e-6
                )

    def test_column_major_rank3_operands_use_folded_rows(self):
        rng = np.random.default_rng(5)
        a = rng.normal(size=(2, 2, 3)).astype(np.float32)
        b = rng.normal(size=(6, 4)).astype(np.float32)
        g = rng.normal(size=(2, 4)).astype(np.float32)
        for kernel in KERNELS:
            with self.subTest(kernel=kernel):
                left = _tensor_from_np(a, row_major=False)
                out = Tensor((2, 4))
                self.be.matrix_dot(left, _tensor_from_np(b), False, False, 1.0, 0.0, out, kernel)
                np.testing.assert_allclose(
                    out.to_numpy(), a.reshape(2, 6) @ b, rtol=1e-5, atol=1e-5
                )

                # transposed rank-3 column-major operand
                dw = Tensor((6, 4))
                self.be.matrix_dot(left, _tensor_from_np(g), True, False, 1.0, 0.0, dw, kernel)
                np.testing.assert_allclose(
                    dw.to_numpy(), a.reshape(2, 6).T @ g, rtol=1e-5, atol=1e-5
                )

    def test_column_major_rank3_output(self):
        c = np.ones((2, 2, 2), dtype=np.float32)
        left_np = self.a[:2]
        right_np = np.repeat(self.b[:, :2], 2, axis=1)
        expected = left_np @ right_np + c.reshape(2, 4)
        for kernel in KERNELS:
            with self.subTest(kernel=kernel):
                out = _tensor_from_np(c, row_major=False)
                left, right = _tensor_from_np(left_np), _tensor_from_np(right_np)
                self.be.matrix_dot(left, right, False, False, 1.0, 1.0, out, kernel)
                np.testing.assert_allclose(
                    out.to_numpy().reshape(2, 4), expected, rtol=1e-5, atol=1e-5
                )


class TestMatrixDotKernelsAgree(unittest.TestCase):
    def test_asm_matches_blas_across_partial_tiles(self):
        rng = np.random.default_rng(2)
        a = rng.normal(size=(70, 130)).astype(np.float32)
        b = rng.normal(size=(130, 90)).astype(np.float32)
        for tile in (8, 64):
            with self.subTest(tile=tile):
                be = CPUBackend(np.float32, rng=RandomState(0), tile=tile)
                out_blas = Tensor((70, 90))
                out_asm = Tensor((70, 90))
                be.matrix_dot(_tensor_from_np(a), _tensor_from_np(b), False, False, 1.0, 0.0, out_blas, "blas")
                be.matrix_dot(_tensor_from_np(a), _tensor_from_np(b), False, False, 1.0, 0.0, out_asm, "asm")
                np.testing.assert_allclose(out_asm.to_numpy(), out_blas.to_numpy(), rtol=1e-4, atol=1e-4)

    def test_asm_float64(self):
        rng = np.random.default_rng(3)
        a = rng.normal(size=(17, 9))
        b = rng.normal(size=(17, 11))
        be = CPUBackend(np.float64, rng=RandomState(0), tile=4)
        out = Tensor((9, 11), dtype=np.float64)
        be.matrix_dot(
            _tensor_from_np(a, dtype=np.float64),
            _tensor_from_np(b, dtype=np.float64),
            True,
            False,
            1.0,
            0.0,
            out,
            "asm",
        )
        np.testing.assert_allclose(out.to_numpy(), a.T @ b, rtol=1e-12, atol=1e-12)

    def test_tile_must_be_positive(self):
        with self.assertRaises(ValueError):
            CPUBackend(np.float32, tile=0)


class TestMatrixDotPreconditions(unittest.TestCase):
    def setUp(self) -> None:
        self.be = CPUBackend(np.float32, rng=RandomState(0))

    def test_unknown_kernel_raises_and_leaves_output(self):
        out = _tensor_from_np([[7.0, 7.0], [7.0, 7.0]])
        with self.assertRaises(UnsupportedKernelError) as ctx:
            self.be.matrix_dot(Tensor((2, 2)), Tensor((2, 2)), False, False, 1.0, 0.0, out, "cublas")
        self.assertEqual(ctx.exception.kernel, "cublas")
        np.testing.assert_array_equal(out.to_numpy(), np.full((2, 2), 7.0))

    def test_common_dimension_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.be.matrix_dot(Tensor((2, 3)), Tensor((2, 3)), False, False, 1.0, 0.0, Tensor((2, 3)))

    def test_output_size_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.be.matrix_dot(Tensor((2, 3)), Tensor((3, 4)), False, False, 1.0, 0.0, Tensor((2, 3)))

    def test_zero_dimension(self):
        with self.assertRaises(ShapeMismatchError):
            self.be.matrix_dot(Tensor((0, 3)), Tensor((3, 4)), False, False, 1.0, 0.0, Tensor((0, 4)))

    def test_debug_logs_dimensions(self):
        be = CPUBackend(np.float32, rng=RandomState(0), debug=True)
        with self.assertLogs("blitz.infrastructure.backend._base", level="DEBUG") as logs:
            be.matrix_dot(Tensor((2, 3)), Tensor((3, 4)), False, False, 1.0, 0.0, Tensor((2, 4)))
        text = "\n".join(logs.output)
        self.assertIn("dim left: 2", text)
        self.assertIn("dim common: 3", text)
        self.assertIn("dim right: 4", text)


if __name__ == "__main__":
    unittest.main()
