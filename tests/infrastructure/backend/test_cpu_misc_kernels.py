import contextlib
import types
import unittest

import numpy as np

from blitz.domain import (
    Device,
    DeviceMismatchError,
    KernelNotImplementedError,
    ShapeMismatchError,
)
from blitz.infrastructure._random import RandomState
from blitz.infrastructure.backend import CPUBackend
from blitz.infrastructure.tensor import Tensor


def _tensor_from_np(arr, *, dtype=np.float32, row_major: bool = True) -> Tensor:
    return Tensor.from_numpy(np.asarray(arr, dtype=dtype), row_major=row_major)


class TestElementwise(unittest.TestCase):
    def setUp(self) -> None:
        self.be = CPUBackend(np.float32, rng=RandomState(0))
        self.a = _tensor_from_np([1.0, -2.0, 3.0])
        self.b = _tensor_from_np([4.0, 5.0, -6.0])
        self.out = Tensor((3,))

    def test_tensor_operands(self):
        cases = {
            "add": [5.0, 3.0, -3.0],
            "minus": [-3.0, -7.0, 9.0],
            "multiply": [4.0, -10.0, -18.0],
            "maximum": [4.0, 5.0, 3.0],
        }
        for op, expected in cases.items():
            with self.subTest(op=op):
                getattr(self.be, op)(self.a, self.b, self.out)
                np.testing.assert_array_equal(self.out.to_numpy(), expected)

    def test_scalar_operands(self):
        cases = {
            "add": [3.0, 0.0, 5.0],
            "minus": [-1.0, -4.0, 1.0],
            "multiply": [2.0, -4.0, 6.0],
            "maximum": [2.0, 2.0, 3.0],
        }
        for op, expected in cases.items():
            with self.subTest(op=op):
                getattr(self.be, op)(self.a, 2, self.out)
                np.testing.assert_array_equal(self.out.to_numpy(), expected)

    def test_in_place(self):
        self.be.multiply(self.a, 0.5, self.a)
        np.testing.assert_array_equal(self.a.to_numpy(), [0.5, -1.0, 1.5])

    def test_size_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.be.add(self.a, Tensor((2,)), self.out)
        with self.assertRaises(ShapeMismatchError):
            self.be.minus(self.a, 1.0, Tensor((4,)))

    def test_sum(self):
        self.assertEqual(self.be.sum(self.a), 2.0)

    def test_device_mismatch(self):
        foreign = types.SimpleNamespace(
            device=Device("cuda:0"),
            dtype=np.dtype(np.float32),
            size=3,
            shape=(3,),
            row_major=True,
            data=np.zeros(3, dtype=np.float32),
        )
        with self.assertRaises(DeviceMismatchError):
            self.be.add(self.a, foreign, self.out)


class TestFillsAndDistributions(unittest.TestCase):
    def setUp(self) -> None:
        self.be = CPUBackend(np.float64, rng=RandomState(1234))

    def test_empty_and_zeros(self):
        z = self.be.zeros((2, 3), row_major=False)
        self.assertEqual(z.dtype, np.float64)
        self.assertFalse(z.row_major)
        self.assertEqual(float(z.data.sum()), 0.0)
        self.assertEqual(self.be.empty((4,)).shape, (4,))

    def test_constant(self):
        t = Tensor((2, 2), dtype=np.float64)
        self.be.constant_distribution(3.5, t)
        np.testing.assert_array_equal(t.to_numpy(), np.full((2, 2), 3.5))

    def test_uniform_range_and_moments(self):
        t = Tensor((20000,), dtype=np.float64)
        self.be.uniform_distribution(-2.0, 3.0, t)
        v = t.to_numpy()
        self.assertGreaterEqual(v.min(), -2.0)
        self.assertLess(v.max(), 3.0)
        self.assertAlmostEqual(float(v.mean()), 0.5, delta=0.05)

    def test_successive_draws_differ(self):
        a = Tensor((16,), dtype=np.float64)
        b = Tensor((16,), dtype=np.float64)
        self.be.uniform_distribution(0.0, 1.0, a)
        self.be.uniform_distribution(0.0, 1.0, b)
        self.assertFalse(np.array_equal(a.to_numpy(), b.to_numpy()))

    def test_explicit_random_state_is_reproducible(self):
        a = Tensor((16,), dtype=np.float64)
        b = Tensor((16,), dtype=np.float64)
        self.be.normal_distribution(0.0, 1.0, a, RandomState(7))
        self.be.normal_distribution(0.0, 1.0, b, RandomState(7))
        np.testing.assert_array_equal(a.to_numpy(), b.to_numpy())

    def test_backend_state_advances(self):
        rng = RandomState(10)
        be = CPUBackend(np.float32, rng=rng)
        be.uniform_distribution(0.0, 1.0, Tensor((4,)))
        be.normal_distribution(0.0, 1.0, Tensor((4,)))
        self.assertEqual(rng.counter, 2)

    def test_normal_moments(self):
        t = Tensor((20000,), dtype=np.float64)
        self.be.normal_distribution(1.0, 2.0, t)
        v = t.to_numpy()
        self.assertAlmostEqual(float(v.mean()), 1.0, delta=0.1)
        self.assertAlmostEqual(float(v.std()), 2.0, delta=0.1)

    def test_binary_mask_density(self):
        t = Tensor((20000,), dtype=np.float64)
        self.be.make_binary_mask(0.0, 1.0, 0.3, t)
        v = t.to_numpy()
        self.assertTrue(set(np.unique(v)).issubset({0.0, 1.0}))
        self.assertAlmostEqual(float(v.mean()), 0.3, delta=0.02)

    def test_binary_mask_shifted_range(self):
        t = Tensor((20000,), dtype=np.float64)
        self.be.make_binary_mask(2.0, 4.0, 3.5, t)
        self.assertAlmostEqual(float(t.to_numpy().mean()), 0.75, delta=0.02)

    def test_host_copy_to_is_raw_storage_copy(self):
        t = Tensor((2, 2), dtype=np.float64, row_major=False)
        self.be.host_copy_to([1.0, 2.0, 3.0, 4.0], t)
        np.testing.assert_array_equal(t.data, [1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(t.to_numpy(), [[1.0, 3.0], [2.0, 4.0]])

    def test_host_copy_to_size_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.be.host_copy_to(np.zeros(3), Tensor((2, 2), dtype=np.float64))


class TestEvaluateClassify(unittest.TestCase):
    def setUp(self) -> None:
        self.be = CPUBackend(np.float32, rng=RandomState(0))

    def test_accuracy_and_flipped_target(self):
        pred = _tensor_from_np([[0.1, 0.9], [0.8, 0.2]])
        self.assertEqual(
            self.be.evaluate_classify(pred, _tensor_from_np([[0, 1], [1, 0]])), 1.0
        )
        self.assertEqual(
            self.be.evaluate_classify(pred, _tensor_from_np([[0, 1], [0, 1]])), 0.5
        )

    def test_ties_pick_first_index(self):
        pred = _tensor_from_np([[0.5, 0.5]])
        self.assertEqual(self.be.evaluate_classify(pred, _tensor_from_np([[1, 0]])), 1.0)
        self.assertEqual(self.be.evaluate_classify(pred, _tensor_from_np([[0, 1]])), 0.0)

    def test_target_must_be_exactly_one(self):
        pred = _tensor_from_np([[0.1, 0.9]])
        self.assertEqual(self.be.evaluate_classify(pred, _tensor_from_np([[0.1, 0.9]])), 0.0)

    def test_size_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.be.evaluate_classify(Tensor((2, 2)), Tensor((2, 3)))


class TestDeclaredKernels(unittest.TestCase):
    def test_unimplemented_kernels_raise(self):
        be = CPUBackend(np.float32, rng=RandomState(0))
        a, b = Tensor((2,)), Tensor((2,))
        calls = {
            "square_mean_apply": lambda: be.square_mean_apply(a, b),
            "square_mean_derivative": lambda: be.square_mean_derivative(a, b, a),
            "abs_mean_apply": lambda: be.abs_mean_apply(a, b),
            "abs_mean_derivative": lambda: be.abs_mean_derivative(a, b, a),
            "batch_norm_forward": lambda: be.batch_norm_forward(a),
            "batch_norm_backward": lambda: be.batch_norm_backward(a),
            "evaluate_regress": lambda: be.evaluate_regress(a, b),
        }
        for op, call in calls.items():
            with self.subTest(op=op):
                with self.assertRaises(KernelNotImplementedError) as ctx:
                    call()
                self.assertEqual(ctx.exception.op, op)

    def test_synchronize_is_noop_on_host(self):
        CPUBackend(np.float32).synchronize()


class _ScopedBackend(CPUBackend):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.events = []

    @contextlib.contextmanager
    def _device_scope(self):
        self.events.append("enter")
        try:
            yield
        finally:
            self.events.append("exit")


class TestDeviceScope(unittest.TestCase):
    def test_every_kernel_call_enters_scope_once(self):
        be = _ScopedBackend(np.float32, rng=RandomState(0))
        x = _tensor_from_np([[1.0, -1.0], [2.0, 0.5]])
        y = Tensor((2, 2))
        be.rectlin_apply(x, 0.0, y)
        self.assertEqual(be.events, ["enter", "exit"])
        be.matrix_dot(x, x, False, False, 1.0, 0.0, y)
        be.bias_backward_update(x, Tensor((2,)))
        be.uniform_distribution(0.0, 1.0, y)
        be.sum(y)
        self.assertEqual(be.events, ["enter", "exit"] * 5)

    def test_scope_is_left_when_a_kernel_raises(self):
        be = _ScopedBackend(np.float32)
        with self.assertRaises(ShapeMismatchError):
            be.add(Tensor((2,)), Tensor((3,)), Tensor((2,)))
        self.assertEqual(be.events, ["enter", "exit"])


if __name__ == "__main__":
    unittest.main()
