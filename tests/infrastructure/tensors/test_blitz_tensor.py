import unittest

import numpy as np

from blitz.domain import Device, ShapeMismatchError
from blitz.infrastructure.tensor import Tensor


class TestTensorConstruction(unittest.TestCase):
    def test_zero_initialized_flat_buffer(self):
        t = Tensor((2, 3))
        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.size, 6)
        self.assertEqual(t.ndim, 2)
        self.assertEqual(t.data.shape, (6,))
        self.assertEqual(t.dtype, np.float32)
        self.assertTrue(t.row_major)
        self.assertEqual(t.device, Device("cpu"))
        np.testing.assert_array_equal(t.to_numpy(), np.zeros((2, 3), np.float32))

    def test_scalar_shape(self):
        t = Tensor(())
        self.assertEqual(t.size, 1)
        self.assertEqual(t.to_numpy().shape, ())

    def test_float64(self):
        t = Tensor((4,), dtype=np.float64)
        self.assertEqual(t.dtype, np.float64)
        self.assertEqual(t.data.dtype, np.float64)

    def test_rejects_non_float_dtypes(self):
        for dt in (np.int32, np.float16, np.int64):
            with self.subTest(dtype=dt):
                with self.assertRaises(TypeError):
                    Tensor((2,), dtype=dt)

    def test_rejects_negative_extent(self):
        with self.assertRaises(ValueError):
            Tensor((2, -3))

    def test_from_numpy_defaults_to_float32_for_ints(self):
        t = Tensor.from_numpy(np.arange(6).reshape(2, 3))
        self.assertEqual(t.dtype, np.float32)
        np.testing.assert_array_equal(t.to_numpy(), np.arange(6).reshape(2, 3))

    def test_from_numpy_keeps_float64(self):
        t = Tensor.from_numpy(np.ones((2,), dtype=np.float64))
        self.assertEqual(t.dtype, np.float64)


class TestTensorLayout(unittest.TestCase):
    def test_column_major_storage_order(self):
        a = np.array([[1, 2], [3, 4]], dtype=np.float32)
        t = Tensor.from_numpy(a, row_major=False)
        self.assertFalse(t.row_major)
        np.testing.assert_array_equal(t.data, [1, 3, 2, 4])
        np.testing.assert_array_equal(t.to_numpy(), a)

    def test_row_major_storage_order(self):
        a = np.array([[1, 2], [3, 4]], dtype=np.float32)
        t = Tensor.from_numpy(a)
        np.testing.assert_array_equal(t.data, [1, 2, 3, 4])

    def test_copy_from_across_layouts(self):
        a = np.arange(6, dtype=np.float32).reshape(2, 3)
        src = Tensor.from_numpy(a, row_major=False)
        dst = Tensor((2, 3))
        dst.copy_from(src)
        np.testing.assert_array_equal(dst.to_numpy(), a)
        np.testing.assert_array_equal(dst.data, a.ravel())


class TestTensorMutation(unittest.TestCase):
    def test_copy_from_numpy_shape_mismatch(self):
        t = Tensor((2, 2))
        with self.assertRaises(ShapeMismatchError):
            t.copy_from_numpy(np.zeros((4,)))

    def test_copy_from_shape_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            Tensor((2, 2)).copy_from(Tensor((4,)))

    def test_fill(self):
        t = Tensor((3,))
        t.fill(2.5)
        np.testing.assert_array_equal(t.to_numpy(), [2.5, 2.5, 2.5])

    def test_clone_is_independent(self):
        t = Tensor.from_numpy(np.array([1.0, 2.0], dtype=np.float32))
        c = t.clone()
        c.fill(0.0)
        np.testing.assert_array_equal(t.to_numpy(), [1.0, 2.0])
        self.assertEqual(c.shape, t.shape)

    def test_to_numpy_returns_copy(self):
        t = Tensor((2,))
        host = t.to_numpy()
        host[0] = 9.0
        self.assertEqual(float(t.data[0]), 0.0)

    def test_to_same_device_returns_self(self):
        t = Tensor((2,))
        self.assertIs(t.to("cpu"), t)

    def test_zeros_like(self):
        t = Tensor.from_numpy(np.ones((2, 2), dtype=np.float64), row_major=False)
        z = Tensor.zeros_like(t)
        self.assertEqual(z.shape, (2, 2))
        self.assertEqual(z.dtype, np.float64)
        self.assertFalse(z.row_major)
        self.assertEqual(float(z.data.sum()), 0.0)

    def test_repr_mentions_layout(self):
        self.assertIn("col_major", repr(Tensor((1,), row_major=False)))


if __name__ == "__main__":
    unittest.main()
