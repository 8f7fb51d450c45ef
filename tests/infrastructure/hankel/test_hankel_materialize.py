import unittest
import warnings

import numpy as np

from hankeltensors import (
    Hankel,
    InvalidWindowSizeError,
    ShapeMismatchError,
    flat_hankel_into,
    hankel,
    hankel_reference,
)


def _ref_hankel_numpy(v: np.ndarray, channel_ndims: int, kernel_size) -> np.ndarray:
    """
    Reference materialization written directly from the index law:

      A[c, j, k, b] = v[c, j + k, b]
    """
    C, K = channel_ndims, len(kernel_size)
    input_size = v.shape[C : C + K]
    output_size = tuple(n - j + 1 for n, j in zip(input_size, kernel_size))
    shape = v.shape[:C] + tuple(kernel_size) + output_size + v.shape[C + K :]
    out = np.empty(shape, dtype=v.dtype)
    for index in np.ndindex(*shape):
        c = index[:C]
        j = index[C : C + K]
        k = index[C + K : C + 2 * K]
        b = index[C + 2 * K :]
        out[index] = v[c + tuple(a + d for a, d in zip(j, k)) + b]
    return out


class TestHankelMaterialize(unittest.TestCase):

    def test_matches_view_for_several_layouts(self) -> None:
        rng = np.random.default_rng(42)
        cases = [
            # (channel_size, input_size, kernel_size, batch_size)
            ((3, 2), (5, 5), (3, 2), (2,)),
            ((1,), (4,), (2,), (1,)),
            ((), (6,), (3,), ()),
            ((2,), (4, 5, 3), (2, 3, 1), (2, 2)),
            ((2,), (3, 3, 3, 3), (2, 1, 3, 2), (1,)),
            ((), (7, 2), (7, 2), (3,)),
        ]
        for channel_size, input_size, kernel_size, batch_size in cases:
            with self.subTest(
                channel_size=channel_size,
                input_size=input_size,
                kernel_size=kernel_size,
                batch_size=batch_size,
            ):
                v = rng.standard_normal(channel_size + input_size + batch_size)
                A = hankel(v, channel_size, kernel_size)
                view = Hankel(v, channel_size, kernel_size)

                self.assertEqual(A.shape, view.shape)
                self.assertTrue(view == A)
                np.testing.assert_array_equal(
                    A, _ref_hankel_numpy(v, len(channel_size), kernel_size)
                )

    def test_matches_reference_path(self) -> None:
        rng = np.random.default_rng(1)
        v = rng.integers(-10, 10, size=(2, 4, 5, 3))

        np.testing.assert_array_equal(
            hankel(v, (2,), (2, 3)), hankel_reference(v, (2,), (2, 3))
        )

    def test_result_is_dense_and_independent(self) -> None:
        v = np.arange(12.0).reshape(1, 6, 2)
        A = hankel(v, (1,), (3,))

        self.assertTrue(A.flags.c_contiguous)
        self.assertTrue(A.flags.writeable)
        self.assertFalse(np.shares_memory(A, v))

        A[0, 0, 0, 0] = -1.0
        self.assertEqual(v[0, 0, 0], 0.0)

    def test_input_is_not_modified(self) -> None:
        v = np.arange(24).reshape(2, 4, 3)
        before = v.copy()
        hankel(v, (2,), (2,))
        np.testing.assert_array_equal(v, before)

    def test_dtype_is_preserved(self) -> None:
        for dtype in (np.float32, np.float64, np.int32, np.complex128, np.bool_):
            with self.subTest(dtype=dtype):
                v = (np.arange(10) % 3).astype(dtype).reshape(1, 5, 2)
                A = hankel(v, (1,), (2,))
                self.assertEqual(A.dtype, np.dtype(dtype))
                self.assertTrue(Hankel(v, (1,), (2,)) == A)

    def test_concrete_values(self) -> None:
        v = np.array([1, 2, 3, 4]).reshape(1, 4, 1)
        A = hankel(v, (1,), (2,))

        # A[0, j, k, 0] = v[j + k]
        expected = np.array([[1, 2, 3], [2, 3, 4]])
        np.testing.assert_array_equal(A[0, :, :, 0], expected)

    def test_integer_channel_spec(self) -> None:
        v = np.arange(2 * 3 * 5 * 2).reshape(2, 3, 5, 2)
        np.testing.assert_array_equal(hankel(v, 2, (4,)), hankel(v, (2, 3), (4,)))

    def test_non_contiguous_input_is_silent_and_correct(self) -> None:
        base = np.arange(3 * 2 * 6 * 2, dtype=np.float64).reshape(2, 6, 2, 3)
        v = base.transpose(3, 2, 1, 0)  # (3, 2, 6, 2)

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            A = hankel(v, (3, 2), (4,))

        self.assertEqual(caught, [])
        np.testing.assert_array_equal(A, _ref_hankel_numpy(v, 2, (4,)))

    def test_kernel_equal_to_input_succeeds(self) -> None:
        v = np.arange(5.0).reshape(1, 5, 1)
        self.assertEqual(hankel(v, (1,), (5,)).shape, (1, 5, 1, 1))

    def test_kernel_larger_than_input_fails(self) -> None:
        v = np.arange(5.0).reshape(1, 5, 1)
        with self.assertRaises(InvalidWindowSizeError):
            hankel(v, (1,), (6,))

    def test_channel_mismatch_fails(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            hankel(np.zeros((2, 5, 1)), (3,), (2,))


class TestFlatHankelInto(unittest.TestCase):

    def test_fills_buffer(self) -> None:
        rng = np.random.default_rng(5)
        v = rng.standard_normal((3, 6, 4, 2))
        out = np.empty((3, 2, 3, 5, 2, 2))

        result = flat_hankel_into(out, v, (2, 3))

        self.assertIs(result, out)
        np.testing.assert_array_equal(out, _ref_hankel_numpy(v, 1, (2, 3)))

    def test_wrong_buffer_shape(self) -> None:
        v = np.zeros((1, 5, 1))
        with self.assertRaises(ShapeMismatchError):
            flat_hankel_into(np.empty((1, 2, 3, 1)), v, (2,))

    def test_requires_flattened_image(self) -> None:
        v = np.zeros((2, 2, 5, 1))
        with self.assertRaises(ShapeMismatchError):
            flat_hankel_into(np.empty((2, 2, 2, 4, 1)), v, (2,))


if __name__ == "__main__":
    unittest.main()
