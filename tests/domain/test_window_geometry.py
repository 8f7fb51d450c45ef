import unittest

from hankeltensors.domain import (
    IndexOutOfRangeError,
    InvalidWindowSizeError,
    ShapeMismatchError,
    WindowGeometry,
)


class TestWindowGeometryFromShape(unittest.TestCase):

    def test_sizes_are_derived_by_position(self) -> None:
        g = WindowGeometry.from_shape((3, 2, 5, 6, 2), (3, 2), (3, 2))

        self.assertEqual(g.channel_size, (3, 2))
        self.assertEqual(g.kernel_size, (3, 2))
        self.assertEqual(g.input_size, (5, 6))
        self.assertEqual(g.batch_size, (2,))
        self.assertEqual(g.output_size, (3, 5))

    def test_view_shape_and_rank(self) -> None:
        g = WindowGeometry.from_shape((3, 2, 5, 5, 2), (3, 2), (3, 2))

        self.assertEqual(g.view_shape, (3, 2) + (3, 2) + (3, 4) + (2,))
        self.assertEqual(g.image_shape, (3, 2, 5, 5, 2))
        self.assertEqual(g.ndim, 5 + 2)

    def test_integer_channel_spec_reads_leading_axes(self) -> None:
        g = WindowGeometry.from_shape((4, 3, 7, 2, 2), 2, (3,))

        self.assertEqual(g.channel_size, (4, 3))
        self.assertEqual(g.input_size, (7,))
        self.assertEqual(g.batch_size, (2, 2))

    def test_no_channel_and_no_batch_axes(self) -> None:
        g = WindowGeometry.from_shape((6, 4), (), (2, 4))

        self.assertEqual(g.channel_size, ())
        self.assertEqual(g.batch_size, ())
        self.assertEqual(g.output_size, (5, 1))
        self.assertEqual(g.view_shape, (2, 4, 5, 1))

    def test_kernel_equal_to_input_gives_single_position(self) -> None:
        g = WindowGeometry.from_shape((1, 4, 1), (1,), (4,))
        self.assertEqual(g.output_size, (1,))

    def test_kernel_larger_than_input_is_rejected(self) -> None:
        with self.assertRaises(InvalidWindowSizeError) as cm:
            WindowGeometry.from_shape((1, 4, 1), (1,), (5,))

        self.assertEqual(cm.exception.kernel_size, (5,))
        self.assertEqual(cm.exception.input_size, (4,))
        # also catchable as a shape mismatch
        self.assertIsInstance(cm.exception, ShapeMismatchError)

    def test_non_positive_kernel_is_rejected(self) -> None:
        for kernel in [(0,), (-1,), (2, 0)]:
            with self.subTest(kernel=kernel):
                with self.assertRaises(InvalidWindowSizeError):
                    WindowGeometry.from_shape((1, 4, 4, 1), (1,), kernel)

    def test_malformed_kernel_is_rejected(self) -> None:
        for kernel in [2, None, (2.5,), ("a",)]:
            with self.subTest(kernel=kernel):
                with self.assertRaises(InvalidWindowSizeError) as cm:
                    WindowGeometry.from_shape((1, 4, 1), (1,), kernel)
                self.assertIsNone(cm.exception.input_size)

    def test_scalar_kernel_is_reported_as_given(self) -> None:
        with self.assertRaises(InvalidWindowSizeError) as cm:
            WindowGeometry.from_shape((1, 4, 1), (1,), 2)
        self.assertEqual(cm.exception.kernel_size, (2,))

    def test_channel_size_mismatch(self) -> None:
        with self.assertRaises(ShapeMismatchError) as cm:
            WindowGeometry.from_shape((3, 5, 2), (2,), (3,))

        self.assertEqual(cm.exception.actual, (3, 5, 2))
        self.assertEqual(cm.exception.expected, (2, 5, 2))

    def test_too_few_axes(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            WindowGeometry.from_shape((3, 5), (3,), (2, 2))

    def test_integer_channel_spec_out_of_range(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            WindowGeometry.from_shape((3, 5), 3, ())

    def test_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            WindowGeometry.from_shape((3, 5, 2), (2,), (3,))


class TestWindowGeometryFromOutput(unittest.TestCase):

    def test_input_size_is_reconstructed(self) -> None:
        g = WindowGeometry.from_output((2,), (3, 2), (4, 5), (7,))

        self.assertEqual(g.input_size, (6, 6))
        self.assertEqual(g.output_size, (4, 5))
        self.assertEqual(g.image_shape, (2, 6, 6, 7))

    def test_rank_disagreement(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            WindowGeometry.from_output((2,), (3, 2), (4,), (7,))

    def test_empty_output(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            WindowGeometry.from_output((2,), (3,), (0,), (7,))


class TestWindowGeometryIndexing(unittest.TestCase):

    def setUp(self) -> None:
        self.g = WindowGeometry.from_shape((2, 5, 4, 3), (2,), (3, 2))

    def test_split_index(self) -> None:
        c, j, k, b = self.g.split_index((1, 2, 0, 1, 3, 2))

        self.assertEqual(c, (1,))
        self.assertEqual(j, (2, 0))
        self.assertEqual(k, (1, 3))
        self.assertEqual(b, (2,))

    def test_to_underlying_adds_offset_and_position(self) -> None:
        self.assertEqual(self.g.to_underlying((1, 2, 0, 1, 3, 2)), (1, 3, 3, 2))
        self.assertEqual(self.g.to_underlying((0, 0, 0, 0, 0, 0)), (0, 0, 0, 0))

    def test_check_index_accepts_every_valid_index(self) -> None:
        self.assertEqual(self.g.check_index((1, 2, 1, 2, 2, 2)), (1, 2, 1, 2, 2, 2))

    def test_check_index_bounds_use_view_shape(self) -> None:
        # view shape: (2, 3, 2, 3, 3, 3)
        bad = [
            (2, 0, 0, 0, 0, 0),
            (0, 3, 0, 0, 0, 0),
            (0, 0, 0, 3, 0, 0),
            (0, 0, 0, 0, 0, 3),
            (-1, 0, 0, 0, 0, 0),
        ]
        for index in bad:
            with self.subTest(index=index):
                with self.assertRaises(IndexOutOfRangeError) as cm:
                    self.g.check_index(index)
                self.assertEqual(cm.exception.shape, self.g.view_shape)

    def test_check_index_wrong_arity(self) -> None:
        with self.assertRaises(IndexOutOfRangeError):
            self.g.check_index((0, 0, 0))
        with self.assertRaises(IndexError):
            self.g.check_index((0, 0, 0, 0, 0, 0, 0))

    def test_offsets_cover_the_kernel(self) -> None:
        offsets = list(self.g.offsets())

        self.assertEqual(len(offsets), 3 * 2)
        self.assertEqual(offsets[0], (0, 0))
        self.assertEqual(offsets[-1], (2, 1))

    def test_window_slices_span_the_output(self) -> None:
        # output size (3, 3)
        self.assertEqual(self.g.window((2, 1)), (slice(2, 5), slice(1, 4)))

    def test_view_strides_repeat_spatial_strides(self) -> None:
        strides = (480, 96, 24, 8)
        self.assertEqual(
            self.g.view_strides(strides), (480, 96, 24, 96, 24, 8)
        )

    def test_flattened_collapses_channel_and_batch(self) -> None:
        g = WindowGeometry.from_shape((3, 2, 5, 2, 4), (3, 2), (2,))
        flat = g.flattened()

        self.assertEqual(flat.channel_size, (6,))
        self.assertEqual(flat.batch_size, (8,))
        self.assertEqual(flat.kernel_size, g.kernel_size)
        self.assertEqual(flat.output_size, g.output_size)

    def test_flattened_empty_groups_become_one(self) -> None:
        g = WindowGeometry.from_shape((5,), (), (2,))
        self.assertEqual(g.flattened().image_shape, (1, 5, 1))

    def test_geometry_is_immutable(self) -> None:
        with self.assertRaises(AttributeError):
            self.g.kernel_size = (1, 1)  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
