"""
Window geometry for Hankel (sliding-window) tensors.

This module is the single source of truth for what a Hankel structure means.
Given an image whose axes are split into three contiguous groups

    (channel..., input..., batch...)

and a kernel (window) size per input axis, it derives the output size

    output_size[d] = input_size[d] - kernel_size[d] + 1

and the index transform from a view multi-index

    (channel..., offset..., position..., batch...)

to the underlying image multi-index

    (channel..., offset + position, batch...)

Indices are 0-based. The sliding-window view, the dense materialization and
both contraction kernels consult this module for shapes, index transforms,
window slices and strides, so they cannot drift apart.

Notes
-----
This module is pure Python and does not depend on NumPy; it only deals with
shape tuples and integer indices.
"""

from __future__ import annotations

import itertools
import math
import numbers
import operator
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

from ._errors import IndexOutOfRangeError, InvalidWindowSizeError, ShapeMismatchError

Shape = Tuple[int, ...]
ChannelSpec = Union[int, Sequence[int]]


def _as_size_tuple(values: Sequence[int], what: str) -> Shape:
    """
    Normalize a sequence of integer-like sizes into a tuple of ints.

    Raises
    ------
    ShapeMismatchError
        If an entry is not an integer or is negative.
    """
    out = []
    for v in values:
        try:
            n = operator.index(v)
        except TypeError:
            raise ShapeMismatchError(what, "non-negative integers", tuple(values))
        if n < 0:
            raise ShapeMismatchError(what, "non-negative integers", tuple(values))
        out.append(n)
    return tuple(out)


def _as_kernel_size(kernel_size: Sequence[int]) -> Shape:
    """
    Normalize a kernel size into a tuple of positive ints.

    Raises
    ------
    InvalidWindowSizeError
        If `kernel_size` is not a sequence, or an entry is not an integer or
        is not positive.
    """
    try:
        entries = tuple(kernel_size)
    except TypeError:
        raise InvalidWindowSizeError((kernel_size,)) from None
    try:
        kernel = tuple(operator.index(j) for j in entries)
    except TypeError:
        raise InvalidWindowSizeError(entries) from None
    if any(j <= 0 for j in kernel):
        raise InvalidWindowSizeError(kernel)
    return kernel


@dataclass(frozen=True)
class WindowGeometry:
    """
    Shape and index arithmetic of a Hankel (sliding-window) tensor.

    Attributes
    ----------
    channel_size : tuple[int, ...]
        Extents of the channel axes (not slid over).
    kernel_size : tuple[int, ...]
        Window extent per spatial axis.
    input_size : tuple[int, ...]
        Extents of the spatial axes of the underlying image.
    batch_size : tuple[int, ...]
        Extents of the trailing batch axes (possibly empty).

    Notes
    -----
    Instances are immutable and validated on construction: every kernel
    entry must be positive and no larger than the matching input extent.
    """

    channel_size: Shape
    kernel_size: Shape
    input_size: Shape
    batch_size: Shape

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "channel_size", _as_size_tuple(self.channel_size, "channel size")
        )
        object.__setattr__(self, "kernel_size", _as_kernel_size(self.kernel_size))
        object.__setattr__(
            self, "input_size", _as_size_tuple(self.input_size, "input size")
        )
        object.__setattr__(
            self, "batch_size", _as_size_tuple(self.batch_size, "batch size")
        )

        if len(self.input_size) != len(self.kernel_size):
            raise ShapeMismatchError(
                "number of spatial axes", len(self.kernel_size), len(self.input_size)
            )
        if any(j > n for j, n in zip(self.kernel_size, self.input_size)):
            raise InvalidWindowSizeError(self.kernel_size, self.input_size)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_shape(
        cls,
        shape: Sequence[int],
        channel_size: ChannelSpec,
        kernel_size: Sequence[int],
    ) -> "WindowGeometry":
        """
        Derive the geometry of a Hankel view over an image of a given shape.

        Parameters
        ----------
        shape : Sequence[int]
            Shape of the underlying image.
        channel_size : int or Sequence[int]
            Either the sizes of the leading channel axes, or an integer giving
            the number of leading axes to treat as channels (their sizes are
            then read from `shape`).
        kernel_size : Sequence[int]
            Window size per spatial axis. The spatial axes are the
            `len(kernel_size)` axes immediately following the channel axes;
            every remaining trailing axis is a batch axis.

        Returns
        -------
        WindowGeometry
            The validated geometry.

        Raises
        ------
        ShapeMismatchError
            If `shape` has fewer axes than channels plus kernel, or its
            leading axes differ from `channel_size`.
        InvalidWindowSizeError
            If a kernel entry is not positive or exceeds its input extent.
        """
        shape = _as_size_tuple(shape, "array shape")
        kernel = _as_kernel_size(kernel_size)

        if isinstance(channel_size, numbers.Integral):
            channel_size = int(channel_size)
            if not 0 <= channel_size <= len(shape):
                raise ShapeMismatchError(
                    "number of channel axes", f"0..{len(shape)}", channel_size
                )
            channel = shape[:channel_size]
        else:
            channel = _as_size_tuple(channel_size, "channel size")

        C, K = len(channel), len(kernel)
        if len(shape) < C + K:
            raise ShapeMismatchError("array rank", f">= {C + K}", len(shape))

        input_size = shape[C : C + K]
        batch_size = shape[C + K :]
        if shape[:C] != channel:
            raise ShapeMismatchError(
                "array shape", channel + input_size + batch_size, shape
            )

        return cls(channel, kernel, input_size, batch_size)

    @classmethod
    def from_output(
        cls,
        channel_size: Sequence[int],
        kernel_size: Sequence[int],
        output_size: Sequence[int],
        batch_size: Sequence[int],
    ) -> "WindowGeometry":
        """
        Build the geometry whose output size is known (adjoint direction).

        The input size is reconstructed as `kernel + output - 1` per axis.

        Raises
        ------
        ShapeMismatchError
            If kernel and output sizes have different lengths or the output
            size is not positive.
        """
        kernel = _as_kernel_size(kernel_size)
        output = _as_size_tuple(output_size, "output size")
        if len(output) != len(kernel):
            raise ShapeMismatchError("number of spatial axes", len(kernel), len(output))
        if any(k <= 0 for k in output):
            raise ShapeMismatchError("output size", "positive extents", output)
        input_size = tuple(j + k - 1 for j, k in zip(kernel, output))
        return cls(channel_size, kernel, input_size, batch_size)

    # ------------------------------------------------------------------
    # Derived sizes
    # ------------------------------------------------------------------
    @property
    def output_size(self) -> Shape:
        """Number of window positions per spatial axis."""
        return tuple(n - j + 1 for n, j in zip(self.input_size, self.kernel_size))

    @property
    def channel_ndims(self) -> int:
        return len(self.channel_size)

    @property
    def kernel_ndims(self) -> int:
        return len(self.kernel_size)

    @property
    def batch_ndims(self) -> int:
        return len(self.batch_size)

    @property
    def image_shape(self) -> Shape:
        """Shape of the underlying image: `(channel..., input..., batch...)`."""
        return self.channel_size + self.input_size + self.batch_size

    @property
    def view_shape(self) -> Shape:
        """Shape of the view: `(channel..., kernel..., output..., batch...)`."""
        return self.channel_size + self.kernel_size + self.output_size + self.batch_size

    @property
    def ndim(self) -> int:
        """Rank of the view, i.e. image rank plus the number of kernel axes."""
        return len(self.view_shape)

    def flattened(self) -> "WindowGeometry":
        """
        Return the geometry with channel and batch axes each collapsed to one.

        Returns
        -------
        WindowGeometry
            Geometry with `channel_size == (prod(channel_size),)` and
            `batch_size == (prod(batch_size),)`. Empty groups flatten to 1.
        """
        return WindowGeometry(
            (math.prod(self.channel_size),),
            self.kernel_size,
            self.input_size,
            (math.prod(self.batch_size),),
        )

    # ------------------------------------------------------------------
    # Index arithmetic
    # ------------------------------------------------------------------
    def check_index(self, index: Sequence[int]) -> Shape:
        """
        Validate a view multi-index against the view shape.

        Parameters
        ----------
        index : Sequence[int]
            Multi-index with one entry per view axis.

        Returns
        -------
        tuple[int, ...]
            The index normalized to a tuple of ints.

        Raises
        ------
        IndexOutOfRangeError
            If the index has the wrong number of entries or an entry lies
            outside `[0, view_shape[axis])`.
        """
        index = tuple(operator.index(i) for i in index)
        shape = self.view_shape
        if len(index) != len(shape):
            raise IndexOutOfRangeError(index, shape)
        if any(not 0 <= i < n for i, n in zip(index, shape)):
            raise IndexOutOfRangeError(index, shape)
        return index

    def split_index(self, index: Sequence[int]) -> Tuple[Shape, Shape, Shape, Shape]:
        """
        Split a view multi-index into `(channel, offset, position, batch)`.
        """
        index = tuple(index)
        C, K = self.channel_ndims, self.kernel_ndims
        return (
            index[:C],
            index[C : C + K],
            index[C + K : C + 2 * K],
            index[C + 2 * K :],
        )

    def to_underlying(self, index: Sequence[int]) -> Shape:
        """
        Map a view multi-index to the underlying image multi-index.

        Implements `(c, j, k, b) -> (c, j + k, b)` componentwise over the
        spatial axes. No bounds checking is performed here.
        """
        c, j, k, b = self.split_index(index)
        return c + tuple(jd + kd for jd, kd in zip(j, k)) + b

    def offsets(self) -> Iterator[Shape]:
        """
        Iterate over every in-kernel offset `j` in row-major order.
        """
        return itertools.product(*(range(j) for j in self.kernel_size))

    def window(self, offset: Sequence[int]) -> Tuple[slice, ...]:
        """
        Spatial slices of the image touched by a fixed kernel offset.

        For offset `j`, position `k` reads image coordinate `j + k`; as `k`
        runs over the output size this is `slice(j_d, j_d + output_d)` on
        every spatial axis `d`.
        """
        return tuple(
            slice(jd, jd + nd) for jd, nd in zip(offset, self.output_size)
        )

    def view_strides(self, image_strides: Sequence[int]) -> Shape:
        """
        Compute zero-copy strides of the view from the image strides.

        Offset and position axes both step along the same spatial axis of the
        image, so each spatial stride appears twice.
        """
        strides = tuple(image_strides)
        if len(strides) != len(self.image_shape):
            raise ShapeMismatchError(
                "number of strides", len(self.image_shape), len(strides)
            )
        C, K = self.channel_ndims, self.kernel_ndims
        spatial = strides[C : C + K]
        return strides[:C] + spatial + spatial + strides[C + K :]
