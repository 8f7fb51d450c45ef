"""
Zero-copy Hankel (sliding-window) view over a NumPy array.

`Hankel` re-exposes every sliding window of an image as if the windows had
been materialized into a larger array, without copying any data:

    A[c, j, k, b] == image[c, j + k, b]

where `c`, `j`, `k`, `b` are the channel, kernel-offset, window-position and
batch multi-indices (0-based). Shapes and the index transform come from
`WindowGeometry`.

Ownership
---------
The view borrows the image: it keeps a reference to it and never copies or
writes to it. Arrays obtained from `to_numpy()` are read-only strided views
sharing the image's memory; they observe any later change the owner makes to
the image.
"""

from __future__ import annotations

from typing import Any, Sequence, Tuple, Union

import numpy as np
from numpy.lib.stride_tricks import as_strided

from ...domain._geometry import WindowGeometry


class Hankel:
    """
    Read-only sliding-window view of an image.

    Parameters
    ----------
    image : array_like
        Underlying data of shape `(channel..., input..., batch...)`.
        NumPy arrays are referenced, not copied.
    channel_size : int or Sequence[int]
        Sizes of the leading channel axes, or the number of leading axes to
        treat as channels.
    kernel_size : Sequence[int]
        Window size per spatial axis.

    Raises
    ------
    ShapeMismatchError
        If the image shape is inconsistent with `channel_size`.
    InvalidWindowSizeError
        If a kernel entry is not positive or exceeds its input extent.

    Notes
    -----
    The view has shape `(channel..., kernel..., output..., batch...)` with
    `output = input - kernel + 1`, and rank `image.ndim + len(kernel_size)`.
    Input and batch sizes are fixed at construction.
    """

    __hash__ = None  # type: ignore[assignment]
    # ndarray operands defer to Hankel.__eq__ instead of broadcasting
    __array_ufunc__ = None

    def __init__(
        self,
        image: Any,
        channel_size: Union[int, Sequence[int]],
        kernel_size: Sequence[int],
    ) -> None:
        image = np.asarray(image)
        self._geometry = WindowGeometry.from_shape(
            image.shape, channel_size, kernel_size
        )
        self._image = image

    # ------------------------------------------------------------------
    # Sizes
    # ------------------------------------------------------------------
    @property
    def image(self) -> np.ndarray:
        return self._image

    @property
    def geometry(self) -> WindowGeometry:
        return self._geometry

    @property
    def channel_size(self) -> Tuple[int, ...]:
        return self._geometry.channel_size

    @property
    def kernel_size(self) -> Tuple[int, ...]:
        return self._geometry.kernel_size

    @property
    def input_size(self) -> Tuple[int, ...]:
        return self._geometry.input_size

    @property
    def output_size(self) -> Tuple[int, ...]:
        return self._geometry.output_size

    @property
    def batch_size(self) -> Tuple[int, ...]:
        return self._geometry.batch_size

    @property
    def shape(self) -> Tuple[int, ...]:
        """`(channel..., kernel..., output..., batch...)`."""
        return self._geometry.view_shape

    @property
    def ndim(self) -> int:
        return self._geometry.ndim

    def rank(self) -> int:
        """Return the view rank, `image.ndim + len(kernel_size)`."""
        return self._image.ndim + self._geometry.kernel_ndims

    @property
    def dtype(self) -> np.dtype:
        return self._image.dtype

    @property
    def size(self) -> int:
        return int(np.prod(self.shape, dtype=np.int64))

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def get(self, index: Sequence[int]) -> Any:
        """
        Return the element at a view multi-index.

        Parameters
        ----------
        index : Sequence[int]
            One integer per view axis.

        Returns
        -------
        Any
            `image[c, j + k, b]` for `index == (c, j, k, b)`.

        Raises
        ------
        IndexOutOfRangeError
            If the index has the wrong length or lies outside the view shape.
        """
        index = self._geometry.check_index(index)
        return self._image[self._geometry.to_underlying(index)]

    def __getitem__(self, index: Union[int, Sequence[int]]) -> Any:
        if not isinstance(index, tuple):
            index = (index,)
        return self.get(index)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a read-only strided `np.ndarray` sharing the image's memory.

        No data is copied: offset and position axes step along the same
        spatial stride of the image.
        """
        return as_strided(
            self._image,
            shape=self.shape,
            strides=self._geometry.view_strides(self._image.strides),
            writeable=False,
        )

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        """
        NumPy conversion hook.

        Without a dtype change and without `copy=True` this is the zero-copy
        view of `to_numpy()`. With `copy=False`, a dtype change raises
        `ValueError` since it cannot be done without copying.
        """
        out = self.to_numpy()
        if dtype is not None and np.dtype(dtype) != out.dtype:
            if copy is False:
                raise ValueError(
                    f"converting a Hankel view from {out.dtype} to "
                    f"{np.dtype(dtype)} requires a copy"
                )
            return out.astype(dtype)
        if copy:
            out = out.copy()
        return out

    def materialize(self) -> np.ndarray:
        """Return a dense, writeable copy of the view (see `hankel`)."""
        from ._hankel_materialize import hankel

        return hankel(self._image, self.channel_size, self.kernel_size)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if isinstance(other, Hankel):
            other_arr = other.to_numpy()
        else:
            try:
                other_arr = np.asarray(other)
            except (TypeError, ValueError):
                return NotImplemented
        if other_arr.shape != self.shape:
            return False
        return bool(np.array_equal(self.to_numpy(), other_arr))

    def __repr__(self) -> str:
        return (
            f"Hankel(shape={self.shape}, channel_size={self.channel_size}, "
            f"kernel_size={self.kernel_size}, dtype={self.dtype})"
        )
