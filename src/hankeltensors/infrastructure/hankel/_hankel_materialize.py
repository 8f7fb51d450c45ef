"""
Dense materialization of Hankel (sliding-window) arrays.

`hankel` allocates a new array of the view's shape and fills it so that

    out[c, j, k, b] == image[c, j + k, b]

which makes it equal, value for value, to the corresponding `Hankel` view.
Use it when a dense, contiguous, writeable result is needed (e.g., before a
linear-algebra routine).

Implementation notes
--------------------
- The channel axes and the batch axes are first flattened to one axis each
  (`flatten_channels_and_batch`), so the kernel only ever sees
  `(C, N_1, ..., N_n, B)` images. If the grouped axes of the input are not
  contiguous, that step copies the input; the copy is a temporary read
  source and does not change the result, so its warning is suppressed here.
- `flat_hankel_into` then performs one block copy per kernel offset `j`:
  for fixed `j`, the positions `k` read the contiguous image window
  `j : j + output_size` on every spatial axis. Output cells never alias, so
  the copies are order-independent.
- `hankel_reference` is the element-by-element path built on `Hankel.get`
  and serves as the correctness oracle for any rank.
"""

from __future__ import annotations

import warnings
from typing import Any, Sequence, Union

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._geometry import WindowGeometry
from ..ops.flatten_cpu import flatten_channels_and_batch
from ._hankel_view import Hankel


def flat_hankel_into(
    out: np.ndarray,
    image: np.ndarray,
    kernel_size: Sequence[int],
) -> np.ndarray:
    """
    Fill a flattened Hankel buffer from a flattened image.

    Parameters
    ----------
    out : np.ndarray
        Writeable buffer of shape `(C, J_1..J_n, K_1..K_n, B)` where
        `K_d = N_d - J_d + 1`.
    image : np.ndarray
        Image of shape `(C, N_1..N_n, B)`.
    kernel_size : Sequence[int]
        Window size `(J_1..J_n)`.

    Returns
    -------
    np.ndarray
        `out`, filled in place.

    Raises
    ------
    ShapeMismatchError
        If `image` does not have exactly one channel and one batch axis
        around the spatial axes, or `out` has the wrong shape.
    InvalidWindowSizeError
        If the kernel does not fit the image.
    """
    kernel = tuple(kernel_size)
    if image.ndim != len(kernel) + 2:
        raise ShapeMismatchError("flattened image rank", len(kernel) + 2, image.ndim)

    geometry = WindowGeometry.from_shape(image.shape, 1, kernel)
    if out.shape != geometry.view_shape:
        raise ShapeMismatchError("output shape", geometry.view_shape, out.shape)

    for j in geometry.offsets():
        out[(slice(None),) + j + (Ellipsis,)] = image[
            (slice(None),) + geometry.window(j) + (slice(None),)
        ]
    return out


def hankel(
    image: Any,
    channel_size: Union[int, Sequence[int]],
    kernel_size: Sequence[int],
) -> np.ndarray:
    """
    Materialize the Hankel array of an image.

    Parameters
    ----------
    image : array_like
        Data of shape `(channel..., input..., batch...)`. Not modified.
    channel_size : int or Sequence[int]
        Sizes of the leading channel axes, or the number of leading axes to
        treat as channels.
    kernel_size : Sequence[int]
        Window size per spatial axis.

    Returns
    -------
    np.ndarray
        New array `A` of shape `(channel..., kernel..., output..., batch...)`
        and the image's dtype, with `A[c, j, k, b] == image[c, j + k, b]`.

    Raises
    ------
    ShapeMismatchError
        If the image shape is inconsistent with `channel_size`.
    InvalidWindowSizeError
        If a kernel entry is not positive or exceeds its input extent.
    """
    v = np.asarray(image)
    geometry = WindowGeometry.from_shape(v.shape, channel_size, kernel_size)

    out = np.empty(geometry.view_shape, dtype=v.dtype)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        v_flat = flatten_channels_and_batch(
            v, geometry.channel_size, geometry.kernel_ndims
        )
    # fresh C-ordered buffer: this reshape is always a view
    out_flat = out.reshape(geometry.flattened().view_shape)

    flat_hankel_into(out_flat, v_flat, geometry.kernel_size)
    return out


def hankel_reference(
    image: Any,
    channel_size: Union[int, Sequence[int]],
    kernel_size: Sequence[int],
) -> np.ndarray:
    """
    Materialize a Hankel array one element at a time.

    This is a slow, general-rank path that reads every element through
    `Hankel.get`. Prefer `hankel` outside of tests and debugging.
    """
    view = Hankel(image, channel_size, kernel_size)
    out = np.empty(view.shape, dtype=view.dtype)
    for index in np.ndindex(*view.shape):
        out[index] = view.get(index)
    return out
