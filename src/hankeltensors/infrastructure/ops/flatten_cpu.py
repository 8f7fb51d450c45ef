"""
Channel/batch flattening helpers (CPU, NumPy).

The contraction kernels operate on arrays with exactly one channel axis and
one batch axis:

    (C, N_1, ..., N_n, B)

Callers that hold several channel axes or several batch axes collapse each
group into a single axis before calling a kernel, and restore the grouping
afterwards. This module provides that step and its inverse explicitly.

Layout precondition
-------------------
Flattening merges adjacent axes in C (row-major) order. When the array's
memory layout keeps the merged axes contiguous, the result is a view of the
input and no data is copied. Otherwise NumPy has to copy; the result is still
correct, but a `RuntimeWarning` is emitted so the extra copy does not go
unnoticed.
"""

from __future__ import annotations

import math
import numbers
import warnings
from typing import Sequence, Tuple, Union

import numpy as np

from ...domain._errors import ShapeMismatchError


def _reshape_no_copy_expected(a: np.ndarray, shape: Tuple[int, ...]) -> np.ndarray:
    """
    Reshape `a`, warning when the reshape had to copy the data.
    """
    out = a.reshape(shape)
    if a.size and not np.may_share_memory(out, a):
        warnings.warn(
            f"array of shape {a.shape} with strides {a.strides} is not contiguous "
            f"in the grouped axes; reshaping to {shape} copied the data.",
            RuntimeWarning,
            stacklevel=3,
        )
    return out


def flatten_channels_and_batch(
    array: np.ndarray,
    channel_size: Union[int, Sequence[int]],
    spatial_ndims: int,
) -> np.ndarray:
    """
    Collapse the channel axes and the batch axes of an array to one axis each.

    Parameters
    ----------
    array : np.ndarray
        Array of shape `(channel..., spatial..., batch...)`.
    channel_size : int or Sequence[int]
        Sizes of the leading channel axes, or the number of leading axes to
        treat as channels.
    spatial_ndims : int
        Number of spatial axes following the channel axes. All remaining
        trailing axes are batch axes.

    Returns
    -------
    np.ndarray
        Array of shape `(prod(channel), spatial..., prod(batch))`. Empty
        groups flatten to an axis of length 1.

    Raises
    ------
    ShapeMismatchError
        If the array has too few axes or its leading axes differ from
        `channel_size`.
    """
    a = np.asarray(array)

    if isinstance(channel_size, numbers.Integral):
        n_channel = int(channel_size)
        if not 0 <= n_channel <= a.ndim:
            raise ShapeMismatchError(
                "number of channel axes", f"0..{a.ndim}", n_channel
            )
        channel = a.shape[:n_channel]
    else:
        channel = tuple(int(c) for c in channel_size)
        n_channel = len(channel)

    if spatial_ndims < 0 or a.ndim < n_channel + spatial_ndims:
        raise ShapeMismatchError("array rank", f">= {n_channel + spatial_ndims}", a.ndim)
    if a.shape[:n_channel] != channel:
        raise ShapeMismatchError("channel size", channel, a.shape[:n_channel])

    spatial = a.shape[n_channel : n_channel + spatial_ndims]
    batch = a.shape[n_channel + spatial_ndims :]
    return _reshape_no_copy_expected(
        a, (math.prod(channel),) + spatial + (math.prod(batch),)
    )


def unflatten_channels_and_batch(
    array: np.ndarray,
    channel_size: Sequence[int],
    batch_size: Sequence[int],
) -> np.ndarray:
    """
    Inverse of `flatten_channels_and_batch`.

    Parameters
    ----------
    array : np.ndarray
        Array of shape `(prod(channel_size), spatial..., prod(batch_size))`.
    channel_size : Sequence[int]
        Sizes of the channel axes to restore.
    batch_size : Sequence[int]
        Sizes of the batch axes to restore.

    Returns
    -------
    np.ndarray
        Array of shape `(channel_size..., spatial..., batch_size...)`.

    Raises
    ------
    ShapeMismatchError
        If the first or last axis does not match the product of the group it
        is supposed to hold.
    """
    a = np.asarray(array)
    channel = tuple(int(c) for c in channel_size)
    batch = tuple(int(b) for b in batch_size)

    if a.ndim < 2:
        raise ShapeMismatchError("array rank", ">= 2", a.ndim)
    if a.shape[0] != math.prod(channel):
        raise ShapeMismatchError("flattened channel size", math.prod(channel), a.shape[0])
    if a.shape[-1] != math.prod(batch):
        raise ShapeMismatchError("flattened batch size", math.prod(batch), a.shape[-1])

    return _reshape_no_copy_expected(a, channel + a.shape[1:-1] + batch)
