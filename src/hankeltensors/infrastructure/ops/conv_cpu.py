"""
CPU Hankel contraction kernels for hankeltensors.

This module implements the two directional contractions that share the
sliding-window geometry of `Hankel`, plus the weight-gradient kernels of
both, using NumPy on the CPU.

Tensor layout
-------------
Channel and batch axes are flattened (see `flatten_cpu`):

- weight  w: (C, J_1, ..., J_n, M)
- visible v: (C, N_1, ..., N_n, B)
- hidden  h: (M, K_1, ..., K_n, B),  K_d = N_d - J_d + 1

Kernels
-------
- visible -> hidden (correlation)::

    h[m, k, b] = sum_{c, j} w[c, j, m] * v[c, j + k, b]

- hidden -> visible (scatter-accumulate, the adjoint of the above)::

    v[c, i, b] = sum_m sum_{j + k = i} w[c, j, m] * h[m, k, b]

- weight gradient of either direction::

    dw[c, j, m] = sum_{k, b} x[c, j + k, b] * y[m, k, b]

  with `(x, y) = (grad_visible, h)` for hidden -> visible and
  `(x, y) = (v, grad_hidden)` for visible -> hidden.

Design notes
------------
- One generic implementation serves every spatial rank n >= 1. The loop runs
  over the kernel offsets `j` (from `WindowGeometry.offsets`); each offset is
  a single vectorized `np.tensordot` over the channel or hidden axis applied
  to the image window `WindowGeometry.window(j)`.
- In the scatter direction, the block written for one offset contains no
  repeated cells; blocks for different offsets overlap and are combined with
  `+=`, never assignment.
- Accumulation uses `np.result_type` of the operands. Summation order is
  unspecified.
- Inputs are never modified.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._geometry import WindowGeometry


def _check_ranks(w: np.ndarray, x: np.ndarray, name: str) -> None:
    """
    Validate that `w` and `x` have the same rank and at least one spatial axis.
    """
    if w.ndim < 3:
        raise ShapeMismatchError("weight rank", ">= 3", w.ndim)
    if x.ndim != w.ndim:
        raise ShapeMismatchError(f"{name} rank", w.ndim, x.ndim)


def _v2h_geometry(w: np.ndarray, v: np.ndarray) -> WindowGeometry:
    """
    Validate visible -> hidden operands and return their (flat) geometry.
    """
    _check_ranks(w, v, "visible")
    if w.shape[0] != v.shape[0]:
        raise ShapeMismatchError("channel size", w.shape[0], v.shape[0])
    return WindowGeometry.from_shape(v.shape, 1, w.shape[1:-1])


def _h2v_geometry(w: np.ndarray, h: np.ndarray) -> WindowGeometry:
    """
    Validate hidden -> visible operands and return their (flat) geometry.
    """
    _check_ranks(w, h, "hidden")
    if w.shape[-1] != h.shape[0]:
        raise ShapeMismatchError("number of hidden units", w.shape[-1], h.shape[0])
    return WindowGeometry.from_output(
        (w.shape[0],), w.shape[1:-1], h.shape[1:-1], (h.shape[-1],)
    )


def _hidden_shape(geometry: WindowGeometry, hidden_units: int) -> Tuple[int, ...]:
    return (hidden_units,) + geometry.output_size + geometry.batch_size


def _window_correlation(
    x: np.ndarray,
    y: np.ndarray,
    geometry: WindowGeometry,
) -> np.ndarray:
    """
    Correlate image windows against a hidden-shaped array.

    Computes `out[c, j, m] = sum_{k, b} x[c, j + k, b] * y[m, k, b]` for an
    image-shaped `x` and a hidden-shaped `y`.
    """
    C = geometry.channel_size[0]
    M = y.shape[0]
    out = np.zeros((C,) + geometry.kernel_size + (M,), dtype=np.result_type(x, y))
    axes = list(range(1, y.ndim))
    for j in geometry.offsets():
        x_j = x[(slice(None),) + geometry.window(j) + (slice(None),)]
        out[(slice(None),) + j + (slice(None),)] = np.tensordot(x_j, y, axes=(axes, axes))
    return out


def conv_v2h_cpu(w: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Contract visible data against Hankel windows (visible -> hidden).

    Parameters
    ----------
    w : np.ndarray
        Weights of shape (C, J_1, ..., J_n, M).
    v : np.ndarray
        Visible data of shape (C, N_1, ..., N_n, B).

    Returns
    -------
    np.ndarray
        Hidden inputs of shape (M, N_1 - J_1 + 1, ..., N_n - J_n + 1, B):

        h[m, k, b] = sum_{c, j} w[c, j, m] * v[c, j + k, b]

    Raises
    ------
    ShapeMismatchError
        If ranks differ, the rank is below 3, or the channel sizes differ.
    InvalidWindowSizeError
        If J_d > N_d for some spatial axis.
    """
    w = np.asarray(w)
    v = np.asarray(v)
    geometry = _v2h_geometry(w, v)

    h = np.zeros(_hidden_shape(geometry, w.shape[-1]), dtype=np.result_type(w, v))
    for j in geometry.offsets():
        w_j = w[(slice(None),) + j + (slice(None),)]
        v_j = v[(slice(None),) + geometry.window(j) + (slice(None),)]
        h += np.tensordot(w_j, v_j, axes=([0], [0]))
    return h


def conv_h2v_into_cpu(
    out: np.ndarray,
    w: np.ndarray,
    h: np.ndarray,
    *,
    accumulate: bool = False,
) -> np.ndarray:
    """
    Scatter hidden data back through Hankel windows into a buffer.

    Parameters
    ----------
    out : np.ndarray
        Writeable buffer of shape (C, K_1 + J_1 - 1, ..., K_n + J_n - 1, B).
    w : np.ndarray
        Weights of shape (C, J_1, ..., J_n, M).
    h : np.ndarray
        Hidden data of shape (M, K_1, ..., K_n, B).
    accumulate : bool, default False
        If False, `out` is zeroed before scattering. If True, contributions
        are added onto its current contents.

    Returns
    -------
    np.ndarray
        `out`, holding

        v[c, i, b] (+)= sum_m sum_{j + k = i} w[c, j, m] * h[m, k, b]

    Raises
    ------
    TypeError
        If `out` is not an `np.ndarray`, or its dtype cannot hold
        `np.result_type(w, h)` under same-kind casting.
    ShapeMismatchError
        If ranks differ, the rank is below 3, the hidden-unit counts differ,
        or `out` has the wrong shape.

    Notes
    -----
    All checks run before `out` is written, so a rejected call leaves the
    buffer unchanged.
    """
    if not isinstance(out, np.ndarray):
        raise TypeError("conv_h2v_into expects `out` to be an np.ndarray")
    w = np.asarray(w)
    h = np.asarray(h)
    geometry = _h2v_geometry(w, h)
    if out.shape != geometry.image_shape:
        raise ShapeMismatchError("output shape", geometry.image_shape, out.shape)
    result_dtype = np.result_type(w, h)
    if not np.can_cast(result_dtype, out.dtype, casting="same_kind"):
        raise TypeError(
            f"conv_h2v_into cannot store {result_dtype} results in a buffer "
            f"of dtype {out.dtype}"
        )

    if not accumulate:
        out[...] = 0

    for j in geometry.offsets():
        w_j = w[(slice(None),) + j + (slice(None),)]
        out[(slice(None),) + geometry.window(j) + (slice(None),)] += np.tensordot(
            w_j, h, axes=([1], [0])
        )
    return out


def conv_h2v_cpu(w: np.ndarray, h: np.ndarray) -> np.ndarray:
    """
    Scatter hidden data back through Hankel windows (hidden -> visible).

    This is the adjoint of `conv_v2h_cpu` with respect to its second
    argument.

    Parameters
    ----------
    w : np.ndarray
        Weights of shape (C, J_1, ..., J_n, M).
    h : np.ndarray
        Hidden data of shape (M, K_1, ..., K_n, B).

    Returns
    -------
    np.ndarray
        Visible inputs of shape (C, K_1 + J_1 - 1, ..., K_n + J_n - 1, B) and
        dtype `np.result_type(w, h)`.

    Raises
    ------
    ShapeMismatchError
        If ranks differ, the rank is below 3, or the hidden-unit counts differ.
    """
    w = np.asarray(w)
    h = np.asarray(h)
    geometry = _h2v_geometry(w, h)
    out = np.zeros(geometry.image_shape, dtype=np.result_type(w, h))
    return conv_h2v_into_cpu(out, w, h, accumulate=True)


def conv_h2v_weight_grad_cpu(
    grad_v: np.ndarray,
    w: np.ndarray,
    h: np.ndarray,
) -> np.ndarray:
    """
    Gradient of `conv_h2v_cpu(w, h)` with respect to `w`.

    Parameters
    ----------
    grad_v : np.ndarray
        Upstream gradient, shaped like the output of `conv_h2v_cpu(w, h)`.
    w : np.ndarray
        Weights used in the forward call (only the shape is read).
    h : np.ndarray
        Hidden data used in the forward call.

    Returns
    -------
    np.ndarray
        dw[c, j, m] = sum_{k, b} grad_v[c, j + k, b] * h[m, k, b]

    Notes
    -----
    The gradient with respect to `h` is not provided by this package.
    """
    grad_v = np.asarray(grad_v)
    w = np.asarray(w)
    h = np.asarray(h)
    geometry = _h2v_geometry(w, h)
    if grad_v.shape != geometry.image_shape:
        raise ShapeMismatchError("gradient shape", geometry.image_shape, grad_v.shape)
    return _window_correlation(grad_v, h, geometry)


def conv_v2h_weight_grad_cpu(
    grad_h: np.ndarray,
    w: np.ndarray,
    v: np.ndarray,
) -> np.ndarray:
    """
    Gradient of `conv_v2h_cpu(w, v)` with respect to `w`.

    Parameters
    ----------
    grad_h : np.ndarray
        Upstream gradient, shaped like the output of `conv_v2h_cpu(w, v)`.
    w : np.ndarray
        Weights used in the forward call (only the shape is read).
    v : np.ndarray
        Visible data used in the forward call.

    Returns
    -------
    np.ndarray
        dw[c, j, m] = sum_{k, b} v[c, j + k, b] * grad_h[m, k, b]
    """
    grad_h = np.asarray(grad_h)
    w = np.asarray(w)
    v = np.asarray(v)
    geometry = _v2h_geometry(w, v)
    expected = _hidden_shape(geometry, w.shape[-1])
    if grad_h.shape != expected:
        raise ShapeMismatchError("gradient shape", expected, grad_h.shape)
    return _window_correlation(v, grad_h, geometry)
