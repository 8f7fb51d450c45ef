"""
Gradient rules for the Hankel contractions.

This module defines `ConvV2HFn` and `ConvH2VFn`, which implement the
domain-level `Function` contract for the visible -> hidden and
hidden -> visible contractions, and the `*_rrule` helpers that package a
forward call together with its backward rule.

Responsibilities and boundaries
--------------------------------
- The `Function` classes contain no numeric code. All kernels live in
  `ops.conv_cpu`.
- hankeltensors does not propagate gradients. A caller (typically an
  external autodiff framework) obtains `(output, ctx)` from an rrule and
  later calls `ctx.backward_fn(grad_out)` to receive one gradient per
  parent.

Gradients provided
------------------
- `ConvV2HFn`: gradients for both `weight` and `visible`. The visible
  gradient is the adjoint contraction `conv_h2v(weight, grad_hidden)`.
- `ConvH2VFn`: gradient for `weight` only. The gradient for `hidden` is
  intentionally not computed and is reported as None.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._function import Function
from .._context import Context
from ..ops.conv_cpu import (
    conv_h2v_cpu,
    conv_h2v_weight_grad_cpu,
    conv_v2h_cpu,
    conv_v2h_weight_grad_cpu,
)


class ConvV2HFn(Function):
    """
    Visible -> hidden contraction with gradients for weight and visible.

    Layout: weight (C, J..., M), visible (C, N..., B), output (M, K..., B).
    """

    @staticmethod
    def forward(ctx: Context, weight: np.ndarray, visible: np.ndarray) -> np.ndarray:
        """
        Compute `conv_v2h(weight, visible)` and save both operands.

        Parameters
        ----------
        ctx : Context
            Context used to save the operands for backward.
        weight : np.ndarray
            Weights of shape (C, J..., M).
        visible : np.ndarray
            Visible data of shape (C, N..., B).

        Returns
        -------
        np.ndarray
            Hidden inputs of shape (M, N - J + 1, B).
        """
        out = conv_v2h_cpu(weight, visible)
        ctx.save_for_backward(weight, visible)
        ctx.saved_meta["out_shape"] = out.shape
        return out

    @staticmethod
    def backward(
        ctx: Context, grad_out: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute gradients for weight and visible.

        Parameters
        ----------
        ctx : Context
            Context populated by `forward`.
        grad_out : np.ndarray
            Gradient with respect to the hidden output.

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            `(grad_weight, grad_visible)`.
        """
        if grad_out.shape != ctx.saved_meta["out_shape"]:
            raise ShapeMismatchError(
                "gradient shape", ctx.saved_meta["out_shape"], grad_out.shape
            )
        weight, visible = ctx.saved_tensors
        grad_weight = conv_v2h_weight_grad_cpu(grad_out, weight, visible)
        grad_visible = conv_h2v_cpu(weight, grad_out)
        return (grad_weight, grad_visible)


class ConvH2VFn(Function):
    """
    Hidden -> visible contraction with a gradient for weight only.

    Layout: weight (C, J..., M), hidden (M, K..., B), output (C, K + J - 1, B).
    """

    @staticmethod
    def forward(ctx: Context, weight: np.ndarray, hidden: np.ndarray) -> np.ndarray:
        """
        Compute `conv_h2v(weight, hidden)` and save both operands.

        Parameters
        ----------
        ctx : Context
            Context used to save the operands for backward.
        weight : np.ndarray
            Weights of shape (C, J..., M).
        hidden : np.ndarray
            Hidden data of shape (M, K..., B).

        Returns
        -------
        np.ndarray
            Visible inputs of shape (C, K + J - 1, B).
        """
        out = conv_h2v_cpu(weight, hidden)
        ctx.save_for_backward(weight, hidden)
        ctx.saved_meta["out_shape"] = out.shape
        return out

    @staticmethod
    def backward(
        ctx: Context, grad_out: np.ndarray
    ) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        Compute the gradient for weight.

        Parameters
        ----------
        ctx : Context
            Context populated by `forward`.
        grad_out : np.ndarray
            Gradient with respect to the visible output.

        Returns
        -------
        tuple[np.ndarray, None]
            `(grad_weight, None)`; the hidden gradient is not computed.
        """
        if grad_out.shape != ctx.saved_meta["out_shape"]:
            raise ShapeMismatchError(
                "gradient shape", ctx.saved_meta["out_shape"], grad_out.shape
            )
        weight, hidden = ctx.saved_tensors
        grad_weight = conv_h2v_weight_grad_cpu(grad_out, weight, hidden)
        return (grad_weight, None)


def conv_v2h_rrule(
    weight: np.ndarray, visible: np.ndarray
) -> Tuple[np.ndarray, Context]:
    """
    Run `ConvV2HFn.forward` and return the output with its backward context.

    Returns
    -------
    tuple[np.ndarray, Context]
        The hidden output and a context whose `backward_fn(grad_out)` returns
        `(grad_weight, grad_visible)`.
    """
    weight = np.asarray(weight)
    visible = np.asarray(visible)

    def _backward(grad_out: np.ndarray) -> Sequence[Optional[np.ndarray]]:
        return ConvV2HFn.backward(ctx, np.asarray(grad_out))

    ctx = Context(parents=(weight, visible), backward_fn=_backward)
    out = ConvV2HFn.forward(ctx, weight, visible)
    return out, ctx


def conv_h2v_rrule(
    weight: np.ndarray, hidden: np.ndarray
) -> Tuple[np.ndarray, Context]:
    """
    Run `ConvH2VFn.forward` and return the output with its backward context.

    Returns
    -------
    tuple[np.ndarray, Context]
        The visible output and a context whose `backward_fn(grad_out)` returns
        `(grad_weight, None)`.
    """
    weight = np.asarray(weight)
    hidden = np.asarray(hidden)

    def _backward(grad_out: np.ndarray) -> Sequence[Optional[np.ndarray]]:
        return ConvH2VFn.backward(ctx, np.asarray(grad_out))

    ctx = Context(parents=(weight, hidden), backward_fn=_backward)
    out = ConvH2VFn.forward(ctx, weight, hidden)
    return out, ctx
