"""
hankeltensors: zero-copy Hankel (sliding-window) views and the contractions
built on the same window geometry.

Public API
----------
- Hankel, hankel, hankel_reference, flat_hankel_into:
    the sliding-window view and its dense materialization.
- conv_v2h, conv_h2v, conv_h2v_into:
    visible -> hidden correlation and its hidden -> visible adjoint.
- conv_v2h_weight_grad, conv_h2v_weight_grad:
    weight-gradient kernels of both contractions.
- ConvV2HFn, ConvH2VFn, conv_v2h_rrule, conv_h2v_rrule, Context, Function:
    gradient rules for wiring into an external autodiff mechanism.
- flatten_channels_and_batch, unflatten_channels_and_batch:
    channel/batch grouping used by the contraction layout.
- WindowGeometry:
    the shared shape and index arithmetic.
- ShapeMismatchError, InvalidWindowSizeError, IndexOutOfRangeError.
"""

from .domain import (
    Function,
    IndexOutOfRangeError,
    InvalidWindowSizeError,
    ShapeMismatchError,
    WindowGeometry,
)
from .infrastructure._context import Context
from .infrastructure.convolution import (
    ConvH2VFn,
    ConvV2HFn,
    conv_h2v_rrule,
    conv_v2h_rrule,
)
from .infrastructure.hankel import Hankel, flat_hankel_into, hankel, hankel_reference
from .infrastructure.ops.conv_cpu import conv_h2v_cpu as conv_h2v
from .infrastructure.ops.conv_cpu import conv_h2v_into_cpu as conv_h2v_into
from .infrastructure.ops.conv_cpu import conv_h2v_weight_grad_cpu as conv_h2v_weight_grad
from .infrastructure.ops.conv_cpu import conv_v2h_cpu as conv_v2h
from .infrastructure.ops.conv_cpu import conv_v2h_weight_grad_cpu as conv_v2h_weight_grad
from .infrastructure.ops.flatten_cpu import (
    flatten_channels_and_batch,
    unflatten_channels_and_batch,
)

__version__ = "0.1.0"

__all__ = [
    "Context",
    "ConvH2VFn",
    "ConvV2HFn",
    "Function",
    "Hankel",
    "IndexOutOfRangeError",
    "InvalidWindowSizeError",
    "ShapeMismatchError",
    "WindowGeometry",
    "conv_h2v",
    "conv_h2v_into",
    "conv_h2v_rrule",
    "conv_h2v_weight_grad",
    "conv_v2h",
    "conv_v2h_rrule",
    "conv_v2h_weight_grad",
    "flat_hankel_into",
    "flatten_channels_and_batch",
    "hankel",
    "hankel_reference",
    "unflatten_channels_and_batch",
]
