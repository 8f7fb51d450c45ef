from .conv_cpu import (
    conv_h2v_cpu,
    conv_h2v_into_cpu,
    conv_h2v_weight_grad_cpu,
    conv_v2h_cpu,
    conv_v2h_weight_grad_cpu,
)
from .flatten_cpu import flatten_channels_and_batch, unflatten_channels_and_batch

__all__ = [
    conv_h2v_cpu.__name__,
    conv_h2v_into_cpu.__name__,
    conv_h2v_weight_grad_cpu.__name__,
    conv_v2h_cpu.__name__,
    conv_v2h_weight_grad_cpu.__name__,
    flatten_channels_and_batch.__name__,
    unflatten_channels_and_batch.__name__,
]
