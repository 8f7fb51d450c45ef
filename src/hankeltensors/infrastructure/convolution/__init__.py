from ._conv_function import ConvH2VFn, ConvV2HFn, conv_h2v_rrule, conv_v2h_rrule

__all__ = [
    ConvH2VFn.__name__,
    ConvV2HFn.__name__,
    conv_h2v_rrule.__name__,
    conv_v2h_rrule.__name__,
]
