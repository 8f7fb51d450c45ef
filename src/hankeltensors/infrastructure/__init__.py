"""
NumPy-backed infrastructure: views, materialization, kernels, gradient rules.
"""

from ._context import Context

__all__ = [Context.__name__]
