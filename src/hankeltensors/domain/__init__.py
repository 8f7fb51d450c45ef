"""
Domain layer public API.

Exports
-------
- WindowGeometry:
    Shape, index and stride arithmetic of Hankel (sliding-window) tensors.
- Function:
    Abstract forward/backward contract for operations with a gradient rule.
- ShapeMismatchError, InvalidWindowSizeError, IndexOutOfRangeError:
    The error taxonomy.

Notes
-----
Nothing in this package depends on NumPy.
"""

from ._errors import IndexOutOfRangeError, InvalidWindowSizeError, ShapeMismatchError
from ._function import Function
from ._geometry import WindowGeometry

__all__ = [
    Function.__name__,
    IndexOutOfRangeError.__name__,
    InvalidWindowSizeError.__name__,
    ShapeMismatchError.__name__,
    WindowGeometry.__name__,
]
