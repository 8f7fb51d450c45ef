"""
Shape- and index-related exceptions for hankeltensors.

This module defines the errors raised when a caller supplies tensors,
channel sizes, kernel sizes, or indices that are inconsistent with each
other. All of them signal a programming error at the call site: they are
raised synchronously at call entry, before any output is computed, and are
never retried or swallowed internally.

The classes derive from the closest built-in exception (`ValueError` for
shape problems, `IndexError` for element access) so that generic handlers
keep working.
"""

from __future__ import annotations

from typing import Any, Sequence


class ShapeMismatchError(ValueError):
    """
    Raised when declared sizes disagree with an array's actual shape.

    Typical causes are a `channel_size` that does not match the leading axes
    of the image, two contraction operands that disagree on the channel or
    hidden-unit count, or an output buffer of the wrong shape.

    Attributes
    ----------
    what : str
        Short description of the quantity being checked.
    expected : Any
        The expected value (usually a shape tuple or an axis length).
    actual : Any
        The value that was actually supplied.
    """

    def __init__(self, what: str, expected: Any, actual: Any) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        what : str
            Description of the checked quantity (e.g., "channel size").
        expected : Any
            Expected value.
        actual : Any
            Actual value.
        """
        super().__init__(f"{what} mismatch: expected {expected}, got {actual}.")
        self.what = what
        self.expected = expected
        self.actual = actual


class InvalidWindowSizeError(ShapeMismatchError):
    """
    Raised when a window (kernel) size cannot slide over its input.

    A kernel entry must be a positive integer no larger than the input
    extent along the same spatial axis; otherwise the output would be empty.

    Attributes
    ----------
    kernel_size : tuple[int, ...]
        The offending kernel size.
    input_size : tuple[int, ...] | None
        The input size it was checked against, if known.
    """

    def __init__(
        self,
        kernel_size: Sequence[Any],
        input_size: Sequence[int] | None = None,
    ) -> None:
        """
        Initialize the InvalidWindowSizeError.

        Parameters
        ----------
        kernel_size : Sequence
            Kernel size supplied by the caller.
        input_size : Sequence[int] | None, optional
            Input size along the spatial axes. None when the kernel size is
            rejected on its own (e.g., a non-positive entry).
        """
        kernel_size = tuple(kernel_size)
        if input_size is None:
            ValueError.__init__(
                self,
                f"kernel size must contain positive integers, got {kernel_size}.",
            )
        else:
            input_size = tuple(input_size)
            ValueError.__init__(
                self,
                f"kernel size {kernel_size} does not fit input size {input_size}.",
            )
        self.what = "kernel size"
        self.expected = input_size
        self.actual = kernel_size
        self.kernel_size = kernel_size
        self.input_size = input_size


class IndexOutOfRangeError(IndexError):
    """
    Raised when a multi-index falls outside a sliding-window view.

    Bounds are checked against the view's own shape. Negative indices are
    not wrapped around and are reported as out of range.

    Attributes
    ----------
    index : tuple
        The rejected multi-index.
    shape : tuple[int, ...]
        The shape of the view that was indexed.
    """

    def __init__(self, index: Sequence[Any], shape: Sequence[int]) -> None:
        """
        Initialize the IndexOutOfRangeError.

        Parameters
        ----------
        index : Sequence
            The rejected multi-index.
        shape : Sequence[int]
            Shape of the indexed view.
        """
        index = tuple(index)
        shape = tuple(shape)
        super().__init__(f"index {index} is out of range for shape {shape}.")
        self.index = index
        self.shape = shape
