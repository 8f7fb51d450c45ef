"""
Differentiable operation interface definitions.

This module defines the abstract base class for operations that expose a
gradient rule. Concrete subclasses implement both the forward computation
and its corresponding backward (pullback) computation.

hankeltensors does not ship an autodiff engine. A `Function` only describes
how gradients flow through one operation; an external framework is expected
to call `backward` with the upstream gradient and route the results.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class Function(ABC):
    """
    Abstract base class for operations with a gradient rule.

    A `Function` encapsulates both:
    - the forward computation
    - the backward (gradient) computation

    Subclasses must implement both `forward` and `backward` as static methods.
    Any intermediate values required for gradient computation should be stored
    on the provided `ctx` object during the forward pass.

    Notes
    -----
    - Methods are declared as `@staticmethod` to avoid implicit state on the
      function object itself.
    - The `ctx` argument acts as a per-invocation context, so one `Function`
      class can serve any number of independent calls.
    """

    @staticmethod
    @abstractmethod
    def forward(ctx, *inputs: Any) -> Any:
        """
        Perform the forward computation.

        Parameters
        ----------
        ctx : Context
            A mutable context object used to store intermediate values
            required for gradient computation.
        *inputs : Any
            Input array(s) to the operation.

        Returns
        -------
        Any
            The output array resulting from the forward computation.
        """
        ...

    @staticmethod
    @abstractmethod
    def backward(ctx, grad_out: Any) -> Sequence[Optional[Any]]:
        """
        Compute gradients with respect to the inputs of `forward`.

        Parameters
        ----------
        ctx : Context
            The context object populated during the forward pass.
        grad_out : Any
            Gradient of the loss with respect to the output.

        Returns
        -------
        tuple[Any | None, ...]
            Gradients with respect to each input, in the order they were
            passed to `forward`. Entries are None for inputs whose gradient
            the operation does not provide.
        """
        ...
