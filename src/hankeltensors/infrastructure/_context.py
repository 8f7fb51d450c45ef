from typing import Any, Callable, Optional, Sequence
from dataclasses import dataclass, field

import numpy as np


@dataclass
class Context:
    """
    Backward context produced by a differentiable operation.

    A `Context` records the information required to compute gradients for a
    single call of an operation. hankeltensors never walks a graph of
    contexts itself; an external autodiff mechanism calls `backward_fn`.

    Attributes
    ----------
    parents : Sequence[np.ndarray]
        The input arrays used to compute the output. `backward_fn` returns
        one gradient per parent, in the same order.
    backward_fn : Callable[[np.ndarray], Sequence[Optional[np.ndarray]]]
        A function that takes the gradient w.r.t. the output (`grad_out`) and
        returns gradients w.r.t. each `parents` entry. Entries are None for
        parents whose gradient is not provided.
    saved_tensors : list[np.ndarray]
        Arrays explicitly saved during the forward pass for use in backward.
    saved_meta : dict[str, Any]
        Non-array metadata required for backward (e.g., shapes).
    """

    parents: Sequence[np.ndarray]
    backward_fn: Callable[[np.ndarray], Sequence[Optional[np.ndarray]]]
    saved_tensors: list[np.ndarray] = field(default_factory=list)
    saved_meta: dict[str, Any] = field(default_factory=dict)

    def save_for_backward(self, *tensors: np.ndarray) -> None:
        """
        Save arrays for use during the backward computation.

        Parameters
        ----------
        *tensors : np.ndarray
            Any number of arrays to be stored in `saved_tensors`.
        """
        self.saved_tensors.extend(tensors)
