from ._hankel_view import Hankel
from ._hankel_materialize import flat_hankel_into, hankel, hankel_reference

__all__ = [
    Hankel.__name__,
    flat_hankel_into.__name__,
    hankel.__name__,
    hankel_reference.__name__,
]
