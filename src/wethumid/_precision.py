from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np


__all__ = [
    "get_dtype",
    "with_precision",
]

_table_dtype: ContextVar[np.typing.DTypeLike] = ContextVar(
    "_table_dtype", default=np.float64
)


def get_dtype() -> np.typing.DTypeLike:
    """
    Get the current data type used for table arrays.

    :return: The current data type.
    """
    return _table_dtype.get()


@contextmanager
def with_precision(dtype: np.typing.DTypeLike):
    """
    Context manager to temporarily set the data type used when building tables.

    :param dtype: The data type to set within the context.
    """
    token = _table_dtype.set(dtype)
    try:
        yield
    finally:
        _table_dtype.reset(token)
