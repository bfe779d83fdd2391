import typing

import numpy as np

from wethumid._precision import get_dtype
from wethumid.errors import ValidationError


__all__ = ["as_column", "freeze", "is_strictly_increasing", "is_strictly_monotonic"]


def freeze(array: np.typing.NDArray) -> np.typing.NDArray:
    """
    Mark an array as read-only (in-place) and return it.

    :param array: Array to freeze
    :return: The same array, no longer writeable
    """
    array.flags.writeable = False
    return array


def as_column(values: typing.Any, name: str = "column") -> np.typing.NDArray:
    """
    Convert a sequence of values into a read-only 1D array of the current dtype.

    A copy is always made so callers cannot mutate table data through the source object.

    :param values: Sequence (or array) of numeric values
    :param name: Name of the column, used in error messages
    :return: Read-only 1D array
    """
    array = np.array(values, dtype=get_dtype(), copy=True)
    if array.ndim == 0:
        array = array.reshape(1)
    if array.ndim != 1:
        raise ValidationError(f"`{name}` must be 1-dimensional, got shape {array.shape}")
    return freeze(array)


def is_strictly_increasing(array: np.typing.NDArray) -> bool:
    """Check whether the values of a 1D array are strictly increasing."""
    return bool(np.all(np.diff(array) > 0))


def is_strictly_monotonic(array: np.typing.NDArray) -> bool:
    """Check whether the values of a 1D array are strictly increasing or strictly decreasing."""
    differences = np.diff(array)
    return bool(np.all(differences > 0) or np.all(differences < 0))
