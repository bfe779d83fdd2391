import enum
import typing

import numpy as np
from typing_extensions import TypeAlias


__all__ = [
    "OneDimensionalGrid",
    "FloatOrArray",
    "GasFamily",
    "GAS_FAMILIES",
    "FAMILY_KEYWORDS",
    "FAMILY_RATIO_COLUMNS",
    "OilVaporizationType",
]

OneDimension: TypeAlias = typing.Tuple[int]
"""1D index"""

OneDimensionalGrid = np.ndarray[OneDimension, np.dtype[np.floating]]
"""1D table column, represented as a 1D NumPy array of floats"""
FloatOrArray = typing.Union[float, np.typing.NDArray[np.floating]]

GasFamily = typing.Literal["wet", "humid"]
"""
Gas table families

- "wet": Gas carrying vaporized oil, inner axis is the oil vaporization ratio (Rv)
- "humid": Gas carrying vaporized water, inner axis is the water vaporization ratio (Rw)
"""

GAS_FAMILIES: typing.Tuple[GasFamily, ...] = ("wet", "humid")
"""Gas families in build order."""

FAMILY_KEYWORDS: typing.Dict[GasFamily, str] = {"wet": "PVTG", "humid": "PVTGW"}
"""Deck keyword each gas family is read from."""

FAMILY_RATIO_COLUMNS: typing.Dict[GasFamily, str] = {"wet": "RV", "humid": "RW"}
"""Name of the vaporization ratio column of each gas family."""


class OilVaporizationType(enum.Enum):
    """Type of oil vaporization control active in a schedule step."""

    UNDEFINED = "undefined"
    VAPPARS = "vappars"
    DRSDT = "drsdt"
    DRVDT = "drvdt"
