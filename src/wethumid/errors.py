__all__ = [
    "WetHumidGasError",
    "ValidationError",
    "TableMismatch",
    "InsufficientData",
    "ExtrapolationImpossible",
]


class WetHumidGasError(Exception):
    """Base class for all wet/humid gas PVT errors."""

    pass


class ValidationError(WetHumidGasError, ValueError):
    """Raised when input table data fails validation checks."""

    pass


class TableMismatch(ValidationError):
    """Raised when the number of regions differs between input tables."""

    pass


class InsufficientData(ValidationError):
    """Raised when a table does not carry enough rows to be interpolated."""

    pass


class ExtrapolationImpossible(ValidationError):
    """
    Raised when a degenerate undersaturated branch has no later
    branch with at least two samples to be extended from.
    """

    pass

