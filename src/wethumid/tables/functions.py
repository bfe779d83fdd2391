"""Tabulated 1D and 2D functions backing the finished PVT tables."""

import logging
import typing

import attrs
import numpy as np
from scipy.interpolate import interp1d  # type: ignore[import-untyped]

from wethumid.errors import InsufficientData, ValidationError
from wethumid.types import FloatOrArray, OneDimensionalGrid
from wethumid.utils import as_column, is_strictly_increasing

logger = logging.getLogger(__name__)

__all__ = ["Table1D", "Table2D", "Table2DBuilder"]


def _as_columns(
    sequences: typing.Iterable[typing.Any],
) -> typing.Tuple[OneDimensionalGrid, ...]:
    return tuple(as_column(values, "branch") for values in sequences)


def _linear_interpolator(x: OneDimensionalGrid, y: OneDimensionalGrid) -> typing.Any:
    return interp1d(
        x,
        y,
        kind="linear",
        fill_value="extrapolate",
        assume_sorted=True,
    )


@attrs.frozen(eq=False)
class Table1D:
    """
    Tabulated function of one variable, evaluated by linear interpolation.

    The `x` and `y` arrays are read-only.
    """

    x: OneDimensionalGrid = attrs.field(converter=lambda v: as_column(v, "x"))
    """Sample positions, strictly increasing."""
    y: OneDimensionalGrid = attrs.field(converter=lambda v: as_column(v, "y"))
    """Sample values."""
    name: str = "table"
    """Name used in log and error messages."""
    warn_on_extrapolation: bool = False
    """Log a warning whenever the table is extrapolated."""
    _interpolator: typing.Any = attrs.field(init=False, default=None, repr=False)

    def __attrs_post_init__(self) -> None:
        if len(self.x) != len(self.y):
            raise ValidationError(
                f"{self.name}: x ({len(self.x)}) and y ({len(self.y)}) must have the same length"
            )
        if len(self.x) < 2:
            raise InsufficientData(
                f"{self.name}: at least 2 sample points are required, got {len(self.x)}"
            )
        if not is_strictly_increasing(self.x):
            raise ValidationError(f"{self.name}: x must be strictly increasing")
        object.__setattr__(self, "_interpolator", _linear_interpolator(self.x, self.y))

    @property
    def num_samples(self) -> int:
        return len(self.x)

    @property
    def x_min(self) -> float:
        return float(self.x[0])

    @property
    def x_max(self) -> float:
        return float(self.x[-1])

    def eval(self, x: FloatOrArray, extrapolate: bool = False) -> FloatOrArray:
        """
        Evaluate the table at `x`.

        :param x: Position(s) to evaluate at
        :param extrapolate: If False, querying outside [x_min, x_max] raises `ValidationError`.
            If True, the end segments are extended linearly.
        :return: Interpolated value(s), a float for scalar input
        """
        points = np.asarray(x, dtype=self.x.dtype)
        if np.any(points < self.x[0]) or np.any(points > self.x[-1]):
            if not extrapolate:
                raise ValidationError(
                    f"{self.name}: queried x ∈ [{points.min()}, {points.max()}] is outside "
                    f"the table range [{self.x_min}, {self.x_max}]"
                )
            if self.warn_on_extrapolation:
                logger.warning(
                    f"{self.name} extrapolation: queried x ∈ [{points.min()}, {points.max()}], "
                    f"table range [{self.x_min}, {self.x_max}]"
                )
        result = self._interpolator(points)
        if points.ndim == 0:
            return float(result)
        return result

    def __call__(self, x: FloatOrArray, extrapolate: bool = False) -> FloatOrArray:
        return self.eval(x, extrapolate=extrapolate)


@attrs.frozen(eq=False)
class Table2D:
    """
    Tabulated function of two variables with a shared outer axis and
    one independently sized inner axis per outer sample.

    Branches are stored index-based: `ys[i]` and `values[i]` hold the inner
    samples of outer position `x[i]`.

    Each branch is interpolated linearly (scipy `interp1d`) along its inner axis,
    then the branch results are interpolated linearly along the outer axis.
    Inner axes are always extended linearly beyond their end points; the outer
    axis only when `extrapolate=True`. A single-sample branch evaluates to its only value.
    """

    x: OneDimensionalGrid = attrs.field(converter=lambda v: as_column(v, "x"))
    """Outer axis, one entry per branch."""
    ys: typing.Tuple[OneDimensionalGrid, ...] = attrs.field(converter=_as_columns)
    """Inner axis of each branch."""
    values: typing.Tuple[OneDimensionalGrid, ...] = attrs.field(converter=_as_columns)
    """Sample values of each branch."""
    name: str = "table"
    """Name used in log and error messages."""
    warn_on_extrapolation: bool = False
    """Log a warning whenever the outer axis is extrapolated."""
    _interpolators: typing.Tuple[typing.Any, ...] = attrs.field(
        init=False, default=(), repr=False
    )

    def __attrs_post_init__(self) -> None:
        if not (len(self.x) == len(self.ys) == len(self.values)):
            raise ValidationError(
                f"{self.name}: outer axis ({len(self.x)}), inner axes ({len(self.ys)}) "
                f"and values ({len(self.values)}) must have the same length"
            )
        for index, (ys, values) in enumerate(zip(self.ys, self.values)):
            if len(ys) != len(values):
                raise ValidationError(
                    f"{self.name}: branch {index} has {len(ys)} inner positions "
                    f"but {len(values)} values"
                )
            if len(ys) == 0:
                raise InsufficientData(f"{self.name}: branch {index} is empty")
            if not is_strictly_increasing(ys):
                raise ValidationError(
                    f"{self.name}: inner axis of branch {index} must be strictly increasing"
                )
        if not is_strictly_increasing(self.x):
            raise ValidationError(f"{self.name}: outer axis must be strictly increasing")
        object.__setattr__(
            self,
            "_interpolators",
            tuple(
                _linear_interpolator(ys, values) if len(ys) > 1 else None
                for ys, values in zip(self.ys, self.values)
            ),
        )

    @property
    def num_x(self) -> int:
        return len(self.x)

    def num_y(self, index: int) -> int:
        """Number of inner samples of the branch at outer index `index`."""
        return len(self.ys[index])

    def degenerate_indices(self, min_samples: int = 2) -> typing.List[int]:
        """Outer indices whose branches have fewer than `min_samples` inner samples."""
        return [index for index in range(self.num_x) if self.num_y(index) < min_samples]

    def is_complete(self, min_samples: int = 2) -> bool:
        return not self.degenerate_indices(min_samples)

    def with_samples(
        self,
        index: int,
        ys: typing.Sequence[float],
        values: typing.Sequence[float],
    ) -> "Table2D":
        """
        Return a new table with samples added to the branch at `index`.

        Samples are merged into the branch in inner axis order. The current table is left untouched.
        """
        merged_ys = np.concatenate([self.ys[index], np.asarray(ys, dtype=self.x.dtype)])
        merged_values = np.concatenate(
            [self.values[index], np.asarray(values, dtype=self.x.dtype)]
        )
        order = np.argsort(merged_ys, kind="stable")

        new_ys = list(self.ys)
        new_values = list(self.values)
        new_ys[index] = merged_ys[order]
        new_values[index] = merged_values[order]
        return attrs.evolve(self, ys=new_ys, values=new_values)

    def eval(self, x: float, y: float, extrapolate: bool = False) -> float:
        """
        Evaluate the table at outer position `x` and inner position `y`.

        :param x: Outer axis position (e.g. pressure)
        :param y: Inner axis position (e.g. vaporization ratio)
        :param extrapolate: If False, querying `x` outside the outer axis raises `ValidationError`
        :return: Interpolated value
        """
        x_min, x_max = float(self.x[0]), float(self.x[-1])
        if x < x_min or x > x_max:
            if not extrapolate:
                raise ValidationError(
                    f"{self.name}: queried x={x} is outside the table range [{x_min}, {x_max}]"
                )
            if self.warn_on_extrapolation:
                logger.warning(
                    f"{self.name} extrapolation: queried x={x}, table range [{x_min}, {x_max}]"
                )

        branch_values = np.array(
            [self._eval_branch(index, y) for index in range(self.num_x)],
            dtype=self.x.dtype,
        )
        if self.num_x == 1:
            return float(branch_values[0])
        return float(_linear_interpolator(self.x, branch_values)(x))

    def _eval_branch(self, index: int, y: float) -> float:
        interpolator = self._interpolators[index]
        if interpolator is None:
            # Single-sample branch
            return float(self.values[index][0])
        return float(interpolator(y))

    def __call__(self, x: float, y: float, extrapolate: bool = False) -> float:
        return self.eval(x, y, extrapolate=extrapolate)


class Table2DBuilder:
    """
    Mutable accumulator for a `Table2D`.

    Outer positions are appended one at a time, then inner samples are appended to them.
    `build()` returns an immutable `Table2D` and leaves the builder reusable.
    """

    def __init__(self, name: str = "table") -> None:
        self.name = name
        self._x: typing.List[float] = []
        self._ys: typing.List[typing.List[float]] = []
        self._values: typing.List[typing.List[float]] = []

    @property
    def num_x(self) -> int:
        return len(self._x)

    def num_y(self, index: int) -> int:
        return len(self._ys[index])

    def append_x(self, x: float) -> int:
        """
        Append an outer position.

        :return: Index of the new outer position
        """
        self._x.append(float(x))
        self._ys.append([])
        self._values.append([])
        return len(self._x) - 1

    def append_sample(self, index: int, y: float, value: float) -> None:
        """
        Add an inner sample to the branch at outer index `index`.

        Samples may arrive in increasing or decreasing inner order. The branch
        is kept sorted by prepending samples below its first position.

        :raises `ValidationError`: If `y` falls inside (or on) the current branch range
        """
        y = float(y)
        ys = self._ys[index]
        if not ys or y > ys[-1]:
            ys.append(y)
            self._values[index].append(float(value))
        elif y < ys[0]:
            ys.insert(0, y)
            self._values[index].insert(0, float(value))
        else:
            raise ValidationError(
                f"{self.name}: inner samples of branch {index} must be strictly monotonic, "
                f"got {y} within [{ys[0]}, {ys[-1]}]"
            )

    def build(self, warn_on_extrapolation: bool = False) -> Table2D:
        return Table2D(
            x=self._x,
            ys=self._ys,
            values=self._values,
            name=self.name,
            warn_on_extrapolation=warn_on_extrapolation,
        )
