"""Already-parsed raw input tables consumed by the wet/humid gas PVT build."""

import typing

import attrs
import numpy as np
from typing_extensions import Self

from wethumid.errors import InsufficientData, ValidationError
from wethumid.types import (
    FAMILY_KEYWORDS,
    FAMILY_RATIO_COLUMNS,
    GAS_FAMILIES,
    GasFamily,
    OilVaporizationType,
    OneDimensionalGrid,
)
from wethumid.utils import as_column


__all__ = [
    "ReferenceDensities",
    "SaturatedGasTable",
    "UndersaturatedGasTable",
    "GasPvtTable",
    "SaltBranch",
    "SaltVaporizationTable",
    "InputTableSet",
    "OilVaporizationControl",
    "ScheduleStep",
    "Schedule",
]

GasRecord = typing.Tuple[float, typing.Sequence[typing.Tuple[float, float, float]]]
"""
Deck-like record for one saturated pressure node: `(pressure, [(ratio, B, viscosity), ...])`.

The first inner row is the saturated point.
"""
SaltRecord = typing.Tuple[float, typing.Sequence[typing.Tuple[float, float]]]
"""Deck-like salt record: `(pressure, [(salt_concentration, vaporization_ratio), ...])`."""


def _check_equal_lengths(instance: typing.Any, table_name: str) -> None:
    lengths = {
        field.name: len(getattr(instance, field.name))
        for field in attrs.fields(type(instance))
        if isinstance(getattr(instance, field.name), np.ndarray)
    }
    if len(set(lengths.values())) > 1:
        raise ValidationError(
            f"All columns of the {table_name} must have the same length, got {lengths}"
        )


@attrs.frozen
class ReferenceDensities:
    """Fluid densities at surface (reference) conditions for one region."""

    oil: float = attrs.field(converter=float, validator=attrs.validators.gt(0))
    """Reference oil density."""
    gas: float = attrs.field(converter=float, validator=attrs.validators.gt(0))
    """Reference gas density."""
    water: float = attrs.field(converter=float, validator=attrs.validators.gt(0))
    """Reference water density."""


@attrs.frozen(eq=False)
class SaturatedGasTable:
    """
    Gas properties on the saturation curve, indexed by pressure.

    Pressures are expected to be strictly increasing. They are never re-sorted.
    """

    pressures: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "pressures")
    )
    """Gas pressures (PG)."""
    formation_volume_factors: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "formation_volume_factors")
    )
    """Gas formation volume factors at saturation (BG)."""
    viscosities: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "viscosities")
    )
    """Gas viscosities at saturation (MUG)."""
    vaporization_ratios: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "vaporization_ratios")
    )
    """Saturated vaporization ratios (RV for wet gas, RW for humid gas)."""

    def __attrs_post_init__(self) -> None:
        _check_equal_lengths(self, "saturated gas table")

    @property
    def num_rows(self) -> int:
        return len(self.pressures)


@attrs.frozen(eq=False)
class UndersaturatedGasTable:
    """
    Gas properties along one undersaturated branch (one saturated pressure node).

    By convention the first row repeats the saturated point.
    """

    ratios: OneDimensionalGrid = attrs.field(converter=lambda v: as_column(v, "ratios"))
    """Vaporization ratios, strictly monotonic."""
    formation_volume_factors: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "formation_volume_factors")
    )
    """Gas formation volume factors (BG)."""
    viscosities: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "viscosities")
    )
    """Gas viscosities (MUG)."""

    def __attrs_post_init__(self) -> None:
        _check_equal_lengths(self, "undersaturated gas table")
        if len(self.ratios) < 1:
            raise InsufficientData(
                "Undersaturated gas table must contain at least one sample"
            )

    @property
    def num_rows(self) -> int:
        return len(self.ratios)


_COLUMN_ATTRIBUTES = {
    "PG": "pressures",
    "BG": "formation_volume_factors",
    "MUG": "viscosities",
}


@attrs.frozen(eq=False)
class GasPvtTable:
    """
    Raw wet (PVTG) or humid (PVTGW) gas table for one region.

    Holds the saturated table and one undersaturated branch per saturated row.
    """

    saturated: SaturatedGasTable
    """Properties on the saturation curve."""
    undersaturated: typing.Tuple[UndersaturatedGasTable, ...] = attrs.field(
        converter=tuple
    )
    """Undersaturated branches, one per saturated row, in the same order."""
    family: GasFamily = attrs.field(
        default="wet", validator=attrs.validators.in_(GAS_FAMILIES)
    )
    """Gas family the table belongs to. Decides the name of the ratio column."""

    def __attrs_post_init__(self) -> None:
        if len(self.undersaturated) != self.saturated.num_rows:
            raise ValidationError(
                f"Gas table has {self.saturated.num_rows} saturated rows but "
                f"{len(self.undersaturated)} undersaturated branches"
            )

    @property
    def num_rows(self) -> int:
        return self.saturated.num_rows

    @property
    def keyword(self) -> str:
        return FAMILY_KEYWORDS[self.family]

    @property
    def ratio_column(self) -> str:
        return FAMILY_RATIO_COLUMNS[self.family]

    def get_column(self, name: str) -> OneDimensionalGrid:
        """
        Get a saturated table column by its deck name.

        :param name: 'PG', 'BG', 'MUG', or the family's ratio column ('RV' for wet gas, 'RW' for humid gas)
        :return: The column values
        """
        name = name.upper()
        if name == self.ratio_column:
            return self.saturated.vaporization_ratios
        try:
            attribute = _COLUMN_ATTRIBUTES[name]
        except KeyError:
            raise ValidationError(
                f"Unknown {self.keyword} table column {name!r}. "
                f"Must be one of: {[*_COLUMN_ATTRIBUTES.keys(), self.ratio_column]}"
            ) from None
        return getattr(self.saturated, attribute)

    def get_undersaturated_table(self, index: int) -> UndersaturatedGasTable:
        return self.undersaturated[index]

    @classmethod
    def from_records(
        cls, records: typing.Iterable[GasRecord], family: GasFamily = "wet"
    ) -> Self:
        """
        Build a gas table from deck-like records.

        Each record is `(pressure, rows)` where `rows` is a sequence of
        `(ratio, formation_volume_factor, viscosity)` tuples and the first row is the saturated point.

        Example:
        ```python
        table = GasPvtTable.from_records(
            [
                (50.0, [(1e-4, 0.025, 0.0140), (0.0, 0.0252, 0.0138)]),
                (100.0, [(2e-4, 0.012, 0.0150)]),
            ]
        )
        ```

        :param records: Records ordered by increasing pressure
        :param family: Gas family of the table ('wet' or 'humid')
        :return: `GasPvtTable`
        """
        pressures = []
        saturated_rows = []
        undersaturated = []
        for pressure, rows in records:
            rows = list(rows)
            if not rows:
                raise InsufficientData(
                    f"Gas record at pressure {pressure} has no (ratio, B, viscosity) rows"
                )
            ratios, factors, viscosities = zip(*rows)
            pressures.append(pressure)
            saturated_rows.append(rows[0])
            undersaturated.append(
                UndersaturatedGasTable(
                    ratios=ratios,
                    formation_volume_factors=factors,
                    viscosities=viscosities,
                )
            )

        saturated = SaturatedGasTable(
            pressures=pressures,
            formation_volume_factors=[row[1] for row in saturated_rows],
            viscosities=[row[2] for row in saturated_rows],
            vaporization_ratios=[row[0] for row in saturated_rows],
        )
        return cls(saturated=saturated, undersaturated=undersaturated, family=family)


@attrs.frozen(eq=False)
class SaltBranch:
    """Water vaporization ratio as a function of salt concentration at one pressure."""

    salt_concentrations: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "salt_concentrations")
    )
    """Salt concentrations (C_SALT), strictly monotonic."""
    vaporization_ratios: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "vaporization_ratios")
    )
    """Saturated water vaporization ratios (RVW)."""

    def __attrs_post_init__(self) -> None:
        _check_equal_lengths(self, "salt branch")
        if len(self.salt_concentrations) < 1:
            raise InsufficientData("Salt branch must contain at least one sample")

    @property
    def num_rows(self) -> int:
        return len(self.salt_concentrations)


@attrs.frozen(eq=False)
class SaltVaporizationTable:
    """Raw salt correction table (RWGSALT) for one region."""

    pressures: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "pressures")
    )
    """Gas pressures (PG) of the saturated salt table."""
    undersaturated: typing.Tuple[SaltBranch, ...] = attrs.field(converter=tuple)
    """Salt branches, one per pressure."""

    def __attrs_post_init__(self) -> None:
        if len(self.undersaturated) != len(self.pressures):
            raise ValidationError(
                f"Salt table has {len(self.pressures)} pressures but "
                f"{len(self.undersaturated)} salt branches"
            )

    @property
    def num_rows(self) -> int:
        return len(self.pressures)

    @classmethod
    def from_records(cls, records: typing.Iterable[SaltRecord]) -> Self:
        """
        Build a salt table from `(pressure, [(salt_concentration, vaporization_ratio), ...])` records.

        :param records: Records ordered by increasing pressure
        :return: `SaltVaporizationTable`
        """
        pressures = []
        branches = []
        for pressure, rows in records:
            rows = list(rows)
            if not rows:
                raise InsufficientData(
                    f"Salt record at pressure {pressure} has no (concentration, ratio) rows"
                )
            concentrations, ratios = zip(*rows)
            pressures.append(pressure)
            branches.append(
                SaltBranch(salt_concentrations=concentrations, vaporization_ratios=ratios)
            )
        return cls(pressures=pressures, undersaturated=branches)


@attrs.frozen(eq=False)
class InputTableSet:
    """
    All raw tables needed to build the wet/humid gas PVT, one entry per region.

    Salt tables are optional. If any are supplied, every region is expected to supply one.
    """

    densities: typing.Tuple[ReferenceDensities, ...] = attrs.field(converter=tuple)
    """Reference densities (DENSITY), one record per region."""
    wet_gas_tables: typing.Tuple[GasPvtTable, ...] = attrs.field(converter=tuple)
    """Wet gas tables (PVTG), one per region."""
    humid_gas_tables: typing.Tuple[GasPvtTable, ...] = attrs.field(converter=tuple)
    """Humid gas tables (PVTGW), one per region."""
    salt_tables: typing.Tuple[SaltVaporizationTable, ...] = attrs.field(
        factory=tuple, converter=tuple
    )
    """Salt correction tables (RWGSALT), empty when salt correction is not used."""

    @property
    def salt_enabled(self) -> bool:
        """Whether salt correction is active. Activation is global, not per region."""
        return len(self.salt_tables) > 0

    def gas_tables(self, family: str) -> typing.Tuple[GasPvtTable, ...]:
        if family == "wet":
            return self.wet_gas_tables
        if family == "humid":
            return self.humid_gas_tables
        raise ValidationError(f"Unknown gas family {family!r}. Must be 'wet' or 'humid'")


@attrs.frozen
class OilVaporizationControl:
    """Oil vaporization control of a schedule step."""

    type: OilVaporizationType = OilVaporizationType.UNDEFINED
    """Kind of control."""
    vap1: float = attrs.field(
        default=0.0, converter=float, validator=attrs.validators.ge(0)
    )
    """First VAPPARS parameter, the vaporization-control coefficient."""
    vap2: float = attrs.field(
        default=0.0, converter=float, validator=attrs.validators.ge(0)
    )
    """Second VAPPARS parameter."""


@attrs.frozen
class ScheduleStep:
    """The part of a simulation schedule step the PVT build reads."""

    oil_vaporization: OilVaporizationControl = attrs.field(
        factory=OilVaporizationControl
    )


Schedule = typing.Sequence[ScheduleStep]
"""Simulation schedule, one entry per report step."""
