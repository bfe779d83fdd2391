"""Construction of the finished, per-region wet/humid gas PVT tables."""

import logging
import typing

import attrs
import numpy as np

from wethumid.config import Config
from wethumid.errors import ValidationError
from wethumid.extrapolation import extrapolate_gas_tables
from wethumid.inputs import (
    GasPvtTable,
    InputTableSet,
    ReferenceDensities,
    Schedule,
)
from wethumid.salt import build_salt_vaporization_table
from wethumid.saturated import SaturatedCurves, build_saturated_curves
from wethumid.tables.functions import Table2D
from wethumid.tables.gas import build_gas_tables
from wethumid.types import (
    FAMILY_KEYWORDS,
    GAS_FAMILIES,
    GasFamily,
    OilVaporizationType,
)
from wethumid.validation import validate_input_tables

logger = logging.getLogger(__name__)

__all__ = [
    "GasFamilyTables",
    "RegionPvt",
    "WetHumidGasPvt",
    "build_gas_family_tables",
    "read_vaporization_parameter",
    "finalize",
    "build_wet_humid_gas_pvt",
    "build_wet_humid_gas_pvt_from_schedule",
]


@attrs.frozen(eq=False)
class GasFamilyTables:
    """Finished tables of one gas family in one region."""

    inverse_formation_volume_factor: Table2D
    """1/Bg(p, r). Every branch has at least two samples."""
    viscosity: Table2D
    """μg(p, r). Every branch has at least two samples."""
    saturated: SaturatedCurves
    """Properties on the saturation curve."""


@attrs.frozen(eq=False)
class RegionPvt:
    """Finished tables of one region."""

    index: int
    """Zero-based region index."""
    reference_densities: ReferenceDensities
    """Oil, gas and water densities at reference conditions."""
    wet: GasFamilyTables
    """Tables built from the wet gas (PVTG) input."""
    humid: GasFamilyTables
    """Tables built from the humid gas (PVTGW) input."""
    salt_vaporization: typing.Optional[Table2D] = None
    """Water vaporization ratio as a function of (pressure, salt concentration), if salt correction is active."""

    def family(self, family: GasFamily) -> GasFamilyTables:
        if family == "wet":
            return self.wet
        if family == "humid":
            return self.humid
        raise ValidationError(f"Unknown gas family {family!r}. Must be 'wet' or 'humid'")


@attrs.frozen(eq=False)
class WetHumidGasPvt:
    """
    Finished, immutable wet/humid gas PVT tables of all regions.

    Only read access is exposed. All arrays held are read-only, so an instance can be shared freely.
    """

    regions: typing.Tuple[RegionPvt, ...] = attrs.field(converter=tuple)
    """Per-region tables, indexed by region."""
    vaporization_parameter: float = attrs.field(default=0.0, converter=float)
    """Vaporization-control coefficient (VAPPARS first parameter), shared by all regions."""
    salt_enabled: bool = False
    """Whether salt correction of the water vaporization ratio is active."""

    @property
    def num_regions(self) -> int:
        return len(self.regions)

    def region(self, region_index: int) -> RegionPvt:
        if not 0 <= region_index < self.num_regions:
            raise ValidationError(
                f"Region index {region_index} out of range, there are {self.num_regions} regions"
            )
        return self.regions[region_index]

    def reference_densities(self, region_index: int) -> ReferenceDensities:
        return self.region(region_index).reference_densities

    def inverse_formation_volume_factor(
        self,
        region_index: int,
        family: GasFamily,
        pressure: float,
        ratio: float,
        extrapolate: bool = False,
    ) -> float:
        """1/Bg at `pressure` and vaporization `ratio`."""
        tables = self.region(region_index).family(family)
        return tables.inverse_formation_volume_factor.eval(
            pressure, ratio, extrapolate=extrapolate
        )

    def viscosity(
        self,
        region_index: int,
        family: GasFamily,
        pressure: float,
        ratio: float,
        extrapolate: bool = False,
    ) -> float:
        """Gas viscosity at `pressure` and vaporization `ratio`."""
        tables = self.region(region_index).family(family)
        return tables.viscosity.eval(pressure, ratio, extrapolate=extrapolate)

    def saturated_inverse_formation_volume_factor(
        self,
        region_index: int,
        family: GasFamily,
        pressure: float,
        extrapolate: bool = False,
    ) -> float:
        """1/Bg on the saturation curve at `pressure`."""
        curves = self.region(region_index).family(family).saturated
        return curves.inverse_formation_volume_factor.eval(
            pressure, extrapolate=extrapolate
        )

    def saturated_vaporization_ratio(
        self,
        region_index: int,
        family: GasFamily,
        pressure: float,
        extrapolate: bool = False,
    ) -> float:
        """Saturated Rv (wet) or Rw (humid) at `pressure`."""
        curves = self.region(region_index).family(family).saturated
        return curves.vaporization_ratio.eval(pressure, extrapolate=extrapolate)

    def saturated_water_vaporization_ratio(
        self,
        region_index: int,
        pressure: float,
        salt_concentration: typing.Optional[float] = None,
        extrapolate: bool = False,
    ) -> float:
        """
        Saturated water vaporization ratio at `pressure`.

        When salt correction is active and a `salt_concentration` is given, the salt table is used.
        Otherwise the humid gas saturated curve is used.
        """
        region = self.region(region_index)
        if salt_concentration is not None and region.salt_vaporization is not None:
            return region.salt_vaporization.eval(
                pressure, salt_concentration, extrapolate=extrapolate
            )
        return region.humid.saturated.vaporization_ratio.eval(
            pressure, extrapolate=extrapolate
        )


def build_gas_family_tables(
    table: GasPvtTable,
    region_index: int,
    family: GasFamily,
    config: typing.Optional[Config] = None,
) -> GasFamilyTables:
    """
    Build the finished tables of one region and gas family.

    Assembles the 2D tables, completes degenerate branches and builds the saturated curves.
    `table` is expected to have passed validation.
    """
    config = config or Config()
    raw_tables = build_gas_tables(
        table,
        region_index=region_index,
        family=family,
        warn_on_extrapolation=config.warn_on_extrapolation,
    )
    complete_tables = extrapolate_gas_tables(
        raw_tables, table, region_index=region_index, family=family
    )
    saturated = build_saturated_curves(
        table,
        complete_tables,
        region_index=region_index,
        family=family,
        warn_on_extrapolation=config.warn_on_extrapolation,
    )
    return GasFamilyTables(
        inverse_formation_volume_factor=complete_tables.inverse_formation_volume_factor,
        viscosity=complete_tables.viscosity,
        saturated=saturated,
    )


def read_vaporization_parameter(schedule: Schedule) -> float:
    """
    Read the vaporization-control coefficient from the first schedule step.

    Later steps are ignored, the coefficient is fixed for the whole run.

    :param schedule: Simulation schedule
    :return: `vap1` if the first step uses VAPPARS, else 0.0
    :raises `ValidationError`: If the schedule has no steps
    """
    if len(schedule) == 0:
        raise ValidationError("Schedule must contain at least one step")
    oil_vaporization = schedule[0].oil_vaporization
    if oil_vaporization.type == OilVaporizationType.VAPPARS:
        return oil_vaporization.vap1
    return 0.0


def finalize(
    regions: typing.Sequence[RegionPvt],
    vaporization_parameter: float,
    salt_enabled: bool,
    config: typing.Optional[Config] = None,
) -> WetHumidGasPvt:
    """
    Freeze the built regions into a `WetHumidGasPvt`.

    With `Config.check_completeness` set, asserts that every region is fully populated.
    The checks are skipped when Python runs with optimizations (`-O`).
    """
    config = config or Config()
    pvt = WetHumidGasPvt(
        regions=regions,
        vaporization_parameter=vaporization_parameter,
        salt_enabled=salt_enabled,
    )
    if config.check_completeness:
        for expected_index, region in enumerate(pvt.regions):
            assert region.index == expected_index, "Regions out of order"
            assert (region.salt_vaporization is not None) == salt_enabled, (
                f"Salt table presence of region {region.index} does not match activation"
            )
            for family in GAS_FAMILIES:
                tables = region.family(family)
                num_x = tables.inverse_formation_volume_factor.num_x
                assert tables.viscosity.num_x == num_x
                assert tables.saturated.vaporization_ratio.num_samples == num_x
                assert tables.inverse_formation_volume_factor.is_complete(), (
                    f"Degenerate {FAMILY_KEYWORDS[family]} branch left in region {region.index}"
                )
                assert tables.viscosity.is_complete()
    return pvt


def build_wet_humid_gas_pvt(
    input_tables: InputTableSet,
    vaporization_parameter: float = 0.0,
    config: typing.Optional[Config] = None,
) -> WetHumidGasPvt:
    """
    Build the finished wet/humid gas PVT tables of all regions.

    Steps:
    1. Validates the input (region counts first, then row counts and axes)
    2. Copies the reference densities of every region
    3. Builds, completes and finalizes the wet gas (PVTG) tables of every region
    4. Builds, completes and finalizes the humid gas (PVTGW) tables of every region
    5. Builds the salt (RWGSALT) tables when any are supplied
    6. Freezes everything, with the vaporization-control coefficient, into a `WetHumidGasPvt`

    Any failure aborts the build; no partially built state is returned.

    Example:
    ```python
    pvt = build_wet_humid_gas_pvt(input_tables, vaporization_parameter=0.5)
    inverse_bg = pvt.inverse_formation_volume_factor(0, "wet", pressure=150.0, ratio=1e-4)
    ```

    :param input_tables: Raw, already-parsed input tables
    :param vaporization_parameter: Vaporization-control coefficient (see `read_vaporization_parameter`)
    :param config: Build configuration, defaults to `Config()`
    :return: `WetHumidGasPvt`
    :raises `TableMismatch`: If input sources disagree on the number of regions
    :raises `InsufficientData`: If a saturated table has fewer than two rows
    :raises `ExtrapolationImpossible`: If a degenerate branch cannot be completed
    """
    config = config or Config()
    if not (np.isfinite(vaporization_parameter) and vaporization_parameter >= 0):
        raise ValidationError(
            f"Vaporization parameter must be finite and non-negative, got {vaporization_parameter}"
        )

    num_regions = validate_input_tables(input_tables, config)
    densities = [input_tables.densities[index] for index in range(num_regions)]

    family_tables: typing.Dict[GasFamily, typing.List[GasFamilyTables]] = {}
    for family in GAS_FAMILIES:
        gas_tables = input_tables.gas_tables(family)
        family_tables[family] = [
            build_gas_family_tables(gas_tables[index], index, family, config)
            for index in range(num_regions)
        ]

    salt_tables: typing.List[typing.Optional[Table2D]] = [None] * num_regions
    if input_tables.salt_enabled:
        salt_tables = [
            build_salt_vaporization_table(
                input_tables.salt_tables[index],
                region_index=index,
                warn_on_extrapolation=config.warn_on_extrapolation,
            )
            for index in range(num_regions)
        ]

    regions = [
        RegionPvt(
            index=index,
            reference_densities=densities[index],
            wet=family_tables["wet"][index],
            humid=family_tables["humid"][index],
            salt_vaporization=salt_tables[index],
        )
        for index in range(num_regions)
    ]
    pvt = finalize(
        regions,
        vaporization_parameter=vaporization_parameter,
        salt_enabled=input_tables.salt_enabled,
        config=config,
    )
    logger.info(
        f"Wet/humid gas PVT built: {pvt.num_regions} regions, "
        f"salt correction {'enabled' if pvt.salt_enabled else 'disabled'}, "
        f"vaporization parameter={pvt.vaporization_parameter}"
    )
    return pvt


def build_wet_humid_gas_pvt_from_schedule(
    input_tables: InputTableSet,
    schedule: Schedule,
    config: typing.Optional[Config] = None,
) -> WetHumidGasPvt:
    """
    Build the wet/humid gas PVT, reading the vaporization-control coefficient from the first schedule step.
    """
    return build_wet_humid_gas_pvt(
        input_tables,
        vaporization_parameter=read_vaporization_parameter(schedule),
        config=config,
    )
