"""Cross checks run on the raw input tables before any table is built."""

import logging
import typing

from wethumid.config import Config
from wethumid.errors import InsufficientData, TableMismatch, ValidationError
from wethumid.inputs import GasPvtTable, InputTableSet, SaltVaporizationTable
from wethumid.types import FAMILY_KEYWORDS, GAS_FAMILIES, GasFamily
from wethumid.utils import is_strictly_increasing, is_strictly_monotonic

logger = logging.getLogger(__name__)

__all__ = [
    "MIN_SATURATED_ROWS",
    "validate_region_counts",
    "validate_table_family",
    "validate_saturated_rows",
    "validate_salt_rows",
    "validate_monotonic_axes",
    "validate_input_tables",
]

MIN_SATURATED_ROWS = 2
"""Interpolation along pressure needs at least two saturated rows."""


def validate_region_counts(input_tables: InputTableSet) -> int:
    """
    Check that every input source describes the same number of regions.

    :param input_tables: Raw input tables
    :return: The number of regions
    :raises `TableMismatch`: If two sources disagree, naming both counts
    """
    num_regions = len(input_tables.densities)
    counts: typing.List[typing.Tuple[str, int]] = [
        (FAMILY_KEYWORDS["humid"], len(input_tables.humid_gas_tables)),
        (FAMILY_KEYWORDS["wet"], len(input_tables.wet_gas_tables)),
    ]
    if input_tables.salt_enabled:
        counts.append(("RWGSALT", len(input_tables.salt_tables)))

    for keyword, count in counts:
        if count != num_regions:
            raise TableMismatch(
                f"Table sizes mismatch. {keyword}: {count}, DENSITY: {num_regions}"
            )
    return num_regions


def validate_table_family(
    table: GasPvtTable, region_index: int, family: GasFamily
) -> None:
    """
    :raises `ValidationError`: If a table of one family is supplied in place of the other
    """
    if table.family != family:
        raise ValidationError(
            f"Region {region_index} supplies a {table.keyword} table where a "
            f"{FAMILY_KEYWORDS[family]} table is expected"
        )


def validate_saturated_rows(
    table: GasPvtTable, region_index: int, family: GasFamily
) -> None:
    """
    :raises `InsufficientData`: If the saturated table has fewer than two rows
    """
    if table.num_rows < MIN_SATURATED_ROWS:
        raise InsufficientData(
            f"Saturated {FAMILY_KEYWORDS[family]} table of region {region_index} must have "
            f"at least {MIN_SATURATED_ROWS} rows, got {table.num_rows}"
        )


def validate_salt_rows(table: SaltVaporizationTable, region_index: int) -> None:
    """
    :raises `InsufficientData`: If the saturated salt table has fewer than two rows
    """
    if table.num_rows < MIN_SATURATED_ROWS:
        raise InsufficientData(
            f"Saturated RWGSALT table of region {region_index} must have "
            f"at least {MIN_SATURATED_ROWS} rows, got {table.num_rows}"
        )


def validate_monotonic_axes(
    table: GasPvtTable, region_index: int, family: GasFamily
) -> None:
    """
    Check that saturated pressures are strictly increasing and that the ratios of every
    undersaturated branch are strictly monotonic (increasing or, as in most decks, decreasing).

    :raises `ValidationError`: Naming the first offending axis
    """
    keyword = FAMILY_KEYWORDS[family]
    if not is_strictly_increasing(table.get_column("PG")):
        raise ValidationError(
            f"Pressures of the saturated {keyword} table of region {region_index} "
            "must be strictly monotonically increasing"
        )
    for outer_index, branch in enumerate(table.undersaturated):
        if not is_strictly_monotonic(branch.ratios):
            raise ValidationError(
                f"Ratios of undersaturated {keyword} branch {outer_index} of region "
                f"{region_index} must be strictly monotonic"
            )


def _validate_salt_axes(table: SaltVaporizationTable, region_index: int) -> None:
    if not is_strictly_increasing(table.pressures):
        raise ValidationError(
            f"Pressures of the RWGSALT table of region {region_index} "
            "must be strictly monotonically increasing"
        )
    for outer_index, branch in enumerate(table.undersaturated):
        if not is_strictly_monotonic(branch.salt_concentrations):
            raise ValidationError(
                f"Salt concentrations of RWGSALT branch {outer_index} of region "
                f"{region_index} must be strictly monotonic"
            )


def validate_input_tables(
    input_tables: InputTableSet, config: typing.Optional[Config] = None
) -> int:
    """
    Run all input checks. Region counts are checked first, before any per-region check.

    :param input_tables: Raw input tables
    :param config: Build configuration, defaults to `Config()`
    :return: The number of regions
    """
    config = config or Config()
    num_regions = validate_region_counts(input_tables)

    for region_index in range(num_regions):
        if input_tables.salt_enabled:
            salt_table = input_tables.salt_tables[region_index]
            validate_salt_rows(salt_table, region_index)
            if config.validate_monotonicity:
                _validate_salt_axes(salt_table, region_index)

        for family in GAS_FAMILIES:
            table = input_tables.gas_tables(family)[region_index]
            validate_table_family(table, region_index, family)
            validate_saturated_rows(table, region_index, family)
            if config.validate_monotonicity:
                validate_monotonic_axes(table, region_index, family)

    logger.debug(f"Input tables validated for {num_regions} regions")
    return num_regions
