import logging

import attrs

from wethumid.inputs import GasPvtTable
from wethumid.tables.functions import Table1D
from wethumid.tables.gas import GasTables2D
from wethumid.types import FAMILY_KEYWORDS, FAMILY_RATIO_COLUMNS, GasFamily

logger = logging.getLogger(__name__)

__all__ = ["SaturatedCurves", "build_saturated_curves"]


@attrs.frozen(eq=False)
class SaturatedCurves:
    """Gas properties on the saturation curve, all sharing the saturated pressure axis."""

    formation_volume_factor: Table1D
    """Bg(p) at saturation."""
    inverse_formation_volume_factor: Table1D
    """1/Bg(p) at saturation."""
    inverse_viscosity_formation_volume_factor: Table1D
    """1/(μg·Bg)(p) at saturation."""
    vaporization_ratio: Table1D
    """Saturated vaporization ratio, Rv(p) for wet gas and Rw(p) for humid gas."""


def build_saturated_curves(
    table: GasPvtTable,
    tables_2d: GasTables2D,
    region_index: int = 0,
    family: GasFamily = "wet",
    warn_on_extrapolation: bool = False,
) -> SaturatedCurves:
    """
    Build the 1D saturated curves of one region and family.

    The pressure column of the saturated table is the x-axis of every curve.
    Columns are used in the order supplied.

    :param table: Raw gas table
    :param tables_2d: Assembled 2D tables, providing the saturated 1/B and 1/(μB) values
    :param region_index: Region index, used in table names
    :param family: Gas family of the table
    :param warn_on_extrapolation: Passed on to the built curves
    :return: `SaturatedCurves`
    """
    keyword = FAMILY_KEYWORDS[family]
    ratio_column = FAMILY_RATIO_COLUMNS[family]
    pressures = table.get_column("PG")

    def curve(values, quantity: str) -> Table1D:
        return Table1D(
            x=pressures,
            y=values,
            name=f"{keyword} saturated {quantity} (region {region_index})",
            warn_on_extrapolation=warn_on_extrapolation,
        )

    curves = SaturatedCurves(
        formation_volume_factor=curve(table.get_column("BG"), "BG"),
        inverse_formation_volume_factor=curve(
            tables_2d.saturated_inverse_formation_volume_factors, "1/BG"
        ),
        inverse_viscosity_formation_volume_factor=curve(
            tables_2d.saturated_inverse_viscosity_formation_volume_factors, "1/(MUG*BG)"
        ),
        vaporization_ratio=curve(table.get_column(ratio_column), ratio_column),
    )
    logger.debug(f"Built {keyword} saturated curves for region {region_index}")
    return curves
