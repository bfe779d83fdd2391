import logging

import attrs
import numpy as np

from wethumid.inputs import GasPvtTable
from wethumid.tables.functions import Table2D, Table2DBuilder
from wethumid.types import FAMILY_KEYWORDS, GasFamily, OneDimensionalGrid
from wethumid.utils import as_column

logger = logging.getLogger(__name__)

__all__ = ["GasTables2D", "build_gas_tables"]


@attrs.frozen(eq=False)
class GasTables2D:
    """
    Two-dimensional gas tables of one region and family, as assembled from the raw input.

    Branches may still be degenerate (a single inner sample) until extrapolated.
    """

    inverse_formation_volume_factor: Table2D
    """1/Bg as a function of (pressure, vaporization ratio)."""
    viscosity: Table2D
    """Gas viscosity as a function of (pressure, vaporization ratio)."""
    saturated_inverse_formation_volume_factors: OneDimensionalGrid = attrs.field(
        converter=lambda v: as_column(v, "saturated_inverse_formation_volume_factors")
    )
    """1/Bg at each saturated pressure node."""
    saturated_inverse_viscosity_formation_volume_factors: OneDimensionalGrid = (
        attrs.field(
            converter=lambda v: as_column(
                v, "saturated_inverse_viscosity_formation_volume_factors"
            )
        )
    )
    """1/(μg·Bg) at each saturated pressure node."""


def build_gas_tables(
    table: GasPvtTable,
    region_index: int = 0,
    family: GasFamily = "wet",
    warn_on_extrapolation: bool = False,
) -> GasTables2D:
    """
    Assemble the 2D inverse formation volume factor and viscosity tables of a gas table.

    Each saturated row seeds one outer pressure node. The rows of its undersaturated
    branch are appended as `(ratio, 1/B)` and `(ratio, μ)` inner samples in the supplied order.
    The saturated 1/B and 1/(μB) of every node are collected alongside.

    :param table: Raw gas table of one region
    :param region_index: Region index, used in table names and log messages
    :param family: Gas family of the table ('wet' or 'humid')
    :param warn_on_extrapolation: Passed on to the built tables
    :return: `GasTables2D` whose branches may still be degenerate
    """
    keyword = FAMILY_KEYWORDS[family]
    inverse_b_builder = Table2DBuilder(
        name=f"{keyword} inverse formation volume factor (region {region_index})"
    )
    viscosity_builder = Table2DBuilder(name=f"{keyword} viscosity (region {region_index})")

    saturated = table.saturated
    saturated_inverse_b = []
    saturated_inverse_b_mu = []
    for outer_index in range(saturated.num_rows):
        pressure = saturated.pressures[outer_index]
        b = saturated.formation_volume_factors[outer_index]
        mu = saturated.viscosities[outer_index]

        inverse_b_builder.append_x(pressure)
        viscosity_builder.append_x(pressure)
        saturated_inverse_b.append(1.0 / b)
        saturated_inverse_b_mu.append(1.0 / (mu * b))

        branch = table.get_undersaturated_table(outer_index)
        for ratio, branch_b, branch_mu in zip(
            branch.ratios, branch.formation_volume_factors, branch.viscosities
        ):
            inverse_b_builder.append_sample(outer_index, ratio, 1.0 / branch_b)
            viscosity_builder.append_sample(outer_index, ratio, branch_mu)

    inverse_formation_volume_factor = inverse_b_builder.build(warn_on_extrapolation)
    viscosity = viscosity_builder.build(warn_on_extrapolation)
    logger.debug(
        f"Assembled {keyword} tables for region {region_index}: "
        f"{inverse_formation_volume_factor.num_x} pressure nodes, "
        f"{len(inverse_formation_volume_factor.degenerate_indices())} degenerate branches"
    )
    return GasTables2D(
        inverse_formation_volume_factor=inverse_formation_volume_factor,
        viscosity=viscosity,
        saturated_inverse_formation_volume_factors=np.asarray(saturated_inverse_b),
        saturated_inverse_viscosity_formation_volume_factors=np.asarray(
            saturated_inverse_b_mu
        ),
    )
