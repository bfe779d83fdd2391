import logging

from wethumid.inputs import SaltVaporizationTable
from wethumid.tables.functions import Table2D, Table2DBuilder

logger = logging.getLogger(__name__)

__all__ = ["build_salt_vaporization_table"]


def build_salt_vaporization_table(
    table: SaltVaporizationTable,
    region_index: int = 0,
    warn_on_extrapolation: bool = False,
) -> Table2D:
    """
    Build the (pressure, salt concentration) -> saturated water vaporization ratio table.

    Uses the same outer/inner assembly as the gas tables but is never extrapolated:
    branches with a single salt concentration are kept as they are.

    :param table: Raw salt table (RWGSALT) of one region
    :param region_index: Region index, used in table names and log messages
    :param warn_on_extrapolation: Passed on to the built table
    :return: `Table2D` of water vaporization ratios
    """
    builder = Table2DBuilder(
        name=f"RWGSALT water vaporization ratio (region {region_index})"
    )
    for outer_index in range(table.num_rows):
        builder.append_x(table.pressures[outer_index])
        branch = table.undersaturated[outer_index]
        for concentration, ratio in zip(
            branch.salt_concentrations, branch.vaporization_ratios
        ):
            builder.append_sample(outer_index, concentration, ratio)

    salt_table = builder.build(warn_on_extrapolation)
    short_branches = salt_table.degenerate_indices()
    if short_branches:
        logger.warning(
            f"RWGSALT table of region {region_index} has single-sample salt branches at "
            f"pressure nodes {short_branches}; they are kept without extrapolation"
        )
    return salt_table
