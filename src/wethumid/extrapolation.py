"""
Completion of degenerate undersaturated gas branches.

The simulator needs at least two inner samples per pressure node to interpolate
along the vaporization ratio. Nodes that only carry their saturated point are
extended using the first later node with real undersaturated data (the "master"
branch) as a template. The master's relative change of B and μ between consecutive
samples is reproduced, starting from the degenerate node's own values, so the
absolute magnitudes of the node are kept.
"""

import logging
import typing

import attrs
import numpy as np

from wethumid.errors import ExtrapolationImpossible
from wethumid.inputs import GasPvtTable, UndersaturatedGasTable
from wethumid.tables.gas import GasTables2D
from wethumid.types import FAMILY_KEYWORDS, GasFamily

logger = logging.getLogger(__name__)

__all__ = [
    "relative_change",
    "apply_relative_change",
    "find_master_index",
    "extend_branch",
    "extrapolate_gas_tables",
]


def relative_change(current: float, previous: float) -> float:
    """
    Relative change between two samples, taken against their arithmetic mean.

    :param current: Value at the later sample
    :param previous: Value at the earlier sample
    :return: `(current - previous) / ((current + previous) / 2)`
    """
    return (current - previous) / ((current + previous) / 2.0)


def apply_relative_change(value: float, change: float) -> float:
    """
    Advance `value` by a relative change computed with `relative_change`.

    Inverts the central difference, so that
    `relative_change(apply_relative_change(v, x), v) == x`.
    """
    return value * (1.0 + change / 2.0) / (1.0 - change / 2.0)


def find_master_index(table: GasPvtTable, index: int, min_samples: int = 2) -> int:
    """
    Find the first raw branch after `index` carrying at least `min_samples` samples.

    :param table: Raw gas table
    :param index: Index of the degenerate node
    :param min_samples: Number of samples a master branch needs
    :return: Index of the master branch
    :raises `ExtrapolationImpossible`: If no later branch qualifies
    """
    for master_index in range(index + 1, table.num_rows):
        if table.get_undersaturated_table(master_index).num_rows >= min_samples:
            return master_index
    raise ExtrapolationImpossible(
        f"no undersaturated branch with at least {min_samples} samples "
        f"follows pressure node {index}. The last table must exhibit at least "
        "one entry for undersaturated gas"
    )


def extend_branch(
    current: UndersaturatedGasTable, master: UndersaturatedGasTable
) -> typing.Tuple[typing.List[float], typing.List[float], typing.List[float]]:
    """
    Synthesize new samples for `current` following the pattern of `master`.

    For each consecutive pair of master samples `(k-1, k)`, one new sample is produced:

        Δr  = r[k] - r[k-1]
        x   = (B[k] - B[k-1]) / ((B[k] + B[k-1]) / 2)
        xμ  = (μ[k] - μ[k-1]) / ((μ[k] + μ[k-1]) / 2)
        r'  = r_last + Δr
        B'  = B_last * (1 + x/2) / (1 - x/2)
        μ'  = μ_last * (1 + xμ/2) / (1 - xμ/2)

    where `*_last` start at the last sample of `current` and are advanced each step.

    :param current: Branch to extend
    :param master: Template branch
    :return: `(ratios, formation_volume_factors, viscosities)` of the new samples only
    """
    last_ratio = float(current.ratios[-1])
    last_b = float(current.formation_volume_factors[-1])
    last_mu = float(current.viscosities[-1])

    ratios: typing.List[float] = []
    factors: typing.List[float] = []
    viscosities: typing.List[float] = []
    for k in range(1, master.num_rows):
        ratio_step = master.ratios[k] - master.ratios[k - 1]
        compressibility = relative_change(
            master.formation_volume_factors[k], master.formation_volume_factors[k - 1]
        )
        viscosibility = relative_change(master.viscosities[k], master.viscosities[k - 1])

        last_ratio = float(last_ratio + ratio_step)
        last_b = apply_relative_change(last_b, compressibility)
        last_mu = apply_relative_change(last_mu, viscosibility)

        ratios.append(last_ratio)
        factors.append(last_b)
        viscosities.append(last_mu)
    return ratios, factors, viscosities


def extrapolate_gas_tables(
    tables_2d: GasTables2D,
    table: GasPvtTable,
    region_index: int = 0,
    family: GasFamily = "wet",
) -> GasTables2D:
    """
    Complete every branch of `tables_2d` that has a single inner sample.

    Master branches are looked up in the raw `table`, never in the branches being completed.
    The input tables are left untouched; a new `GasTables2D` is returned. If every branch
    already has two or more samples, `tables_2d` is returned as-is.

    :param tables_2d: Assembled (possibly degenerate) 2D tables
    :param table: Raw gas table the 2D tables were assembled from
    :param region_index: Region index, used in error and log messages
    :param family: Gas family, used in error and log messages
    :return: Completed `GasTables2D`
    :raises `ExtrapolationImpossible`: If a degenerate node has no later master branch
    """
    keyword = FAMILY_KEYWORDS[family]
    inverse_b = tables_2d.inverse_formation_volume_factor
    viscosity = tables_2d.viscosity

    degenerate = [index for index in range(inverse_b.num_x) if inverse_b.num_y(index) == 1]
    if not degenerate:
        return tables_2d

    for index in degenerate:
        try:
            master_index = find_master_index(table, index)
        except ExtrapolationImpossible as exc:
            raise ExtrapolationImpossible(
                f"{keyword} tables of region {region_index} are invalid: {exc}"
            ) from exc

        ratios, factors, viscosities = extend_branch(
            table.get_undersaturated_table(index),
            table.get_undersaturated_table(master_index),
        )
        inverse_b = inverse_b.with_samples(index, ratios, 1.0 / np.asarray(factors))
        viscosity = viscosity.with_samples(index, ratios, viscosities)
        logger.debug(
            f"Extended {keyword} branch {index} of region {region_index} with "
            f"{len(ratios)} samples from master branch {master_index}"
        )

    return attrs.evolve(
        tables_2d, inverse_formation_volume_factor=inverse_b, viscosity=viscosity
    )
