import typing

import pytest

from wethumid import (
    GasPvtTable,
    InputTableSet,
    ReferenceDensities,
    SaltVaporizationTable,
)

PRESSURES = (50.0, 100.0, 150.0)


def gas_records(
    pressures: typing.Sequence[float] = PRESSURES,
    degenerate_rows: typing.Iterable[int] = (),
    samples: int = 3,
):
    """
    Deck-like gas records with increasing ratios.

    Full branches carry `samples` samples, degenerate ones only their saturated point.
    """
    degenerate_rows = set(degenerate_rows)
    records = []
    for index, pressure in enumerate(pressures):
        ratio = 1e-5 * (index + 1)
        b = 0.03 / (index + 1)
        mu = 0.014 + 0.001 * index
        count = 1 if index in degenerate_rows else samples
        rows = [
            (ratio + 1e-5 * k, b * (1.0 + 0.01 * k), mu * (1.0 - 0.02 * k))
            for k in range(count)
        ]
        records.append((pressure, rows))
    return records


@pytest.fixture
def gas_table_factory():
    def factory(family: str = "wet", **kwargs) -> GasPvtTable:
        return GasPvtTable.from_records(gas_records(**kwargs), family=family)

    return factory


@pytest.fixture
def salt_table_factory():
    def factory(pressures: typing.Sequence[float] = PRESSURES, samples: int = 2):
        records = []
        for index, pressure in enumerate(pressures):
            rows = [
                (10.0 * k, 2e-5 * (index + 1) * (1.0 - 0.05 * k)) for k in range(samples)
            ]
            records.append((pressure, rows))
        return SaltVaporizationTable.from_records(records)

    return factory


@pytest.fixture
def input_tables_factory(gas_table_factory, salt_table_factory):
    def factory(
        num_regions: int = 3,
        wet_degenerate: typing.Optional[typing.Dict[int, typing.Iterable[int]]] = None,
        humid_degenerate: typing.Optional[typing.Dict[int, typing.Iterable[int]]] = None,
        with_salt: bool = False,
    ) -> InputTableSet:
        wet_degenerate = wet_degenerate or {}
        humid_degenerate = humid_degenerate or {}
        return InputTableSet(
            densities=[
                ReferenceDensities(oil=800.0, gas=0.9 + 0.01 * index, water=1000.0)
                for index in range(num_regions)
            ],
            wet_gas_tables=[
                gas_table_factory(degenerate_rows=wet_degenerate.get(index, ()))
                for index in range(num_regions)
            ],
            humid_gas_tables=[
                gas_table_factory(
                    family="humid",
                    degenerate_rows=humid_degenerate.get(index, ()),
                )
                for index in range(num_regions)
            ],
            salt_tables=(
                [salt_table_factory() for _ in range(num_regions)] if with_salt else ()
            ),
        )

    return factory
