import attrs
import numpy as np
import pytest

import wethumid.pvt
from wethumid import (
    Config,
    ExtrapolationImpossible,
    InputTableSet,
    InsufficientData,
    OilVaporizationControl,
    OilVaporizationType,
    ReferenceDensities,
    ScheduleStep,
    TableMismatch,
    ValidationError,
    WetHumidGasError,
    build_wet_humid_gas_pvt,
    build_wet_humid_gas_pvt_from_schedule,
    read_vaporization_parameter,
)


def test_every_branch_is_complete_after_build(input_tables_factory):
    tables = input_tables_factory(
        num_regions=2, wet_degenerate={0: (0, 1)}, humid_degenerate={1: (0,)}
    )
    pvt = build_wet_humid_gas_pvt(tables)

    for region in pvt.regions:
        for family in ("wet", "humid"):
            family_tables = region.family(family)
            assert family_tables.inverse_formation_volume_factor.is_complete()
            assert family_tables.viscosity.is_complete()
            assert family_tables.inverse_formation_volume_factor.num_x == 3


def test_three_regions_with_degenerate_middle_row(input_tables_factory):
    tables = input_tables_factory(num_regions=3, wet_degenerate={2: (1,)})
    pvt = build_wet_humid_gas_pvt(tables)

    assert pvt.num_regions == len(tables.densities) == 3
    inverse_b = pvt.region(2).wet.inverse_formation_volume_factor
    assert inverse_b.num_y(1) == inverse_b.num_y(2) == 3
    assert np.all(np.diff(inverse_b.ys[1]) > 0)
    assert np.all(np.diff(pvt.region(2).wet.viscosity.ys[1]) > 0)
    # Untouched regions keep the raw samples
    np.testing.assert_allclose(
        pvt.region(0).wet.inverse_formation_volume_factor.ys[1],
        tables.wet_gas_tables[0].get_undersaturated_table(1).ratios,
    )


def test_mismatched_region_counts_fail_before_any_table_is_built(
    input_tables_factory, gas_table_factory, monkeypatch
):
    tables = input_tables_factory(num_regions=2)
    mismatched = InputTableSet(
        densities=tables.densities,
        wet_gas_tables=[gas_table_factory() for _ in range(3)],
        humid_gas_tables=tables.humid_gas_tables,
    )

    def fail(*args, **kwargs):
        raise AssertionError("per-region work started before validation")

    monkeypatch.setattr(wethumid.pvt, "build_gas_family_tables", fail)
    monkeypatch.setattr(wethumid.pvt, "build_salt_vaporization_table", fail)
    with pytest.raises(TableMismatch):
        build_wet_humid_gas_pvt(mismatched)


def test_single_row_saturated_table_never_builds(input_tables_factory, gas_table_factory):
    tables = input_tables_factory(num_regions=1)
    single_row = attrs.evolve(
        tables, wet_gas_tables=[gas_table_factory(pressures=(75.0,))]
    )
    with pytest.raises(InsufficientData):
        build_wet_humid_gas_pvt(single_row)


def test_degenerate_terminal_row_fails(input_tables_factory):
    tables = input_tables_factory(num_regions=2, humid_degenerate={1: (2,)})
    with pytest.raises(ExtrapolationImpossible, match="region 1"):
        build_wet_humid_gas_pvt(tables)


def test_errors_are_input_errors(input_tables_factory):
    tables = input_tables_factory(num_regions=1, wet_degenerate={0: (2,)})
    with pytest.raises(WetHumidGasError) as excinfo:
        build_wet_humid_gas_pvt(tables)
    assert isinstance(excinfo.value, ValidationError)
    assert isinstance(excinfo.value, ValueError)


def test_salt_augmentation_skipped_without_salt_tables(input_tables_factory):
    without_salt = build_wet_humid_gas_pvt(input_tables_factory(num_regions=3))
    with_salt = build_wet_humid_gas_pvt(input_tables_factory(num_regions=3, with_salt=True))

    assert not without_salt.salt_enabled
    assert all(region.salt_vaporization is None for region in without_salt.regions)
    assert with_salt.salt_enabled
    assert all(region.salt_vaporization is not None for region in with_salt.regions)

    for plain, salted in zip(without_salt.regions, with_salt.regions):
        for family in ("wet", "humid"):
            for index in range(3):
                np.testing.assert_array_equal(
                    plain.family(family).inverse_formation_volume_factor.values[index],
                    salted.family(family).inverse_formation_volume_factor.values[index],
                )


def test_salt_table_values(input_tables_factory):
    pvt = build_wet_humid_gas_pvt(input_tables_factory(num_regions=1, with_salt=True))
    salt_table = pvt.region(0).salt_vaporization
    assert salt_table.num_x == 3
    # Salt table rows: (0, 2e-5 * (i + 1)), (10, 2e-5 * (i + 1) * 0.95)
    assert pvt.saturated_water_vaporization_ratio(0, 100.0, salt_concentration=10.0) == (
        pytest.approx(4e-5 * 0.95)
    )
    assert pvt.saturated_water_vaporization_ratio(0, 100.0) == pytest.approx(2e-5)


def test_single_sample_salt_branches_are_kept(input_tables_factory, salt_table_factory, caplog):
    tables = input_tables_factory(num_regions=1)
    with_salt = attrs.evolve(tables, salt_tables=[salt_table_factory(samples=1)])
    with caplog.at_level("WARNING"):
        pvt = build_wet_humid_gas_pvt(with_salt)
    assert pvt.region(0).salt_vaporization.num_y(0) == 1
    assert "RWGSALT" in caplog.text


def test_reference_densities_are_copied(input_tables_factory):
    tables = input_tables_factory(num_regions=3)
    pvt = build_wet_humid_gas_pvt(tables)
    for index in range(3):
        assert pvt.reference_densities(index) == tables.densities[index]


def test_saturated_curves_share_pressure_axis(input_tables_factory):
    tables = input_tables_factory(num_regions=1)
    saturated = build_wet_humid_gas_pvt(tables).region(0).humid.saturated
    pressures = tables.humid_gas_tables[0].get_column("PG")

    for curve in (
        saturated.formation_volume_factor,
        saturated.inverse_formation_volume_factor,
        saturated.inverse_viscosity_formation_volume_factor,
        saturated.vaporization_ratio,
    ):
        np.testing.assert_array_equal(curve.x, pressures)

    b = tables.humid_gas_tables[0].get_column("BG")
    mu = tables.humid_gas_tables[0].get_column("MUG")
    np.testing.assert_allclose(saturated.inverse_formation_volume_factor.y, 1.0 / b)
    np.testing.assert_allclose(
        saturated.inverse_viscosity_formation_volume_factor.y, 1.0 / (mu * b)
    )


def test_queries(input_tables_factory):
    tables = input_tables_factory(num_regions=1)
    pvt = build_wet_humid_gas_pvt(tables)
    # Node 1 of the factory: ratio 2e-5, B = 0.015, mu = 0.015
    assert pvt.inverse_formation_volume_factor(0, "wet", 100.0, 2e-5) == pytest.approx(
        1.0 / 0.015
    )
    assert pvt.viscosity(0, "wet", 100.0, 2e-5) == pytest.approx(0.015)
    assert pvt.saturated_vaporization_ratio(0, "humid", 75.0) == pytest.approx(1.5e-5)
    assert pvt.saturated_inverse_formation_volume_factor(0, "wet", 100.0) == pytest.approx(
        1.0 / 0.015
    )
    with pytest.raises(ValidationError):
        pvt.viscosity(0, "wet", 500.0, 2e-5)
    with pytest.raises(ValidationError):
        pvt.region(3)
    with pytest.raises(ValidationError):
        pvt.region(0).family("dry")


def test_result_is_immutable(input_tables_factory):
    pvt = build_wet_humid_gas_pvt(input_tables_factory(num_regions=1))
    with pytest.raises(AttributeError):
        pvt.vaporization_parameter = 1.0
    with pytest.raises(AttributeError):
        pvt.region(0).wet = None
    with pytest.raises(ValueError):
        pvt.region(0).wet.viscosity.values[0][0] = 1.0
    with pytest.raises(ValueError):
        pvt.region(0).wet.saturated.vaporization_ratio.y[0] = 1.0


def test_negative_vaporization_parameter(input_tables_factory):
    with pytest.raises(ValidationError):
        build_wet_humid_gas_pvt(input_tables_factory(num_regions=1), vaporization_parameter=-1)


def test_vaporization_parameter_must_be_finite(input_tables_factory):
    tables = input_tables_factory(num_regions=1)
    for value in (float("nan"), float("inf")):
        with pytest.raises(ValidationError, match="finite and non-negative"):
            build_wet_humid_gas_pvt(tables, vaporization_parameter=value)


def test_decreasing_pressures_never_build(gas_table_factory):
    tables = InputTableSet(
        densities=[ReferenceDensities(800.0, 1.0, 1000.0)],
        wet_gas_tables=[gas_table_factory(pressures=(150.0, 100.0, 50.0))],
        humid_gas_tables=[gas_table_factory(family="humid")],
    )
    with pytest.raises(ValidationError, match="strictly increasing"):
        build_wet_humid_gas_pvt(tables, config=Config(validate_monotonicity=False))


def test_vaporization_parameter_read_from_first_step_only():
    vappars = ScheduleStep(
        oil_vaporization=OilVaporizationControl(type=OilVaporizationType.VAPPARS, vap1=0.7, vap2=0.2)
    )
    drsdt = ScheduleStep(
        oil_vaporization=OilVaporizationControl(type=OilVaporizationType.DRSDT)
    )
    assert read_vaporization_parameter([vappars, drsdt]) == pytest.approx(0.7)
    assert read_vaporization_parameter([drsdt, vappars]) == 0.0
    assert read_vaporization_parameter([ScheduleStep()]) == 0.0
    with pytest.raises(ValidationError):
        read_vaporization_parameter([])


def test_build_from_schedule(input_tables_factory, caplog):
    schedule = [
        ScheduleStep(
            oil_vaporization=OilVaporizationControl(
                type=OilVaporizationType.VAPPARS, vap1=0.5
            )
        )
    ]
    with caplog.at_level("INFO", logger="wethumid"):
        pvt = build_wet_humid_gas_pvt_from_schedule(
            input_tables_factory(num_regions=2), schedule
        )
    assert pvt.vaporization_parameter == pytest.approx(0.5)
    assert "2 regions" in caplog.text


def test_completeness_checks_can_be_disabled(input_tables_factory):
    config = Config(check_completeness=False, validate_monotonicity=False)
    pvt = build_wet_humid_gas_pvt(input_tables_factory(num_regions=1), config=config)
    assert pvt.num_regions == 1
