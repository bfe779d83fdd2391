import attrs


__all__ = ["Config"]


@attrs.frozen
class Config:
    """Options controlling how wet/humid gas PVT tables are built."""

    validate_monotonicity: bool = attrs.field(
        default=True, validator=attrs.validators.instance_of(bool)
    )
    """
    Whether to check that saturated pressures are strictly increasing and undersaturated ratios strictly monotonic.

    Tables are never re-sorted. Disable only if the input has already been checked upstream.
    """
    check_completeness: bool = attrs.field(
        default=True, validator=attrs.validators.instance_of(bool)
    )
    """Whether to assert that every region is fully populated when the build is finalized."""
    warn_on_extrapolation: bool = attrs.field(
        default=False, validator=attrs.validators.instance_of(bool)
    )
    """Whether finished tables log a warning when queried outside their pressure range."""
