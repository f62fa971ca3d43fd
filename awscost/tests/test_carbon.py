"""
Tests for carbon footprint estimation.
"""

import pytest

from awscost.services.carbon import (
    AWS_PUE,
    DEFAULT_GRID_FACTOR,
    DEFAULT_UTILIZATION,
    FAMILY_POWER,
    estimate_ebs_carbon,
    estimate_instance_carbon,
    estimate_s3_carbon,
    get_grid_factor,
    get_vcpu_count,
    resolve_utilization,
)


def test_t3_micro_month_in_us_east_1():
    """Watts are interpolated by utilization, then scaled by PUE and grid intensity."""
    grams = estimate_instance_carbon('t3.micro', 'us-east-1', 0.5, 730)

    expected_kwh = (0.47 + 0.5 * (1.69 - 0.47)) * 2 * 730 / 1000
    assert grams == pytest.approx(expected_kwh * AWS_PUE * 0.000379 * 1_000_000)
    assert 600 < grams < 750


def test_unknown_instance_type_has_no_carbon():
    """Missing power data yields None, not an error."""
    assert estimate_instance_carbon('x9.huge', 'us-east-1', 0.5, 730) is None
    assert estimate_instance_carbon('m5.metal', 'us-east-1', 0.5, 730) is None


def test_carbon_grows_with_utilization():
    low = estimate_instance_carbon('m5.large', 'us-east-1', 0.2, 730)
    high = estimate_instance_carbon('m5.large', 'us-east-1', 0.8, 730)

    assert high > low


def test_low_carbon_region():
    """Sweden's grid is far cleaner than Virginia's."""
    virginia = estimate_instance_carbon('t3.micro', 'us-east-1', 0.5, 730)
    sweden = estimate_instance_carbon('t3.micro', 'eu-north-1', 0.5, 730)

    assert sweden < virginia / 10


def test_unknown_region_uses_global_average():
    assert get_grid_factor('xx-nowhere-1') == DEFAULT_GRID_FACTOR
    assert estimate_instance_carbon('t3.micro', 'xx-nowhere-1', 0.5, 730) is not None


def test_vcpu_counts():
    assert get_vcpu_count('m5.large') == 2
    assert get_vcpu_count('m5.4xlarge') == 16
    assert get_vcpu_count('t2.micro') == 1
    assert get_vcpu_count('m5.metal') is None


def test_every_family_has_ordered_wattage():
    for family, profile in FAMILY_POWER.items():
        assert 0 < profile.min_watts < profile.max_watts, family


@pytest.mark.parametrize('raw, expected', [
    (None, DEFAULT_UTILIZATION),
    ('', DEFAULT_UTILIZATION),
    ('0.8', 0.8),
    ('3', 1.0),
    ('0', DEFAULT_UTILIZATION),
    ('-0.5', DEFAULT_UTILIZATION),
    ('busy', DEFAULT_UTILIZATION),
])
def test_resolve_utilization(raw, expected):
    """Utilization comes from its tag, clamped, with a 50% default."""
    tags = {} if raw is None else {'utilization_percentage': raw}
    assert resolve_utilization(tags) == expected


def test_ebs_gp3_volume():
    """SSD volumes are replicated twice."""
    grams = estimate_ebs_carbon('gp3', 100, 'us-east-1', 730)

    expected_kwh = 100 / 1024 * 730 * 1.2 * 2 / 1000
    assert grams == pytest.approx(expected_kwh * AWS_PUE * 0.000379 * 1_000_000)


def test_ebs_hdd_is_lower_than_ssd():
    assert estimate_ebs_carbon('st1', 100, 'us-east-1', 730) < estimate_ebs_carbon('gp3', 100, 'us-east-1', 730)


def test_ebs_unknown_volume_type():
    assert estimate_ebs_carbon('gp9', 100, 'us-east-1', 730) is None


def test_s3_replication_factors():
    """Standard storage keeps three copies, One Zone-IA only one."""
    standard = estimate_s3_carbon('STANDARD', 100, 'us-east-1', 730)
    one_zone = estimate_s3_carbon('onezone_ia', 100, 'us-east-1', 730)

    assert standard == pytest.approx(one_zone * 3)


def test_s3_rejects_negative_size():
    assert estimate_s3_carbon('STANDARD', -1, 'us-east-1', 730) is None
    assert estimate_s3_carbon('REDUCED_REDUNDANCY', 1, 'us-east-1', 730) is None
